"""
monitor.py — File-system event monitor for deathcounter.

Uses the ``watchdog`` library to watch the save directory (non-recursively)
and converts raw events into ``ChangeEvent`` objects that are put on a
queue for the reconciliation loop.  The observer thread never touches the
metric cache itself.

Public API
----------
start(events, directory, poll_interval)
    Begin watching *directory*.  Returns the running observer.

stop(observer)
    Stop and join an observer returned by :func:`start`.
"""

from __future__ import annotations

import logging
import os
import queue

from watchdog.events import (
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from deathcounter.errors import WatchError
from deathcounter.events import ChangeEvent, EventKind
from deathcounter.snapshot import canonicalize

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Mapping watchdog event types → ChangeEvent kinds
# ---------------------------------------------------------------------------
# Moves are never correlated: the polling backend infers them from inode
# snapshots, so any move forces a rescan.
_EVENT_MAP = {
    FileCreatedEvent: EventKind.CREATED,
    FileModifiedEvent: EventKind.MODIFIED,
    FileDeletedEvent: EventKind.REMOVED,
    FileMovedEvent: EventKind.AMBIGUOUS_RENAME,
}


class _QueueingHandler(FileSystemEventHandler):
    """Translates watchdog events into ChangeEvents on a queue."""

    def __init__(self, events: queue.Queue[ChangeEvent]) -> None:
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        try:
            change = translate(event)
        except Exception:
            logger.exception("Could not translate event: %s", event)
            return
        if change is not None:
            self._events.put(change)


def translate(event: FileSystemEvent) -> ChangeEvent | None:
    """Convert a watchdog event, or return ``None`` for events we ignore."""
    if event.is_directory:
        return None

    kind = _EVENT_MAP.get(type(event))
    if kind is None:
        return None

    if kind is EventKind.AMBIGUOUS_RENAME:
        logger.debug("Move %s -> %s", event.src_path, getattr(event, "dest_path", ""))
        return ChangeEvent.ambiguous_rename()

    path = canonicalize(os.fsdecode(event.src_path))
    return ChangeEvent(kind, (path,))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def start(
    events: queue.Queue[ChangeEvent],
    directory: str | os.PathLike[str],
    poll_interval: float | None = None,
) -> BaseObserver:
    """Start watching *directory* and feed translated events into *events*.

    This function **does not block** — it starts a background observer
    thread.

    Args:
        events:        Queue receiving :class:`ChangeEvent` objects.
        directory:     Directory to watch (not recursively).
        poll_interval: Seconds between directory polls.  ``None`` selects
                       the platform's native notification backend.

    Raises:
        WatchError: If the observer cannot be scheduled or started.
    """
    if poll_interval is None:
        observer: BaseObserver = Observer()
        backend = "native"
    else:
        observer = PollingObserver(timeout=poll_interval)
        backend = f"polling every {poll_interval:g}s"

    handler = _QueueingHandler(events)
    try:
        observer.schedule(handler, os.fspath(directory), recursive=False)
        observer.daemon = True
        observer.start()
    except OSError as exc:
        raise WatchError(f"cannot watch {directory}: {exc}") from exc

    logger.info("Watching: %s (%s)", directory, backend)
    return observer


def stop(observer: BaseObserver) -> None:
    """Stop the monitoring observer."""
    observer.stop()
    observer.join(timeout=5)
    logger.info("Monitor stopped.")
