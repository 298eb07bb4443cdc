"""
watcher.py — Reconciliation loop for deathcounter.

Wires the pieces together:
  1. Start the watchdog observer, which only produces ChangeEvents.
  2. Take a startup snapshot and emit the first total.
  3. Drain the event queue on the calling thread, one event at a time,
     each processed to completion before the next is taken.

The loop thread is the sole owner of the cache and the emission state.
"""

from __future__ import annotations

import logging
import queue
from typing import Callable

from watchdog.observers.api import BaseObserver

from deathcounter import monitor
from deathcounter.aggregate import EmissionGate
from deathcounter.config import WatchConfig
from deathcounter.events import ChangeEvent
from deathcounter.reconciler import Reconciler
from deathcounter.sinks import make_sink

logger = logging.getLogger(__name__)


class DataWatcher:
    """Owns the event queue, the observer and the reconciler.

    Parameters:
        config: Validated settings.
        sink:   Output callable.  Defaults to the file or console sink
                selected by ``config.output``.
    """

    def __init__(
        self,
        config: WatchConfig,
        sink: Callable[[int], None] | None = None,
    ) -> None:
        self.config = config
        self.events: queue.Queue[ChangeEvent] = queue.Queue()
        self.gate = EmissionGate(sink if sink is not None else make_sink(config.output))
        self.reconciler = Reconciler(
            directory=config.directory,
            gate=self.gate,
            baseline=config.baseline,
            extension=config.extension,
            retention=config.retention,
        )
        self._observer: BaseObserver | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> int:
        """Take the startup snapshot and emit the first total.

        Raises:
            SnapshotError: If the directory cannot be listed.  Fatal here.
        """
        self.reconciler.rescan()
        total = self.reconciler.total()
        logger.info(
            "Startup: %d file(s), baseline %d, total %d",
            len(self.reconciler.cache),
            self.config.baseline,
            total,
        )
        return total

    def start(self) -> None:
        """Start the observer feeding :attr:`events`.

        Raises:
            WatchError: If the directory cannot be watched.
        """
        self._observer = monitor.start(
            self.events,
            self.config.directory,
            poll_interval=self.config.poll_interval,
        )

    def stop(self) -> None:
        if self._observer is not None:
            monitor.stop(self._observer)
            self._observer = None

    def watch(self) -> None:
        """Start observing, snapshot and process events until interrupted.

        The observer starts first so nothing written during the snapshot is
        missed; events queued meanwhile are re-applied on top of it.
        """
        self.start()
        try:
            self.initialize()
            self.run()
        finally:
            self.stop()

    # ------------------------------------------------------------------
    # Event processing
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Block on the queue forever, handling each event as it arrives."""
        while True:
            self._take(self.events.get())

    def process(self, event: ChangeEvent) -> bool:
        """Apply one event; returns whether it was acted on."""
        return self.reconciler.handle(event)

    def _take(self, event: ChangeEvent) -> None:
        try:
            self.process(event)
        except Exception:
            logger.exception("Failed to process event: %s", event)
        finally:
            self.events.task_done()

    def process_pending(self, timeout: float = 0.0) -> int:
        """Handle queued events until the queue stays empty for *timeout* seconds.

        Returns the number of events taken off the queue.
        """
        count = 0
        while True:
            try:
                event = self.events.get(timeout=timeout) if timeout > 0 else self.events.get_nowait()
            except queue.Empty:
                return count
            self._take(event)
            count += 1
