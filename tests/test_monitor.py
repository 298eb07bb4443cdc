"""Test translation of watchdog events and observer startup."""

import os
import queue
from unittest.mock import Mock, patch

import pytest
from watchdog.events import (
    DirCreatedEvent,
    DirModifiedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from deathcounter import monitor
from deathcounter.errors import WatchError
from deathcounter.events import EventKind


class TestTranslate:
    """Test watchdog event → ChangeEvent mapping."""

    def test_created(self, save_dir):
        change = monitor.translate(FileCreatedEvent(str(save_dir / "a.json")))
        assert change.kind is EventKind.CREATED
        assert change.paths == (save_dir / "a.json",)

    def test_modified(self, save_dir):
        change = monitor.translate(FileModifiedEvent(str(save_dir / "a.json")))
        assert change.kind is EventKind.MODIFIED

    def test_deleted(self, save_dir):
        change = monitor.translate(FileDeletedEvent(str(save_dir / "a.json")))
        assert change.kind is EventKind.REMOVED
        assert change.paths == (save_dir / "a.json",)

    def test_moved_is_ambiguous(self, save_dir):
        change = monitor.translate(
            FileMovedEvent(str(save_dir / "a.json"), str(save_dir / "b.json"))
        )
        assert change.kind is EventKind.AMBIGUOUS_RENAME
        assert change.paths == ()

    def test_paths_are_canonical(self, save_dir):
        raw = str(save_dir / "sub" / ".." / "a.json")
        change = monitor.translate(FileCreatedEvent(raw))
        assert change.paths == (save_dir / "a.json",)

    @pytest.mark.parametrize("event_cls", [DirCreatedEvent, DirModifiedEvent])
    def test_directory_events_ignored(self, save_dir, event_cls):
        assert monitor.translate(event_cls(str(save_dir))) is None

    def test_unmapped_events_ignored(self, save_dir):
        assert monitor.translate(FileClosedEvent(str(save_dir / "a.json"))) is None

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
    def test_symlink_loop(self, save_dir):
        loop = save_dir / "loop.json"
        try:
            loop.symlink_to(loop)
        except OSError:
            pytest.skip("cannot create symlinks here")
        change = monitor.translate(FileCreatedEvent(str(loop)))
        assert change.kind is EventKind.CREATED
        assert change.paths == (loop,)


class TestHandler:
    """Test that the handler only enqueues."""

    def test_dispatch_enqueues(self, save_dir):
        events = queue.Queue()
        handler = monitor._QueueingHandler(events)
        handler.dispatch(FileModifiedEvent(str(save_dir / "a.json")))
        handler.dispatch(DirModifiedEvent(str(save_dir)))

        change = events.get_nowait()
        assert change.kind is EventKind.MODIFIED
        assert events.empty()

    def test_translation_error_does_not_escape(self, save_dir):
        events = queue.Queue()
        handler = monitor._QueueingHandler(events)
        with patch.object(monitor, "translate", side_effect=RuntimeError("boom")):
            handler.dispatch(FileModifiedEvent(str(save_dir / "a.json")))
        assert events.empty()

        handler.dispatch(FileModifiedEvent(str(save_dir / "a.json")))
        assert events.get_nowait().kind is EventKind.MODIFIED


class TestStart:
    """Test observer selection and startup failure."""

    def test_native_backend_by_default(self, save_dir):
        with patch.object(monitor, "Observer") as observer_cls:
            observer = monitor.start(queue.Queue(), save_dir)
        assert observer is observer_cls.return_value
        observer.schedule.assert_called_once()
        assert observer.schedule.call_args.kwargs["recursive"] is False
        observer.start.assert_called_once()

    def test_polling_backend_with_interval(self, save_dir):
        with patch.object(monitor, "PollingObserver") as polling_cls:
            observer = monitor.start(queue.Queue(), save_dir, poll_interval=0.5)
        polling_cls.assert_called_once_with(timeout=0.5)
        assert observer is polling_cls.return_value

    def test_start_failure_raises_watch_error(self, save_dir):
        with patch.object(monitor, "Observer") as observer_cls:
            observer_cls.return_value.start.side_effect = OSError("inotify limit reached")
            with pytest.raises(WatchError, match="inotify limit"):
                monitor.start(queue.Queue(), save_dir)

    def test_stop_joins(self):
        observer = Mock()
        monitor.stop(observer)
        observer.stop.assert_called_once()
        observer.join.assert_called_once()
