"""Tests for event system."""

from __future__ import annotations

from datetime import datetime

from batchlab.events import Event, EventEmitter, EventKind, emit_event


class TestEvent:
    """Tests for Event dataclass."""

    def test_run_started_factory(self):
        """run_started() factory should create correct event."""
        event = Event.run_started("lr0.1", index=3)
        assert event.kind == EventKind.RUN_STARTED
        assert event.name == "lr0.1"
        assert event.payload["index"] == 3
        assert isinstance(event.timestamp, datetime)

    def test_run_finished_factory(self):
        event = Event.run_finished("lr0.1", duration_seconds=1.5)
        assert event.kind == EventKind.RUN_FINISHED
        assert event.payload["duration_seconds"] == 1.5

    def test_run_failed_factory(self):
        event = Event.run_failed("lr0.1", error="exit code 1", exit_code=1)
        assert event.kind == EventKind.RUN_FAILED
        assert event.payload["error"] == "exit code 1"
        assert event.payload["exit_code"] == 1

    def test_progress_factory(self):
        event = Event.progress(current=0, total=4)
        assert event.kind == EventKind.PROGRESS
        assert event.name is None
        assert event.payload["total"] == 4

    def test_log_factory(self):
        event = Event.log("lr0.1", message="hello", level="warning")
        assert event.kind == EventKind.LOG
        assert event.payload == {"message": "hello", "level": "warning"}


class TestEmitEvent:
    """Tests for emit_event()."""

    def test_none_callback(self):
        emit_event(None, Event.progress(0, 1))

    def test_callback_receives_event(self):
        received = []
        event = Event.run_started("a")
        emit_event(received.append, event)
        assert received == [event]

    def test_callback_exception_swallowed(self, caplog):
        """A broken callback must not abort the batch."""

        def broken(event):
            raise RuntimeError("boom")

        emit_event(broken, Event.run_started("a"))
        assert "Event callback failed" in caplog.text


class TestEventEmitter:
    def test_convenience_methods(self):
        received = []
        emitter = EventEmitter(received.append)
        emitter.run_started("a")
        emitter.log("output", name="a")
        emitter.run_failed("a", "exit code 2")
        emitter.run_finished("b")
        emitter.progress(1, 2)
        assert [e.kind for e in received] == [
            EventKind.RUN_STARTED,
            EventKind.LOG,
            EventKind.RUN_FAILED,
            EventKind.RUN_FINISHED,
            EventKind.PROGRESS,
        ]
        assert received[1].name == "a"

    def test_no_callback(self):
        EventEmitter().run_started("a")
