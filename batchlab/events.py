"""
Events system: Stable event schema for progress reporting.

Ordering guarantees:
- Synchronous emission: Events are emitted inline from the driver thread
- Best-effort delivery: If callback raises, exception is logged but the batch continues
- Per-invocation ordering: run_started < log < run_finished/run_failed
- Cross-invocation ordering: expansion order when jobs=1; with jobs>1, run_started
  follows the pool's start order and completions arrive in completion order
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Types of events emitted by the driver."""

    RUN_STARTED = "run_started"
    RUN_FINISHED = "run_finished"
    RUN_FAILED = "run_failed"
    PROGRESS = "progress"
    LOG = "log"


@dataclass(frozen=True)
class Event:
    """
    An event emitted during batch execution.

    Attributes:
        kind: The type of event.
        name: The invocation this event relates to (None for batch events).
        timestamp: When the event occurred.
        payload: Event-specific data.
    """

    kind: EventKind
    name: str | None
    timestamp: datetime
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def run_started(cls, name: str, **extra: Any) -> Event:
        """Create a run_started event."""
        return cls(
            kind=EventKind.RUN_STARTED,
            name=name,
            timestamp=datetime.now(),
            payload=extra,
        )

    @classmethod
    def run_finished(cls, name: str, **extra: Any) -> Event:
        """Create a run_finished event."""
        return cls(
            kind=EventKind.RUN_FINISHED,
            name=name,
            timestamp=datetime.now(),
            payload=extra,
        )

    @classmethod
    def run_failed(cls, name: str, error: str, **extra: Any) -> Event:
        """Create a run_failed event."""
        return cls(
            kind=EventKind.RUN_FAILED,
            name=name,
            timestamp=datetime.now(),
            payload={"error": error, **extra},
        )

    @classmethod
    def progress(cls, current: int, total: int, message: str = "") -> Event:
        """Create a progress event."""
        return cls(
            kind=EventKind.PROGRESS,
            name=None,
            timestamp=datetime.now(),
            payload={"current": current, "total": total, "message": message},
        )

    @classmethod
    def log(cls, name: str | None, message: str, level: str = "info") -> Event:
        """Create a log event."""
        return cls(
            kind=EventKind.LOG,
            name=name,
            timestamp=datetime.now(),
            payload={"message": message, "level": level},
        )


# Type alias for event callbacks
EventCallback = Callable[[Event], None]


def emit_event(callback: EventCallback | None, event: Event) -> None:
    """
    Emit an event to a callback, with best-effort delivery.

    If the callback raises an exception, it is logged but the batch continues.

    Args:
        callback: The event callback (may be None).
        event: The event to emit.
    """
    if callback is None:
        return

    try:
        callback(event)
    except Exception as e:
        logger.warning(f"Event callback failed for {event.kind}: {e}")
        # Do NOT re-raise; batch continues


class EventEmitter:
    """
    Helper class for emitting events.

    Wraps a callback and provides convenience methods for common events.
    """

    def __init__(self, callback: EventCallback | None = None) -> None:
        self._callback = callback

    def emit(self, event: Event) -> None:
        """Emit an event."""
        emit_event(self._callback, event)

    def run_started(self, name: str, **extra: Any) -> None:
        self.emit(Event.run_started(name, **extra))

    def run_finished(self, name: str, **extra: Any) -> None:
        self.emit(Event.run_finished(name, **extra))

    def run_failed(self, name: str, error: str, **extra: Any) -> None:
        self.emit(Event.run_failed(name, error, **extra))

    def progress(self, current: int, total: int, message: str = "") -> None:
        self.emit(Event.progress(current, total, message))

    def log(self, message: str, level: str = "info", name: str | None = None) -> None:
        self.emit(Event.log(name, message, level))
