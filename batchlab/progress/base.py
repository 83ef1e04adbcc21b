"""
Base classes for progress reporting.

Provides the ProgressTracker protocol and SimpleProgressTracker implementation.
A tracker is the driver's reporting capability: it is opened when the batch
starts, receives one event per state change, and is closed when the batch ends.
"""

from __future__ import annotations

import sys
import time
from typing import TYPE_CHECKING, Any, Protocol, TextIO, runtime_checkable

if TYPE_CHECKING:
    from batchlab.events import Event


def format_duration(seconds: float) -> str:
    """Compact duration for progress lines."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    if seconds < 3600:
        return f"{seconds / 60:.1f}m"
    return f"{seconds / 3600:.1f}h"


def describe_outcome(event: "Event") -> str:
    """
    One-line detail for a finished or failed invocation.

    Example:
        "0.4s" for a success, "exit 1" or "timed out after 5s" for failures.
    """
    from batchlab.events import EventKind

    payload = event.payload or {}
    if event.kind == EventKind.RUN_FINISHED:
        return format_duration(payload.get("duration_seconds", 0.0))
    return str(payload.get("error", "unknown"))


@runtime_checkable
class ProgressTracker(Protocol):
    """
    Protocol for progress trackers.

    Progress trackers receive events from the batch driver and display
    progress information to the user.

    Trackers should be usable as context managers for setup/teardown.
    """

    total: int
    completed: int
    failed: int

    def __call__(self, event: Event) -> None:
        """Handle an event from the driver."""
        ...

    def __enter__(self) -> ProgressTracker:
        """Enter the context (start display)."""
        ...

    def __exit__(self, *args: Any) -> None:
        """Exit the context (print final counts)."""
        ...


class SimpleProgressTracker:
    """
    Simple text-based progress tracker.

    Prints one line per finished invocation, without any fancy formatting:

        [ok]   lr0.01_bs32 (0.4s) [1/2]
        [FAIL] lr0.1_bs32 (exit code 1) [2/2]

    Example:
        with SimpleProgressTracker(total=2) as tracker:
            summary = run_batch(invocations, executor, on_event=tracker)
    """

    def __init__(
        self,
        total: int = 0,
        title: str = "Batch",
        stream: TextIO | None = None,
    ) -> None:
        """
        Initialize the simple progress tracker.

        Args:
            total: Total number of invocations expected.
            title: Title for the progress display.
            stream: Where to print (defaults to sys.stdout at print time).
        """
        self.total = total
        self.title = title
        self._stream = stream

        self.completed = 0
        self.failed = 0
        self.start_time = time.time()

    def _print(self, text: str) -> None:
        print(text, file=self._stream or sys.stdout, flush=True)

    def __call__(self, event: "Event") -> None:
        """Handle batchlab events."""
        from batchlab.events import EventKind

        if event.kind == EventKind.RUN_FINISHED:
            self.completed += 1
            self._print(
                f"  [ok]   {event.name} ({describe_outcome(event)}) "
                f"[{self.completed + self.failed}/{self.total}]"
            )

        elif event.kind == EventKind.RUN_FAILED:
            self.failed += 1
            self._print(
                f"  [FAIL] {event.name} ({describe_outcome(event)}) "
                f"[{self.completed + self.failed}/{self.total}]"
            )

        elif event.kind == EventKind.LOG:
            message = event.payload.get("message", "") if event.payload else ""
            for line in message.rstrip("\n").splitlines():
                self._print(f"    | {line}")

        elif event.kind == EventKind.PROGRESS:
            if event.payload:
                self.total = event.payload.get("total", self.total)

    def __enter__(self) -> "SimpleProgressTracker":
        """Start tracking."""
        self.start_time = time.time()
        self._print(f"\n{self.title}")
        self._print("-" * 60)
        return self

    def __exit__(self, *args: Any) -> None:
        """Finish tracking."""
        elapsed = time.time() - self.start_time
        self._print("-" * 60)
        self._print(f"Completed in {elapsed:.1f}s")
        self._print(f"  Success: {self.completed}")
        self._print(f"  Failed: {self.failed}")
