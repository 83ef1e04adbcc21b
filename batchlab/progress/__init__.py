"""
Progress reporting module for batchlab.

Provides the reporting capability the batch driver writes to: one line per
finished invocation and a final count, either as plain text or as a live
rich display.

Example:
    from batchlab.progress import create_progress_tracker

    with create_progress_tracker(total=len(invocations)) as tracker:
        summary = run_batch(invocations, executor, on_event=tracker)
"""

from batchlab.progress.base import (
    ProgressTracker,
    SimpleProgressTracker,
    describe_outcome,
    format_duration,
)
from batchlab.progress.factory import create_progress_tracker
from batchlab.progress.rich import RichProgressTracker

__all__ = [
    "ProgressTracker",
    "SimpleProgressTracker",
    "RichProgressTracker",
    "create_progress_tracker",
    "describe_outcome",
    "format_duration",
]
