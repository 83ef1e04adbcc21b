"""
Factory function for creating progress trackers.
"""

from __future__ import annotations

from typing import Literal

from rich.console import Console

from batchlab.progress.base import ProgressTracker, SimpleProgressTracker
from batchlab.progress.rich import RichProgressTracker


def create_progress_tracker(
    total: int = 0,
    title: str = "Batch",
    style: Literal["auto", "rich", "simple"] = "auto",
    **kwargs,
) -> ProgressTracker:
    """
    Create a progress tracker.

    Args:
        total: Total number of invocations expected.
        title: Title for the progress display.
        style: Progress style to use:
            - "auto": rich on an interactive terminal, otherwise simple
            - "rich": live rich display
            - "simple": plain text lines (logs, CI, pipes)
        **kwargs: Additional arguments passed to the tracker.

    Returns:
        A ProgressTracker instance.

    Example:
        tracker = create_progress_tracker(total=8, title="lr sweep")
        tracker = create_progress_tracker(total=8, style="simple")
    """
    if style == "simple":
        return SimpleProgressTracker(total=total, title=title, **kwargs)

    if style == "rich":
        return RichProgressTracker(total=total, title=title, **kwargs)

    if style != "auto":
        raise ValueError(f"Unknown progress style: {style!r}")

    console = kwargs.pop("console", None) or Console()
    if console.is_terminal:
        return RichProgressTracker(total=total, title=title, console=console, **kwargs)
    return SimpleProgressTracker(total=total, title=title, **kwargs)
