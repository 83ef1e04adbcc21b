"""
Rich progress tracker for terminal output.

Shows a live progress bar with counters and prints a line per finished
invocation above it.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

from rich.console import Console, Group
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from batchlab.progress.base import describe_outcome

if TYPE_CHECKING:
    from batchlab.events import Event


class RichProgressTracker:
    """
    Progress tracking with rich.

    Displays a live-updating progress bar with:
    - Spinner and progress bar
    - Success/failed/running counters
    - One printed line per finished invocation
    - Time elapsed and ETA

    Example:
        with RichProgressTracker(total=8, title="lr sweep") as tracker:
            summary = run_batch(invocations, executor, on_event=tracker)
    """

    def __init__(
        self,
        total: int = 0,
        title: str = "Batch",
        console: Console | None = None,
    ) -> None:
        """
        Initialize the rich progress tracker.

        Args:
            total: Total number of invocations expected.
            title: Title for the progress display.
            console: Rich console instance (created if None).
        """
        self.total = total
        self.title = title

        self.completed = 0
        self.failed = 0
        self.running: set[str] = set()
        self.start_time = time.time()

        self.console = console or Console()

        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TextColumn("•"),
            TimeRemainingColumn(),
            console=self.console,
            expand=False,
        )

        self.task_id = None
        self.live: Live | None = None

    def _make_display(self) -> Group:
        """Create the rich display layout."""
        stats_table = Table.grid(padding=(0, 2))
        stats_table.add_column(style="green", justify="right")
        stats_table.add_column(style="dim")
        stats_table.add_column(style="red", justify="right")
        stats_table.add_column(style="dim")
        stats_table.add_column(style="cyan", justify="right")
        stats_table.add_column(style="dim")

        stats_table.add_row(
            str(self.completed), "success",
            str(self.failed), "failed",
            str(len(self.running)), "running",
        )

        return Group(
            self.progress,
            Panel(
                stats_table,
                title=f"[bold]{escape(self.title)}[/bold]",
                border_style="blue",
                padding=(0, 1),
            ),
        )

    def _advance(self) -> None:
        if self.task_id is not None:
            self.progress.advance(self.task_id)

    def __call__(self, event: "Event") -> None:
        """Handle batchlab events."""
        from batchlab.events import EventKind

        if event.kind == EventKind.RUN_STARTED:
            self.running.add(event.name)

        elif event.kind == EventKind.RUN_FINISHED:
            self.completed += 1
            self.running.discard(event.name)
            self.console.print(
                f"[green]✓ done[/green] {escape(event.name)} "
                f"[dim]({escape(describe_outcome(event))})[/dim]"
            )
            self._advance()

        elif event.kind == EventKind.RUN_FAILED:
            self.failed += 1
            self.running.discard(event.name)
            self.console.print(
                f"[red]✗ fail[/red] {escape(event.name)} "
                f"[dim]({escape(describe_outcome(event))})[/dim]"
            )
            self._advance()

        elif event.kind == EventKind.LOG:
            message = event.payload.get("message", "") if event.payload else ""
            for line in message.rstrip("\n").splitlines():
                self.console.print(f"    [dim]|[/dim] {escape(line)}", highlight=False)

        elif event.kind == EventKind.PROGRESS:
            if event.payload:
                new_total = event.payload.get("total", self.total)
                if new_total != self.total:
                    self.total = new_total
                    if self.task_id is not None:
                        self.progress.update(self.task_id, total=self.total)

        if self.live is not None:
            self.live.update(self._make_display())

    def __enter__(self) -> "RichProgressTracker":
        """Start the live display."""
        self.start_time = time.time()
        self.task_id = self.progress.add_task(
            "Running invocations",
            total=self.total or None,
        )
        self.live = Live(
            self._make_display(),
            console=self.console,
            refresh_per_second=10,
            transient=False,
        )
        self.live.__enter__()
        return self

    def __exit__(self, *args: Any) -> None:
        """Stop the live display and print the final counts."""
        if self.live is not None:
            self.live.__exit__(*args)
            self.live = None

        elapsed = time.time() - self.start_time
        border = "green" if self.failed == 0 else "red"
        self.console.print()
        self.console.print(Panel(
            f"Completed in [bold]{elapsed:.1f}s[/bold]\n"
            f"  Success: [green]{self.completed}[/green]\n"
            f"  Failed: [red]{self.failed}[/red]",
            title="Batch Complete",
            border_style=border,
        ))

    def get_console(self) -> Console:
        """Get the rich Console instance for output routing."""
        return self.console
