"""
Core types for batchlab (PUBLIC).

This module defines the result data structures:
- Status: Invocation completion status
- ExecutionResult: Outcome of running one invocation
- RunSummary: Ordered aggregate of all results for one batch
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from batchlab.errors import InvocationFailure, InvocationStartError

if TYPE_CHECKING:
    import pandas as pd

# Shell conventions: "command not found" and GNU timeout(1)
EXIT_NOT_STARTED = 127
EXIT_TIMED_OUT = 124

SUMMARY_COLUMNS = ["name", "status", "exit_code", "duration_seconds"]


class Status(str, Enum):
    """Invocation completion status."""

    SUCCESS = "success"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    NOT_STARTED = "not_started"


@dataclass(frozen=True)
class ExecutionResult:
    """
    Outcome of running one invocation.

    Attributes:
        name: The invocation name.
        status: Completion status.
        exit_code: Process exit code, or a sentinel for NOT_STARTED/TIMED_OUT.
        stdout: Captured standard output.
        stderr: Captured standard error.
        started_at: When the invocation was launched.
        finished_at: When it finished (or failed to start).
        params: The parameter values it ran with.
        error: Error message for failed results.
        log_path: Where captured output was written, if anywhere.
    """

    name: str
    status: Status
    exit_code: int
    stdout: str
    stderr: str
    started_at: datetime
    finished_at: datetime
    params: dict[str, Any] = field(default_factory=dict)
    error: str | None = None
    log_path: Path | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == Status.SUCCESS

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    def raise_for_status(self) -> None:
        """
        Raise the matching error if this result is a failure.

        Raises:
            InvocationStartError: If the command could not be launched.
            InvocationFailure: If the command exited non-zero or timed out.
        """
        if self.status == Status.SUCCESS:
            return
        if self.status == Status.NOT_STARTED:
            raise InvocationStartError(self.name, self.error or "unknown error")
        raise InvocationFailure(self.name, self.exit_code, self.error)

    def to_row(self) -> dict[str, Any]:
        """Summary row for this result."""
        return {
            "name": self.name,
            "status": self.status.value,
            "exit_code": self.exit_code,
            "duration_seconds": round(self.duration_seconds, 3),
        }


@dataclass
class RunSummary:
    """
    Aggregate of all ExecutionResults for one batch.

    Results are kept in expansion order, not completion order.
    """

    results: list[ExecutionResult] = field(default_factory=list)

    def append(self, result: ExecutionResult) -> None:
        self.results.append(result)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self):
        return iter(self.results)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.succeeded)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def all_succeeded(self) -> bool:
        return self.failed == 0

    @property
    def names(self) -> list[str]:
        return [r.name for r in self.results]

    def rows(self) -> list[dict[str, Any]]:
        """One summary row per result, in order."""
        return [r.to_row() for r in self.results]

    def to_dataframe(self) -> "pd.DataFrame":
        """
        Summary as a pandas DataFrame with the summary columns.

        Example:
            df = summary.to_dataframe()
            df[df.status == "failed"]
        """
        import pandas as pd

        return pd.DataFrame(self.rows(), columns=SUMMARY_COLUMNS)

    def to_csv(self, path: str | Path) -> Path:
        """
        Write the summary table as CSV.

        Args:
            path: Destination file path.

        Returns:
            The path written.
        """
        path = Path(path)
        self.to_dataframe().to_csv(path, index=False)
        return path
