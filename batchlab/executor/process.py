"""
ProcessExecutor: Runs each invocation as an isolated child process.

The child's stdout and stderr are captured in full, its exit code observed,
and the captured text optionally written to a per-invocation log file.
"""

from __future__ import annotations

import logging
import subprocess
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

from batchlab.errors import InvocationStartError
from batchlab.executor.base import build_argv
from batchlab.types import EXIT_NOT_STARTED, EXIT_TIMED_OUT, ExecutionResult, Status

if TYPE_CHECKING:
    from batchlab.layout import ResultsLayout
    from batchlab.params.source import Invocation

logger = logging.getLogger(__name__)


def _as_text(data: str | bytes | None) -> str:
    # TimeoutExpired may carry bytes even when text=True was requested
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class ProcessExecutor:
    """
    Executor that launches the experiment command once per invocation.

    Example:
        executor = ProcessExecutor(["python", "train.py"], layout=ResultsLayout(Path("results")))
        result = executor.execute(Invocation("lr0.1", {"lr": 0.1}))
        result.status  # Status.SUCCESS
    """

    def __init__(
        self,
        command: Sequence[str],
        layout: ResultsLayout | None = None,
        timeout: float | None = None,
        cwd: str | Path | None = None,
    ) -> None:
        """
        Initialize the process executor.

        Args:
            command: Command prefix; invocation arguments are appended.
            layout: Results layout for log files; None disables logging to disk.
            timeout: Per-invocation timeout in seconds; None waits forever.
            cwd: Working directory for the child process.
        """
        if not command:
            raise ValueError("command must not be empty")
        self._command = list(command)
        self._layout = layout
        self._timeout = timeout
        self._cwd = cwd

    @property
    def command(self) -> list[str]:
        return list(self._command)

    def _launch(self, argv: list[str]) -> subprocess.CompletedProcess[str]:
        try:
            return subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self._timeout,
                cwd=self._cwd,
                check=False,
            )
        except (OSError, ValueError) as e:
            # FileNotFoundError, PermissionError, exec format errors;
            # ValueError for an embedded null byte in argv
            raise InvocationStartError(argv[0], str(e)) from e

    def execute(self, invocation: Invocation) -> ExecutionResult:
        """
        Run one invocation and record its outcome.

        The log file is truncated before the process starts.

        Raises:
            OSError: Only if the log file cannot be written.
        """
        argv = build_argv(self._command, invocation)

        log_path = None
        if self._layout is not None:
            log_path = self._layout.log_path(invocation.name)
            log_path.write_text("", encoding="utf-8")

        logger.debug(f"Launching {invocation.name}: {argv}")
        started_at = datetime.now()
        error = None

        try:
            completed = self._launch(argv)
            stdout, stderr = completed.stdout, completed.stderr
            exit_code = completed.returncode
            if exit_code == 0:
                status = Status.SUCCESS
            else:
                status = Status.FAILED
                error = f"exit code {exit_code}"
        except InvocationStartError as e:
            stdout, stderr = "", ""
            exit_code = EXIT_NOT_STARTED
            status = Status.NOT_STARTED
            error = e.reason
        except subprocess.TimeoutExpired as e:
            stdout, stderr = _as_text(e.stdout), _as_text(e.stderr)
            exit_code = EXIT_TIMED_OUT
            status = Status.TIMED_OUT
            error = f"timed out after {self._timeout:g}s"

        finished_at = datetime.now()

        if log_path is not None:
            log_path.write_text(stdout + stderr, encoding="utf-8")

        if status != Status.SUCCESS:
            logger.debug(f"{invocation.name} {status.value}: {error}")

        return ExecutionResult(
            name=invocation.name,
            status=status,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            started_at=started_at,
            finished_at=finished_at,
            params=dict(invocation.params),
            error=error,
            log_path=log_path,
        )
