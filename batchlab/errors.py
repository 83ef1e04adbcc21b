"""
Exception hierarchy for batchlab.

Configuration-time errors (ConfigError, DuplicateNameError) abort a batch
before anything runs. Per-invocation errors (InvocationStartError,
InvocationFailure) are recorded as failed results by the executor and only
raised when a caller asks for them via ``ExecutionResult.raise_for_status``.
"""

from __future__ import annotations


class BatchlabError(Exception):
    """Base class for all batchlab errors."""

    pass


class ConfigError(BatchlabError):
    """Raised when a configuration document or settings file is invalid."""

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class DuplicateNameError(BatchlabError):
    """Raised when two invocations resolve to the same name."""

    def __init__(self, name: str, first: str, second: str) -> None:
        self.name = name
        self.first = first
        self.second = second
        super().__init__(
            f"Duplicate invocation name {name!r} (from {first} and {second})"
        )


class InvocationStartError(BatchlabError):
    """The experiment command could not be launched."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invocation {name!r} could not start: {reason}")


class InvocationFailure(BatchlabError):
    """The experiment command exited unsuccessfully."""

    def __init__(self, name: str, exit_code: int, reason: str | None = None) -> None:
        self.name = name
        self.exit_code = exit_code
        detail = reason or f"exit code {exit_code}"
        super().__init__(f"Invocation {name!r} failed: {detail}")
