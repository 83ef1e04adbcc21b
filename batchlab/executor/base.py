"""
Executor protocol: Backend-agnostic execution interface.

An executor turns one Invocation into one ExecutionResult. The contract is
that process-level failures never escape: a command that cannot start, exits
non-zero, or times out comes back as a failed result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Sequence

from batchlab._canonical import format_value

if TYPE_CHECKING:
    from batchlab.params.source import Invocation
    from batchlab.types import ExecutionResult


def build_argv(command: Sequence[str], invocation: Invocation) -> list[str]:
    """
    Build the argument vector for one invocation.

    Layout: ``[*command, --name, <name>, --<k1>, <v1>, --<k2>, <v2>, ...]``
    with parameters in declaration order.

    Example:
        >>> build_argv(["python", "train.py"], Invocation("lr0.1", {"lr": 0.1}))
        ['python', 'train.py', '--name', 'lr0.1', '--lr', '0.1']
    """
    argv = [*command, "--name", invocation.name]
    for key, value in invocation.params.items():
        argv.extend([f"--{key}", format_value(value)])
    return argv


class Executor(Protocol):
    """
    Protocol for execution backends.

    Key design decisions:
    - execute() handles exactly one invocation and blocks until it is done
    - Failures are returned, not raised (OSError writing logs excepted)
    - Scheduling across invocations belongs to the caller
    """

    def execute(self, invocation: Invocation) -> ExecutionResult:
        """
        Run one invocation and return its result.

        Args:
            invocation: The invocation to run.

        Returns:
            The recorded outcome.
        """
        ...
