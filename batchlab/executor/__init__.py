"""
Executor module: Running invocations as external processes.

Provides:
- Executor: Protocol for single-invocation backends
- ProcessExecutor: Child process per invocation, captured output
- ThreadExecutor: Bounded-parallel wrapper over any Executor
- build_argv: Command-line construction for an invocation
"""

from batchlab.executor.base import Executor, build_argv
from batchlab.executor.process import ProcessExecutor
from batchlab.executor.thread import ThreadExecutor

__all__ = [
    "Executor",
    "ProcessExecutor",
    "ThreadExecutor",
    "build_argv",
]
