"""
ThreadExecutor: Bounded-parallel execution of invocations.

Each worker thread blocks on one child process at a time, so the pool size
is the number of experiment processes allowed to run at once.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import TYPE_CHECKING, Iterator, Sequence

if TYPE_CHECKING:
    from batchlab.executor.base import Executor
    from batchlab.params.source import Invocation
    from batchlab.types import ExecutionResult


class ThreadExecutor:
    """
    Runs invocations through an inner executor on a thread pool.

    Results are yielded in completion order together with their expansion
    index; callers that need expansion order reassemble by index.

    Example:
        with ThreadExecutor(ProcessExecutor(cmd), max_workers=4) as pool:
            for index, result in pool.run(invocations):
                ...
    """

    def __init__(self, executor: Executor, max_workers: int = 4) -> None:
        """
        Initialize the thread executor.

        Args:
            executor: Executor used for each individual invocation.
            max_workers: Maximum number of concurrent invocations.
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._executor = executor
        self._max_workers = max_workers
        self._pool = ThreadPoolExecutor(max_workers=max_workers)

    def execute(self, invocation: Invocation) -> ExecutionResult:
        """Run a single invocation on the pool and wait for it."""
        return self._pool.submit(self._executor.execute, invocation).result()

    def run(
        self, invocations: Sequence[Invocation]
    ) -> Iterator[tuple[int, ExecutionResult]]:
        """
        Submit all invocations and yield (index, result) as each completes.

        Raises:
            OSError: Re-raised from a worker that could not write its log.
        """
        futures: dict[Future[ExecutionResult], int] = {
            self._pool.submit(self._executor.execute, inv): i
            for i, inv in enumerate(invocations)
        }
        try:
            for future in as_completed(futures):
                yield futures[future], future.result()
        finally:
            for future in futures:
                future.cancel()

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the pool."""
        self._pool.shutdown(wait=wait)

    def __enter__(self) -> "ThreadExecutor":
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown(wait=True)
