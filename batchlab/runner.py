"""
Runner: Orchestrates batch execution.

The Runner:

1. Expands the configuration into an ordered list of invocations
2. Prepares the results directory
3. Executes invocations (one at a time by default)
4. Reports each outcome as it happens
5. Writes the summary table and run manifest

Progress reporting:

- Pass ``tracker=...`` to supply a ProgressTracker (opened and closed here)
- Otherwise one is created from ``settings.progress``
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Sequence

from batchlab.errors import ConfigError
from batchlab.events import EventCallback, EventEmitter
from batchlab.executor.process import ProcessExecutor
from batchlab.executor.thread import ThreadExecutor
from batchlab.layout import ResultsLayout
from batchlab.manifest import build_run_manifest, write_run_manifest
from batchlab.progress.factory import create_progress_tracker
from batchlab.types import ExecutionResult, RunSummary

if TYPE_CHECKING:
    from batchlab.config import RunSettings
    from batchlab.executor.base import Executor
    from batchlab.loader import ExperimentConfig
    from batchlab.params.source import Invocation
    from batchlab.progress.base import ProgressTracker

logger = logging.getLogger(__name__)


def _report(emitter: EventEmitter, result: ExecutionResult, echo: bool) -> None:
    """Emit the completion events for one result."""
    if echo:
        output = result.stdout + result.stderr
        if output:
            emitter.log(output, name=result.name)

    if result.succeeded:
        emitter.run_finished(
            result.name,
            exit_code=result.exit_code,
            duration_seconds=result.duration_seconds,
        )
    else:
        emitter.run_failed(
            result.name,
            result.error or result.status.value,
            status=result.status.value,
            exit_code=result.exit_code,
            duration_seconds=result.duration_seconds,
        )


def run_batch(
    invocations: Sequence[Invocation],
    executor: Executor,
    jobs: int = 1,
    on_event: EventCallback | None = None,
    echo: bool = False,
) -> RunSummary:
    """
    Execute invocations and collect a RunSummary.

    With ``jobs == 1`` invocations run strictly one after another in the
    given order, and each is reported before the next starts. With
    ``jobs > 1`` up to ``jobs`` run at once and are reported as they
    complete. The pool starts invocations in the given order, so
    run_started is emitted for the first ``jobs`` up front and for the next
    one each time a slot frees. Either way the summary is in the given order.

    Args:
        invocations: Invocations in expansion order.
        executor: Executor for individual invocations.
        jobs: Maximum number of concurrent invocations.
        on_event: Event callback (typically a ProgressTracker).
        echo: Forward captured output as log events.

    Returns:
        Summary with one result per invocation.

    Raises:
        OSError: If a log file cannot be written.
    """
    emitter = EventEmitter(on_event)
    total = len(invocations)
    emitter.progress(0, total)

    if jobs <= 1:
        summary = RunSummary()
        for i, invocation in enumerate(invocations):
            emitter.run_started(invocation.name, index=i)
            result = executor.execute(invocation)
            summary.append(result)
            _report(emitter, result, echo)
        return summary

    results: list[ExecutionResult | None] = [None] * total
    started = min(jobs, total)
    for i in range(started):
        emitter.run_started(invocations[i].name, index=i)
    with ThreadExecutor(executor, max_workers=jobs) as pool:
        for index, result in pool.run(invocations):
            results[index] = result
            _report(emitter, result, echo)
            if started < total:
                emitter.run_started(invocations[started].name, index=started)
                started += 1

    return RunSummary([r for r in results if r is not None])


def plan(config: ExperimentConfig) -> list[Invocation]:
    """
    Expand a configuration without executing anything.

    Raises:
        DuplicateNameError: If two invocations share a name.
    """
    return config.invocations()


def run(
    config: ExperimentConfig,
    settings: RunSettings,
    tracker: ProgressTracker | None = None,
) -> RunSummary:
    """
    Run every invocation of *config* and write the results directory.

    Args:
        config: Loaded configuration document.
        settings: Resolved run settings.
        tracker: Progress tracker; created from settings if None.

    Returns:
        The final RunSummary (also written to ``summary.csv``).

    Raises:
        DuplicateNameError: If expansion produces a name collision.
        ConfigError: If invocations exist but no command is configured.
        OSError: If the results directory cannot be written.
    """
    invocations = plan(config)
    if invocations and not settings.command:
        raise ConfigError(
            "no experiment command configured (set 'command' or pass --command)",
            config.source,
        )

    layout = ResultsLayout(settings.results_dir)
    layout.ensure()

    if not invocations:
        logger.info("No invocations to run")

    if tracker is None:
        tracker = create_progress_tracker(
            total=len(invocations),
            title=config.source,
            style=settings.progress,
        )

    started_at = datetime.now()
    with tracker:
        if invocations:
            executor = ProcessExecutor(
                settings.command,
                layout=layout,
                timeout=settings.timeout,
            )
            summary = run_batch(
                invocations,
                executor,
                jobs=settings.jobs,
                on_event=tracker,
                echo=settings.echo,
            )
        else:
            summary = RunSummary()
    finished_at = datetime.now()

    summary.to_csv(layout.summary_path)
    write_run_manifest(
        layout.manifest_path,
        build_run_manifest(config, settings, summary, started_at, finished_at),
    )
    logger.debug(f"Wrote {layout.summary_path} and {layout.manifest_path}")

    return summary
