"""
batchlab: Run an experiment command over a parameter sweep.

A batch is a configuration document (named experiments plus a sweep grid)
expanded into uniquely named invocations, each run as its own process,
with per-invocation logs and a summary table written to a results directory.

Example:
    import batchlab

    config = batchlab.load("sweep.yaml")
    settings = batchlab.resolve_settings(config, {"results_dir": "results"})
    summary = batchlab.run(config, settings)
    print(summary.to_dataframe())

Or from the shell:

    batchlab run sweep.yaml --results-dir results
"""

__version__ = "0.1.0"

# Configuration
from batchlab.config import RunSettings, resolve_settings

# Errors
from batchlab.errors import (
    BatchlabError,
    ConfigError,
    DuplicateNameError,
    InvocationFailure,
    InvocationStartError,
)

# Events
from batchlab.events import Event, EventCallback, EventKind

# Executors
from batchlab.executor import ProcessExecutor, ThreadExecutor, build_argv

# Layout
from batchlab.layout import ResultsLayout
from batchlab.loader import ExperimentConfig, load, loads

# Params
from batchlab.params import GridSource, Invocation, NamedSource, expand, grid, named

# Progress
from batchlab.progress import (
    RichProgressTracker,
    SimpleProgressTracker,
    create_progress_tracker,
)

# Runner
from batchlab.runner import plan, run, run_batch

# Types
from batchlab.types import ExecutionResult, RunSummary, Status

__all__ = [
    "__version__",
    # Configuration
    "ExperimentConfig",
    "RunSettings",
    "load",
    "loads",
    "resolve_settings",
    # Errors
    "BatchlabError",
    "ConfigError",
    "DuplicateNameError",
    "InvocationFailure",
    "InvocationStartError",
    # Events
    "Event",
    "EventCallback",
    "EventKind",
    # Executors
    "ProcessExecutor",
    "ThreadExecutor",
    "build_argv",
    # Layout
    "ResultsLayout",
    # Params
    "GridSource",
    "Invocation",
    "NamedSource",
    "expand",
    "grid",
    "named",
    # Progress
    "RichProgressTracker",
    "SimpleProgressTracker",
    "create_progress_tracker",
    # Runner
    "plan",
    "run",
    "run_batch",
    # Types
    "ExecutionResult",
    "RunSummary",
    "Status",
]
