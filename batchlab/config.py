"""
RunSettings: Project-level defaults for batchlab runs.

This module provides:

- find_config_file: Walk up directories to locate .batchlab.toml
- RunSettings: Fully resolved settings for one batch
- load_project_defaults: Read the ``[run]`` table of a project file
- resolve_settings: Layer defaults, project file, document and CLI overrides

The resolution order is (later wins):

    built-in defaults → .batchlab.toml [run] → config document → CLI flags

Example:
    >>> settings = resolve_settings(document=config, overrides={"jobs": 4})
    >>> settings.results_dir
    PosixPath('results')
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from batchlab.errors import ConfigError
from batchlab.loader import ExperimentConfig, parse_command, parse_timeout

CONFIG_FILENAME = ".batchlab.toml"

PROGRESS_STYLES = ("auto", "rich", "simple")

DEFAULTS: dict[str, Any] = {
    "command": None,
    "results_dir": "results",
    "timeout": None,
    "jobs": 1,
    "echo": False,
    "progress": "auto",
}


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """
    Walk up from *start_dir* to find `.batchlab.toml`.

    Args:
        start_dir: Directory to start searching from. Defaults to ``Path.cwd()``.

    Returns:
        Path to the config file, or ``None`` if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate

        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RunSettings:
    """
    Resolved settings for one batch.

    Attributes:
        command: Experiment command prefix (argv list), or None if unset.
        results_dir: Directory for logs, summary and manifest.
        timeout: Per-invocation timeout in seconds, or None for no limit.
        jobs: Number of invocations allowed to run at once.
        echo: Forward captured output of each invocation to the console.
        progress: Progress display style ("auto", "rich" or "simple").
    """

    command: list[str] | None = None
    results_dir: Path = Path("results")
    timeout: float | None = None
    jobs: int = 1
    echo: bool = False
    progress: str = "auto"


def _validate(values: dict[str, Any], source: str) -> dict[str, Any]:
    unknown = values.keys() - DEFAULTS.keys()
    if unknown:
        raise ConfigError(f"unknown [run] keys: {', '.join(sorted(unknown))}", source)

    checked: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            continue
        if key == "command":
            checked[key] = parse_command(value, source)
        elif key == "timeout":
            checked[key] = parse_timeout(value, source)
        elif key == "results_dir":
            if not isinstance(value, (str, Path)) or not str(value):
                raise ConfigError("'results_dir' must be a path", source)
            checked[key] = Path(value)
        elif key == "jobs":
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError("'jobs' must be a positive integer", source)
            checked[key] = value
        elif key == "echo":
            if not isinstance(value, bool):
                raise ConfigError("'echo' must be true or false", source)
            checked[key] = value
        elif key == "progress":
            if value not in PROGRESS_STYLES:
                raise ConfigError(
                    f"'progress' must be one of {', '.join(PROGRESS_STYLES)}", source
                )
            checked[key] = value
    return checked


def load_project_defaults(path: Path) -> dict[str, Any]:
    """
    Read and validate the ``[run]`` table of a project file.

    Raises:
        ConfigError: If the file cannot be parsed or has invalid values.
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"cannot read project settings: {e}", str(path)) from e

    run_table = data.get("run", {})
    if not isinstance(run_table, dict):
        raise ConfigError("[run] must be a table", str(path))
    return _validate(run_table, str(path))


def resolve_settings(
    document: ExperimentConfig | None = None,
    overrides: dict[str, Any] | None = None,
    project_file: Path | None = None,
    search: bool = True,
) -> RunSettings:
    """
    Layer all settings sources into a RunSettings.

    Args:
        document: Loaded configuration document (supplies command/timeout).
        overrides: Explicit overrides, typically from CLI flags. None values
            are ignored.
        project_file: Explicit project file; if None and *search* is True,
            ``.batchlab.toml`` is searched for upward from the cwd.
        search: Whether to look for a project file at all.

    Raises:
        ConfigError: If any layer is invalid.
    """
    merged = dict(DEFAULTS)
    merged["results_dir"] = Path(merged["results_dir"])

    if project_file is None and search:
        project_file = find_config_file()
    if project_file is not None:
        merged.update(load_project_defaults(project_file))

    if document is not None:
        if document.command is not None:
            merged["command"] = document.command
        if document.timeout is not None:
            merged["timeout"] = document.timeout

    if overrides:
        merged.update(_validate(overrides, "command line"))

    return RunSettings(**merged)
