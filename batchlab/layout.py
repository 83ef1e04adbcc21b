"""
Results layout: Encapsulates the results directory structure.

Centralizes all path construction for a batch so the executor, the driver
and downstream tooling agree on where things live.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ResultsLayout:
    """
    Encapsulates the results directory layout.

    Default layout:
        {root}/
        ├── {invocation_name}.log
        ├── summary.csv
        └── manifest.json

    Invocation names are validated at load time to be usable as file names,
    so each invocation owns exactly one log file.
    """

    root: Path

    # File names
    summary_file: str = "summary.csv"
    manifest_file: str = "manifest.json"
    log_suffix: str = ".log"

    def log_path(self, name: str) -> Path:
        """Path to the captured output of invocation *name*."""
        return self.root / f"{name}{self.log_suffix}"

    @property
    def summary_path(self) -> Path:
        return self.root / self.summary_file

    @property
    def manifest_path(self) -> Path:
        return self.root / self.manifest_file

    def ensure(self) -> None:
        """
        Create the results directory (and parents).

        Raises:
            OSError: If the directory cannot be created.
        """
        self.root.mkdir(parents=True, exist_ok=True)
