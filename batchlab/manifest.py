"""
Run manifest serialization.

The manifest records how a batch was configured and how it ended, next to
its logs and summary, so a results directory is self-describing.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from batchlab import __version__

if TYPE_CHECKING:
    from batchlab.config import RunSettings
    from batchlab.loader import ExperimentConfig
    from batchlab.types import RunSummary


def serialize(obj: Any) -> Any:
    """
    Serialize a source for the manifest.

    - If obj has to_manifest_dict(), use it
    - Otherwise, fall back to type name + repr()
    """
    if obj is None:
        return None
    if hasattr(obj, "to_manifest_dict"):
        return obj.to_manifest_dict()
    return {"type": type(obj).__name__, "repr": repr(obj)}


def build_run_manifest(
    config: ExperimentConfig,
    settings: RunSettings,
    summary: RunSummary,
    started_at: datetime,
    finished_at: datetime,
) -> dict[str, Any]:
    """
    Build the run manifest dict.

    Args:
        config: The configuration document that was run.
        settings: Resolved run settings.
        summary: Final run summary.
        started_at: When the batch started.
        finished_at: When the batch finished.

    Returns:
        JSON-serializable manifest.
    """
    return {
        "batchlab_version": __version__,
        "config": {
            "source": config.source,
            "fingerprint": config.fingerprint,
            "experiments": serialize(config.experiments),
            "sweep": serialize(config.sweep),
        },
        "command": settings.command,
        "timeout": settings.timeout,
        "jobs": settings.jobs,
        "started_at": started_at.isoformat(),
        "finished_at": finished_at.isoformat(),
        "counts": {
            "total": summary.total,
            "succeeded": summary.succeeded,
            "failed": summary.failed,
        },
        "invocations": [
            {
                "name": r.name,
                "params": r.params,
                "status": r.status.value,
                "exit_code": r.exit_code,
            }
            for r in summary
        ],
    }


def write_run_manifest(path: Path, manifest: dict[str, Any]) -> Path:
    """Write *manifest* as indented JSON."""
    path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    return path
