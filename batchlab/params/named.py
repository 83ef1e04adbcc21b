"""
NamedSource: Explicitly enumerated experiments.

For when the exact name and parameter set of each run is chosen by hand.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Sequence

from batchlab.params.source import Invocation


class NamedSource:
    """
    Invocation source from an explicit list of named experiments.

    Names are kept unchanged and declaration order is preserved.

    Example:
        source = NamedSource([
            ("baseline", {"lr": 0.01}),
            ("ablation", {"lr": 0.01, "dropout": 0.0}),
        ])
    """

    def __init__(self, experiments: Sequence[tuple[str, Mapping[str, Any]]]) -> None:
        self._experiments = [(name, dict(params)) for name, params in experiments]

    def __iter__(self) -> Iterator[Invocation]:
        for name, params in self._experiments:
            yield Invocation(name=name, params=dict(params), origin="named")

    def __len__(self) -> int:
        return len(self._experiments)

    def __repr__(self) -> str:
        return f"NamedSource({len(self._experiments)} experiments)"

    def to_manifest_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict representation for run manifests."""
        return {
            "type": "NamedSource",
            "experiments": [
                {"name": name, "params": params} for name, params in self._experiments
            ],
            "total_cases": len(self._experiments),
        }


def named(experiments: Sequence[tuple[str, Mapping[str, Any]]]) -> NamedSource:
    """
    Create a NamedSource from (name, params) pairs.

    Example:
        source = named([("baseline", {"lr": 0.01})])
    """
    return NamedSource(experiments)
