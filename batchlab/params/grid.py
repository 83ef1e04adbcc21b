"""
GridSource: Cartesian product invocation generation.

Generates one invocation per combination of the declared values.

Ordering convention: keys keep their declared order and the last-declared
key varies fastest (``itertools.product`` order). Derived names and the
execution order both follow from this.
"""

from __future__ import annotations

import itertools
from typing import Any, Iterator, Mapping, Sequence

from batchlab._canonical import derive_name
from batchlab.params.source import Invocation


class GridSource:
    """
    Invocation source that generates a Cartesian product of values.

    Example:
    ```python
    source = GridSource({"lr": [0.01, 0.1], "bs": [32, 64]})
    # Yields 4 invocations: lr0.01_bs32, lr0.01_bs64, lr0.1_bs32, lr0.1_bs64
    ```
    """

    def __init__(self, params: Mapping[str, Sequence[Any]]) -> None:
        """
        Initialize with parameter names mapped to sequences of values.

        Args:
            params: Parameter names mapped to non-empty value sequences.
                Iteration order of the mapping is the declared key order.

        Raises:
            ValueError: If any value sequence is empty.
        """
        for key, values in params.items():
            if len(values) == 0:
                raise ValueError(f"Sweep parameter {key!r} has no values")
        self._keys = list(params.keys())
        self._values = [tuple(params[k]) for k in self._keys]

    @property
    def keys(self) -> list[str]:
        """Parameter names in declared order."""
        return list(self._keys)

    def _make(self, combo: Sequence[Any]) -> Invocation:
        params = dict(zip(self._keys, combo))
        return Invocation(name=derive_name(params), params=params, origin="sweep")

    def __iter__(self) -> Iterator[Invocation]:
        """Yield all combinations, last-declared key fastest."""
        if not self._keys:
            return
        for combo in itertools.product(*self._values):
            yield self._make(combo)

    def __len__(self) -> int:
        """Return the total number of combinations (0 for an empty grid)."""
        if not self._keys:
            return 0
        total = 1
        for values in self._values:
            total *= len(values)
        return total

    def __getitem__(self, index: int) -> Invocation:
        """
        Get the invocation at *index* without enumerating the grid.

        The ordering matches __iter__ (mixed radix, last key fastest).

        Raises:
            IndexError: If index is out of range.
        """
        total = len(self)
        if index < 0:
            index = total + index
        if index < 0 or index >= total:
            raise IndexError(f"Index {index} out of range [0, {total})")

        # itertools.product iterates rightmost index fastest, so decode from the right
        indices = []
        remaining = index
        for values in reversed(self._values):
            indices.append(remaining % len(values))
            remaining //= len(values)
        indices.reverse()

        return self._make([self._values[i][j] for i, j in enumerate(indices)])

    def __repr__(self) -> str:
        params_str = ", ".join(
            f"{k}={list(v)}" for k, v in zip(self._keys, self._values)
        )
        return f"GridSource({params_str})"

    def to_manifest_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict representation for run manifests."""
        return {
            "type": "GridSource",
            "spec": {k: list(v) for k, v in zip(self._keys, self._values)},
            "total_cases": len(self),
        }


def grid(**kwargs: Sequence[Any]) -> GridSource:
    """
    Create a GridSource for Cartesian product invocation generation.

    Keyword order is the declared key order.

    Example:
    ```python
    source = grid(lr=[0.01, 0.1], bs=[32])
    # Yields lr0.01_bs32, lr0.1_bs32
    ```
    """
    return GridSource(kwargs)
