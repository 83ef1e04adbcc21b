"""
Expansion of invocation sources into a flat, ordered batch.

Named experiments come first, in declaration order, followed by the sweep
in grid order. Name collisions across either source are detected before
anything is returned, so expansion is all-or-nothing.
"""

from __future__ import annotations

from typing import Iterable

from batchlab.errors import DuplicateNameError
from batchlab.params.source import Invocation, InvocationSource


def expand(sources: Iterable[InvocationSource | None]) -> list[Invocation]:
    """
    Flatten *sources* into one ordered list of invocations.

    Args:
        sources: Sources in emission order; None entries are skipped.

    Returns:
        All invocations, source order then per-source order.

    Raises:
        DuplicateNameError: If two invocations share a name.
    """
    invocations: list[Invocation] = []
    seen: dict[str, Invocation] = {}

    for source in sources:
        if source is None:
            continue
        for invocation in source:
            previous = seen.get(invocation.name)
            if previous is not None:
                raise DuplicateNameError(
                    invocation.name, previous.describe(), invocation.describe()
                )
            seen[invocation.name] = invocation
            invocations.append(invocation)

    return invocations
