"""
Invocation dataclass and InvocationSource protocol.

An InvocationSource is the core abstraction for producing units of work.
It yields Invocations, each a fully resolved (name, params) pair ready to
hand to an executor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Protocol


@dataclass(frozen=True)
class Invocation:
    """
    One concrete run of the experiment command.

    Attributes:
        name: Unique name within a batch; also the log file stem.
        params: Parameter values in declaration order.
        origin: Where the invocation came from ("named" or "sweep").
    """

    name: str
    params: dict[str, Any] = field(default_factory=dict)
    origin: str = "named"

    def describe(self) -> str:
        """Short human-readable label used in error messages."""
        return f"{self.origin} invocation {self.name!r}"


class InvocationSource(Protocol):
    """
    Protocol for invocation generators.

    Implementations include:
    - GridSource: Cartesian product of declared value sequences
    - NamedSource: Explicitly enumerated experiments

    Example:
        source = grid(lr=[0.01, 0.1], bs=[32])
        for inv in source:
            print(inv.name)  # lr0.01_bs32, lr0.1_bs32
    """

    def __iter__(self) -> Iterator[Invocation]:
        """Yield invocations in a stable order."""
        ...

    def __len__(self) -> int:
        """Number of invocations the source yields."""
        ...
