"""
Params module: Invocation generation and expansion.

Provides:
- Invocation: A single resolved (name, params) unit of work
- InvocationSource: Protocol for invocation generators
- grid(): Cartesian product of declared values
- named(): Explicitly enumerated experiments
- expand(): Flatten sources into one ordered, name-unique batch
"""

from batchlab.params.expand import expand
from batchlab.params.grid import GridSource, grid
from batchlab.params.named import NamedSource, named
from batchlab.params.source import Invocation, InvocationSource

__all__ = [
    # Core types
    "Invocation",
    "InvocationSource",
    # Sources
    "GridSource",
    "NamedSource",
    # Factories
    "grid",
    "named",
    "expand",
]
