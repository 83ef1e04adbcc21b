"""
Low-level value rendering and fingerprinting primitives (internal).

Parameter values appear in three places: derived invocation names, the
argument vector handed to the experiment command, and the run manifest.
All three go through this module so they never disagree.

Key design decisions:
- Only primitives are allowed: bool, int, finite float, str
- Booleans render as ``true``/``false``
- Floats use repr() (shortest round-trip form)
- NaN/Inf raise CanonicalizeError (not silently encoded)
- Keys are always sorted in canonical JSON
"""

from __future__ import annotations

import hashlib
import json
import math
from typing import Any

Primitive = bool | int | float | str


class CanonicalizeError(Exception):
    """Raised when a value is not an allowed parameter primitive."""

    pass


def check_primitive(value: Any) -> Primitive:
    """
    Validate that *value* is an allowed parameter primitive.

    Returns:
        The value unchanged.

    Raises:
        CanonicalizeError: For None, containers, NaN/Inf or any other type.
    """
    if isinstance(value, str):
        if "\x00" in value:
            raise CanonicalizeError("NUL bytes are not allowed in parameter values")
        return value
    if isinstance(value, (bool, int)):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            raise CanonicalizeError("NaN not allowed as a parameter value")
        if math.isinf(value):
            raise CanonicalizeError("Inf not allowed as a parameter value")
        return value
    if value is None:
        raise CanonicalizeError("null is not allowed as a parameter value")
    raise CanonicalizeError(
        f"Parameter values must be bool, int, float or str, got {type(value).__name__}"
    )


def format_value(value: Primitive) -> str:
    """
    Render a primitive for use in names and command-line arguments.

    Example:
        >>> format_value(0.01)
        '0.01'
        >>> format_value(True)
        'true'
    """
    check_primitive(value)
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def derive_name(params: dict[str, Primitive]) -> str:
    """
    Build an invocation name from params in their insertion order.

    Example:
        >>> derive_name({"lr": 0.01, "bs": 64})
        'lr0.01_bs64'
    """
    return "_".join(f"{key}{format_value(value)}" for key, value in params.items())


def canonical(obj: Any) -> str:
    """
    Convert a JSON-compatible object to a canonical JSON string.

    Floats are encoded via repr() so that the string is stable across
    platforms; dict keys are sorted.

    Raises:
        CanonicalizeError: If the object contains NaN or Inf.
    """

    def _encode(item: Any) -> Any:
        if isinstance(item, float):
            return repr(check_primitive(item))
        if isinstance(item, (list, tuple)):
            return [_encode(i) for i in item]
        if isinstance(item, dict):
            return {str(k): _encode(v) for k, v in item.items()}
        return item

    return json.dumps(_encode(obj), sort_keys=True, separators=(",", ":"))


def fingerprint(obj: Any) -> str:
    """
    Compute a stable fingerprint of a JSON-compatible object.

    Uses SHA-256 of the canonical representation, truncated to 16 hex characters.
    """
    canonical_str = canonical(obj)
    hash_bytes = hashlib.sha256(canonical_str.encode("utf-8")).digest()
    return hash_bytes.hex()[:16]
