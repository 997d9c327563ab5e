"""Canonical serialization and SHA-256 hashing for cache keys.

Provides:
    - canonicalize(): Nested value → hashable, order-deterministic tuple
    - sha256_string(): Hash a string
    - hash_canonical(): Short digest of a canonical value (for log lines)
    - hash_dict(): Hash a JSON-serializable dictionary (sorted keys)

Canonical form rules:
    - None, bool, int, str pass through unchanged
    - Floats pass through; -0.0 becomes 0.0, NaN is rejected (NaN != NaN)
    - Enums become their value
    - Dataclasses become (class name, ((field, value), ...)) in field order
    - Mappings become ((key, value), ...) sorted by key
    - Lists and tuples become tuples
    - Anything else (sets, arbitrary objects) is rejected, since its
      iteration order or equality is not guaranteed to be stable

Two logically equal inputs always produce equal canonical values, which is
what makes them usable as dictionary keys for the vertex cache.

Usage:
    from sandpath.utils import hashing
    key = hashing.canonicalize(layer)
    digest = hashing.hash_canonical(key)
"""

import dataclasses
import hashlib
import json
import math
from collections.abc import Mapping
from enum import Enum
from typing import Any


class CanonicalizationError(ValueError):
    """Raised when a value has no deterministic canonical form."""

    pass


def canonicalize(value: Any, path: str = "$") -> Any:
    """Convert a nested value into a hashable canonical tuple form.

    Parameters
    ----------
    value : Any
        Value to convert (dataclass, mapping, sequence, primitive)
    path : str
        Location of ``value`` inside the root object, used in error messages

    Returns
    -------
    Any
        Hashable canonical representation

    Raises
    ------
    CanonicalizationError
        If ``value`` (or anything nested in it) has no stable canonical form

    Examples
    --------
    >>> canonicalize({"b": 1, "a": [1.0, 2]})
    (('a', (1.0, 2)), ('b', 1))
    """
    # Enums first: str-based enums would otherwise pass through as members
    if isinstance(value, Enum):
        return canonicalize(value.value, path)

    if value is None or isinstance(value, (bool, int, str)):
        return value

    if isinstance(value, float):
        if math.isnan(value):
            raise CanonicalizationError(f"NaN has no canonical form at {path}")
        return 0.0 if value == 0.0 else value

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return (
            type(value).__name__,
            tuple(
                (f.name, canonicalize(getattr(value, f.name), f"{path}.{f.name}"))
                for f in dataclasses.fields(value)
            ),
        )

    if isinstance(value, Mapping):
        try:
            keys = sorted(value.keys())
        except TypeError as exc:
            raise CanonicalizationError(
                f"Mapping keys at {path} cannot be ordered: {exc}"
            ) from exc
        return tuple((k, canonicalize(value[k], f"{path}[{k!r}]")) for k in keys)

    if isinstance(value, (list, tuple)):
        return tuple(canonicalize(v, f"{path}[{i}]") for i, v in enumerate(value))

    raise CanonicalizationError(
        f"Cannot canonicalize {type(value).__name__} at {path}"
    )


def sha256_string(s: str) -> str:
    """Compute SHA-256 hex digest (64 characters) of a string."""
    sha256 = hashlib.sha256()
    sha256.update(s.encode('utf-8'))
    return sha256.hexdigest()


def hash_canonical(value: Any, length: int = 12) -> str:
    """Short digest of an already-canonical value.

    Parameters
    ----------
    value : Any
        Output of :func:`canonicalize`
    length : int
        Number of hex characters to keep, default 12

    Returns
    -------
    str
        Truncated SHA-256 hex digest

    Notes
    -----
    ``repr`` of a canonical tuple is deterministic, so the digest is stable
    across processes. Used to identify cache entries in log lines without
    dumping whole layers.
    """
    return sha256_string(repr(value))[:length]


def hash_dict(d: dict) -> str:
    """Compute SHA-256 hash of a JSON-serializable dictionary (sorted keys).

    Examples
    --------
    >>> config_hash = hash_dict({"cache": {"max_vertices": 500000}})
    """
    json_str = json.dumps(d, sort_keys=True)
    return sha256_string(json_str)
