"""Vertex cache -- LRU store of raw shape vertices, budgeted by vertex count.

Raw vertex lists vary wildly in size (a point has one vertex, a fractal
thousands), so the cache budget is the **sum of stored list lengths**, not
the number of entries. Inserting past the budget evicts least-recently-used
entries until the new list fits; ``get`` counts as a use.

Keys are :class:`CacheKey` values built by :func:`make_cache_key` from the
layer and -- only when the layer uses machine settings -- the machine. A
layer that ignores the machine gets the same key whatever the machine looks
like, so editing machine settings never evicts or regenerates it.

Usage::

    cache = VertexCache(max_vertices=500_000)
    key = make_cache_key(layer, machine)
    vertices = cache.get(key)
    if vertices is None:
        vertices = shape.get_vertices(state)
        cache.put(key, vertices)
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Optional

from sandpath.core.errors import CacheKeySerializationFailure
from sandpath.core.types import Layer, Machine, VertexList
from sandpath.utils.hashing import CanonicalizationError, canonicalize, hash_canonical

logger = logging.getLogger(__name__)

DEFAULT_MAX_VERTICES = 500_000


@dataclass(frozen=True, slots=True)
class CacheKey:
    """Canonical ``(shape, machine)`` snapshot.

    Both sides are nested tuples from :func:`sandpath.utils.hashing.canonicalize`;
    ``machine`` is ``None`` unless the layer uses machine settings.
    """

    shape: Any
    machine: Any = None

    @property
    def digest(self) -> str:
        """Short stable digest for log lines."""
        return hash_canonical((self.shape, self.machine))


def make_cache_key(layer: Layer, machine: Optional[Machine]) -> CacheKey:
    """Build the cache key of a layer snapshot.

    Parameters
    ----------
    layer : Layer
        Layer snapshot.
    machine : Machine | None
        Machine settings. Ignored unless ``layer.uses_machine``.

    Returns
    -------
    CacheKey

    Raises
    ------
    CacheKeySerializationFailure
        If the layer or machine contains a value without a canonical form.
    """
    try:
        shape_key = canonicalize(layer)
        machine_key = canonicalize(machine) if layer.uses_machine else None
    except CanonicalizationError as exc:
        raise CacheKeySerializationFailure(
            f"Cannot build cache key for layer '{layer.layer_id}': {exc}"
        ) from exc
    return CacheKey(shape=shape_key, machine=machine_key)


class VertexCache:
    """Capacity-bounded LRU mapping of :class:`CacheKey` to vertex lists.

    Parameters
    ----------
    max_vertices : int
        Budget as total number of stored vertices across all entries.
    """

    def __init__(self, max_vertices: int = DEFAULT_MAX_VERTICES) -> None:
        if max_vertices <= 0:
            raise ValueError(f"max_vertices must be positive, got {max_vertices}")
        self.max_vertices = max_vertices
        self._entries: OrderedDict[CacheKey, VertexList] = OrderedDict()
        self._size = 0
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: CacheKey) -> Optional[VertexList]:
        """Return the stored list (same object on every hit) or ``None``."""
        vertices = self._entries.get(key)
        if vertices is None:
            self.misses += 1
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        return vertices

    def put(self, key: CacheKey, vertices: VertexList) -> None:
        """Store ``vertices`` under ``key``, evicting LRU entries to fit.

        A list longer than the whole budget is not stored.
        """
        length = len(vertices)
        if length > self.max_vertices:
            logger.debug(
                "Not caching %s: %d vertices exceed budget of %d",
                key.digest, length, self.max_vertices,
            )
            return

        previous = self._entries.pop(key, None)
        if previous is not None:
            self._size -= len(previous)

        while self._entries and self._size + length > self.max_vertices:
            old_key, old_vertices = self._entries.popitem(last=False)
            self._size -= len(old_vertices)
            self.evictions += 1
            logger.debug(
                "Evicted %s (%d vertices), cache size now %d",
                old_key.digest, len(old_vertices), self._size,
            )

        self._entries[key] = vertices
        self._size += length

    @property
    def size(self) -> int:
        """Total number of vertices currently stored."""
        return self._size

    def clear(self) -> None:
        self._entries.clear()
        self._size = 0

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"VertexCache(entries={len(self)}, size={self._size}/"
            f"{self.max_vertices}, hits={self.hits}, misses={self.misses})"
        )
