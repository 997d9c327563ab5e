"""Tests for the vertex cache and its keys.

Validates that:
    - The budget counts stored vertices, not entries
    - Least-recently-used entries are evicted first; get() refreshes recency
    - Hits return the stored object itself
    - Keys of logically equal snapshots are equal
    - Layers that ignore the machine get machine-independent keys
    - Values without a canonical form raise CacheKeySerializationFailure
"""

from __future__ import annotations

import pytest

from sandpath.core import (
    CacheKey,
    CacheKeySerializationFailure,
    Effect,
    Layer,
    Machine,
    Vertex,
    VertexCache,
    make_cache_key,
)


def _vertices(n: int) -> tuple[Vertex, ...]:
    return tuple(Vertex(float(i), 0.0) for i in range(n))


def _key(name: str) -> CacheKey:
    return CacheKey(shape=name)


# ---------------------------------------------------------------------------
# Budget and eviction
# ---------------------------------------------------------------------------


class TestBudget:
    def test_rejects_non_positive_budget(self) -> None:
        with pytest.raises(ValueError, match="max_vertices"):
            VertexCache(0)

    def test_size_is_total_vertex_count(self) -> None:
        cache = VertexCache(100)
        cache.put(_key("a"), _vertices(10))
        cache.put(_key("b"), _vertices(25))
        assert cache.size == 35
        assert len(cache) == 2

    def test_evicts_least_recently_used(self) -> None:
        cache = VertexCache(10)
        cache.put(_key("a"), _vertices(4))
        cache.put(_key("b"), _vertices(4))
        cache.put(_key("c"), _vertices(4))
        assert _key("a") not in cache
        assert _key("b") in cache and _key("c") in cache
        assert cache.size == 8
        assert cache.evictions == 1

    def test_get_refreshes_recency(self) -> None:
        cache = VertexCache(10)
        cache.put(_key("a"), _vertices(4))
        cache.put(_key("b"), _vertices(4))
        assert cache.get(_key("a")) is not None
        cache.put(_key("c"), _vertices(4))
        assert _key("a") in cache
        assert _key("b") not in cache

    def test_evicts_as_many_entries_as_needed(self) -> None:
        cache = VertexCache(10)
        for name in "abcde":
            cache.put(_key(name), _vertices(2))
        cache.put(_key("big"), _vertices(9))
        assert len(cache) == 1
        assert cache.size == 9

    def test_oversized_list_not_stored(self) -> None:
        cache = VertexCache(5)
        cache.put(_key("a"), _vertices(3))
        cache.put(_key("huge"), _vertices(6))
        assert _key("huge") not in cache
        assert _key("a") in cache
        assert cache.size == 3

    def test_replacing_key_updates_size(self) -> None:
        cache = VertexCache(10)
        cache.put(_key("a"), _vertices(6))
        cache.put(_key("a"), _vertices(2))
        assert cache.size == 2
        assert len(cache) == 1

    def test_clear(self) -> None:
        cache = VertexCache(10)
        cache.put(_key("a"), _vertices(3))
        cache.clear()
        assert len(cache) == 0
        assert cache.size == 0


class TestLookup:
    def test_hit_returns_stored_object(self) -> None:
        cache = VertexCache(10)
        stored = _vertices(3)
        cache.put(_key("a"), stored)
        assert cache.get(_key("a")) is stored
        assert cache.hits == 1

    def test_miss_returns_none(self) -> None:
        cache = VertexCache(10)
        assert cache.get(_key("missing")) is None
        assert cache.misses == 1

    def test_empty_list_is_a_hit(self) -> None:
        cache = VertexCache(10)
        cache.put(_key("empty"), ())
        assert cache.get(_key("empty")) == ()
        assert cache.hits == 1


# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------


class TestCacheKey:
    def test_equal_snapshots_equal_keys(self) -> None:
        a = Layer(layer_id="a", type="circle", params=(("segments", 12),))
        b = Layer(layer_id="a", type="circle", params=(("segments", 12),))
        assert a is not b
        assert make_cache_key(a, Machine()) == make_cache_key(b, Machine())
        assert hash(make_cache_key(a, Machine())) == hash(make_cache_key(b, Machine()))

    def test_any_field_change_changes_key(self) -> None:
        a = Layer(layer_id="a", type="circle")
        b = Layer(layer_id="a", type="circle", rotation=15.0)
        assert make_cache_key(a, None) != make_cache_key(b, None)

    def test_machine_ignored_when_unused(self) -> None:
        layer = Layer(layer_id="a", type="circle", uses_machine=False)
        small = Machine(max_x=100.0)
        large = Machine(max_x=400.0)
        assert make_cache_key(layer, small) == make_cache_key(layer, large)
        assert make_cache_key(layer, small).machine is None

    def test_machine_included_when_used(self) -> None:
        layer = Layer(layer_id="a", type="perimeter", uses_machine=True)
        small = Machine(max_x=100.0)
        large = Machine(max_x=400.0)
        assert make_cache_key(layer, small) != make_cache_key(layer, large)

    def test_effects_are_part_of_key(self) -> None:
        plain = Layer(layer_id="a", type="circle")
        scaled = Layer(
            layer_id="a", type="circle",
            effects=(Effect("e1", "scale", params=(("factor", 2.0),)),),
        )
        assert make_cache_key(plain, None) != make_cache_key(scaled, None)

    def test_unserializable_param_raises(self) -> None:
        layer = Layer(layer_id="a", type="circle", params=(("tags", frozenset({"x"})),))
        with pytest.raises(CacheKeySerializationFailure, match="layer 'a'"):
            make_cache_key(layer, None)

    def test_nan_param_raises(self) -> None:
        layer = Layer(layer_id="a", type="circle", params=(("segments", float("nan")),))
        with pytest.raises(CacheKeySerializationFailure):
            make_cache_key(layer, None)

    def test_digest_is_short_and_stable(self) -> None:
        layer = Layer(layer_id="a", type="circle")
        key = make_cache_key(layer, None)
        assert len(key.digest) == 12
        assert key.digest == make_cache_key(Layer(layer_id="a", type="circle"), None).digest
