"""Tests for memoized computation nodes and the node registry."""

from __future__ import annotations

from enum import Enum

import pytest

from sandpath.core import ComputationNode, ComputationRegistry
from sandpath.core.registry import same_input


class _Mode(Enum):
    A = "a"


class TestSameInput:
    def test_identity(self) -> None:
        obj = object()
        assert same_input(obj, obj)

    def test_equal_but_distinct_objects_differ(self) -> None:
        assert not same_input([1, 2], [1, 2])

    def test_plain_values_compare_by_value(self) -> None:
        assert same_input(int("1000"), int("1000"))
        assert same_input(0.5, 0.25 * 2)
        assert same_input("".join(["ab", "c"]), "abc")
        assert same_input(None, None)
        assert same_input(_Mode.A, _Mode("a"))

    def test_value_types_must_match(self) -> None:
        assert not same_input(1, 1.0)
        assert not same_input(True, 1)


class TestComputationNode:
    def test_recomputes_only_on_changed_input(self) -> None:
        calls = []

        def compute(items):
            calls.append(items)
            return len(items)

        node = ComputationNode("count", None, inputs=[lambda s: s["items"]], compute=compute)
        items = (1, 2, 3)
        state = {"items": items}
        assert node(state) == 3
        assert node({"items": items}) == 3
        assert node.evaluations == 1

        assert node({"items": tuple([1, 2, 3])}) == 3
        assert node.evaluations == 2

    def test_returns_same_result_object(self) -> None:
        node = ComputationNode("copy", None, inputs=[lambda s: s], compute=lambda s: list(s))
        state = (1, 2)
        assert node(state) is node(state)

    def test_with_state_passes_state_without_comparing_it(self) -> None:
        seen = []

        def compute(value, *, state):
            seen.append(state)
            return value * 2

        node = ComputationNode(
            "double", None, inputs=[lambda s: s["value"]], compute=compute, with_state=True
        )
        assert node({"value": 2}) == 4
        assert node({"value": 2}) == 4
        assert node.evaluations == 1
        assert len(seen) == 1

    def test_reset_forces_recompute(self) -> None:
        node = ComputationNode("id", None, inputs=[lambda s: s], compute=lambda s: s)
        node(1)
        node.reset()
        node(1)
        assert node.evaluations == 2


class TestComputationRegistry:
    @pytest.fixture()
    def registry(self) -> ComputationRegistry:
        registry = ComputationRegistry()
        registry.register(
            "double",
            lambda layer_id: ComputationNode(
                "double", layer_id,
                inputs=[lambda state: state[layer_id]],
                compute=lambda value: value * 2,
            ),
        )
        return registry

    def test_one_node_per_key(self, registry: ComputationRegistry) -> None:
        node = registry.get_node("double", "a")
        assert registry.get_node("double", "a") is node
        assert registry.get_node("double", "b") is not node
        assert len(registry) == 2
        assert ("double", "a") in registry

    def test_unknown_kind_raises(self, registry: ComputationRegistry) -> None:
        with pytest.raises(KeyError, match="Unknown computation kind 'missing'"):
            registry.get_node("missing", "a")

    def test_reregistering_same_factory_is_allowed(self) -> None:
        registry = ComputationRegistry()

        def factory(layer_id):
            return ComputationNode("k", layer_id, inputs=[], compute=lambda: 1)

        registry.register("k", factory)
        registry.register("k", factory)
        assert registry.kinds() == ["k"]

    def test_conflicting_registration_raises(self, registry: ComputationRegistry) -> None:
        with pytest.raises(ValueError, match="already registered"):
            registry.register("double", lambda layer_id: None)

    def test_selector_evaluates_shared_node(self, registry: ComputationRegistry) -> None:
        select = registry.selector("double", "a")
        state = {"a": 21}
        assert select(state) == 42
        assert select(state) == 42
        assert registry.get_node("double", "a").evaluations == 1

    def test_chained_nodes_recompute_downstream_only(self, registry: ComputationRegistry) -> None:
        registry.register(
            "plus_one",
            lambda layer_id: ComputationNode(
                "plus_one", layer_id,
                inputs=[registry.selector("double", layer_id)],
                compute=lambda doubled: doubled + 1,
            ),
        )
        assert registry.get_node("plus_one", "a")({"a": 1, "b": 5}) == 3
        assert registry.get_node("plus_one", "a")({"a": 1, "b": 6}) == 3
        assert registry.get_node("double", "a").evaluations == 1
        assert registry.get_node("plus_one", "a").evaluations == 1
