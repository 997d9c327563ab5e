"""Memoized computation nodes and the registry that keeps one node per key.

A :class:`ComputationNode` is a selector: a list of *input* functions of the
drawing state plus a *compute* function of those inputs. Calling the node
resolves the inputs and reruns ``compute`` only when at least one input
changed since the previous call. "Changed" means a different object
(identity), except for plain values -- ints, floats, strings, bools, enums
and ``None`` -- which compare by value, since equal numbers are not
guaranteed to be the same object.

The :class:`ComputationRegistry` guarantees at most one node per
``(kind, layer_id)`` pair for the lifetime of the registry, so every
consumer of e.g. the transformed vertices of layer ``"a"`` shares a single
memoized result instead of recomputing it independently.

Usage::

    registry = ComputationRegistry()
    registry.register("double", lambda layer_id: ComputationNode(
        "double", layer_id,
        inputs=[lambda state: state.layers[layer_id]],
        compute=lambda layer: layer.num_loops * 2,
    ))
    node = registry.get_node("double", "a")
    assert node is registry.get_node("double", "a")
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Hashable, Optional, Sequence

logger = logging.getLogger(__name__)

Selector = Callable[[Any], Any]
NodeFactory = Callable[[Optional[Hashable]], "ComputationNode"]

_VALUE_TYPES = (bool, int, float, str, Enum, type(None))


def same_input(a: Any, b: Any) -> bool:
    """Identity comparison, relaxed to equality for plain values."""
    if a is b:
        return True
    return (
        type(a) is type(b)
        and isinstance(a, _VALUE_TYPES)
        and a == b
    )


class ComputationNode:
    """One memoized computation.

    Parameters
    ----------
    kind : str
        Computation kind (e.g. ``"raw"``).
    layer_id : Hashable | None
        Layer the node belongs to; ``None`` for whole-drawing views.
    inputs : Sequence[Selector]
        Functions of the state whose results are the declared inputs.
    compute : Callable
        Pure function of the resolved inputs.
    with_state : bool
        Also pass the state to ``compute`` as keyword ``state``. The state is
        **not** compared; use this only when ``compute`` needs the state to
        call other nodes whose results are implied by the declared inputs.
    """

    def __init__(
        self,
        kind: str,
        layer_id: Optional[Hashable],
        inputs: Sequence[Selector],
        compute: Callable[..., Any],
        *,
        with_state: bool = False,
    ) -> None:
        self.kind = kind
        self.layer_id = layer_id
        self.inputs = tuple(inputs)
        self.compute = compute
        self.with_state = with_state
        self.evaluations = 0
        self._last_inputs: Optional[tuple] = None
        self._result: Any = None

    def __call__(self, state: Any) -> Any:
        args = tuple(selector(state) for selector in self.inputs)

        if self._last_inputs is not None and len(args) == len(self._last_inputs) and all(
            same_input(a, b) for a, b in zip(args, self._last_inputs)
        ):
            return self._result

        if self.with_state:
            result = self.compute(*args, state=state)
        else:
            result = self.compute(*args)

        self._last_inputs = args
        self._result = result
        self.evaluations += 1
        logger.debug("Evaluated %s[%s] (#%d)", self.kind, self.layer_id, self.evaluations)
        return result

    def reset(self) -> None:
        """Forget the memoized result; the next call recomputes."""
        self._last_inputs = None
        self._result = None

    def __repr__(self) -> str:
        return (
            f"ComputationNode({self.kind!r}, {self.layer_id!r}, "
            f"evaluations={self.evaluations})"
        )


class ComputationRegistry:
    """Creates nodes lazily and hands out the same node for the same key."""

    def __init__(self) -> None:
        self._factories: dict[str, NodeFactory] = {}
        self._nodes: dict[tuple[str, Optional[Hashable]], ComputationNode] = {}

    def register(self, kind: str, factory: NodeFactory) -> None:
        """Declare how nodes of ``kind`` are built.

        Raises
        ------
        ValueError
            If ``kind`` is already registered with a different factory.
        """
        existing = self._factories.get(kind)
        if existing is not None and existing is not factory:
            raise ValueError(f"Computation kind '{kind}' is already registered")
        self._factories[kind] = factory

    def get_node(self, kind: str, layer_id: Optional[Hashable] = None) -> ComputationNode:
        """Return the node for ``(kind, layer_id)``, creating it on first use.

        Raises
        ------
        KeyError
            If no factory is registered for ``kind``.
        """
        key = (kind, layer_id)
        node = self._nodes.get(key)
        if node is None:
            try:
                factory = self._factories[kind]
            except KeyError:
                raise KeyError(
                    f"Unknown computation kind '{kind}'. "
                    f"Registered: {sorted(self._factories)}"
                ) from None
            node = factory(layer_id)
            self._nodes[key] = node
            logger.debug("Created node %s[%s]", kind, layer_id)
        return node

    def selector(self, kind: str, layer_id: Optional[Hashable] = None) -> Selector:
        """Input function that evaluates ``(kind, layer_id)`` for a state.

        The node is looked up on each call, so selectors can be declared
        before the node they point at has been created.
        """
        def select(state: Any) -> Any:
            return self.get_node(kind, layer_id)(state)

        select.__name__ = f"select_{kind}"
        return select

    def nodes(self) -> list[ComputationNode]:
        return list(self._nodes.values())

    def kinds(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
