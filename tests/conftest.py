"""Shared fixtures: layer builders and counting collaborators.

The counting wrappers delegate to the reference implementations and record
how often each layer's geometry is generated or transformed, which is what
the memoization and cache tests assert on.
"""

from __future__ import annotations

from collections import Counter
from typing import Callable

import pytest

from sandpath import shapes
from sandpath.core import Collaborators, Layer, PipelineContext
from sandpath.core import transform


class CountingShapes:
    """``get_shape`` collaborator that counts generator calls per layer id."""

    def __init__(self) -> None:
        self.calls: Counter = Counter()

    def __call__(self, layer):
        return _CountedGenerator(shapes.get_shape(layer), self.calls)


class _CountedGenerator:
    def __init__(self, generator, calls: Counter) -> None:
        self.generator = generator
        self.calls = calls

    def get_vertices(self, state):
        self.calls[state.shape.layer_id] += 1
        return self.generator.get_vertices(state)


class CountingTransform:
    """``transform_shapes`` collaborator that counts calls per layer id."""

    def __init__(self) -> None:
        self.calls: Counter = Counter()

    def __call__(self, vertices, layer, effects):
        self.calls[layer.layer_id] += 1
        return transform.transform_shapes(vertices, layer, effects)


@pytest.fixture()
def counting_shapes() -> CountingShapes:
    return CountingShapes()


@pytest.fixture()
def counting_transform() -> CountingTransform:
    return CountingTransform()


@pytest.fixture()
def context(counting_shapes: CountingShapes, counting_transform: CountingTransform) -> PipelineContext:
    """Fresh pipeline context wired to the counting collaborators."""
    return PipelineContext(
        collaborators=Collaborators.defaults(
            get_shape=counting_shapes,
            transform_shapes=counting_transform,
        )
    )


@pytest.fixture()
def make_layer() -> Callable[..., Layer]:
    """Build a ``custom`` layer from explicit points.

    ``make_layer("a", [(0, 0), (1, 0)], connection_method="along perimeter")``
    """

    def build(layer_id: str, points, **fields) -> Layer:
        params = (("points", tuple(tuple(p) for p in points)),) + tuple(
            fields.pop("params", ())
        )
        return Layer(layer_id=layer_id, type="custom", params=params, **fields)

    return build
