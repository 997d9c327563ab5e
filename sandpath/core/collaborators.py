"""Interfaces of the pipeline's external collaborators.

The pipeline owns memoization, caching, stitching and aggregation. Shape
geometry, transforms, machine perimeter geometry, polishing and slider
bounds are supplied from outside through the protocols below and bundled
in :class:`Collaborators`. Every collaborator must be a pure function of
its arguments: the pipeline caches their results.

``Collaborators.defaults()`` wires the reference implementations shipped in
:mod:`sandpath.shapes`, :mod:`sandpath.core.transform` and
:mod:`sandpath.machines`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import partial
from typing import Callable, Protocol, Sequence

from sandpath.core.types import Effect, Layer, Machine, ShapeState, VertexList
from sandpath.utils.geometry import Vertex


class ShapeGenerator(Protocol):
    """Raw geometry of one shape kind."""

    def get_vertices(self, state: ShapeState) -> Sequence[Vertex]:
        ...


class MachineInstance(Protocol):
    """Perimeter geometry of a configured machine."""

    def nearest_perimeter_vertex(self, point: Vertex) -> Vertex:
        ...

    def trace_perimeter(self, start: Vertex, end: Vertex) -> Sequence[Vertex]:
        """Points strictly between ``start`` and ``end`` along the perimeter."""
        ...


class TransformShapes(Protocol):
    def __call__(
        self, vertices: VertexList, layer: Layer, effects: tuple[Effect, ...]
    ) -> Sequence[Vertex]:
        ...


class TransformShape(Protocol):
    def __call__(
        self, layer: Layer, vertex: Vertex, loop_index: int, total_loops: int
    ) -> Vertex:
        ...


class PolishVertices(Protocol):
    def __call__(
        self, vertices: VertexList, machine: Machine, *, start: bool, end: bool
    ) -> Sequence[Vertex]:
        ...


class SliderBounds(Protocol):
    def __call__(self, vertices: Sequence[Vertex], value: float) -> tuple[int, int]:
        ...


@dataclass(frozen=True)
class Collaborators:
    """Bundle of external functions used by the pipeline.

    Parameters
    ----------
    get_shape : Callable[[Layer], ShapeGenerator]
        Resolves the generator for a layer's shape type.
    transform_shapes : TransformShapes
        Applies layer transform and effects to raw vertices.
    transform_shape : TransformShape
        Single-vertex transform, used for preview-track vertices.
    machine_instance : Callable[[Machine], MachineInstance]
        Builds perimeter geometry for machine settings.
    polish_vertices : PolishVertices
        Final machine-specific finishing of a layer path.
    slider_bounds : SliderBounds
        Maps a slider value to an index window of the flattened path.
    """

    get_shape: Callable[[Layer], ShapeGenerator]
    transform_shapes: TransformShapes
    transform_shape: TransformShape
    machine_instance: Callable[[Machine], MachineInstance]
    polish_vertices: PolishVertices
    slider_bounds: SliderBounds

    @classmethod
    def defaults(
        cls,
        *,
        slide_size: float = 0.02,
        trace_step_deg: float = 2.0,
        **overrides,
    ) -> Collaborators:
        """Reference implementations, with any field replaceable by keyword."""
        from sandpath import machines, shapes
        from sandpath.core import transform
        from sandpath.utils.geometry import slider_bounds

        fields = dict(
            get_shape=shapes.get_shape,
            transform_shapes=transform.transform_shapes,
            transform_shape=transform.transform_shape,
            machine_instance=partial(
                machines.get_machine_instance, trace_step_deg=trace_step_deg
            ),
            polish_vertices=machines.polish_vertices,
            slider_bounds=partial(slider_bounds, slide_size=slide_size),
        )
        fields.update(overrides)
        return cls(**fields)

    def replace(self, **changes) -> Collaborators:
        return replace(self, **changes)


