"""Reference shape generators.

Each shape is a small object with a ``get_vertices(state)`` method returning
shape-local vertices centred on the origin and sized by the layer's
``starting_width`` / ``starting_height``. Generators are pure functions of
the :class:`~sandpath.core.types.ShapeState` they receive.

Registered types:
    circle     -- ``segments`` (default 128) points on an ellipse, closed
    polygon    -- ``sides`` (default 4) regular polygon, closed
    point      -- a single vertex at the origin
    custom     -- explicit ``points`` parameter
    perimeter  -- machine border (needs ``uses_machine``)
"""

from __future__ import annotations

import math
from typing import Sequence

from sandpath.core.errors import ShapeNotFound
from sandpath.core.types import Layer, ShapeState
from sandpath.utils.geometry import Vertex


class Shape:
    """Base class: subclasses set ``name`` and implement ``get_vertices``."""

    name = "shape"

    def get_vertices(self, state: ShapeState) -> list[Vertex]:
        raise NotImplementedError


class Circle(Shape):
    name = "circle"

    def get_vertices(self, state: ShapeState) -> list[Vertex]:
        layer = state.shape
        segments = max(3, int(layer.param("segments", 128)))
        rx = layer.starting_width / 2.0
        ry = layer.starting_height / 2.0
        return [
            Vertex(rx * math.cos(2.0 * math.pi * i / segments),
                   ry * math.sin(2.0 * math.pi * i / segments))
            for i in range(segments + 1)
        ]


class Polygon(Shape):
    name = "polygon"

    def get_vertices(self, state: ShapeState) -> list[Vertex]:
        layer = state.shape
        sides = int(layer.param("sides", 4))
        if sides < 3:
            raise ValueError(f"polygon needs at least 3 sides, got {sides}")
        rx = layer.starting_width / 2.0
        ry = layer.starting_height / 2.0
        # First vertex straight up, like the editor's default orientation
        return [
            Vertex(rx * math.cos(math.pi / 2.0 + 2.0 * math.pi * i / sides),
                   ry * math.sin(math.pi / 2.0 + 2.0 * math.pi * i / sides))
            for i in range(sides + 1)
        ]


class Point(Shape):
    name = "point"

    def get_vertices(self, state: ShapeState) -> list[Vertex]:
        return [Vertex(0.0, 0.0)]


class Custom(Shape):
    """Vertices given verbatim in the ``points`` layer parameter."""

    name = "custom"

    def get_vertices(self, state: ShapeState) -> list[Vertex]:
        points: Sequence = state.shape.param("points", ())
        return [Vertex(float(x), float(y)) for x, y in points]


class Perimeter(Shape):
    """Machine border, inset by the ``inset`` parameter (default 0)."""

    name = "perimeter"

    def get_vertices(self, state: ShapeState) -> list[Vertex]:
        machine = state.machine
        if machine is None:
            return []
        inset = float(state.shape.param("inset", 0.0))
        if machine.type == "polar":
            radius = max(machine.max_radius - inset, 0.0)
            segments = 180
            return [
                Vertex(radius * math.cos(2.0 * math.pi * i / segments),
                       radius * math.sin(2.0 * math.pi * i / segments))
                for i in range(segments + 1)
            ]
        x0, x1 = machine.min_x + inset, machine.max_x - inset
        y0, y1 = machine.min_y + inset, machine.max_y - inset
        return [Vertex(x0, y0), Vertex(x1, y0), Vertex(x1, y1), Vertex(x0, y1), Vertex(x0, y0)]


SHAPES: dict[str, Shape] = {
    shape.name: shape
    for shape in (Circle(), Polygon(), Point(), Custom(), Perimeter())
}


def get_shape(layer: Layer) -> Shape:
    """Generator registered for ``layer.type``.

    Raises
    ------
    ShapeNotFound
        If the type is not registered.
    """
    try:
        return SHAPES[layer.type]
    except KeyError:
        raise ShapeNotFound(layer.type, sorted(SHAPES)) from None


__all__ = ["SHAPES", "Circle", "Custom", "Perimeter", "Point", "Polygon", "Shape", "get_shape"]
