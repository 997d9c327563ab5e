"""Reference layer transform and effect stack.

``transform_shapes`` turns raw shape vertices into the user-edited shape:

1. apply each enabled effect, in stack order, to the shape-local vertices;
2. for every loop ``i`` in ``range(layer.num_loops)``, place a copy of the
   vertices with :func:`transform_shape`.

``transform_shape`` places one vertex: per-loop spin, track offset (a
circle of radius ``track_length * starting_width`` walked once over
``num_loops`` loops), then the layer rotation (clockwise degrees, the UI
transformer convention) and offset.

Effects are looked up by type in :data:`EFFECTS`; each is a pure function
``(vertices, effect) -> vertices``.
"""

from __future__ import annotations

import math
from typing import Callable, Sequence

from sandpath.core.types import Effect, Layer, VertexList
from sandpath.utils.geometry import Vertex, offset, rotate


def _scale(vertices: Sequence[Vertex], effect: Effect) -> list[Vertex]:
    sx = float(effect.param("x", effect.param("factor", 1.0)))
    sy = float(effect.param("y", effect.param("factor", 1.0)))
    return [Vertex(v.x * sx, v.y * sy) for v in vertices]


def _translate(vertices: Sequence[Vertex], effect: Effect) -> list[Vertex]:
    dx = float(effect.param("dx", 0.0))
    dy = float(effect.param("dy", 0.0))
    return [offset(v, dx, dy) for v in vertices]


def _reverse(vertices: Sequence[Vertex], effect: Effect) -> list[Vertex]:
    return list(reversed(vertices))


EFFECTS: dict[str, Callable[[Sequence[Vertex], Effect], list[Vertex]]] = {
    "scale": _scale,
    "translate": _translate,
    "reverse": _reverse,
}


def apply_effects(vertices: Sequence[Vertex], effects: Sequence[Effect]) -> list[Vertex]:
    """Apply enabled effects in order.

    Raises
    ------
    ValueError
        If an effect type is not in :data:`EFFECTS`.
    """
    result = list(vertices)
    for effect in effects:
        if not effect.enabled:
            continue
        try:
            fn = EFFECTS[effect.type]
        except KeyError:
            raise ValueError(
                f"Unknown effect type '{effect.type}'. Available: {sorted(EFFECTS)}"
            ) from None
        result = fn(result, effect)
    return result


def transform_shape(
    layer: Layer, vertex: Vertex, loop_index: int, total_loops: int
) -> Vertex:
    """Place one shape-local vertex in machine coordinates.

    Parameters
    ----------
    layer : Layer
        Layer whose transform to apply.
    vertex : Vertex
        Shape-local vertex.
    loop_index : int
        Loop number; positions the copy on the track.
    total_loops : int
        Multiplier of the per-loop spin (``spin`` layer parameter, degrees).

    Returns
    -------
    Vertex
    """
    v = vertex
    spin = float(layer.param("spin", 0.0))
    if spin:
        v = rotate(v, spin * total_loops)

    if layer.track_enabled and layer.num_loops > 0:
        radius = layer.track_length * layer.starting_width
        angle = 2.0 * math.pi * loop_index / layer.num_loops
        v = offset(v, radius * math.cos(angle), radius * math.sin(angle))

    v = rotate(v, -layer.rotation)
    return offset(v, layer.offset_x, layer.offset_y)


def transform_shapes(
    vertices: VertexList, layer: Layer, effects: Sequence[Effect]
) -> list[Vertex]:
    """Effects, then one placed copy of the shape per loop."""
    local = apply_effects(vertices, effects)
    placed: list[Vertex] = []
    for i in range(layer.num_loops):
        placed.extend(transform_shape(layer, v, i, i) for v in local)
    return placed
