"""Perimeter stitching -- joins one layer's path to the next visible layer.

The machine cannot lift its pen, so the last vertex of a layer must lead to
the first vertex of the next visible layer. The computed stage of a layer
asks the stitcher for that bridge:

* no next layer, a dragged next layer, or an empty next path → no bridge;
  a dragged layer's path is transient and must not be baked into its
  neighbour's memoized result;
* ``ALONG_PERIMETER`` → ``[start_p, *trace(start_p, end_p), end_p, end]``,
  where ``start`` is this layer's last vertex, ``end`` the next layer's
  first vertex and ``*_p`` their nearest perimeter points;
* otherwise → ``[end]``, a straight stitch. The rest of the next layer is
  emitted when its own turn comes in the aggregate view.

The next layer's computed vertices come from its memoized node, so the
recursion visits each layer at most once per change. The visible order is
finite and every layer only looks forward, which bounds the recursion by
the layer count; a duplicated id in the order would still loop, so the
stitcher tracks the layers currently being computed and raises
:class:`StitchCycleError` on re-entry.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Optional

from sandpath.core.errors import InvalidConnectionGeometry, StitchCycleError
from sandpath.core.types import ConnectionMethod, DrawingState, Layer, VertexList
from sandpath.utils.geometry import Vertex

if TYPE_CHECKING:
    from sandpath.core.context import PipelineContext

logger = logging.getLogger(__name__)


class PerimeterStitcher:
    """Builds the bridge from a layer to the next visible layer."""

    def __init__(self, context: PipelineContext) -> None:
        self.context = context
        self._active: list[str] = []

    @contextmanager
    def visiting(self, layer_id: str) -> Iterator[None]:
        """Mark ``layer_id`` as being computed for the duration of the block."""
        if layer_id in self._active:
            raise StitchCycleError(self._active[self._active.index(layer_id):] + [layer_id])
        self._active.append(layer_id)
        try:
            yield
        finally:
            self._active.pop()

    def stitch(
        self,
        vertices: VertexList,
        layer: Layer,
        next_layer_id: Optional[str],
        state: DrawingState,
    ) -> VertexList:
        """Return ``vertices`` followed by the bridge to the next layer."""
        if next_layer_id is None:
            return vertices

        next_layer = state.layers.get(next_layer_id)
        if next_layer is None or next_layer.dragging:
            return vertices

        next_vertices = self.context.registry.get_node("computed", next_layer_id)(state)
        if not next_vertices:
            return vertices

        end = next_vertices[0]
        if layer.connection_method is ConnectionMethod.ALONG_PERIMETER and vertices:
            bridge = self.perimeter_bridge(vertices[-1], end, state)
            logger.debug(
                "Bridged %s -> %s along perimeter (%d vertices)",
                layer.layer_id, next_layer_id, len(bridge),
            )
            return vertices + bridge

        return vertices + (end,)

    def perimeter_bridge(self, start: Vertex, end: Vertex, state: DrawingState) -> VertexList:
        """``(start_p, *trace, end_p, end)`` for the current machine.

        Raises
        ------
        InvalidConnectionGeometry
            If the machine cannot resolve a perimeter point.
        """
        machine = self.context.collaborators.machine_instance(state.machine)
        start_perimeter = machine.nearest_perimeter_vertex(start)
        end_perimeter = machine.nearest_perimeter_vertex(end)
        if start_perimeter is None or end_perimeter is None:
            raise InvalidConnectionGeometry(
                f"No perimeter point for connection {start} -> {end}"
            )
        trace = tuple(machine.trace_perimeter(start_perimeter, end_perimeter))
        return (start_perimeter,) + trace + (end_perimeter, end)
