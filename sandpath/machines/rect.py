"""Rectangular table perimeter geometry.

The drawable area is the axis-aligned rectangle ``[min_x, max_x] x
[min_y, max_y]``. The perimeter is walked counter-clockwise starting at the
lower-left corner: bottom edge, right edge, top edge, left edge. Positions
on the perimeter are expressed as the arc length ``s`` from that corner.
"""

from __future__ import annotations

from sandpath.core.errors import InvalidConnectionGeometry
from sandpath.core.types import Machine
from sandpath.utils.geometry import Vertex, clamp_to_rect


class RectMachine:
    """Perimeter lookup and tracing for a rectangular table."""

    def __init__(self, machine: Machine) -> None:
        self.machine = machine
        self.width = machine.max_x - machine.min_x
        self.height = machine.max_y - machine.min_y
        self.perimeter = 2.0 * (self.width + self.height)

    def _require_area(self) -> None:
        if self.width <= 0.0 or self.height <= 0.0:
            raise InvalidConnectionGeometry(
                f"Rectangular machine has no perimeter: "
                f"width={self.width:.3f}, height={self.height:.3f}"
            )

    def nearest_perimeter_vertex(self, point: Vertex) -> Vertex:
        """Closest point on the rectangle border.

        Points outside are clamped onto the border; points inside are
        projected onto the nearest edge (ties go bottom, right, top, left).
        """
        self._require_area()
        m = self.machine
        p = clamp_to_rect(point, m.min_x, m.max_x, m.min_y, m.max_y)

        edges = [
            (p.y - m.min_y, Vertex(p.x, m.min_y)),
            (m.max_x - p.x, Vertex(m.max_x, p.y)),
            (m.max_y - p.y, Vertex(p.x, m.max_y)),
            (p.x - m.min_x, Vertex(m.min_x, p.y)),
        ]
        return min(edges, key=lambda edge: edge[0])[1]

    def _arc_position(self, p: Vertex) -> float:
        m = self.machine
        w, h = self.width, self.height
        candidates = [
            (abs(p.y - m.min_y), p.x - m.min_x),
            (abs(p.x - m.max_x), w + (p.y - m.min_y)),
            (abs(p.y - m.max_y), w + h + (m.max_x - p.x)),
            (abs(p.x - m.min_x), 2.0 * w + h + (m.max_y - p.y)),
        ]
        return min(candidates, key=lambda c: c[0])[1] % self.perimeter

    def _corners(self) -> list[tuple[float, Vertex]]:
        m = self.machine
        w, h = self.width, self.height
        return [
            (0.0, Vertex(m.min_x, m.min_y)),
            (w, Vertex(m.max_x, m.min_y)),
            (w + h, Vertex(m.max_x, m.max_y)),
            (2.0 * w + h, Vertex(m.min_x, m.max_y)),
        ]

    def trace_perimeter(self, start: Vertex, end: Vertex) -> list[Vertex]:
        """Corners passed when walking the border from ``start`` to ``end``.

        Walks the shorter way round (counter-clockwise on a tie). The
        endpoints themselves are not included.
        """
        self._require_area()
        s_start = self._arc_position(start)
        s_end = self._arc_position(end)

        forward = (s_end - s_start) % self.perimeter
        backward = (s_start - s_end) % self.perimeter
        if forward == 0.0:
            return []

        if forward <= backward:
            along = [
                ((s - s_start) % self.perimeter, corner)
                for s, corner in self._corners()
            ]
            limit = forward
        else:
            along = [
                ((s_start - s) % self.perimeter, corner)
                for s, corner in self._corners()
            ]
            limit = backward

        return [corner for d, corner in sorted(along, key=lambda a: a[0]) if 0.0 < d < limit]
