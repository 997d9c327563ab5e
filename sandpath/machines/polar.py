"""Polar (round) table perimeter geometry.

The drawable area is the disc of radius ``max_radius`` around the origin.
Perimeter points are found by pushing a point radially out to the rim;
tracing samples the shorter arc between two rim points.
"""

from __future__ import annotations

import math

import numpy as np

from sandpath.core.errors import InvalidConnectionGeometry
from sandpath.core.types import Machine
from sandpath.utils.geometry import Vertex


class PolarMachine:
    """Perimeter lookup and tracing for a round table.

    Parameters
    ----------
    machine : Machine
        Machine settings; only ``max_radius`` is used.
    trace_step_deg : float
        Maximum angular distance between traced rim points, default 2.0.
    """

    def __init__(self, machine: Machine, trace_step_deg: float = 2.0) -> None:
        if trace_step_deg <= 0.0:
            raise ValueError(f"trace_step_deg must be positive, got {trace_step_deg}")
        self.machine = machine
        self.radius = machine.max_radius
        self.trace_step = math.radians(trace_step_deg)

    def _require_radius(self) -> None:
        if self.radius <= 0.0:
            raise InvalidConnectionGeometry(
                f"Polar machine has no perimeter: max_radius={self.radius:.3f}"
            )

    def nearest_perimeter_vertex(self, point: Vertex) -> Vertex:
        """Rim point on the ray from the origin through ``point``.

        The origin itself has no direction and maps to angle 0.
        """
        self._require_radius()
        r = math.hypot(point.x, point.y)
        if r == 0.0:
            return Vertex(self.radius, 0.0)
        scale = self.radius / r
        return Vertex(point.x * scale, point.y * scale)

    def trace_perimeter(self, start: Vertex, end: Vertex) -> list[Vertex]:
        """Rim points strictly between ``start`` and ``end`` on the shorter arc."""
        self._require_radius()
        a0 = math.atan2(start.y, start.x)
        a1 = math.atan2(end.y, end.x)
        delta = (a1 - a0 + math.pi) % (2.0 * math.pi) - math.pi

        steps = int(math.ceil(abs(delta) / self.trace_step))
        if steps < 2:
            return []

        angles = a0 + delta * np.arange(1, steps) / steps
        return [
            Vertex(float(self.radius * math.cos(a)), float(self.radius * math.sin(a)))
            for a in angles
        ]
