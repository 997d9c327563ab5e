"""Geometric primitives and polyline operations for drawing paths.

Provides:
    - Vertex: immutable (x, y) point
    - rotate / offset: single-vertex transforms (degrees, machine units)
    - distance / path_length: Euclidean segment and polyline lengths
    - clamp_to_rect / clamp_to_radius: keep vertices inside machine bounds
    - slider_bounds: index window of a path selected by a progress value

Used by:
    - Layer pipeline: preview-frame mapping of vertices
    - Aggregate views: path statistics, slider gradient bounds
    - Reference machines: perimeter projection and polishing

All coordinates are machine units (mm on a sand table), origin at the
machine centre, +Y up. Angles are in degrees at the API boundary.
"""

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np


@dataclass(frozen=True, slots=True)
class Vertex:
    """One drawable point. Ordered sequences of vertices are drawing order."""

    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


def rotate(vertex: Vertex, angle_deg: float) -> Vertex:
    """Rotate a vertex counter-clockwise about the origin.

    Parameters
    ----------
    vertex : Vertex
        Point to rotate
    angle_deg : float
        Rotation angle in degrees

    Returns
    -------
    Vertex
        Rotated point
    """
    angle = math.radians(angle_deg)
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return Vertex(
        vertex.x * cos_a - vertex.y * sin_a,
        vertex.x * sin_a + vertex.y * cos_a,
    )


def offset(vertex: Vertex, dx: float, dy: float) -> Vertex:
    """Translate a vertex by (dx, dy)."""
    return Vertex(vertex.x + dx, vertex.y + dy)


def distance(a: Vertex, b: Vertex) -> float:
    """Euclidean distance between two vertices."""
    return math.hypot(b.x - a.x, b.y - a.y)


def to_array(vertices: Sequence[Vertex]) -> np.ndarray:
    """Stack vertices into an (N, 2) float array."""
    if not vertices:
        return np.zeros((0, 2), dtype=np.float64)
    return np.array([(v.x, v.y) for v in vertices], dtype=np.float64)


def path_length(vertices: Sequence[Vertex]) -> float:
    """Compute total length of a polyline.

    Parameters
    ----------
    vertices : Sequence[Vertex]
        Polyline vertices in drawing order

    Returns
    -------
    float
        Sum of Euclidean distances between consecutive vertices; 0.0 for
        fewer than two vertices
    """
    if len(vertices) < 2:
        return 0.0

    points = to_array(vertices)
    diffs = points[1:] - points[:-1]
    return float(np.hypot(diffs[:, 0], diffs[:, 1]).sum())


def clamp_to_rect(
    vertex: Vertex,
    min_x: float,
    max_x: float,
    min_y: float,
    max_y: float
) -> Vertex:
    """Clamp a vertex into an axis-aligned rectangle."""
    return Vertex(
        min(max(vertex.x, min_x), max_x),
        min(max(vertex.y, min_y), max_y),
    )


def clamp_to_radius(vertex: Vertex, radius: float) -> Vertex:
    """Pull a vertex outside the circle of ``radius`` back onto its edge."""
    r = math.hypot(vertex.x, vertex.y)
    if r <= radius or r == 0.0:
        return vertex
    scale = radius / r
    return Vertex(vertex.x * scale, vertex.y * scale)


def slider_bounds(
    vertices: Sequence[Vertex],
    value: float,
    slide_size: float = 0.02
) -> Tuple[int, int]:
    """Resolve the path window highlighted by a preview slider.

    Parameters
    ----------
    vertices : Sequence[Vertex]
        Whole flattened path
    value : float
        Slider progress in [0, 1]
    slide_size : float
        Window width as a fraction of the path, default 0.02

    Returns
    -------
    tuple[int, int]
        Half-open index range ``(start, end)`` with
        ``0 <= start <= end <= len(vertices)``

    Examples
    --------
    >>> slider_bounds([Vertex(0, 0)] * 100, 0.5)
    (50, 52)
    """
    n = len(vertices)
    value = min(max(value, 0.0), 1.0)
    start = int(math.floor(n * value))
    end = int(math.floor(n * (value + slide_size)))
    end = min(end, n)
    start = min(start, end)
    return (start, end)
