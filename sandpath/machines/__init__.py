"""Reference machine collaborators: perimeter geometry and path polishing.

Subpackage modules:
    rect: Rectangular table perimeter
    polar: Round table perimeter

Public API:
    get_machine_instance(machine) -> RectMachine | PolarMachine
    polish_vertices(vertices, machine, start=..., end=...)
"""

from __future__ import annotations

from typing import Sequence, Union

from sandpath.core.types import Machine
from sandpath.machines.polar import PolarMachine
from sandpath.machines.rect import RectMachine
from sandpath.utils.geometry import Vertex, clamp_to_radius, clamp_to_rect


def get_machine_instance(
    machine: Machine, trace_step_deg: float = 2.0
) -> Union[RectMachine, PolarMachine]:
    """Build the perimeter geometry for ``machine.type``."""
    if machine.type == "polar":
        return PolarMachine(machine, trace_step_deg=trace_step_deg)
    return RectMachine(machine)


def polish_vertices(
    vertices: Sequence[Vertex], machine: Machine, *, start: bool, end: bool
) -> list[Vertex]:
    """Clamp a layer path to the table and add homing at drawing boundaries.

    Parameters
    ----------
    vertices : Sequence[Vertex]
        Layer path (already stitched to the next layer).
    machine : Machine
        Table settings.
    start, end : bool
        Whether this layer is the first / last of the visible order. The
        machine's ``start_point`` / ``end_point`` (when set) are added only
        there, and never to an empty path.
    """
    if machine.type == "polar":
        polished = [clamp_to_radius(v, machine.max_radius) for v in vertices]
    else:
        polished = [
            clamp_to_rect(v, machine.min_x, machine.max_x, machine.min_y, machine.max_y)
            for v in vertices
        ]

    if not polished:
        return polished
    if start and machine.start_point is not None:
        polished.insert(0, machine.start_point)
    if end and machine.end_point is not None:
        polished.append(machine.end_point)
    return polished


__all__ = [
    "PolarMachine",
    "RectMachine",
    "get_machine_instance",
    "polish_vertices",
]
