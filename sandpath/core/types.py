"""Drawing state model -- immutable snapshots consumed by the pipeline.

Every model object is a frozen dataclass. The host state store produces a
new object whenever a logical value changes and **reuses** the existing
object otherwise; the pipeline's memoization compares inputs by identity,
so handing it fresh copies of unchanged layers makes every stage recompute.

``DrawingState.replace_layer`` and friends follow that rule: they build a
new snapshot that shares every unchanged layer, machine and slider object.

Units
-----
Coordinates are machine units (mm) with the origin at the table centre.
Rotation is in degrees.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from sandpath.utils.geometry import Vertex

VertexList = tuple[Vertex, ...]
"""Ordered vertices; order is drawing order."""

Params = tuple[tuple[str, Any], ...]
"""Shape or effect parameters as ordered ``(name, value)`` pairs."""


def _param(params: Params, name: str, default: Any) -> Any:
    for key, value in params:
        if key == name:
            return value
    return default


class ConnectionMethod(str, Enum):
    """How a layer's path is joined to the next visible layer."""

    NONE = "none"
    ALONG_PERIMETER = "along perimeter"

    @classmethod
    def parse(cls, value: str | ConnectionMethod) -> ConnectionMethod:
        """Accept ``"along perimeter"``, ``"along-perimeter"`` or
        ``"along_perimeter"`` (case-insensitive)."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", " ").replace("_", " ")
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(
            f"connection method must be one of "
            f"{[m.value for m in cls]}, got {value!r}"
        )


@dataclass(frozen=True, slots=True)
class Effect:
    """One entry of a layer's effect stack.

    Parameters
    ----------
    effect_id : str
        Identifier, unique within the drawing.
    type : str
        Effect kind name (see ``sandpath.core.transform.EFFECTS``).
    enabled : bool
        Disabled effects are kept in the stack but not applied.
    params : Params
        Effect-specific parameters.
    """

    effect_id: str
    type: str
    enabled: bool = True
    params: Params = ()

    def param(self, name: str, default: Any = None) -> Any:
        return _param(self.params, name, default)


@dataclass(frozen=True, slots=True)
class Layer:
    """One user-configured shape instance.

    ``uses_machine`` marks shapes whose geometry depends on machine settings;
    when it is false the machine never reaches the shape generator or the
    cache key. ``should_cache`` marks shapes expensive enough to keep their
    raw vertices in the vertex cache.
    """

    layer_id: str
    type: str
    offset_x: float = 0.0
    offset_y: float = 0.0
    rotation: float = 0.0
    starting_width: float = 100.0
    starting_height: float = 100.0
    autosize: bool = True
    dragging: bool = False
    effects: tuple[Effect, ...] = ()
    connection_method: ConnectionMethod = ConnectionMethod.NONE
    uses_machine: bool = False
    should_cache: bool = False
    track_enabled: bool = False
    track_length: float = 0.2
    num_loops: int = 1
    params: Params = ()

    def __post_init__(self) -> None:
        if self.num_loops < 0:
            raise ValueError(f"num_loops must be >= 0, got {self.num_loops}")
        if not isinstance(self.connection_method, ConnectionMethod):
            object.__setattr__(
                self, "connection_method",
                ConnectionMethod.parse(self.connection_method),
            )

    @property
    def has_active_effect(self) -> bool:
        return any(effect.enabled for effect in self.effects)

    def param(self, name: str, default: Any = None) -> Any:
        return _param(self.params, name, default)


@dataclass(frozen=True, slots=True)
class Machine:
    """Physical machine settings. Compared by content.

    Parameters
    ----------
    type : ``"rectangular"`` | ``"polar"``
        Table geometry.
    min_x, max_x, min_y, max_y : float
        Drawable rectangle (rectangular tables).
    max_radius : float
        Drawable radius around the origin (polar tables).
    start_point, end_point : Vertex | None
        Optional homing positions added by polishing at the true start and
        end of the whole drawing.
    """

    type: str = "rectangular"
    min_x: float = -250.0
    max_x: float = 250.0
    min_y: float = -250.0
    max_y: float = 250.0
    max_radius: float = 250.0
    start_point: Optional[Vertex] = None
    end_point: Optional[Vertex] = None

    def __post_init__(self) -> None:
        if self.type not in ("rectangular", "polar"):
            raise ValueError(
                f"machine type must be 'rectangular' or 'polar', got {self.type!r}"
            )


@dataclass(frozen=True, slots=True)
class PreviewSlider:
    """Progress slider of the preview window, ``value`` in [0, 1]."""

    value: float = 0.0


@dataclass(frozen=True, slots=True)
class ShapeState:
    """Argument handed to shape generators.

    ``machine`` is ``None`` for layers that don't use machine settings.
    """

    shape: Layer
    machine: Optional[Machine]


@dataclass(frozen=True, eq=False)
class DrawingState:
    """Snapshot of everything the pipeline reads.

    Equality is identity: two snapshots are "the same" only when they are the
    same object, which is what the aggregate views memoize on.
    """

    layers: Mapping[str, Layer]
    visible_layer_ids: tuple[str, ...]
    machine: Machine = field(default_factory=Machine)
    preview_slider: PreviewSlider = field(default_factory=PreviewSlider)

    @classmethod
    def from_layers(
        cls,
        layers: list[Layer],
        machine: Optional[Machine] = None,
        slider: float = 0.0,
    ) -> DrawingState:
        """Build a snapshot where every given layer is visible, in order."""
        return cls(
            layers={layer.layer_id: layer for layer in layers},
            visible_layer_ids=tuple(layer.layer_id for layer in layers),
            machine=machine if machine is not None else Machine(),
            preview_slider=PreviewSlider(slider),
        )

    def replace_layer(self, layer: Layer) -> DrawingState:
        """New snapshot with ``layer`` swapped in, sharing everything else."""
        layers = dict(self.layers)
        layers[layer.layer_id] = layer
        return dataclasses.replace(self, layers=layers)

    def update_layer(self, layer_id: str, **changes: Any) -> DrawingState:
        """New snapshot with fields of one layer changed."""
        return self.replace_layer(dataclasses.replace(self.layers[layer_id], **changes))

    def with_machine(self, machine: Machine) -> DrawingState:
        return dataclasses.replace(self, machine=machine)

    def with_slider(self, value: float) -> DrawingState:
        return dataclasses.replace(self, preview_slider=PreviewSlider(value))

    def with_visible_layers(self, layer_ids: tuple[str, ...]) -> DrawingState:
        return dataclasses.replace(self, visible_layer_ids=tuple(layer_ids))
