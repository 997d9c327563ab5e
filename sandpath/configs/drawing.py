"""Drawing document schema (drawing.v1.yaml) and conversion to snapshots.

A drawing document lists the machine, the layers and the visible order. It is
validated with pydantic for fail-fast errors with actionable messages
(offending layer id, expected ranges), then converted into the frozen
:class:`~sandpath.core.types.DrawingState` the pipeline consumes.

Example::

    schema: drawing.v1
    machine:
      type: polar
      max_radius: 250
    visible_layers: [ring, dot]
    layers:
      - id: ring
        type: circle
        starting_width: 300
        connection_method: along perimeter
      - id: dot
        type: point
        offset_x: 40

Usage:
    from sandpath.configs.drawing import load_drawing
    state = load_drawing("drawings/rings.yaml")
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from sandpath.core.types import (
    ConnectionMethod,
    DrawingState,
    Effect,
    Layer,
    Machine,
    PreviewSlider,
)
from sandpath.utils import fs
from sandpath.utils.geometry import Vertex


class EffectV1(BaseModel):
    """One effect of a layer's stack."""
    id: str = Field(..., min_length=1, description="Effect identifier")
    type: str = Field(..., description="Effect type (scale, translate, reverse)")
    enabled: bool = Field(True, description="Disabled effects are kept but not applied")
    params: dict[str, Any] = Field(default_factory=dict)


class LayerV1(BaseModel):
    """One layer of a drawing."""
    id: str = Field(..., min_length=1, description="Unique layer identifier")
    type: str = Field(..., description="Shape type (circle, polygon, point, custom, perimeter)")
    offset_x: float = 0.0
    offset_y: float = 0.0
    rotation: float = Field(0.0, description="Clockwise rotation in degrees")
    starting_width: float = Field(100.0, gt=0.0)
    starting_height: float = Field(100.0, gt=0.0)
    autosize: bool = True
    effects: List[EffectV1] = Field(default_factory=list)
    connection_method: str = "none"
    uses_machine: bool = False
    should_cache: bool = False
    track_enabled: bool = False
    track_length: float = Field(0.2, ge=0.0)
    num_loops: int = Field(1, ge=0, le=10_000)
    params: dict[str, Any] = Field(default_factory=dict)

    @field_validator('connection_method')
    @classmethod
    def validate_connection_method(cls, v: str) -> str:
        return ConnectionMethod.parse(v).value


class MachineV1(BaseModel):
    """Machine settings."""
    type: Literal["rectangular", "polar"] = "rectangular"
    min_x: float = -250.0
    max_x: float = 250.0
    min_y: float = -250.0
    max_y: float = 250.0
    max_radius: float = Field(250.0, gt=0.0)
    start_point: Optional[Tuple[float, float]] = None
    end_point: Optional[Tuple[float, float]] = None

    @model_validator(mode='after')
    def validate_bounds(self) -> 'MachineV1':
        if self.type == "rectangular":
            if self.max_x <= self.min_x:
                raise ValueError(f"max_x ({self.max_x}) must exceed min_x ({self.min_x})")
            if self.max_y <= self.min_y:
                raise ValueError(f"max_y ({self.max_y}) must exceed min_y ({self.min_y})")
        return self


class DrawingV1(BaseModel):
    """Whole drawing document (drawing.v1.yaml)."""
    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field("drawing.v1", alias="schema", description="Schema version")
    machine: MachineV1 = Field(default_factory=MachineV1)
    layers: List[LayerV1] = Field(..., description="Layers in document order")
    visible_layers: Optional[List[str]] = Field(
        None, description="Drawing order; all layers in document order when omitted"
    )
    slider: float = Field(0.0, ge=0.0, le=1.0, description="Preview slider value")

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != "drawing.v1":
            raise ValueError(f"Expected schema 'drawing.v1', got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_layer_ids(self) -> 'DrawingV1':
        ids = [layer.id for layer in self.layers]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate layer ids: {duplicates}")
        if self.visible_layers is not None:
            unknown = [i for i in self.visible_layers if i not in ids]
            if unknown:
                raise ValueError(f"visible_layers references unknown layers: {unknown}")
            if len(set(self.visible_layers)) != len(self.visible_layers):
                raise ValueError("visible_layers must not repeat a layer id")
        return self


def _freeze(value: Any) -> Any:
    """YAML lists → tuples so parameters stay hashable."""
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, dict):
        return tuple((k, _freeze(v)) for k, v in value.items())
    return value


def _params(raw: dict[str, Any]) -> tuple:
    return tuple((name, _freeze(value)) for name, value in raw.items())


def _vertex(point: Optional[Tuple[float, float]]) -> Optional[Vertex]:
    return Vertex(point[0], point[1]) if point is not None else None


def to_layer(doc: LayerV1) -> Layer:
    return Layer(
        layer_id=doc.id,
        type=doc.type,
        offset_x=doc.offset_x,
        offset_y=doc.offset_y,
        rotation=doc.rotation,
        starting_width=doc.starting_width,
        starting_height=doc.starting_height,
        autosize=doc.autosize,
        effects=tuple(
            Effect(effect_id=e.id, type=e.type, enabled=e.enabled, params=_params(e.params))
            for e in doc.effects
        ),
        connection_method=ConnectionMethod.parse(doc.connection_method),
        uses_machine=doc.uses_machine,
        should_cache=doc.should_cache,
        track_enabled=doc.track_enabled,
        track_length=doc.track_length,
        num_loops=doc.num_loops,
        params=_params(doc.params),
    )


def to_machine(doc: MachineV1) -> Machine:
    return Machine(
        type=doc.type,
        min_x=doc.min_x,
        max_x=doc.max_x,
        min_y=doc.min_y,
        max_y=doc.max_y,
        max_radius=doc.max_radius,
        start_point=_vertex(doc.start_point),
        end_point=_vertex(doc.end_point),
    )


def to_state(doc: DrawingV1) -> DrawingState:
    """Convert a validated document into a pipeline snapshot."""
    layers = {layer.id: to_layer(layer) for layer in doc.layers}
    visible = doc.visible_layers if doc.visible_layers is not None else [l.id for l in doc.layers]
    return DrawingState(
        layers=layers,
        visible_layer_ids=tuple(visible),
        machine=to_machine(doc.machine),
        preview_slider=PreviewSlider(doc.slider),
    )


def parse_drawing(data: dict[str, Any]) -> DrawingState:
    """Validate a raw mapping and convert it into a snapshot.

    Raises
    ------
    ValueError
        If validation fails (pydantic message included).
    """
    try:
        doc = DrawingV1.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Drawing validation failed: {e}") from e
    return to_state(doc)


def load_drawing(path: Union[str, Path]) -> DrawingState:
    """Load and validate a drawing document from YAML.

    Raises
    ------
    FileNotFoundError
        If path doesn't exist
    ValueError
        If validation fails (with actionable error message)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Drawing not found: {path}")

    data = fs.load_yaml(path)
    if not isinstance(data, dict):
        raise ValueError(f"Drawing file must contain a mapping: {path}")
    try:
        return parse_drawing(data)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e
