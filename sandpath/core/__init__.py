"""Vertex pipeline core.

Turns a :class:`DrawingState` snapshot into one continuous vertex path:
per-layer memoized stages (raw → transformed → computed), perimeter
stitching between consecutive visible layers, and whole-drawing views.

All coordinates are machine units, table-centred.
"""

from sandpath.core.aggregate import AggregateViews, PathStats
from sandpath.core.collaborators import Collaborators
from sandpath.core.context import PipelineContext
from sandpath.core.errors import (
    CacheKeySerializationFailure,
    InvalidConnectionGeometry,
    LayerNotFound,
    PipelineError,
    ShapeNotFound,
    StitchCycleError,
)
from sandpath.core.pipeline import LayerPipeline
from sandpath.core.registry import ComputationNode, ComputationRegistry
from sandpath.core.stitcher import PerimeterStitcher
from sandpath.core.types import (
    ConnectionMethod,
    DrawingState,
    Effect,
    Layer,
    Machine,
    PreviewSlider,
    ShapeState,
    VertexList,
)
from sandpath.core.vertex_cache import CacheKey, VertexCache, make_cache_key
from sandpath.utils.geometry import Vertex

__all__ = [
    "AggregateViews",
    "CacheKey",
    "CacheKeySerializationFailure",
    "Collaborators",
    "ComputationNode",
    "ComputationRegistry",
    "ConnectionMethod",
    "DrawingState",
    "Effect",
    "InvalidConnectionGeometry",
    "Layer",
    "LayerNotFound",
    "LayerPipeline",
    "Machine",
    "PathStats",
    "PerimeterStitcher",
    "PipelineContext",
    "PipelineError",
    "PreviewSlider",
    "ShapeNotFound",
    "ShapeState",
    "StitchCycleError",
    "Vertex",
    "VertexCache",
    "VertexList",
    "make_cache_key",
]
