"""Pipeline context -- the single owner of all long-lived pipeline state.

One :class:`PipelineContext` is created at startup and shared by every
evaluation: it holds the vertex cache, the computation registry, the
stitcher's bookkeeping, stage timers and the external collaborators. There
are no module-level singletons; tests and embedders create as many
independent contexts as they need.

Evaluation is synchronous and single-threaded. The host must serialize
calls (one state change at a time); nothing here takes locks.

Usage::

    from sandpath.core import PipelineContext, DrawingState

    ctx = PipelineContext()
    path = ctx.all_computed_vertices(state)
    stats = ctx.vertex_stats(state)
"""

from __future__ import annotations

import logging
from typing import Optional

from sandpath.configs.loader import PipelineConfig
from sandpath.core.aggregate import AggregateViews, PathStats
from sandpath.core.collaborators import Collaborators
from sandpath.core.pipeline import LayerPipeline
from sandpath.core.registry import ComputationRegistry
from sandpath.core.stitcher import PerimeterStitcher
from sandpath.core.types import DrawingState, VertexList
from sandpath.core.vertex_cache import VertexCache
from sandpath.utils.profiler import StageTimers

logger = logging.getLogger(__name__)


class PipelineContext:
    """Cache, registry and collaborators shared by all evaluations.

    Parameters
    ----------
    config : PipelineConfig, optional
        Loaded configuration; defaults are used when omitted.
    collaborators : Collaborators, optional
        External functions; the reference implementations when omitted.
    cache : VertexCache, optional
        Pre-built cache (e.g. shared between contexts); sized from the
        config when omitted.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        collaborators: Optional[Collaborators] = None,
        cache: Optional[VertexCache] = None,
    ) -> None:
        self.config = config if config is not None else PipelineConfig()
        self.collaborators = (
            collaborators
            if collaborators is not None
            else Collaborators.defaults(
                slide_size=self.config.slider.slide_size,
                trace_step_deg=self.config.polar.trace_step_deg,
            )
        )
        self.cache = cache if cache is not None else VertexCache(self.config.cache.max_vertices)
        self.registry = ComputationRegistry()
        self.timers = StageTimers()
        self.stitcher = PerimeterStitcher(self)
        self.layers = LayerPipeline(self)
        self.views = AggregateViews(self)
        logger.debug("Pipeline context ready (cache budget %d vertices)", self.cache.max_vertices)

    # -- per-layer stages ---------------------------------------------------

    def raw_vertices(self, state: DrawingState, layer_id: str) -> VertexList:
        return self.registry.get_node("raw", layer_id)(state)

    def transformed_vertices(self, state: DrawingState, layer_id: str) -> VertexList:
        return self.registry.get_node("transformed", layer_id)(state)

    def computed_vertices(self, state: DrawingState, layer_id: str) -> VertexList:
        return self.registry.get_node("computed", layer_id)(state)

    def preview_vertices(self, state: DrawingState, layer_id: str) -> VertexList:
        return self.registry.get_node("preview", layer_id)(state)

    def preview_track_vertices(self, state: DrawingState, layer_id: str) -> VertexList:
        return self.registry.get_node("preview_track", layer_id)(state)

    # -- whole-drawing views ------------------------------------------------

    def all_computed_vertices(self, state: DrawingState) -> VertexList:
        return self.registry.get_node("all_computed")(state)

    def all_preview_vertices(self, state: DrawingState) -> VertexList:
        return self.registry.get_node("all_preview")(state)

    def vertex_offsets(self, state: DrawingState) -> dict[str, int]:
        return self.registry.get_node("offsets")(state)

    def vertex_stats(self, state: DrawingState) -> PathStats:
        return self.registry.get_node("stats")(state)

    def slider_colors(self, state: DrawingState, layer_id: str) -> dict[int, str]:
        return self.registry.get_node("slider_colors", layer_id)(state)
