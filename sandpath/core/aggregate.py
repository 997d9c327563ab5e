"""Whole-drawing views built from per-layer outputs.

Views (node kind in parentheses, all memoized on the snapshot object):

* flattened path (``all_computed``): computed vertices of every visible
  layer, concatenated in visible order;
* preview path (``all_preview``): the same for preview vertices;
* offsets (``offsets``): start index of each layer in the flattened path,
  advancing by ``len(computed) + 1`` per layer -- the extra slot is the
  stitch vertex index reserved by the preview renderer;
* statistics (``stats``): point count and floored Euclidean length;
* slider gradient (``slider_colors``, per layer): index → hex color.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sandpath.core.errors import LayerNotFound
from sandpath.core.registry import ComputationNode
from sandpath.core.types import DrawingState, PreviewSlider, VertexList
from sandpath.utils import color
from sandpath.utils.geometry import path_length

if TYPE_CHECKING:
    from sandpath.core.context import PipelineContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PathStats:
    """Summary of the flattened path."""

    num_points: int
    distance: int


def get_state(state: DrawingState) -> DrawingState:
    return state


def get_preview_slider(state: DrawingState) -> PreviewSlider:
    return state.preview_slider


def compute_stats(vertices: VertexList) -> PathStats:
    """Point count and total length floored to an integer."""
    return PathStats(num_points=len(vertices), distance=int(math.floor(path_length(vertices))))


def gradient_colors(start: int, end: int, base_color: str, darken_span: float) -> dict[int, str]:
    """Colors for indices ``start..end-1``, darker the farther from ``end``.

    Index ``i`` is darkened by ``darken_span / (end - start) * (end - i)``,
    so the last index is one step darker than the base color and ``start``
    is darkened by the whole span. An empty range yields ``{}``.
    """
    if end <= start:
        return {}
    step = darken_span / (end - start)
    return {
        i: color.to_hex(color.darken(base_color, step * (end - i)))
        for i in range(start, end)
    }


class AggregateViews:
    """Registers the whole-drawing node kinds on the context's registry."""

    KINDS = ("all_computed", "all_preview", "offsets", "stats", "slider_colors")

    def __init__(self, context: PipelineContext) -> None:
        self.context = context
        self.registry = context.registry
        for kind in self.KINDS:
            self.registry.register(kind, getattr(self, f"_make_{kind}"))

    def _layer_outputs(self, kind: str, state: DrawingState) -> list[VertexList]:
        return [
            self.registry.get_node(kind, layer_id)(state)
            for layer_id in state.visible_layer_ids
        ]

    def _concat(self, kind: str, state: DrawingState) -> VertexList:
        result: list = []
        for vertices in self._layer_outputs(kind, state):
            result.extend(vertices)
        return tuple(result)

    def _make_all_computed(self, _layer_id: None) -> ComputationNode:
        def compute(state: DrawingState) -> VertexList:
            with self.context.timers["all_computed"].measure():
                vertices = self._concat("computed", state)
            logger.debug(
                "Flattened %d layers into %d vertices",
                len(state.visible_layer_ids), len(vertices),
            )
            return vertices

        return ComputationNode("all_computed", None, inputs=[get_state], compute=compute)

    def _make_all_preview(self, _layer_id: None) -> ComputationNode:
        return ComputationNode(
            "all_preview", None,
            inputs=[get_state],
            compute=lambda state: self._concat("preview", state),
        )

    def _make_offsets(self, _layer_id: None) -> ComputationNode:
        def compute(state: DrawingState) -> dict[str, int]:
            offsets: dict[str, int] = {}
            running = 0
            for layer_id, vertices in zip(
                state.visible_layer_ids, self._layer_outputs("computed", state)
            ):
                offsets[layer_id] = running
                running += len(vertices) + 1
            return offsets

        return ComputationNode("offsets", None, inputs=[get_state], compute=compute)

    def _make_stats(self, _layer_id: None) -> ComputationNode:
        return ComputationNode(
            "stats", None,
            inputs=[self.registry.selector("all_computed")],
            compute=compute_stats,
        )

    def _make_slider_colors(self, layer_id: str) -> ComputationNode:
        gradient = self.context.config.gradient

        def compute(vertices, slider, layer_vertices, offsets) -> dict[int, str]:
            if slider.value > 0:
                start, end = self.context.collaborators.slider_bounds(vertices, slider.value)
            else:
                if layer_id not in offsets:
                    raise LayerNotFound(layer_id)
                start = offsets[layer_id]
                end = start + len(layer_vertices)
            return gradient_colors(start, end, gradient.base_color, gradient.darken_span)

        return ComputationNode(
            "slider_colors", layer_id,
            inputs=[
                self.registry.selector("all_preview"),
                get_preview_slider,
                self.registry.selector("preview", layer_id),
                self.registry.selector("offsets"),
            ],
            compute=compute,
        )
