"""Per-layer chain of memoized stages.

Stages, by node kind (every node is keyed by layer id in the registry)::

    layer          state.layers[layer_id]
    layer_machine  machine if layer.uses_machine else None
    effects        enabled effects of the layer
    raw            shape generator output (through the vertex cache)
    transformed    raw + layer transform + effects
    layer_index    position in the visible order
    next_layer_id  id that follows in the visible order, or None
    computed       transformed + bridge to next layer, polished
    preview        computed (transformed while dragging) in transformer frame
    preview_track  track positions of every loop in transformer frame

The ``layer_machine`` node is what keeps machine edits away from shapes that
ignore the machine: it keeps returning ``None`` for them, so their ``raw``
node sees unchanged inputs and never reruns.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from sandpath.core.errors import CacheKeySerializationFailure, LayerNotFound
from sandpath.core.types import (
    DrawingState,
    Effect,
    Layer,
    Machine,
    ShapeState,
    VertexList,
)
from sandpath.core.registry import ComputationNode
from sandpath.core.vertex_cache import make_cache_key
from sandpath.utils.geometry import Vertex, offset, rotate
from sandpath.utils.logging_config import layer_context

if TYPE_CHECKING:
    from sandpath.core.context import PipelineContext

logger = logging.getLogger(__name__)

# The on-screen transformer is this many times larger than an autosized shape
TRANSFORMER_SCALE = 5


def get_layers(state: DrawingState):
    return state.layers


def get_machine(state: DrawingState) -> Machine:
    return state.machine


def get_visible_layer_ids(state: DrawingState) -> tuple[str, ...]:
    return state.visible_layer_ids


def get_num_visible_layers(state: DrawingState) -> int:
    return len(state.visible_layer_ids)


def lookup_layer(layers, layer_id: str) -> Layer:
    try:
        return layers[layer_id]
    except KeyError:
        raise LayerNotFound(layer_id) from None


def to_preview_frame(vertices, layer: Layer) -> VertexList:
    """Undo layer offset and rotation, shift into the transformer box."""
    scale = TRANSFORMER_SCALE if layer.autosize else 1
    dx = (scale - 1) / 2 * layer.starting_width
    dy = (scale - 1) / 2 * layer.starting_height
    return tuple(
        offset(rotate(offset(v, -layer.offset_x, -layer.offset_y), layer.rotation), dx, -dy)
        for v in vertices
    )


class LayerPipeline:
    """Registers the per-layer node kinds on the context's registry."""

    KINDS = (
        "layer",
        "layer_machine",
        "effects",
        "raw",
        "transformed",
        "layer_index",
        "next_layer_id",
        "computed",
        "preview",
        "preview_track",
    )

    def __init__(self, context: PipelineContext) -> None:
        self.context = context
        self.registry = context.registry
        for kind in self.KINDS:
            self.registry.register(kind, getattr(self, f"_make_{kind}"))

    # -- node factories -----------------------------------------------------

    def _make_layer(self, layer_id: str) -> ComputationNode:
        return ComputationNode(
            "layer", layer_id,
            inputs=[get_layers],
            compute=lambda layers: lookup_layer(layers, layer_id),
        )

    def _make_layer_machine(self, layer_id: str) -> ComputationNode:
        return ComputationNode(
            "layer_machine", layer_id,
            inputs=[self.registry.selector("layer", layer_id), get_machine],
            compute=lambda layer, machine: machine if layer.uses_machine else None,
        )

    def _make_effects(self, layer_id: str) -> ComputationNode:
        return ComputationNode(
            "effects", layer_id,
            inputs=[self.registry.selector("layer", layer_id)],
            compute=lambda layer: tuple(e for e in layer.effects if e.enabled),
        )

    def _make_raw(self, layer_id: str) -> ComputationNode:
        return ComputationNode(
            "raw", layer_id,
            inputs=[
                self.registry.selector("layer", layer_id),
                self.registry.selector("layer_machine", layer_id),
            ],
            compute=self.raw_vertices,
        )

    def _make_transformed(self, layer_id: str) -> ComputationNode:
        return ComputationNode(
            "transformed", layer_id,
            inputs=[
                self.registry.selector("raw", layer_id),
                self.registry.selector("layer", layer_id),
                self.registry.selector("effects", layer_id),
            ],
            compute=self.transformed_vertices,
        )

    def _make_layer_index(self, layer_id: str) -> ComputationNode:
        def index_of(visible: tuple[str, ...]) -> int:
            return visible.index(layer_id) if layer_id in visible else -1

        return ComputationNode("layer_index", layer_id, inputs=[get_visible_layer_ids], compute=index_of)

    def _make_next_layer_id(self, layer_id: str) -> ComputationNode:
        def next_of(visible: tuple[str, ...]) -> Optional[str]:
            if layer_id not in visible:
                return None
            index = visible.index(layer_id)
            return visible[index + 1] if index + 1 < len(visible) else None

        return ComputationNode("next_layer_id", layer_id, inputs=[get_visible_layer_ids], compute=next_of)

    def _make_computed(self, layer_id: str) -> ComputationNode:
        def compute(transformed, layer_index, next_layer_id, num_layers, _visible, layers, machine, *, state):
            return self.computed_vertices(
                layer_id, transformed, layer_index, next_layer_id,
                num_layers, layers, machine, state,
            )

        return ComputationNode(
            "computed", layer_id,
            inputs=[
                self.registry.selector("transformed", layer_id),
                self.registry.selector("layer_index", layer_id),
                self.registry.selector("next_layer_id", layer_id),
                get_num_visible_layers,
                # The bridge can reach past the next layer (an empty next layer
                # forwards its own stitch), so any order change reruns this node
                get_visible_layer_ids,
                get_layers,
                get_machine,
            ],
            compute=compute,
            with_state=True,
        )

    def _make_preview(self, layer_id: str) -> ComputationNode:
        def compute(layers, machine, transformed, computed):
            layer = lookup_layer(layers, layer_id)
            return to_preview_frame(transformed if layer.dragging else computed, layer)

        return ComputationNode(
            "preview", layer_id,
            inputs=[
                get_layers,
                get_machine,
                self.registry.selector("transformed", layer_id),
                self.registry.selector("computed", layer_id),
            ],
            compute=compute,
        )

    def _make_preview_track(self, layer_id: str) -> ComputationNode:
        return ComputationNode(
            "preview_track", layer_id,
            inputs=[get_layers],
            compute=lambda layers: self.preview_track_vertices(lookup_layer(layers, layer_id)),
        )

    # -- stage bodies -------------------------------------------------------

    def raw_vertices(self, layer: Layer, machine: Optional[Machine]) -> VertexList:
        """Shape generator output, through the cache for cacheable layers."""
        shape = self.context.collaborators.get_shape(layer)
        shape_state = ShapeState(shape=layer, machine=machine)

        if layer.should_cache:
            try:
                key = make_cache_key(layer, machine)
            except CacheKeySerializationFailure as exc:
                logger.warning("%s; generating vertices without the cache", exc)
                return self._generate(shape, shape_state)

            vertices = self.context.cache.get(key)
            if vertices is None:
                vertices = self._generate(shape, shape_state)
                self.context.cache.put(key, vertices)
                logger.debug(
                    "Cached layer %s as %s (%d vertices, cache size %d)",
                    layer.layer_id, key.digest, len(vertices), self.context.cache.size,
                )
            return vertices

        if not layer.dragging and layer.has_active_effect:
            return ()
        return self._generate(shape, shape_state)

    def _generate(self, shape: Any, shape_state: ShapeState) -> VertexList:
        with self.context.timers["raw"].measure():
            return tuple(shape.get_vertices(shape_state))

    def transformed_vertices(
        self, raw: VertexList, layer: Layer, effects: tuple[Effect, ...]
    ) -> VertexList:
        with self.context.timers["transformed"].measure():
            return tuple(self.context.collaborators.transform_shapes(raw, layer, effects))

    def computed_vertices(
        self,
        layer_id: str,
        transformed: VertexList,
        layer_index: int,
        next_layer_id: Optional[str],
        num_layers: int,
        layers,
        machine: Machine,
        state: DrawingState,
    ) -> VertexList:
        """Machine-bound path of one layer, bridged to the next and polished."""
        stitcher = self.context.stitcher
        with stitcher.visiting(layer_id), layer_context(layer_id):
            vertices = transformed
            if layer_index < num_layers - 1:
                layer = lookup_layer(layers, layer_id)
                vertices = stitcher.stitch(vertices, layer, next_layer_id, state)

            with self.context.timers["polish"].measure():
                polished = tuple(self.context.collaborators.polish_vertices(
                    vertices, machine,
                    start=layer_index == 0,
                    end=layer_index == num_layers - 1,
                ))
            logger.debug("Computed %d vertices", len(polished))
            return polished

    def preview_track_vertices(self, layer: Layer) -> VertexList:
        """Where each loop of the layer sits on its track, in transformer frame."""
        if not layer.track_enabled:
            return ()
        transform_shape = self.context.collaborators.transform_shape
        track = [transform_shape(layer, Vertex(0.0, 0.0), i, i) for i in range(layer.num_loops)]
        return to_preview_frame(track, layer)

    # -- convenience --------------------------------------------------------

    def evaluate(self, kind: str, layer_id: str, state: DrawingState) -> Any:
        """Evaluate one per-layer node for ``state``."""
        if kind not in self.KINDS:
            raise KeyError(f"Unknown layer stage '{kind}'. Available: {list(self.KINDS)}")
        return self.registry.get_node(kind, layer_id)(state)
