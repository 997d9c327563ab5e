"""Exceptions raised by the vertex pipeline.

Everything derives from :class:`PipelineError` so host integrations can catch
one type around the aggregate views and decide whether to show a partial
drawing or abort. Nothing here is retried automatically.

Skipping a dragged neighbour or returning an empty path for an inactive
effect layer are normal branches, not errors.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for vertex pipeline failures."""

    pass


class LayerNotFound(PipelineError):
    """A layer id referenced by the visible order is missing from the layers."""

    def __init__(self, layer_id: str) -> None:
        super().__init__(f"Layer '{layer_id}' not found in drawing state")
        self.layer_id = layer_id


class ShapeNotFound(PipelineError):
    """No shape generator is registered for a layer's shape type."""

    def __init__(self, shape_type: str, available: list[str]) -> None:
        super().__init__(
            f"Unknown shape type '{shape_type}'. Available: {available}"
        )
        self.shape_type = shape_type


class InvalidConnectionGeometry(PipelineError):
    """A perimeter point could not be resolved for a connection."""

    pass


class CacheKeySerializationFailure(PipelineError):
    """A shape/machine snapshot has no canonical cache key.

    Caught by the raw stage, which logs a warning and generates the vertices
    without the cache for that call.
    """

    pass


class StitchCycleError(PipelineError):
    """Stitching re-entered a layer that is already being stitched."""

    def __init__(self, chain: list[str]) -> None:
        super().__init__(
            "Cycle in visible layer order while stitching: "
            + " -> ".join(chain)
        )
        self.chain = chain
