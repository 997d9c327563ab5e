"""sandpath: memoized vertex pipeline for sand-drawing tables.

Layers (shapes with placement and effects) are turned into one continuous
toolpath for a rectangular or polar machine. Consecutive layers are joined
directly or by tracing the machine perimeter, and the whole-drawing views
(flattened path, per-layer offsets, statistics, preview slider gradient)
are derived from the same memoized graph.

Entry points:
    from sandpath.core import PipelineContext, DrawingState
    from sandpath.configs import load_config
    from sandpath.configs.drawing import load_drawing
"""

__version__ = "0.1.0"
