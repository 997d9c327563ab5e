"""Render a drawing document into one continuous toolpath.

Runs the vertex pipeline on a drawing.v1.yaml document:
    1. Load pipeline config (cache budget, gradient, slider, logging)
    2. Load and validate the drawing
    3. Evaluate the whole-drawing views (path, offsets, stats, preview)
    4. Write the toolpath YAML (vertices, per-layer offsets, stats)

Refactored architecture:
    - render_main(drawing_path, output_path, config_path) → dict
        * Callable function (used by tests and embedding hosts)
        * Returns: {output_path, num_points, distance, offsets, timers}
    - CLI entry point: if __name__ == "__main__"

CLI:
    python scripts/render_drawing.py --drawing drawings/rings.yaml \\
                                     --output out/rings_path.yaml
    python scripts/render_drawing.py --drawing rings.yaml --output out.yaml \\
                                     --config custom_pipeline.yaml --log-level DEBUG

Output structure (YAML):
    drawing: <source path>
    machine: rectangular | polar
    stats: {num_points, distance}
    offsets: {<layer_id>: <index>, ...}
    vertices: [[x, y], ...]
    preview: [[x, y], ...]        # only with --preview
"""

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from sandpath.configs import load_config
from sandpath.configs.drawing import load_drawing
from sandpath.core import PipelineContext
from sandpath.utils import fs
from sandpath.utils.logging_config import (
    install_excepthook,
    set_level,
    setup_logging,
    shutdown,
)

logger = logging.getLogger(__name__)


def render_main(
    drawing_path: str,
    output_path: str,
    config_path: Optional[str] = None,
    include_preview: bool = False,
    context: Optional[PipelineContext] = None,
) -> Dict[str, Any]:
    """Evaluate a drawing and write its toolpath.

    Parameters
    ----------
    drawing_path : str
        Path to drawing.v1.yaml
    output_path : str
        Destination YAML file (parent directories are created)
    config_path : str, optional
        Pipeline config; the packaged default when None
    include_preview : bool
        Also write the preview-frame path
    context : PipelineContext, optional
        Reuse an existing context (shared cache); a fresh one when None

    Returns
    -------
    dict
        {output_path, num_points, distance, offsets, timers}
    """
    if context is None:
        context = PipelineContext(config=load_config(config_path))

    state = load_drawing(drawing_path)
    logger.info(
        "Loaded drawing %s: %d layers (%d visible), %s machine",
        drawing_path, len(state.layers), len(state.visible_layer_ids), state.machine.type,
    )

    vertices = context.all_computed_vertices(state)
    offsets = context.vertex_offsets(state)
    stats = context.vertex_stats(state)
    logger.info("Toolpath: %d points, distance %d", stats.num_points, stats.distance)

    document: Dict[str, Any] = {
        'drawing': str(drawing_path),
        'machine': state.machine.type,
        'stats': {'num_points': stats.num_points, 'distance': stats.distance},
        'offsets': dict(offsets),
        'vertices': [[float(v.x), float(v.y)] for v in vertices],
    }
    if include_preview:
        document['preview'] = [
            [float(v.x), float(v.y)] for v in context.all_preview_vertices(state)
        ]

    output = Path(output_path)
    fs.ensure_dir(output.parent)
    fs.atomic_yaml_dump(document, output)
    logger.info("Wrote toolpath to %s", output)

    timers = context.timers.summary()
    for kind, entry in timers.items():
        logger.debug("stage %s: %d runs, mean %.3f ms", kind, entry['count'], entry['mean_ms'])
    logger.debug("Vertex cache: %r", context.cache)

    return {
        'output_path': str(output),
        'num_points': stats.num_points,
        'distance': stats.distance,
        'offsets': dict(offsets),
        'timers': timers,
    }


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Render a sand-table drawing into one continuous toolpath"
    )
    parser.add_argument(
        "--drawing",
        type=str,
        required=True,
        help="Path to drawing document (drawing.v1.yaml)",
    )
    parser.add_argument(
        "--output",
        type=str,
        required=True,
        help="Output YAML file for the toolpath",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to pipeline config (default: packaged pipeline.yaml)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Also write the preview-frame path",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level",
    )

    args = parser.parse_args()

    config = load_config(args.config)
    setup_logging(**config.logging_kwargs(), context={"app": "render"})
    if args.log_level:
        set_level(args.log_level)
    install_excepthook()

    result = render_main(
        drawing_path=args.drawing,
        output_path=args.output,
        include_preview=args.preview,
        context=PipelineContext(config=config),
    )

    print("\n=== Render Complete ===")
    print(f"Toolpath: {result['output_path']}")
    print(f"Points: {result['num_points']}")
    print(f"Distance: {result['distance']}")

    shutdown()


if __name__ == "__main__":
    main()
