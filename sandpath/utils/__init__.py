"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Color parsing and darkening (color)
    - Vertex geometry and path measurement (geometry)
    - Atomic I/O and YAML loading (fs)
    - Canonical cache keys and digests (hashing)
    - Stage timing (profiler)
    - Unified logging (logging_config)

No module in utils/ may import from upper layers (core, machines, shapes, configs).

Convenience imports:
    from sandpath.utils import fs, color, geometry
    from sandpath.utils.logging_config import setup_logging, get_logger
"""

from . import color
from . import fs
from . import geometry
from . import hashing
from . import logging_config
from . import profiler
