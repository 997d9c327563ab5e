"""Configuration loader for the vertex pipeline.

Loads and validates ``pipeline.yaml`` into typed, frozen dataclasses. Cache
budget, gradient colors, slider window and perimeter tracing resolution all
come from the config -- nothing downstream hardcodes them.

Usage::

    from sandpath.configs.loader import load_config
    cfg = load_config()                        # default path
    cfg = load_config("/custom/pipeline.yaml") # explicit path
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sandpath.utils import color, hashing
from sandpath.utils.fs import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "pipeline.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CacheConfig:
    """Vertex cache budget (total stored vertices)."""

    max_vertices: int = 500_000


@dataclass(frozen=True)
class GradientConfig:
    """Preview slider gradient."""

    base_color: str = "yellow"
    darken_span: float = 0.375


@dataclass(frozen=True)
class SliderConfig:
    """Highlighted window width as a fraction of the path."""

    slide_size: float = 0.02


@dataclass(frozen=True)
class PolarConfig:
    """Polar perimeter tracing resolution."""

    trace_step_deg: float = 2.0


@dataclass(frozen=True)
class LoggingConfig:
    """Arguments for :func:`sandpath.utils.logging_config.setup_logging`."""

    level: str = "INFO"
    file: str | None = None
    json: bool = False


@dataclass(frozen=True)
class PipelineConfig:
    """Complete pipeline configuration loaded from ``pipeline.yaml``."""

    cache: CacheConfig = field(default_factory=CacheConfig)
    gradient: GradientConfig = field(default_factory=GradientConfig)
    slider: SliderConfig = field(default_factory=SliderConfig)
    polar: PolarConfig = field(default_factory=PolarConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def logging_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for ``setup_logging``."""
        return {
            "log_level": self.logging.level,
            "log_file": self.logging.file,
            "json": self.logging.json,
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_config(cfg: PipelineConfig) -> None:
    """Validate value ranges.

    Raises
    ------
    ConfigError
        On any invalid value.
    """
    if cfg.cache.max_vertices <= 0:
        raise ConfigError(
            f"cache.max_vertices must be positive, got {cfg.cache.max_vertices}"
        )

    try:
        color.parse_color(cfg.gradient.base_color)
    except ValueError as exc:
        raise ConfigError(f"gradient.base_color: {exc}") from exc

    if not 0.0 <= cfg.gradient.darken_span <= 1.0:
        raise ConfigError(
            f"gradient.darken_span must be in [0, 1], got {cfg.gradient.darken_span}"
        )

    if not 0.0 < cfg.slider.slide_size <= 1.0:
        raise ConfigError(
            f"slider.slide_size must be in (0, 1], got {cfg.slider.slide_size}"
        )

    if cfg.polar.trace_step_deg <= 0.0:
        raise ConfigError(
            f"polar.trace_step_deg must be positive, got {cfg.polar.trace_step_deg}"
        )

    if cfg.logging.level.upper() not in _LOG_LEVELS:
        raise ConfigError(
            f"logging.level must be one of {_LOG_LEVELS}, got {cfg.logging.level!r}"
        )

    if cfg.cache.max_vertices < 10_000:
        logger.warning(
            "cache.max_vertices=%d is small; cacheable shapes will be "
            "regenerated often",
            cfg.cache.max_vertices,
        )


def parse_config(data: dict[str, Any]) -> PipelineConfig:
    """Build a validated config from a raw YAML mapping.

    Missing sections fall back to their defaults; present keys must have
    valid types and values.
    """
    try:
        cache_data = data.get("cache") or {}
        gradient_data = data.get("gradient") or {}
        slider_data = data.get("slider") or {}
        polar_data = data.get("polar") or {}
        log_data = data.get("logging") or {}

        config = PipelineConfig(
            cache=CacheConfig(
                max_vertices=int(cache_data.get("max_vertices", 500_000)),
            ),
            gradient=GradientConfig(
                base_color=str(gradient_data.get("base_color", "yellow")),
                darken_span=float(gradient_data.get("darken_span", 0.375)),
            ),
            slider=SliderConfig(
                slide_size=float(slider_data.get("slide_size", 0.02)),
            ),
            polar=PolarConfig(
                trace_step_deg=float(polar_data.get("trace_step_deg", 2.0)),
            ),
            logging=LoggingConfig(
                level=str(log_data.get("level", "INFO")),
                file=(
                    str(log_data["file"])
                    if log_data.get("file") is not None
                    else None
                ),
                json=bool(log_data.get("json", False)),
            ),
        )
    except AttributeError as exc:
        raise ConfigError(f"Configuration sections must be mappings: {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration value: {exc}") from exc

    _validate_config(config)
    return config


def load_config(path: str | Path | None = None) -> PipelineConfig:
    """Load and validate pipeline configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``pipeline.yaml``. ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    PipelineConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    config = parse_config(data)
    logger.info("Configuration loaded (hash %s)", hashing.hash_dict(data)[:12])
    return config
