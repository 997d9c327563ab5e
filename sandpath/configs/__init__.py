"""Pipeline configuration loading and validation."""

from sandpath.configs.loader import (
    CacheConfig,
    ConfigError,
    GradientConfig,
    LoggingConfig,
    PipelineConfig,
    PolarConfig,
    SliderConfig,
    load_config,
    parse_config,
)

__all__ = [
    "CacheConfig",
    "ConfigError",
    "GradientConfig",
    "LoggingConfig",
    "PipelineConfig",
    "PolarConfig",
    "SliderConfig",
    "load_config",
    "parse_config",
]
