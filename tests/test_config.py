"""Tests for the pipeline config loader.

Validates that:
    - pipeline.yaml shipped with the package loads and validates
    - Missing sections fall back to defaults
    - Out-of-range values and malformed sections raise ConfigError
    - The loaded config drives the pipeline context (cache budget, slider)
"""

from __future__ import annotations

import logging

import pytest

from sandpath.configs import (
    ConfigError,
    PipelineConfig,
    load_config,
    parse_config,
)
from sandpath.core import PipelineContext
from sandpath.utils import fs


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def config() -> PipelineConfig:
    """Load the default pipeline.yaml shipped with the package."""
    return load_config()


class TestDefaultConfig:
    def test_loads(self, config: PipelineConfig) -> None:
        assert config.cache.max_vertices > 0
        assert 0.0 < config.slider.slide_size <= 1.0
        assert config.polar.trace_step_deg > 0.0

    def test_matches_dataclass_defaults(self, config: PipelineConfig) -> None:
        assert config == PipelineConfig()

    def test_logging_kwargs(self, config: PipelineConfig) -> None:
        assert config.logging_kwargs() == {"log_level": "INFO", "log_file": None, "json": False}

    def test_drives_context(self) -> None:
        cfg = parse_config({"cache": {"max_vertices": 20_000}, "slider": {"slide_size": 0.1}})
        ctx = PipelineContext(config=cfg)
        assert ctx.cache.max_vertices == 20_000
        assert ctx.collaborators.slider_bounds([None] * 10, 0.5) == (5, 6)


class TestParseConfig:
    def test_missing_sections_default(self) -> None:
        assert parse_config({}) == PipelineConfig()

    def test_partial_section(self) -> None:
        cfg = parse_config({"gradient": {"base_color": "#00FF00"}})
        assert cfg.gradient.base_color == "#00FF00"
        assert cfg.gradient.darken_span == PipelineConfig().gradient.darken_span

    @pytest.mark.parametrize(
        "data, fragment",
        [
            ({"cache": {"max_vertices": 0}}, "cache.max_vertices"),
            ({"gradient": {"base_color": "chartreuse-ish"}}, "gradient.base_color"),
            ({"gradient": {"darken_span": 1.5}}, "gradient.darken_span"),
            ({"slider": {"slide_size": 0.0}}, "slider.slide_size"),
            ({"polar": {"trace_step_deg": -1}}, "polar.trace_step_deg"),
            ({"logging": {"level": "CHATTY"}}, "logging.level"),
            ({"cache": {"max_vertices": "lots"}}, "Invalid configuration value"),
            ({"cache": [1, 2]}, "must be mappings"),
        ],
    )
    def test_invalid_values(self, data, fragment) -> None:
        with pytest.raises(ConfigError, match=fragment):
            parse_config(data)

    def test_small_cache_warns(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="sandpath.configs.loader"):
            parse_config({"cache": {"max_vertices": 100}})
        assert any("is small" in r.getMessage() for r in caplog.records)


class TestLoadConfig:
    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ConfigError, match="Empty"):
            load_config(path)

    def test_non_mapping_root(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_custom_file(self, tmp_path) -> None:
        path = tmp_path / "pipeline.yaml"
        fs.atomic_yaml_dump({"cache": {"max_vertices": 50_000}, "logging": {"json": True}}, path)
        cfg = load_config(path)
        assert cfg.cache.max_vertices == 50_000
        assert cfg.logging.json is True
