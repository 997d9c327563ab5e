"""Test drawing document validation and conversion.

Tests for sandpath.configs.drawing:
    - Load the example drawing shipped in drawings/
    - Reject invalid documents with clear error messages
    - Convert YAML lists into hashable tuples the cache can key on
    - Default visible order is document order
"""

from __future__ import annotations

from pathlib import Path

import pytest

from sandpath.configs.drawing import DrawingV1, load_drawing, parse_drawing
from sandpath.core import ConnectionMethod, PipelineContext, Vertex, make_cache_key
from sandpath.utils import fs

PROJECT_ROOT = Path(__file__).parent.parent


def _doc(**overrides) -> dict:
    doc = {
        "schema": "drawing.v1",
        "layers": [
            {"id": "a", "type": "custom", "params": {"points": [[0, 0], [1, 0]]}},
            {"id": "b", "type": "point", "offset_x": 5},
        ],
    }
    doc.update(overrides)
    return doc


class TestParseDrawing:
    def test_minimal_document(self) -> None:
        state = parse_drawing(_doc())
        assert state.visible_layer_ids == ("a", "b")
        assert state.machine.type == "rectangular"
        assert state.preview_slider.value == 0.0
        assert state.layers["b"].offset_x == 5.0

    def test_points_become_tuples(self) -> None:
        layer = parse_drawing(_doc()).layers["a"]
        assert layer.param("points") == ((0, 0), (1, 0))
        make_cache_key(layer, None)

    def test_visible_order_and_slider(self) -> None:
        state = parse_drawing(_doc(visible_layers=["b"], slider=0.25))
        assert state.visible_layer_ids == ("b",)
        assert state.preview_slider.value == 0.25
        assert set(state.layers) == {"a", "b"}

    def test_connection_method_spellings(self) -> None:
        doc = _doc()
        doc["layers"][0]["connection_method"] = "Along_Perimeter"
        state = parse_drawing(doc)
        assert state.layers["a"].connection_method is ConnectionMethod.ALONG_PERIMETER

    def test_effects_converted(self) -> None:
        doc = _doc()
        doc["layers"][0]["effects"] = [
            {"id": "e1", "type": "scale", "params": {"factor": 2}},
            {"id": "e2", "type": "reverse", "enabled": False},
        ]
        layer = parse_drawing(doc).layers["a"]
        assert [e.effect_id for e in layer.effects] == ["e1", "e2"]
        assert layer.effects[0].param("factor") == 2
        assert layer.has_active_effect

    def test_machine_homing_points(self) -> None:
        state = parse_drawing(_doc(machine={"type": "polar", "max_radius": 200, "end_point": [0, 0]}))
        assert state.machine.type == "polar"
        assert state.machine.end_point == Vertex(0.0, 0.0)
        assert state.machine.start_point is None

    def test_populate_by_field_name(self) -> None:
        model = DrawingV1(schema_version="drawing.v1", layers=[])
        assert model.schema_version == "drawing.v1"

    @pytest.mark.parametrize(
        "overrides, fragment",
        [
            ({"schema": "drawing.v2"}, "drawing.v1"),
            ({"visible_layers": ["a", "zzz"]}, "unknown layers"),
            ({"visible_layers": ["a", "a"]}, "must not repeat"),
            ({"slider": 1.5}, "slider"),
            ({"machine": {"type": "hexagonal"}}, "type"),
            ({"machine": {"min_x": 10, "max_x": -10}}, "max_x"),
        ],
    )
    def test_invalid_documents(self, overrides, fragment) -> None:
        with pytest.raises(ValueError, match=fragment):
            parse_drawing(_doc(**overrides))

    def test_duplicate_layer_ids(self) -> None:
        doc = _doc()
        doc["layers"].append({"id": "a", "type": "point"})
        with pytest.raises(ValueError, match="Duplicate layer ids"):
            parse_drawing(doc)

    def test_bad_connection_method(self) -> None:
        doc = _doc()
        doc["layers"][0]["connection_method"] = "teleport"
        with pytest.raises(ValueError, match="connection method"):
            parse_drawing(doc)

    def test_negative_loops(self) -> None:
        doc = _doc()
        doc["layers"][0]["num_loops"] = -1
        with pytest.raises(ValueError, match="num_loops"):
            parse_drawing(doc)


class TestLoadDrawing:
    def test_example_drawing(self) -> None:
        state = load_drawing(PROJECT_ROOT / "drawings" / "rings.yaml")
        assert state.visible_layer_ids == ("outer", "inner", "star")
        assert state.machine.type == "polar"
        assert state.layers["outer"].connection_method is ConnectionMethod.ALONG_PERIMETER

    def test_example_drawing_renders(self) -> None:
        state = load_drawing(PROJECT_ROOT / "drawings" / "rings.yaml")
        ctx = PipelineContext()
        path = ctx.all_computed_vertices(state)
        assert path[0] == state.machine.start_point
        assert ctx.vertex_stats(state).num_points == len(path)
        assert list(ctx.vertex_offsets(state)) == ["outer", "inner", "star"]

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_drawing(tmp_path / "missing.yaml")

    def test_error_names_file(self, tmp_path) -> None:
        path = tmp_path / "bad.yaml"
        fs.atomic_yaml_dump(_doc(schema="drawing.v0"), path)
        with pytest.raises(ValueError, match="bad.yaml"):
            load_drawing(path)

    def test_non_mapping_document(self, tmp_path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n")
        with pytest.raises(ValueError, match="mapping"):
            load_drawing(path)
