"""Tests for the whole-drawing views: path, offsets, statistics, gradient."""

from __future__ import annotations

import re

import pytest

from sandpath.configs import GradientConfig, PipelineConfig
from sandpath.core import DrawingState, Layer, PathStats, PipelineContext
from sandpath.core.aggregate import compute_stats, gradient_colors
from sandpath.utils import color
from sandpath.utils.geometry import Vertex, slider_bounds

HEX = re.compile(r"^#[0-9A-F]{6}$")
SQUARE = [(0, 0), (1, 0), (1, 1), (0, 1)]


def _xy(vertices):
    return [(v.x, v.y) for v in vertices]


@pytest.fixture()
def two_layer_state(make_layer) -> DrawingState:
    """Square A followed by point B, straight stitch."""
    return DrawingState.from_layers([make_layer("A", SQUARE), make_layer("B", [(5, 5)])])


# ---------------------------------------------------------------------------
# Flattened path, offsets and statistics
# ---------------------------------------------------------------------------


class TestTwoLayerDrawing:
    def test_flattened_path(self, context, two_layer_state) -> None:
        assert _xy(context.all_computed_vertices(two_layer_state)) == [
            (0, 0), (1, 0), (1, 1), (0, 1), (5, 5), (5, 5),
        ]

    def test_offsets_reserve_stitch_slot(self, context, two_layer_state) -> None:
        assert context.vertex_offsets(two_layer_state) == {"A": 0, "B": 6}

    def test_stats(self, context, two_layer_state) -> None:
        stats = context.vertex_stats(two_layer_state)
        # 1 + 1 + 1 + hypot(5, 4) + 0 = 9.40
        assert stats == PathStats(num_points=6, distance=9)

    def test_views_memoized_on_snapshot(self, context, two_layer_state) -> None:
        path = context.all_computed_vertices(two_layer_state)
        assert context.all_computed_vertices(two_layer_state) is path
        context.vertex_stats(two_layer_state)
        context.vertex_stats(two_layer_state)
        assert context.registry.get_node("stats").evaluations == 1


class TestOffsets:
    def test_offset_consistency(self, context, make_layer) -> None:
        state = DrawingState.from_layers(
            [
                make_layer("a", SQUARE),
                make_layer("b", [(3, 3), (4, 4)], connection_method="along perimeter"),
                make_layer("c", [(-5, 2)]),
                make_layer("d", [(7, 7)], num_loops=0),
                make_layer("e", [(8, 8)]),
            ]
        )
        offsets = context.vertex_offsets(state)
        ids = list(state.visible_layer_ids)
        assert list(offsets) == ids
        for current, following in zip(ids, ids[1:]):
            computed = context.computed_vertices(state, current)
            assert offsets[following] == offsets[current] + len(computed) + 1

    def test_hidden_layers_excluded(self, context, make_layer) -> None:
        state = DrawingState(
            layers={"a": make_layer("a", SQUARE), "b": make_layer("b", [(5, 5)])},
            visible_layer_ids=("b",),
        )
        assert context.vertex_offsets(state) == {"b": 0}
        assert _xy(context.all_computed_vertices(state)) == [(5, 5)]

    def test_empty_drawing(self, context) -> None:
        state = DrawingState(layers={}, visible_layer_ids=())
        assert context.all_computed_vertices(state) == ()
        assert context.vertex_offsets(state) == {}
        assert context.vertex_stats(state) == PathStats(0, 0)


class TestStats:
    def test_single_point_has_zero_length(self) -> None:
        assert compute_stats((Vertex(3.0, 4.0),)) == PathStats(1, 0)

    def test_distance_is_floored(self) -> None:
        path = (Vertex(0.0, 0.0), Vertex(3.0, 4.0), Vertex(3.0, 4.9))
        assert compute_stats(path) == PathStats(3, 5)

    def test_distance_matches_sum_of_segments(self, context, make_layer) -> None:
        state = DrawingState.from_layers(
            [make_layer("a", [(0, 0), (30, 40)]), make_layer("b", [(30, 0), (0, 0)])]
        )
        path = context.all_computed_vertices(state)
        # 50 + 40 + 0 + 30
        assert context.vertex_stats(state).distance == 120
        assert context.vertex_stats(state).num_points == len(path)


# ---------------------------------------------------------------------------
# Slider gradient
# ---------------------------------------------------------------------------


class TestGradientColors:
    def test_keys_cover_half_open_range(self) -> None:
        colors = gradient_colors(2, 6, "yellow", 0.375)
        assert sorted(colors) == [2, 3, 4, 5]
        assert all(HEX.match(value) for value in colors.values())

    def test_darker_farther_from_end(self) -> None:
        colors = gradient_colors(2, 6, "yellow", 0.375)
        levels = [color.lightness(colors[i]) for i in range(2, 6)]
        assert levels == sorted(levels)
        assert colors[5] == "#E7E700"
        assert colors[2] == "#9F9F00"

    def test_empty_range(self) -> None:
        assert gradient_colors(4, 4, "yellow", 0.375) == {}


class TestSliderColors:
    def test_zero_slider_uses_layer_range(self, context, make_layer) -> None:
        # "x" is dragged, so "p" is not bridged into it and keeps one vertex
        state = DrawingState.from_layers(
            [
                make_layer("p", [(0, 0)]),
                make_layer("x", SQUARE, dragging=True),
                make_layer("q", [(9, 9)] * 3),
            ]
        )
        assert context.vertex_offsets(state)["x"] == 2
        colors = context.slider_colors(state, "x")
        assert sorted(colors) == [2, 3, 4, 5]

    def test_positive_slider_uses_bounds(self, context) -> None:
        circle = Layer(layer_id="c", type="circle", params=(("segments", 99),))
        state = DrawingState.from_layers([circle], slider=0.5)
        preview = context.all_preview_vertices(state)
        assert len(preview) == 100
        start, end = slider_bounds(preview, 0.5, slide_size=0.02)
        colors = context.slider_colors(state, "c")
        assert sorted(colors) == list(range(start, end)) == [50, 51]

    def test_slider_change_recomputes_colors_only(self, context, make_layer) -> None:
        state = DrawingState.from_layers([make_layer("a", SQUARE * 25)])
        context.slider_colors(state, "a")
        moved = state.with_slider(0.5)
        context.slider_colors(moved, "a")
        assert context.registry.get_node("slider_colors", "a").evaluations == 2
        assert context.registry.get_node("computed", "a").evaluations == 1

    def test_gradient_uses_configured_base_color(self, make_layer) -> None:
        ctx = PipelineContext(config=PipelineConfig(gradient=GradientConfig(base_color="#FF0000")))
        state = DrawingState.from_layers([make_layer("a", SQUARE)])
        colors = ctx.slider_colors(state, "a")
        assert all(value.endswith("0000") for value in colors.values())
