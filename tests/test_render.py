"""Tests for the render coordinator and the plotly figure builders."""

from __future__ import annotations

import math

import pandas as pd
import pytest

from cartosense.config import ATTRIBUTES, COLOR_CLASSES, NO_DATA_COLOR
from cartosense.interaction import InteractionLayer
from cartosense.processing.join import join_data
from cartosense.render.coordinator import (
    RenderCoordinator,
    RenderState,
    RenderStateError,
    chart_title,
    rank_rows,
    y_domain_max,
)
from cartosense.render.figures import (
    build_chart_figure,
    build_map_figure,
    plotted_value,
    stepped_colorscale,
)
from cartosense.render.schemas import HIGHLIGHT_STYLE, ChartFrame
from cartosense.state import MapSession, SelectionChanged, UnknownAttributeError


@pytest.fixture
def coordinator(features, records) -> RenderCoordinator:
    joined = join_data(features, records, "regionCode", ATTRIBUTES)
    return RenderCoordinator(joined, records, key="regionCode")


@pytest.fixture
def session() -> MapSession:
    return MapSession()


# ── Helpers ───────────────────────────────────────────────────────────────

class TestHelpers:
    def test_y_domain_has_ten_percent_headroom(self):
        assert y_domain_max([10.0, None, 30.0]) == pytest.approx(33.0)

    def test_y_domain_without_values(self):
        assert y_domain_max([None, None]) == 1.0
        assert y_domain_max([0.0]) == 1.0

    def test_rank_rows_missing_last(self):
        assert rank_rows([10.0, 30.0, None]) == [1, 0, 2]

    def test_rank_rows_only_missing(self):
        assert rank_rows([None, None]) == [0, 1]

    def test_chart_title(self):
        assert chart_title("varC") == "Number of Variable varC in each region"


# ── State machine ─────────────────────────────────────────────────────────

class TestStateMachine:
    def test_starts_unrendered(self, coordinator):
        assert coordinator.state is RenderState.UNRENDERED
        assert coordinator.view is None

    def test_render_then_rendered(self, coordinator, session):
        view = coordinator.render(session)
        assert coordinator.state is RenderState.RENDERED
        assert view.transition_ms == 0

    def test_render_twice_raises(self, coordinator, session):
        coordinator.render(session)
        with pytest.raises(RenderStateError):
            coordinator.render(session)

    def test_rerender_before_render_raises(self, coordinator, session):
        with pytest.raises(RenderStateError):
            coordinator.rerender(session)

    def test_rerender_uses_transition(self, coordinator, session):
        coordinator.render(session)
        assert coordinator.rerender(session).transition_ms == 1000

    def test_dispatch_updates_session_before_render(self, coordinator, session):
        coordinator.render(session)
        view = coordinator.dispatch(SelectionChanged("varB"), session)
        assert session.expressed == "varB"
        assert view.attribute == "varB"
        assert coordinator.classification.attribute == "varB"

    def test_dispatch_unknown_attribute(self, coordinator, session):
        initial = coordinator.render(session)
        with pytest.raises(UnknownAttributeError):
            coordinator.dispatch(SelectionChanged("varZ"), session)
        assert session.expressed == "varA"
        assert coordinator.view == initial


# ── Initial render ────────────────────────────────────────────────────────

class TestInitialRender:
    def test_concrete_scenario(self, coordinator, session):
        view = coordinator.render(session)
        assert view.bar_order() == ["B", "A", "C"]
        fills = {r.key: r.fill for r in view.regions}
        assert fills["A"] == COLOR_CLASSES[0]
        assert fills["B"] == COLOR_CLASSES[4]
        assert fills["C"] == NO_DATA_COLOR
        bar_c = next(b for b in view.bars if b.key == "C")
        assert bar_c.fill == NO_DATA_COLOR

    def test_bar_geometry(self, coordinator, session):
        view = coordinator.render(session)
        frame = ChartFrame()
        bars = {b.key: b for b in view.bars}
        assert view.y_domain == pytest.approx((0.0, 33.0))
        slot = frame.inner_width / 3
        assert bars["B"].x == pytest.approx(frame.left_padding)
        assert bars["A"].x == pytest.approx(slot + frame.left_padding)
        assert bars["A"].width == pytest.approx(slot - 1)
        assert bars["B"].height == pytest.approx(frame.inner_height * 30 / 33)
        assert bars["A"].height == pytest.approx(frame.inner_height * 10 / 33)
        assert bars["A"].y == pytest.approx(
            frame.inner_height * (1 - 10 / 33) + frame.top_bottom_padding
        )

    def test_missing_bar_sits_on_baseline(self, coordinator, session):
        view = coordinator.render(session)
        frame = ChartFrame()
        bar_c = next(b for b in view.bars if b.key == "C")
        assert bar_c.height == 0
        assert bar_c.y == pytest.approx(frame.inner_height + frame.top_bottom_padding)
        assert bar_c.value is None

    def test_one_bar_per_record_one_shape_per_feature(self, coordinator, session, features, records):
        view = coordinator.render(session)
        assert len(view.bars) == len(records)
        assert len(view.regions) == len(features)

    def test_names_from_records(self, coordinator, session):
        view = coordinator.render(session)
        assert {b.key: b.name for b in view.bars} == {"A": "Alpha", "B": "Bravo", "C": "Charlie"}

    def test_zero_value_is_classified(self, features, records):
        # varD of region A is 0, distinct from missing
        coordinator = RenderCoordinator(join_data(features, records, "regionCode", ATTRIBUTES), records)
        view = coordinator.render(MapSession(expressed="varD"))
        region_a = next(r for r in view.regions if r.key == "A")
        assert region_a.value == 0.0
        assert region_a.fill != NO_DATA_COLOR

    def test_all_missing_attribute(self, features):
        records = pd.DataFrame({"regionCode": ["A", "B"], "varA": [float("nan"), float("nan")]})
        coordinator = RenderCoordinator(join_data(features, records, "regionCode", ("varA",)), records)
        view = coordinator.render(MapSession(attributes=("varA",)))
        assert view.y_domain == (0.0, 1.0)
        for bar in view.bars:
            assert bar.height == 0
            assert math.isfinite(bar.y)
            assert bar.fill == NO_DATA_COLOR
        assert {r.fill for r in view.regions} == {NO_DATA_COLOR}

    def test_unmatched_feature_renders_gray(self, features, records, region_factory):
        joined = join_data(features + [region_factory("Z", 9.0)], records, "regionCode", ATTRIBUTES)
        view = RenderCoordinator(joined, records).render(MapSession())
        assert view.regions[-1].fill == NO_DATA_COLOR


# ── Re-render ─────────────────────────────────────────────────────────────

class TestRerender:
    def test_idempotent(self, coordinator, session):
        coordinator.render(session)
        first = coordinator.rerender(session)
        second = coordinator.rerender(session)
        assert first == second

    def test_round_trip_restores_view(self, coordinator, session):
        initial = coordinator.render(session)
        initial_classification = coordinator.classification
        coordinator.dispatch(SelectionChanged("varB"), session)
        restored = coordinator.dispatch(SelectionChanged("varA"), session)
        assert restored.bar_order() == initial.bar_order()
        assert restored.bars == initial.bars
        assert restored.regions == initial.regions
        assert coordinator.classification == initial_classification

    def test_reorders_bars(self, coordinator, session):
        coordinator.render(session)
        view = coordinator.dispatch(SelectionChanged("varB"), session)
        assert view.bar_order() == ["A", "C", "B"]
        assert view.title == chart_title("varB")

    def test_joined_data_untouched(self, coordinator, session):
        coordinator.render(session)
        before = [dict(f["properties"]) for f in coordinator.features]
        for attr in ATTRIBUTES:
            coordinator.dispatch(SelectionChanged(attr), session)
        assert [f["properties"] for f in coordinator.features] == before


# ── Figures ───────────────────────────────────────────────────────────────

class TestFigures:
    def test_stepped_colorscale(self):
        scale = stepped_colorscale(["#000", "#111"])
        assert scale == [[0.0, "#000"], [0.5, "#000"], [0.5, "#111"], [1.0, "#111"]]

    def test_map_figure(self, coordinator, session, background_geojson):
        view = coordinator.render(session)
        layer = InteractionLayer(view)
        fig = build_map_figure(view, coordinator.features, background_geojson, layer.styles)
        assert len(fig.data) == 2
        background, regions = fig.data
        assert background.hoverinfo == "skip"
        assert list(regions.locations) == ["A", "B", "C"]
        assert regions.featureidkey == "properties.regionCode"
        assert fig.layout.geo.projection.type == "conic equal area"
        assert fig.layout.geo.lataxis.dtick == 5

    def test_map_figure_without_background(self, coordinator, session):
        view = coordinator.render(session)
        fig = build_map_figure(view, coordinator.features, None, InteractionLayer(view).styles)
        assert len(fig.data) == 1

    def test_map_figure_shows_highlight(self, coordinator, session):
        view = coordinator.render(session)
        layer = InteractionLayer(view)
        layer.highlight(view, "B")
        fig = build_map_figure(view, coordinator.features, None, layer.styles)
        colors = list(fig.data[0].marker.line.color)
        assert colors[1] == HIGHLIGHT_STYLE.stroke
        assert colors[0] != HIGHLIGHT_STYLE.stroke

    def test_chart_figure(self, coordinator, session):
        view = coordinator.render(session)
        fig = build_chart_figure(view, InteractionLayer(view).styles)
        bar = fig.data[0]
        assert list(bar.ids) == ["bar-1", "bar-0", "bar-2"]
        assert list(bar.y) == [30.0, 10.0, 0.0]
        assert list(fig.layout.yaxis.range) == pytest.approx([0.0, 33.0])
        assert fig.layout.title.text == chart_title("varA")
        assert fig.layout.transition.duration == 0

    def test_chart_figure_after_selection(self, coordinator, session):
        view = coordinator.render(session)
        layer = InteractionLayer(view)
        view = coordinator.dispatch(SelectionChanged("varB"), session)
        fig = build_chart_figure(view, layer.styles)
        assert list(fig.data[0].ids) == ["bar-0", "bar-2", "bar-1"]
        assert fig.layout.transition.duration == 1000

    def test_negative_value_drawn_on_baseline(self, features):
        records = pd.DataFrame({"regionCode": ["A", "B"], "varA": [-5.0, 10.0]})
        coordinator = RenderCoordinator(join_data(features, records, "regionCode", ("varA",)), records)
        view = coordinator.render(MapSession(attributes=("varA",)))
        bar_a = next(b for b in view.bars if b.key == "A")
        assert bar_a.height == 0
        assert plotted_value(bar_a, view.y_domain) == 0.0
        fig = build_chart_figure(view, InteractionLayer(view).styles)
        assert min(fig.data[0].y) >= 0.0
        assert list(fig.data[0].y) == [10.0, 0.0]
