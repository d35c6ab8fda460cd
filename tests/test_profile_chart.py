"""Tests for ProfileChart - elevation profile rendering.

These tests verify that ProfileChart creates Plotly figures for:
- Empty and single-point profiles (placeholder)
- Grade-colored pieces that cover the whole route
- Hover marker
- Chart configuration
"""

import plotly.graph_objects as go
import pytest

from gravel_atlas.constants import ChartConfig
from gravel_atlas.core.grade_analyzer import GradeAnalyzer
from gravel_atlas.model.elevation import ElevationProfilePoint
from gravel_atlas.ui.bottom_chart import ProfileChart


@pytest.fixture
def chart() -> ProfileChart:
    """Standard chart for testing."""
    return ProfileChart(width=800, height=400)


def make_profile(elevations: list[float], step_km: float = 0.1) -> list[ElevationProfilePoint]:
    return [ElevationProfilePoint(distance_km=i * step_km, elevation_m=e) for i, e in enumerate(elevations)]


@pytest.fixture
def climb() -> list[ElevationProfilePoint]:
    """Flat start, steep middle, flat end."""
    return make_profile([500, 500, 500, 520, 540, 540, 540])


class TestEmptyProfile:
    """Placeholder figure until there are two points."""

    @pytest.mark.parametrize("count", [0, 1])
    def test_placeholder(self, chart: ProfileChart, count: int) -> None:
        fig = chart.render(profile=make_profile([600] * count))
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 0
        assert "Add points" in fig.layout.annotations[0].text


class TestProfileRendering:
    """Profile with grade-colored pieces."""

    def test_area_trace_first(self, chart: ProfileChart, climb: list[ElevationProfilePoint]) -> None:
        fig = chart.render(profile=climb)
        assert fig.data[0].name == "Elevation"
        assert list(fig.data[0].y) == [p.elevation_m for p in climb]

    def test_one_trace_per_grade_segment(self, chart: ProfileChart, climb: list[ElevationProfilePoint]) -> None:
        segments = GradeAnalyzer.group_segments(profile=climb)
        fig = chart.render(profile=climb)
        grade_traces = fig.data[1:]
        drawable = [s for s in segments if min(s.end_index + 1, len(climb) - 1) > s.start_index]
        assert len(grade_traces) == len(drawable)
        assert [t.line.color for t in grade_traces] == [s.color for s in drawable]

    def test_pieces_cover_route(self, chart: ProfileChart, climb: list[ElevationProfilePoint]) -> None:
        fig = chart.render(profile=climb)
        pieces = fig.data[1:]
        assert pieces[0].x[0] == 0.0
        assert pieces[-1].x[-1] == pytest.approx(climb[-1].distance_km)
        for prev, curr in zip(pieces, pieces[1:]):
            assert prev.x[-1] == curr.x[0]

    def test_precomputed_grades_used(self, chart: ProfileChart) -> None:
        profile = make_profile([100, 100, 100])
        fig = chart.render(profile=profile, grades=[20.0, 20.0, 20.0])
        assert fig.data[1].line.color == GradeAnalyzer.grade_bucket(grade_pct=20.0).color

    def test_hover_marker(self, chart: ProfileChart, climb: list[ElevationProfilePoint]) -> None:
        fig = chart.render(profile=climb, hover_index=3)
        marker = fig.data[-1]
        assert marker.mode == "markers"
        assert list(marker.x) == [climb[3].distance_km]

    def test_out_of_range_hover_ignored(self, chart: ProfileChart, climb: list[ElevationProfilePoint]) -> None:
        assert len(chart.render(profile=climb, hover_index=99).data) == len(chart.render(profile=climb).data)

    def test_summary_annotation(self, chart: ProfileChart, climb: list[ElevationProfilePoint]) -> None:
        text = chart.render(profile=climb).layout.annotations[0].text
        assert "0.60 km" in text
        assert "↑40 m" in text
        assert "↓0 m" in text


class TestChartConfiguration:
    """Dimensions and axis range."""

    def test_dimensions(self, chart: ProfileChart) -> None:
        fig = chart.render(profile=make_profile([10, 20]))
        assert fig.layout.width == 800
        assert fig.layout.height == 400

    def test_defaults(self) -> None:
        chart = ProfileChart()
        assert (chart.width, chart.height) == (ChartConfig.PROFILE_WIDTH, ChartConfig.PROFILE_HEIGHT)

    def test_y_axis_padding(self, chart: ProfileChart) -> None:
        fig = chart.render(profile=make_profile([300, 350]))
        pad = ChartConfig.ELEVATION_PADDING_M
        assert tuple(fig.layout.yaxis.range) == (300 - pad, 350 + pad)
