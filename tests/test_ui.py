"""Tests for gravel_atlas UI state: draw state machine, context and line rendering.

Tests: DrawStateMachine, DrawContext/SessionContext, LineRenderListener,
PydeckLineRenderer
Focus: Transitions, guards, session resets, line layer lifecycle

Note: Controller workflows (click -> sample -> finish) live in tests_workflow.
"""

import pydeck as pdk
import pytest
from statemachine.exceptions import TransitionNotAllowed

from gravel_atlas.constants import DrawConfig, MapConfig, StyleConfig
from gravel_atlas.core.grade_analyzer import GradeAnalyzer
from gravel_atlas.model.elevation import ElevationProfilePoint
from gravel_atlas.model.geo_point import GeoPoint
from gravel_atlas.ui.line_renderer import PydeckLineRenderer
from gravel_atlas.ui.state_machine import DrawContext, DrawnPoint, DrawStateMachine, SessionContext

from fakes import FakeRenderer


def _drawn(key: int, lon: float = 0.0, lat: float = 0.0) -> DrawnPoint:
    return DrawnPoint(point=GeoPoint(lon=lon, lat=lat), key=key)


# =============================================================================
# CONTEXT
# =============================================================================


class TestSessionContext:
    """SessionContext - points, elevations and profile."""

    def test_defaults(self) -> None:
        ctx = DrawContext()
        assert ctx.session.points == []
        assert ctx.session.line_handle is None
        assert ctx.settings.snap_to_road is DrawConfig.SNAP_TO_ROAD_DEFAULT
        assert ctx.messages.status is None

    def test_keys_are_never_reused(self) -> None:
        session = SessionContext()
        first = session.new_key()
        session.clear()
        assert session.new_key() == first + 1

    def test_profile_skips_pending_but_keeps_distances(self) -> None:
        session = SessionContext(points=[_drawn(0, lon=0.0), _drawn(1, lon=0.001), _drawn(2, lon=0.002)])
        session.elevations = {0: 100, 2: 120}

        profile = session.profile()
        assert [p.elevation_m for p in profile] == [100.0, 120.0]
        assert profile[1].distance_km == pytest.approx(0.2224, abs=0.001)
        assert session.pending_count == 1

    def test_profile_fill_pending(self) -> None:
        session = SessionContext(points=[_drawn(0), _drawn(1, lon=0.001)])
        session.elevations = {1: 50}
        assert [p.elevation_m for p in session.profile(fill_pending=True)] == [0.0, 50.0]

    def test_layer_id_follows_generation(self) -> None:
        session = SessionContext()
        session.new_generation()
        assert session.layer_id == f"{DrawConfig.LAYER_ID_PREFIX}-1"


# =============================================================================
# STATE MACHINE
# =============================================================================


class TestDrawStateMachine:
    """DrawStateMachine - transitions and hooks."""

    def test_initial_state(self) -> None:
        sm, _ = DrawStateMachine.create()
        assert sm.is_idle
        assert sm.get_state_name() == "Idle"
        assert set(sm.get_available_actions()) == {"start", "clear"}

    def test_start_add_finish(self) -> None:
        sm, ctx = DrawStateMachine.create()
        sm.start()
        sm.add_point(drawn=_drawn(0))
        sm.add_point(drawn=_drawn(1, lon=0.001))
        assert sm.is_drawing
        assert len(ctx.session.points) == 2

        sm.finish()
        assert sm.is_idle
        assert ctx.session.points == []

    def test_undo_guard(self) -> None:
        sm, ctx = DrawStateMachine.create()
        sm.start()
        assert sm.try_transition("undo_point") is False
        assert sm.is_drawing

        sm.add_point(drawn=_drawn(7))
        ctx.session.elevations[7] = 300
        sm.undo_point()
        assert ctx.session.points == []
        assert ctx.session.elevations == {}

    def test_entering_idle_bumps_generation(self) -> None:
        sm, ctx = DrawStateMachine.create()
        before = ctx.session.generation
        sm.start()
        sm.clear()
        assert ctx.session.generation == before + 1
        sm.clear()
        assert ctx.session.generation == before + 2

    def test_start_clears_stale_messages(self) -> None:
        sm, ctx = DrawStateMachine.create()
        ctx.messages.status = object()  # type: ignore[assignment]
        sm.start()
        assert ctx.messages.status is None

    def test_add_point_while_idle_not_allowed(self) -> None:
        sm, _ = DrawStateMachine.create()
        with pytest.raises(TransitionNotAllowed):
            sm.add_point(drawn=_drawn(0))
        assert sm.try_transition("finish") is False


# =============================================================================
# LINE RENDER LISTENER
# =============================================================================


class TestLineRenderListener:
    """The rendered line follows the session."""

    def test_line_lifecycle(self) -> None:
        renderer = FakeRenderer()
        sm, ctx = DrawStateMachine.create(renderer=renderer)
        sm.start()
        assert renderer.lines == {}

        sm.add_point(drawn=_drawn(0))
        handle = ctx.session.line_handle
        assert renderer.lines[handle] == [(0.0, 0.0)]

        sm.add_point(drawn=_drawn(1, lon=0.001))
        assert renderer.lines[handle] == [(0.0, 0.0), (0.001, 0.0)]
        assert renderer.grades[handle] is None  # elevations pending

        sm.undo_point()
        sm.undo_point()
        assert handle in renderer.removed
        assert ctx.session.line_handle is None

    def test_finish_removes_line(self) -> None:
        renderer = FakeRenderer()
        sm, ctx = DrawStateMachine.create(renderer=renderer)
        sm.start()
        sm.add_point(drawn=_drawn(0))
        sm.finish()
        assert renderer.lines == {}
        assert ctx.session.line_handle is None

    def test_grades_once_profile_complete(self) -> None:
        renderer = FakeRenderer()
        sm, ctx = DrawStateMachine.create(renderer=renderer)
        sm.start()
        sm.add_point(drawn=_drawn(0))
        ctx.session.elevations[0] = 100
        sm.add_point(drawn=_drawn(1, lon=0.001))
        ctx.session.elevations[1] = 120
        sm.add_point(drawn=_drawn(2, lon=0.002))
        ctx.session.elevations[2] = 120

        sm.undo_point()  # any transition refreshes
        grades = renderer.grades[ctx.session.line_handle]
        assert grades is not None
        assert grades[0].start_index == 0


# =============================================================================
# PYDECK RENDERER
# =============================================================================


def _profile(elevations: list[float], step_km: float = 0.1) -> list[ElevationProfilePoint]:
    return [ElevationProfilePoint(distance_km=i * step_km, elevation_m=e) for i, e in enumerate(elevations)]


class TestPydeckLineRenderer:
    """PydeckLineRenderer - pydeck layers for the drawing."""

    coords = [(0.0, 0.0), (0.001, 0.0), (0.002, 0.0), (0.003, 0.0)]

    def test_plain_line_is_single_red_layer(self) -> None:
        renderer = PydeckLineRenderer()
        renderer.add_line(layer_id="drawing-1", coordinates=self.coords)
        layers = renderer.layers()

        assert len(layers) == 1
        assert layers[0].id == "drawing-1"
        assert layers[0].data[0]["color"] == list(StyleConfig.DRAWING_LINE_COLOR_RGBA)
        assert layers[0].data[0]["path"] == [list(c) for c in self.coords]

    def test_grade_layers_join_without_gaps(self) -> None:
        renderer = PydeckLineRenderer()
        handle = renderer.add_line(layer_id="drawing-1", coordinates=self.coords)
        segments = GradeAnalyzer.group_segments(profile=_profile([0, 0, 20, 20]))
        renderer.update_line(handle=handle, coordinates=self.coords, grade_segments=segments)

        layers = renderer.layers()
        paths = [layer.data[0]["path"] for layer in layers]
        for prev, curr in zip(paths, paths[1:]):
            assert prev[-1] == curr[0]
        assert paths[0][0] == [0.0, 0.0]
        assert paths[-1][-1] == [0.003, 0.0]
        assert all(layer.id.startswith(f"{DrawConfig.GRADE_LAYER_ID_PREFIX}-drawing-1-") for layer in layers)

    def test_duplicate_layer_rejected(self) -> None:
        renderer = PydeckLineRenderer()
        renderer.add_line(layer_id="drawing-1", coordinates=self.coords)
        with pytest.raises(ValueError):
            renderer.add_line(layer_id="drawing-1", coordinates=self.coords)

    def test_remove(self) -> None:
        renderer = PydeckLineRenderer()
        handle = renderer.add_line(layer_id="drawing-1", coordinates=self.coords)
        renderer.remove_line(handle)
        renderer.remove_line(handle)  # unknown handle only warns
        assert renderer.layers() == []

    def test_deck_centers_on_last_point(self) -> None:
        renderer = PydeckLineRenderer()
        assert isinstance(renderer.deck(), pdk.Deck)
        assert renderer._default_view_state().latitude == MapConfig.START_CENTER_LAT

        renderer.add_line(layer_id="drawing-1", coordinates=self.coords)
        view = renderer._default_view_state()
        assert (view.longitude, view.latitude) == self.coords[-1]
