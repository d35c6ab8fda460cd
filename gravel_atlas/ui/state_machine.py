"""State machine for the segment drawing mode.

Uses python-statemachine for the draw-mode lifecycle with:
- Two states (Idle, Drawing)
- Guarded transitions (undo needs a point to remove)
- Entry hooks that reset the session
- A listener that keeps the rendered line in sync after every transition

States:
    IDLE: Not drawing. Clicks on the map are ignored.
    DRAWING: Clicks append points to the current route.

Transitions:
    IDLE -> DRAWING: start
    DRAWING -> DRAWING: add_point, undo_point (only with points)
    DRAWING -> IDLE: finish, clear
    IDLE -> IDLE: clear (idempotent)

Session generations
-------------------
Every entry into IDLE bumps SessionContext.generation. Elevation samples are
scheduled with the generation and point key they belong to; a completion is
written back only if both still match, so clearing or undoing can never be
undone by a late network response.

The rendered line handle lives in SessionContext and is owned by
LineRenderListener: it is created with the first point and removed on every
transition that leaves the session empty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from gravel_atlas.constants import DrawConfig, ElevationConfig
from gravel_atlas.core.geo_calculator import GeoCalculator
from gravel_atlas.core.grade_analyzer import GradeAnalyzer
from gravel_atlas.model.elevation import ElevationProfilePoint
from gravel_atlas.model.geo_point import GeoPoint

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from gravel_atlas.core.road_snapper import Road
    from gravel_atlas.model.message import Message, ToastMessage
    from gravel_atlas.ui.line_renderer import LineRenderer


@dataclass(frozen=True)
class DrawnPoint:
    """A placed route point.

    Attributes:
        point: Coordinate after optional snapping
        key: Unique key within the controller's lifetime (never reused)
        road: Road the point was snapped onto, None for raw clicks
    """

    point: GeoPoint
    key: int
    road: Road | None = None


@dataclass
class SessionContext:
    """Points and elevations of the route being drawn."""

    points: list[DrawnPoint] = field(default_factory=list)
    elevations: dict[int, int] = field(default_factory=dict)  # point key -> meters
    generation: int = 0
    next_key: int = 0
    line_handle: Any = None

    def clear(self) -> None:
        """Empty the route. The line handle is released by the listener."""
        self.points = []
        self.elevations = {}

    def new_generation(self) -> int:
        self.generation += 1
        return self.generation

    def new_key(self) -> int:
        key = self.next_key
        self.next_key += 1
        return key

    def has_key(self, key: int) -> bool:
        return any(p.key == key for p in self.points)

    @property
    def geo_points(self) -> list[GeoPoint]:
        return [p.point for p in self.points]

    @property
    def coordinates(self) -> list[tuple[float, float]]:
        """(lon, lat) pairs in click order, as handed to the renderer."""
        return [p.point.lon_lat for p in self.points]

    @property
    def pending_count(self) -> int:
        """Points whose elevation sample has not resolved yet."""
        return sum(1 for p in self.points if p.key not in self.elevations)

    @property
    def layer_id(self) -> str:
        return f"{DrawConfig.LAYER_ID_PREFIX}-{self.generation}"

    def distances_km(self) -> list[float]:
        return [d / 1000.0 for d in GeoCalculator.cumulative_distances_m(self.coordinates)]

    def profile(self, fill_pending: bool = False) -> list[ElevationProfilePoint]:
        """Distance/elevation profile of the route.

        Distances are always measured along the full route. Points still
        waiting for elevation are left out, unless fill_pending is set, in
        which case they get the fallback elevation.

        Args:
            fill_pending: Use the fallback elevation for unresolved points
        """
        profile = []
        for drawn, distance_km in zip(self.points, self.distances_km()):
            elevation = self.elevations.get(drawn.key)
            if elevation is None:
                if not fill_pending:
                    continue
                elevation = ElevationConfig.FALLBACK_ELEVATION_M
            profile.append(ElevationProfilePoint(distance_km=distance_km, elevation_m=float(elevation)))
        return profile


@dataclass
class SettingsContext:
    """Session-independent toggles; survive start/finish/clear."""

    snap_to_road: bool = DrawConfig.SNAP_TO_ROAD_DEFAULT


@dataclass
class UIMessagesContext:
    """Latest panel status and toast for the UI to show."""

    status: Message | None = None
    toast: ToastMessage | None = None

    def set_status(self, message: Message | None) -> None:
        self.status = message
        if message is not None:
            message.log()

    def set_toast(self, toast: ToastMessage) -> None:
        self.toast = toast
        toast.log()

    def clear(self) -> None:
        self.status = None
        self.toast = None


@dataclass
class DrawContext:
    """Shared context/model for the draw state machine.

    Sub-contexts:
        session: Route points, elevations, generation and line handle
        settings: Snap-to-road toggle
        messages: Latest status and toast

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    # State managed by python-statemachine (model pattern)
    state: str | None = None

    session: SessionContext = field(default_factory=SessionContext)
    settings: SettingsContext = field(default_factory=SettingsContext)
    messages: UIMessagesContext = field(default_factory=UIMessagesContext)

    def __repr__(self) -> str:
        return (
            f"DrawContext(state={self.state}, generation={self.session.generation}, "
            f"points={len(self.session.points)}, pending={self.session.pending_count}, "
            f"snap={self.settings.snap_to_road})"
        )


class LineRenderListener:
    """Keeps the rendered drawing line in sync with the session.

    Runs after every transition; the controller also calls refresh() when an
    elevation sample resolves, so the line picks up grade colors.

    Usage:
        sm = DrawStateMachine(context=context)
        sm.add_listener(LineRenderListener(renderer=renderer))
    """

    def __init__(self, renderer: LineRenderer) -> None:
        self.renderer = renderer

    def after_transition(self, event: str, source: State, target: State, model: DrawContext) -> None:
        logger.info(f"[STATE] {source.name} --({event})--> {target.name}")
        self.refresh(context=model)

    def refresh(self, context: DrawContext) -> None:
        """Add, update or remove the drawing line to match the points."""
        session = context.session
        coordinates = session.coordinates

        if not coordinates:
            if session.line_handle is not None:
                self.renderer.remove_line(handle=session.line_handle)
                logger.debug(f"[RENDER] Removed drawing line {session.line_handle}")
                session.line_handle = None
            return

        if session.line_handle is None:
            session.line_handle = self.renderer.add_line(layer_id=session.layer_id, coordinates=coordinates)
            logger.debug(f"[RENDER] Added drawing line {session.line_handle}")
            return

        grade_segments = None
        if session.pending_count == 0 and len(coordinates) >= 2:
            grade_segments = GradeAnalyzer.group_segments(profile=session.profile())
        self.renderer.update_line(handle=session.line_handle, coordinates=coordinates, grade_segments=grade_segments)


class DrawStateMachine(StateMachine):
    """State machine for the draw-mode workflow.

    See module docstring for the transition table.
    """

    # ==========================================================================
    # State Definitions
    # ==========================================================================

    idle = State("Idle", initial=True)
    drawing = State("Drawing")

    # ==========================================================================
    # Transitions
    # ==========================================================================

    start = idle.to(drawing)

    add_point = drawing.to(drawing)

    undo_point = drawing.to(drawing, cond="has_points")

    finish = drawing.to(idle)

    clear = drawing.to(idle) | idle.to(idle)

    # ==========================================================================
    # Guards (Conditions)
    # ==========================================================================

    def has_points(self) -> bool:
        """Guard: there is a point to undo."""
        return len(self.context.session.points) > 0

    # ==========================================================================
    # State Check Properties
    # ==========================================================================

    @property
    def is_idle(self) -> bool:
        return self.idle.is_active

    @property
    def is_drawing(self) -> bool:
        return self.drawing.is_active

    # ==========================================================================
    # Entry Hooks
    # ==========================================================================

    def on_enter_idle(self) -> None:
        """Hook: Entering idle. Invalidates in-flight samples and empties the route."""
        self.context.session.new_generation()
        self.context.session.clear()

    # ==========================================================================
    # Transition Actions (before_* hooks)
    # ==========================================================================

    def before_start(self) -> None:
        self.context.session.clear()
        self.context.messages.clear()

    def before_add_point(self, drawn: DrawnPoint) -> None:
        self.context.session.points.append(drawn)

    def before_undo_point(self) -> None:
        removed = self.context.session.points.pop()
        self.context.session.elevations.pop(removed.key, None)
        logger.debug(f"Undid point {removed.key} at {removed.point!r}")

    # ==========================================================================
    # Initialization
    # ==========================================================================

    def __init__(self, context: DrawContext | None = None, start_value: str | None = None) -> None:
        """Initialize state machine with model pattern.

        Args:
            context: Shared context/model (creates new if None)
            start_value: Optional initial state value (for restoring state)
        """
        model = context or DrawContext()
        super().__init__(model=model, start_value=start_value)

    # ==========================================================================
    # Utility Methods
    # ==========================================================================

    @property
    def context(self) -> DrawContext:
        """Alias for model."""
        return self.model

    def get_state_name(self) -> str:
        return self.current_state.name

    def get_available_actions(self) -> list[str]:
        """Get list of available transition names (for UI display only)."""
        return [t.event for t in self.current_state.transitions]

    def __repr__(self) -> str:
        return f"DrawStateMachine(state={self.get_state_name()}, model={self.context!r})"

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure.

        Args:
            event: Transition event name
            **kwargs: Arguments for transition

        Returns:
            True if transition succeeded, False otherwise.
        """
        try:
            self.send(event=event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.warning(f"Transition '{event}' not allowed from {self.get_state_name()}")
            return False

    @staticmethod
    def create(renderer: LineRenderer | None = None) -> tuple["DrawStateMachine", DrawContext]:
        """Factory method to create state machine with context and optional line listener.

        Args:
            renderer: If given, a LineRenderListener drawing onto it is attached.
                      Leave out for tests that only check state.

        Returns:
            Tuple of (DrawStateMachine, DrawContext)
        """
        context = DrawContext()
        sm = DrawStateMachine(context=context)
        if renderer is not None:
            sm.add_listener(LineRenderListener(renderer=renderer))
            logger.info("Created DrawStateMachine with LineRenderListener")
        else:
            logger.info("Created DrawStateMachine without renderer")
        return sm, context
