"""State Machine Transition Matrix - Parameterized validation of all event/state combinations.

Uses pytest.mark.parametrize to create a data-driven truth table for state transitions.
This serves as executable documentation of the state machine contract.

Test Categories:
    1. Valid transitions: Event fires successfully from allowed source states
    2. Invalid transitions: Event raises TransitionNotAllowed from forbidden states
    3. Guarded transitions: Event is refused while its guard fails

Matrix Reference (from state_machine.py docstring):
    2 states × 5 events = 10 combinations
    6 valid transitions (including the add_point/undo_point/clear self-loops)
    4 invalid transitions
"""

import pytest
from statemachine.exceptions import TransitionNotAllowed

from gravel_atlas.model.geo_point import GeoPoint
from gravel_atlas.ui.state_machine import DrawnPoint, DrawStateMachine


# =============================================================================
# TRUTH TABLE: Valid Transitions
# =============================================================================
# Format: (event_name, source_state, expected_target_state, needs_point)
# needs_point: a point is placed first so guards on the session pass

VALID_TRANSITIONS: list[tuple[str, str, str, bool]] = [
    ("start", "idle", "drawing", False),
    ("clear", "idle", "idle", False),  # idempotent
    ("add_point", "drawing", "drawing", False),
    ("undo_point", "drawing", "drawing", True),
    ("finish", "drawing", "idle", False),
    ("clear", "drawing", "idle", False),
]


# =============================================================================
# TRUTH TABLE: Invalid Transitions (Events from forbidden states)
# =============================================================================
# Format: (event_name, invalid_source_state)

INVALID_TRANSITIONS: list[tuple[str, str]] = [
    ("start", "drawing"),
    ("add_point", "idle"),
    ("undo_point", "idle"),
    ("finish", "idle"),
]


def _point(key: int) -> DrawnPoint:
    return DrawnPoint(point=GeoPoint(lon=0.001 * key, lat=0.0), key=key)


def _event_kwargs(event: str, key: int = 100) -> dict:
    return {"drawn": _point(key)} if event == "add_point" else {}


def _enter(sm: DrawStateMachine, state: str, with_point: bool = False) -> None:
    """Drive the machine into a state through real transitions."""
    if state == "drawing":
        sm.start()
        if with_point:
            sm.add_point(drawn=_point(0))
    assert sm.current_state.id == state


class TestValidTransitions:
    """Every allowed event/state pair reaches its target."""

    @pytest.mark.parametrize("event,source,target,needs_point", VALID_TRANSITIONS)
    def test_valid_transition(self, sm: DrawStateMachine, event: str, source: str, target: str, needs_point: bool) -> None:
        _enter(sm, state=source, with_point=needs_point)
        sm.send(event, **_event_kwargs(event))
        assert sm.current_state.id == target

    def test_matrix_is_complete(self) -> None:
        """Valid and invalid tables together cover every state/event pair."""
        covered = {(e, s) for e, s, _, _ in VALID_TRANSITIONS} | set(INVALID_TRANSITIONS)
        sm, _ = DrawStateMachine.create()
        states = {s.id for s in sm.states}
        events = {"start", "add_point", "undo_point", "finish", "clear"}
        assert covered == {(e, s) for e in events for s in states}


class TestInvalidTransitions:
    """Forbidden event/state pairs raise and leave the state unchanged."""

    @pytest.mark.parametrize("event,source", INVALID_TRANSITIONS)
    def test_invalid_transition_raises(self, sm: DrawStateMachine, event: str, source: str) -> None:
        _enter(sm, state=source)
        with pytest.raises(TransitionNotAllowed):
            sm.send(event, **_event_kwargs(event))
        assert sm.current_state.id == source

    @pytest.mark.parametrize("event,source", INVALID_TRANSITIONS)
    def test_try_transition_returns_false(self, sm: DrawStateMachine, event: str, source: str) -> None:
        _enter(sm, state=source)
        assert sm.try_transition(event, **_event_kwargs(event)) is False
        assert sm.current_state.id == source


class TestGuardedTransitions:
    """Events whose guard depends on the session."""

    def test_undo_without_points_refused(self, sm: DrawStateMachine) -> None:
        _enter(sm, state="drawing")
        with pytest.raises(TransitionNotAllowed):
            sm.undo_point()
        assert sm.is_drawing

    def test_undo_until_empty(self, sm: DrawStateMachine) -> None:
        _enter(sm, state="drawing")
        for key in range(3):
            sm.add_point(drawn=_point(key))
        for _ in range(3):
            sm.undo_point()
        assert sm.try_transition("undo_point") is False
        assert sm.context.session.points == []
