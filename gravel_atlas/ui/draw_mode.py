"""DrawModeController - Interactive segment drawing.

Wires the draw state machine to its collaborators:
- ElevationSampler for per-point elevation (concurrent, best-effort)
- RoadSnapper for optional snap-to-road
- LineRenderer for the line on the map
- SegmentStore for saving finished segments

All operations except finish/save are synchronous. click() schedules the
elevation sample for the new point as an asyncio task on the running loop
and returns immediately, so the user can keep clicking or undo while samples
are in flight. Completed samples are written back only when their session
generation and point key are still current.

Example:
    async def main():
        with DrawModeController(sampler=sampler, renderer=PydeckLineRenderer()) as draw:
            draw.start()
            draw.click(GeoPoint(lon=11.39, lat=47.26))
            draw.click(GeoPoint(lon=11.40, lat=47.27))
            segment = await draw.finish(title="Morning loop")
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from gravel_atlas.constants import DrawConfig
from gravel_atlas.core.elevation_sampler import ElevationSampler
from gravel_atlas.core.grade_analyzer import GradeAnalyzer
from gravel_atlas.core.road_snapper import Road, RoadSnapper
from gravel_atlas.core.segment_store import SegmentStore
from gravel_atlas.model.elevation import (
    ElevationProfilePoint,
    ElevationSample,
    ProfileStats,
    nearest_profile_point,
)
from gravel_atlas.model.errors import InsufficientPointsError, PersistenceError, SnapUnavailableError
from gravel_atlas.model.finished_segment import FinishedSegment, assemble_segment
from gravel_atlas.model.geo_point import GeoPoint
from gravel_atlas.model.grade_segment import GradeSegment
from gravel_atlas.model.message import (
    DrawingStatusMessage,
    SaveFailedMessage,
    SegmentSavedMessage,
    SnapFallbackMessage,
    TooFewPointsMessage,
)
from gravel_atlas.model.road_stats import RoadStats
from gravel_atlas.ui.line_renderer import LineRenderer
from gravel_atlas.ui.state_machine import DrawContext, DrawnPoint, DrawStateMachine, LineRenderListener

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DrawSnapshot:
    """Read-only view of the drawing for the UI.

    Attributes:
        is_drawing: Whether draw mode is active
        points: Placed points in click order
        profile: Profile of points with resolved elevation
        grades: One grade per profile point
        grade_segments: Bucket runs of the profile
        stats: Profile summary, None while the profile is empty
        road_stats: Highway/surface breakdown, None when nothing was snapped
        pending_samples: Points still waiting for elevation
        snap_to_road: Current snap setting
    """

    is_drawing: bool
    points: tuple[GeoPoint, ...]
    profile: tuple[ElevationProfilePoint, ...]
    grades: tuple[float, ...]
    grade_segments: tuple[GradeSegment, ...]
    stats: Optional[ProfileStats]
    road_stats: Optional[RoadStats]
    pending_samples: int
    snap_to_road: bool

    @property
    def profile_complete(self) -> bool:
        return self.pending_samples == 0


class DrawModeController:
    """Draw mode: click points, undo, clear, finish and save.

    The controller is a context manager; leaving the block clears the
    session (removing the rendered line) and cancels in-flight samples.
    """

    def __init__(
        self,
        sampler: ElevationSampler,
        renderer: LineRenderer,
        snapper: Optional[RoadSnapper] = None,
        store: Optional[SegmentStore] = None,
    ) -> None:
        self.sampler = sampler
        self.snapper = snapper
        self.store = store
        self.sm = DrawStateMachine(context=DrawContext())
        self._listener = LineRenderListener(renderer=renderer)
        self.sm.add_listener(self._listener)
        self._tasks: set[asyncio.Task] = set()

    @property
    def context(self) -> DrawContext:
        return self.sm.context

    @property
    def is_drawing(self) -> bool:
        return self.sm.is_drawing

    # =========================================================================
    # DRAWING OPERATIONS
    # =========================================================================

    def start(self) -> bool:
        """Enter draw mode with an empty route."""
        started = self.sm.try_transition("start")
        if started:
            self._update_status()
        return started

    def click(self, point: GeoPoint) -> Optional[asyncio.Task]:
        """Add a point to the route.

        Must be called from inside the running event loop. The point is snapped
        to a road when snapping is on (falling back to the raw point), appended,
        and its elevation sample is scheduled.

        Returns:
            The sampling task, or None when not drawing.
        """
        if not self.sm.is_drawing:
            logger.warning(f"Ignoring click at {point!r}: not drawing")
            return None

        placed, road = self._snap(point=point)
        drawn = DrawnPoint(point=placed, key=self.context.session.new_key(), road=road)
        if not self.sm.try_transition("add_point", drawn=drawn):
            return None

        task = asyncio.get_running_loop().create_task(
            self._sample(generation=self.context.session.generation, drawn=drawn)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._update_status()
        return task

    def undo_last_point(self) -> bool:
        """Remove the last point. No-op (returns False) without points."""
        if not self.sm.is_drawing or not self.context.session.points:
            logger.debug("Nothing to undo")
            return False
        undone = self.sm.try_transition("undo_point")
        if undone:
            self._update_status()
        return undone

    def toggle_snap_to_road(self, enabled: bool) -> None:
        """Set snap-to-road for future clicks. Placed points are not changed."""
        self.context.settings.snap_to_road = enabled
        logger.info(f"Snap to road {'enabled' if enabled else 'disabled'}")

    def clear(self) -> None:
        """Drop the route and leave draw mode. Idempotent."""
        self.sm.try_transition("clear")
        self._cancel_tasks()
        self.context.messages.set_status(None)

    async def finish(self, title: str = "") -> Optional[FinishedSegment]:
        """Finish the drawing.

        Waits for in-flight elevation samples, then assembles the segment and
        returns to idle. With fewer than two points the drawing is cleared and
        None is returned.

        Args:
            title: Segment title

        Returns:
            The FinishedSegment, or None if nothing was finished.
        """
        if not self.sm.is_drawing:
            logger.warning("finish called while not drawing")
            return None

        generation = self.context.session.generation
        await self.wait_for_samples()
        if not self.sm.is_drawing or self.context.session.generation != generation:
            logger.info("Drawing was cleared while waiting for elevation samples")
            return None

        session = self.context.session
        try:
            segment = assemble_segment(
                points=session.geo_points,
                title=title,
                profile=session.profile(fill_pending=True),
                road_stats=self._road_stats(),
            )
        except InsufficientPointsError as exc:
            logger.info(f"Finish with too few points: {exc}")
            self.clear()
            self.context.messages.set_status(
                TooFewPointsMessage(point_count=exc.point_count, required=DrawConfig.MIN_POINTS_TO_FINISH)
            )
            return None

        self.sm.try_transition("finish")
        self.context.messages.set_status(None)
        logger.info(f"Finished {segment!r}")
        return segment

    async def save(self, segment: FinishedSegment) -> dict[str, Any]:
        """Persist a finished segment.

        The blocking HTTP call runs in a worker thread. Failures are recorded
        as a toast and re-raised; calling save again retries.

        Returns:
            The stored segment record.

        Raises:
            PersistenceError: The store rejected the segment or was unreachable.
            ValueError: No store configured.
        """
        if self.store is None:
            raise ValueError("No segment store configured")
        try:
            record = await asyncio.to_thread(self.store.save, segment)
        except PersistenceError as exc:
            self.context.messages.set_toast(SaveFailedMessage(error=str(exc)))
            raise
        self.context.messages.set_toast(
            SegmentSavedMessage(title=segment.title, distance_km=segment.distance_m / 1000.0)
        )
        return record

    async def wait_for_samples(self) -> None:
        """Wait until no elevation sample is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # =========================================================================
    # READ-ONLY VIEWS
    # =========================================================================

    def snapshot(self) -> DrawSnapshot:
        session = self.context.session
        profile = session.profile()
        grades = GradeAnalyzer.compute_grades(profile=profile)
        return DrawSnapshot(
            is_drawing=self.sm.is_drawing,
            points=tuple(session.geo_points),
            profile=tuple(profile),
            grades=tuple(grades),
            grade_segments=tuple(GradeAnalyzer.group_segments(profile=profile, grades=grades)),
            stats=ProfileStats.from_profile(profile),
            road_stats=self._road_stats(),
            pending_samples=session.pending_count,
            snap_to_road=self.context.settings.snap_to_road,
        )

    def hover(self, distance_km: float) -> Optional[tuple[ElevationProfilePoint, GeoPoint]]:
        """Profile point and map coordinate nearest to a chart distance."""
        session = self.context.session
        resolved = [p for p in session.points if p.key in session.elevations]
        profile = session.profile()
        idx = nearest_profile_point(profile, distance_km)
        if idx is None:
            return None
        return profile[idx], resolved[idx].point

    # =========================================================================
    # TEARDOWN
    # =========================================================================

    def close(self) -> None:
        self.clear()

    def __enter__(self) -> "DrawModeController":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DrawModeController(state={self.sm.get_state_name()}, in_flight={len(self._tasks)})"

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _snap(self, point: GeoPoint) -> tuple[GeoPoint, Optional[Road]]:
        """Snap to the nearest road, falling back to the raw point."""
        if not self.context.settings.snap_to_road or self.snapper is None:
            return point, None
        try:
            result = self.snapper.snap(point)
        except SnapUnavailableError as exc:
            self.context.messages.set_toast(SnapFallbackMessage(reason=str(exc)))
            return point, None
        except Exception as exc:
            logger.warning(f"Snapping failed for {point!r}, keeping the raw click: {exc}")
            self.context.messages.set_toast(SnapFallbackMessage(reason=str(exc)))
            return point, None
        logger.debug(f"Snapped {point!r} to road {result.road.id} ({result.distance_m:.1f}m)")
        return result.point, result.road

    async def _sample(self, generation: int, drawn: DrawnPoint) -> ElevationSample:
        sample = await self.sampler.sample_elevation(drawn.point)
        session = self.context.session
        if session.generation != generation or not session.has_key(drawn.key):
            logger.debug(f"[SAMPLE] Discarding stale elevation for point {drawn.key} (generation {generation})")
            return sample
        session.elevations[drawn.key] = sample.elevation_m
        self._listener.refresh(context=self.context)
        self._update_status()
        return sample

    def _cancel_tasks(self) -> None:
        for task in list(self._tasks):
            task.cancel()

    def _road_stats(self) -> Optional[RoadStats]:
        points = self.context.session.points
        if not any(p.road is not None for p in points):
            return None
        return RoadStats.from_route(points=[p.point for p in points], roads=[p.road for p in points])

    def _update_status(self) -> None:
        session = self.context.session
        distances = session.distances_km()
        self.context.messages.set_status(
            DrawingStatusMessage(
                point_count=len(session.points),
                distance_km=distances[-1] if distances else 0.0,
                pending_samples=session.pending_count,
            )
        )
