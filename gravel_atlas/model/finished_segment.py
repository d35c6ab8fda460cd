"""FinishedSegment - The payload produced when a drawing is finished.

Created once per finished drawing and handed to the segment store.
"""

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from gravel_atlas.constants import DrawConfig
from gravel_atlas.core.geo_calculator import GeoCalculator
from gravel_atlas.model.elevation import ElevationProfilePoint, elevation_changes
from gravel_atlas.model.errors import InsufficientPointsError
from gravel_atlas.model.geo_point import GeoPoint
from gravel_atlas.model.geojson import LineStringFeature
from gravel_atlas.model.road_stats import RoadStats


@dataclass(frozen=True)
class FinishedSegment:
    """A finished route ready to persist.

    Attributes:
        coordinates: Ordered route points (at least two)
        title: User-given title
        distance_m: Total haversine length
        elevation_gain_m: Sum of positive elevation deltas
        elevation_loss_m: Sum of negative elevation deltas, as a positive number
        elevation_profile: One profile point per coordinate
        road_stats: Highway/surface breakdown when points were snapped
    """

    coordinates: tuple[GeoPoint, ...]
    title: str
    distance_m: float
    elevation_gain_m: float
    elevation_loss_m: float
    elevation_profile: tuple[ElevationProfilePoint, ...]
    road_stats: Optional[RoadStats] = None

    @property
    def feature(self) -> LineStringFeature:
        return LineStringFeature.from_points(points=self.coordinates)

    def to_payload(self) -> dict[str, Any]:
        """Request body for the save endpoint, mirroring the stored document."""
        metadata: dict[str, Any] = {
            "title": self.title,
            "length": self.distance_m,
            "elevationGain": self.elevation_gain_m,
            "elevationLoss": self.elevation_loss_m,
            "elevationProfile": [p.to_dict() for p in self.elevation_profile],
            "surfaceTypes": self.road_stats.known_surface_types if self.road_stats else [],
        }
        return {"geojson": self.feature.to_dict(), "title": self.title, "metadata": metadata}

    def __repr__(self) -> str:
        return (
            f"FinishedSegment({self.title!r}, {len(self.coordinates)} pts, {self.distance_m:.0f}m, "
            f"+{self.elevation_gain_m:.0f}/-{self.elevation_loss_m:.0f}m)"
        )


def assemble_segment(
    points: Sequence[GeoPoint],
    title: str,
    profile: Sequence[ElevationProfilePoint],
    road_stats: Optional[RoadStats] = None,
) -> FinishedSegment:
    """Package a drawn route into a FinishedSegment.

    Args:
        points: Ordered route points
        title: Segment title
        profile: Elevation profile, one entry per point
        road_stats: Optional road breakdown

    Returns:
        The assembled FinishedSegment.

    Raises:
        InsufficientPointsError: Fewer than two points.
        ValueError: Profile length does not match the points.
    """
    if len(points) < DrawConfig.MIN_POINTS_TO_FINISH:
        raise InsufficientPointsError(point_count=len(points), required=DrawConfig.MIN_POINTS_TO_FINISH)
    if len(profile) != len(points):
        raise ValueError(f"Profile has {len(profile)} entries for {len(points)} points")

    distances = GeoCalculator.cumulative_distances_m([p.lon_lat for p in points])
    gain, loss = elevation_changes(profile)
    return FinishedSegment(
        coordinates=tuple(points),
        title=title,
        distance_m=distances[-1],
        elevation_gain_m=gain,
        elevation_loss_m=loss,
        elevation_profile=tuple(profile),
        road_stats=road_stats,
    )
