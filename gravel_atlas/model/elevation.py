"""Elevation samples and the distance/elevation profile of a drawn route.

- ElevationSample: one sampled point (integer meters, 0 when sampling failed)
- ElevationProfilePoint: cumulative distance + elevation, one per route point
- build_profile: derive the profile from points and their elevations
- ProfileStats: gain, loss, min, max and length of a profile
- nearest_profile_point: hover lookup by chart distance
"""

from bisect import bisect_left
from dataclasses import dataclass
from typing import Sequence

from gravel_atlas.core.geo_calculator import GeoCalculator
from gravel_atlas.model.geo_point import GeoPoint


@dataclass(frozen=True)
class ElevationSample:
    """Elevation resolved for one point.

    Attributes:
        point: The sampled coordinate
        elevation_m: Elevation rounded to whole meters; 0 if sampling failed
            or decoded out of range. Negative values are valid terrain.
    """

    point: GeoPoint
    elevation_m: int


@dataclass(frozen=True)
class ElevationProfilePoint:
    """One point of an elevation profile.

    Attributes:
        distance_km: Cumulative distance from the route start (non-decreasing)
        elevation_m: Elevation in meters
    """

    distance_km: float
    elevation_m: float

    def to_dict(self) -> dict[str, float]:
        """Serialize using the stored document's field names."""
        return {"distance": self.distance_km, "elevation": self.elevation_m}

    @classmethod
    def from_dict(cls, data: dict[str, float]) -> "ElevationProfilePoint":
        return cls(distance_km=float(data["distance"]), elevation_m=float(data["elevation"]))


def build_profile(points: Sequence[GeoPoint], elevations: Sequence[float]) -> list[ElevationProfilePoint]:
    """Build an elevation profile from route points and their elevations.

    Args:
        points: Ordered route points
        elevations: Elevation for each point, same length as points

    Returns:
        One ElevationProfilePoint per point, distances cumulative in km.

    Raises:
        ValueError: If the sequences differ in length.
    """
    if len(points) != len(elevations):
        raise ValueError(f"Got {len(points)} points but {len(elevations)} elevations")
    distances_m = GeoCalculator.cumulative_distances_m([p.lon_lat for p in points])
    return [
        ElevationProfilePoint(distance_km=d / 1000.0, elevation_m=float(e)) for d, e in zip(distances_m, elevations)
    ]


def elevation_changes(profile: Sequence[ElevationProfilePoint]) -> tuple[float, float]:
    """Sum of positive and (positive-valued) negative elevation deltas.

    Returns:
        Tuple (gain_m, loss_m), both >= 0.
    """
    gain = 0.0
    loss = 0.0
    for prev, curr in zip(profile, profile[1:]):
        delta = curr.elevation_m - prev.elevation_m
        if delta > 0:
            gain += delta
        else:
            loss -= delta
    return gain, loss


@dataclass(frozen=True)
class ProfileStats:
    """Summary numbers shown next to the elevation chart."""

    distance_km: float
    elevation_gain_m: float
    elevation_loss_m: float
    min_elevation_m: float
    max_elevation_m: float

    @classmethod
    def from_profile(cls, profile: Sequence[ElevationProfilePoint]) -> "ProfileStats | None":
        """Compute stats, or None for an empty profile."""
        if not profile:
            return None
        gain, loss = elevation_changes(profile)
        elevations = [p.elevation_m for p in profile]
        return cls(
            distance_km=profile[-1].distance_km,
            elevation_gain_m=gain,
            elevation_loss_m=loss,
            min_elevation_m=min(elevations),
            max_elevation_m=max(elevations),
        )


def nearest_profile_point(profile: Sequence[ElevationProfilePoint], distance_km: float) -> int | None:
    """Index of the profile point closest to a distance along the route.

    Used to place the hover marker when the pointer moves over the chart.
    Ties resolve to the earlier point.
    """
    if not profile:
        return None
    distances = [p.distance_km for p in profile]
    idx = bisect_left(distances, distance_km)
    if idx == 0:
        return 0
    if idx == len(distances):
        return len(distances) - 1
    before, after = distances[idx - 1], distances[idx]
    return idx - 1 if distance_km - before <= after - distance_km else idx
