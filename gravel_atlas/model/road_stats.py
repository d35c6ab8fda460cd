"""RoadStats - Highway and surface breakdown of a drawn route.

A leg (consecutive point pair) is attributed to a road only when both of its
endpoints were snapped onto that same road; every other leg counts as
unknown. Lengths are haversine meters.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence

from gravel_atlas.constants import SnapConfig
from gravel_atlas.model.geo_point import GeoPoint

if TYPE_CHECKING:
    from gravel_atlas.core.road_snapper import Road


@dataclass
class RoadStats:
    """Length per highway type and surface type, plus paved/unpaved shares.

    Attributes:
        highways: Meters per highway tag
        surfaces: Meters per surface tag
        total_length_m: Total route length
    """

    highways: dict[str, float] = field(default_factory=dict)
    surfaces: dict[str, float] = field(default_factory=dict)
    total_length_m: float = 0.0

    @classmethod
    def from_route(cls, points: Sequence[GeoPoint], roads: Sequence[Optional["Road"]]) -> "RoadStats":
        """Aggregate leg lengths by the road each leg runs along.

        Args:
            points: Ordered route points
            roads: Road each point snapped to (None for unsnapped points)
        """
        if len(points) != len(roads):
            raise ValueError(f"Got {len(points)} points but {len(roads)} road entries")

        stats = cls()
        for i in range(1, len(points)):
            length = points[i - 1].distance_to(points[i])
            prev_road, road = roads[i - 1], roads[i]
            if road is not None and prev_road is not None and road.id == prev_road.id:
                highway, surface = road.highway, road.surface
            else:
                highway, surface = SnapConfig.UNKNOWN, SnapConfig.UNKNOWN
            stats.highways[highway] = stats.highways.get(highway, 0.0) + length
            stats.surfaces[surface] = stats.surfaces.get(surface, 0.0) + length
            stats.total_length_m += length
        return stats

    @property
    def surface_percentages(self) -> dict[str, float]:
        """Share of the route that is paved, unpaved or unknown (percent)."""
        result = {"paved": 0.0, "unpaved": 0.0, "unknown": 0.0}
        if self.total_length_m <= 0:
            return result
        for surface, length in self.surfaces.items():
            if surface in SnapConfig.PAVED_SURFACES:
                key = "paved"
            elif surface in SnapConfig.UNPAVED_SURFACES:
                key = "unpaved"
            else:
                key = "unknown"
            result[key] += length / self.total_length_m * 100
        return result

    @property
    def known_surface_types(self) -> list[str]:
        """Surface tags present on the route, longest first, excluding unknown."""
        known = [(s, length) for s, length in self.surfaces.items() if s != SnapConfig.UNKNOWN]
        return [s for s, _ in sorted(known, key=lambda item: item[1], reverse=True)]
