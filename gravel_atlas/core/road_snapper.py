"""Snap clicked points onto a known road network.

The draw controller treats snapping as a pluggable point transform. This
module provides the default implementation over road geometries already
loaded on the map (e.g. the gravel and paved road overlays), using a Shapely
STRtree for the nearest-road lookup.

Projection is done in lon/lat degrees (planar approximation, fine at the
tens-of-meters scale of a click); the snap distance limit is checked with
the haversine distance in meters.
"""

import logging
from dataclasses import dataclass, field
from typing import Protocol, Sequence

from shapely.geometry import LineString, Point
from shapely.strtree import STRtree

from gravel_atlas.constants import SnapConfig
from gravel_atlas.model.errors import SnapUnavailableError
from gravel_atlas.model.geo_point import GeoPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Road:
    """A road geometry with its OSM-style tags.

    Attributes:
        id: Stable identifier (e.g. OSM way id)
        coordinates: (lon, lat) vertices, at least two
        highway: highway=* tag (e.g. "track", "residential")
        surface: surface=* tag (e.g. "gravel", "asphalt"), "unknown" if untagged
    """

    id: str
    coordinates: tuple[tuple[float, float], ...]
    highway: str = SnapConfig.UNKNOWN
    surface: str = SnapConfig.UNKNOWN

    def __post_init__(self) -> None:
        if len(self.coordinates) < 2:
            raise ValueError(f"Road {self.id} needs at least 2 coordinates")

    @classmethod
    def from_feature(cls, feature: dict) -> "Road":
        """Create from a GeoJSON LineString Feature with highway/surface properties."""
        props = feature.get("properties") or {}
        geometry = feature["geometry"]
        if geometry.get("type") != "LineString":
            raise ValueError(f"Road geometry must be LineString, got {geometry.get('type')}")
        return cls(
            id=str(props.get("id", feature.get("id", ""))),
            coordinates=tuple((float(c[0]), float(c[1])) for c in geometry["coordinates"]),
            highway=props.get("highway") or SnapConfig.UNKNOWN,
            surface=props.get("surface") or SnapConfig.UNKNOWN,
        )


@dataclass(frozen=True)
class SnapResult:
    """A snapped point and the road it landed on."""

    point: GeoPoint
    road: Road
    distance_m: float


class RoadSnapper(Protocol):
    """Point transform used when snap-to-road is enabled.

    Implementations raise SnapUnavailableError when no snap is possible.
    """

    def snap(self, point: GeoPoint) -> SnapResult: ...


@dataclass
class RoadNetworkSnapper:
    """Snaps points to the nearest of a fixed set of roads.

    Example:
        snapper = RoadNetworkSnapper(roads=[Road(id="w1", coordinates=((0, 0), (0.01, 0)))])
        result = snapper.snap(GeoPoint(lon=0.005, lat=0.0001))
    """

    roads: Sequence[Road]
    max_distance_m: float = SnapConfig.MAX_SNAP_DISTANCE_M
    _lines: list[LineString] = field(init=False, repr=False)
    _tree: STRtree | None = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.roads = list(self.roads)
        self._lines = [LineString(road.coordinates) for road in self.roads]
        self._tree = STRtree(self._lines) if self._lines else None
        logger.info(f"Road snapper indexed {len(self._lines)} roads")

    def snap(self, point: GeoPoint) -> SnapResult:
        """Project a point onto the nearest road.

        Raises:
            SnapUnavailableError: No roads loaded, or nearest road farther
                than max_distance_m.
        """
        if self._tree is None:
            raise SnapUnavailableError("No roads loaded for snapping")

        query = Point(point.lon, point.lat)
        idx = self._tree.nearest(query)
        if idx is None:
            raise SnapUnavailableError(f"No road found near {point!r}")
        idx = int(idx)
        line = self._lines[idx]
        projected = line.interpolate(line.project(query))
        snapped = GeoPoint(lon=float(projected.x), lat=float(projected.y))

        distance_m = point.distance_to(snapped)
        if distance_m > self.max_distance_m:
            raise SnapUnavailableError(
                f"Nearest road {self.roads[idx].id} is {distance_m:.0f}m away (limit {self.max_distance_m:.0f}m)"
            )
        return SnapResult(point=snapped, road=self.roads[idx], distance_m=distance_m)
