"""GeoPoint - The coordinate atom of a drawn route.

A GeoPoint is a validated WGS84 longitude/latitude pair. It is immutable,
so the same instance can be shared between the drawing session, the
elevation cache and the finished segment.
"""

from dataclasses import dataclass
from math import isfinite

from gravel_atlas.core.geo_calculator import GeoCalculator


@dataclass(frozen=True)
class GeoPoint:
    """A WGS84 coordinate.

    Attributes:
        lon: Longitude in decimal degrees, [-180, 180]
        lat: Latitude in decimal degrees, (-90, 90); poles are excluded
            because the Mercator tile projection is undefined there

    Example:
        point = GeoPoint(lon=-105.27, lat=40.01)
    """

    lon: float
    lat: float

    def __post_init__(self) -> None:
        """Validate coordinate ranges."""
        if not (isfinite(self.lon) and isfinite(self.lat)):
            raise ValueError(f"GeoPoint coordinates must be finite, got ({self.lon}, {self.lat})")
        if not -180.0 <= self.lon <= 180.0:
            raise ValueError(f"Longitude {self.lon} outside [-180, 180]")
        if not -90.0 < self.lat < 90.0:
            raise ValueError(f"Latitude {self.lat} outside (-90, 90)")

    @property
    def lon_lat(self) -> tuple[float, float]:
        """Return (lon, lat) tuple - GeoJSON/Pydeck order."""
        return (self.lon, self.lat)

    @classmethod
    def from_lon_lat(cls, position: tuple[float, float] | list[float]) -> "GeoPoint":
        """Create from a GeoJSON position ([lon, lat] or [lon, lat, elev])."""
        return cls(lon=float(position[0]), lat=float(position[1]))

    def distance_to(self, other: "GeoPoint") -> float:
        """Haversine distance to another point in meters."""
        return GeoCalculator.haversine_distance_m(lat1=self.lat, lon1=self.lon, lat2=other.lat, lon2=other.lon)

    def __repr__(self) -> str:
        return f"GeoPoint(lon={self.lon:.5f}, lat={self.lat:.5f})"
