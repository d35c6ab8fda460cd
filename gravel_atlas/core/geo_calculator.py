"""Geodesic calculations on Earth's surface.

Provides the distance metric shared by the elevation profile, grade windows
and segment assembly:
- Distance calculation (Haversine formula)
- Cumulative distance along an ordered coordinate sequence

All calculations use WGS84 spherical Earth approximation (R = 6,371 km).
"""

from math import atan2, cos, radians, sin, sqrt
from typing import Sequence

# Earth's radius in meters (WGS84 spherical approximation)
EARTH_RADIUS_M = 6_371_000


class GeoCalculator:
    """Static methods for geodesic calculations on Earth's surface.

    All methods use WGS84 spherical Earth model (R = 6,371 km).
    Coordinates are in decimal degrees (WGS84).
    Distances are in meters.
    """

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate great-circle distance between two points using Haversine formula.

        Args:
            lat1: Latitude of first point (decimal degrees)
            lon1: Longitude of first point (decimal degrees)
            lat2: Latitude of second point (decimal degrees)
            lon2: Longitude of second point (decimal degrees)

        Returns:
            Distance in meters.
        """
        dlat = radians(lat2 - lat1)
        dlon = radians(lon2 - lon1)
        a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
        # Clamp guards against a > 1 from floating point on antipodal points
        a = min(1.0, a)
        return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))

    @staticmethod
    def cumulative_distances_m(lon_lats: Sequence[tuple[float, float]]) -> list[float]:
        """Cumulative distance from the first coordinate to each coordinate.

        Args:
            lon_lats: Ordered (lon, lat) pairs

        Returns:
            List of the same length, starting at 0.0 and non-decreasing.
        """
        if not lon_lats:
            return []
        result = [0.0]
        for (lon1, lat1), (lon2, lat2) in zip(lon_lats, lon_lats[1:]):
            result.append(
                result[-1] + GeoCalculator.haversine_distance_m(lat1=lat1, lon1=lon1, lat2=lat2, lon2=lon2)
            )
        return result
