"""GeoJSON structures exchanged with the segment store.

Only the LineString Feature shape is accepted. Anything else (other geometry
types, fewer than two positions, non-numeric or out-of-range positions) is
rejected with GeoJSONValidationError before it reaches or leaves the store.
"""

from dataclasses import dataclass, field
from math import isfinite
from typing import Any, Sequence

from shapely.geometry import LineString

from gravel_atlas.model.errors import GeoJSONValidationError
from gravel_atlas.model.geo_point import GeoPoint


def _parse_position(position: Any, index: int) -> tuple[float, float]:
    if not isinstance(position, (list, tuple)) or len(position) < 2:
        raise GeoJSONValidationError(f"Position {index} must be [lon, lat], got {position!r}")
    try:
        lon, lat = float(position[0]), float(position[1])
    except (TypeError, ValueError) as exc:
        raise GeoJSONValidationError(f"Position {index} is not numeric: {position!r}") from exc
    if not (isfinite(lon) and isfinite(lat)) or not -180 <= lon <= 180 or not -90 < lat < 90:
        raise GeoJSONValidationError(f"Position {index} out of range: {position!r}")
    return lon, lat


@dataclass(frozen=True)
class LineStringGeometry:
    """GeoJSON LineString geometry with at least two positions."""

    coordinates: tuple[tuple[float, float], ...]
    type: str = field(default="LineString", init=False)

    def __post_init__(self) -> None:
        if len(self.coordinates) < 2:
            raise GeoJSONValidationError(f"LineString needs at least 2 positions, got {len(self.coordinates)}")

    @classmethod
    def from_points(cls, points: Sequence[GeoPoint]) -> "LineStringGeometry":
        return cls(coordinates=tuple(p.lon_lat for p in points))

    @classmethod
    def from_dict(cls, data: Any) -> "LineStringGeometry":
        if not isinstance(data, dict):
            raise GeoJSONValidationError(f"Geometry must be an object, got {type(data).__name__}")
        if data.get("type") != "LineString":
            raise GeoJSONValidationError(f"Geometry type must be LineString, got {data.get('type')!r}")
        raw = data.get("coordinates")
        if not isinstance(raw, (list, tuple)):
            raise GeoJSONValidationError("LineString coordinates must be an array")
        return cls(coordinates=tuple(_parse_position(pos, i) for i, pos in enumerate(raw)))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "coordinates": [list(c) for c in self.coordinates]}

    def to_points(self) -> list[GeoPoint]:
        return [GeoPoint.from_lon_lat(c) for c in self.coordinates]

    def to_shapely(self) -> LineString:
        return LineString(self.coordinates)


@dataclass(frozen=True)
class LineStringFeature:
    """GeoJSON Feature wrapping a LineString geometry."""

    geometry: LineStringGeometry
    properties: dict[str, Any] = field(default_factory=dict)
    type: str = field(default="Feature", init=False)

    @classmethod
    def from_points(cls, points: Sequence[GeoPoint], properties: dict[str, Any] | None = None) -> "LineStringFeature":
        return cls(geometry=LineStringGeometry.from_points(points=points), properties=dict(properties or {}))

    @classmethod
    def from_dict(cls, data: Any) -> "LineStringFeature":
        """Parse and validate a Feature dict.

        Raises:
            GeoJSONValidationError: If the structure is not a LineString Feature.
        """
        if not isinstance(data, dict):
            raise GeoJSONValidationError(f"Feature must be an object, got {type(data).__name__}")
        if data.get("type") != "Feature":
            raise GeoJSONValidationError(f"GeoJSON type must be Feature, got {data.get('type')!r}")
        properties = data.get("properties") or {}
        if not isinstance(properties, dict):
            raise GeoJSONValidationError("Feature properties must be an object")
        return cls(geometry=LineStringGeometry.from_dict(data.get("geometry")), properties=dict(properties))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "geometry": self.geometry.to_dict(), "properties": dict(self.properties)}
