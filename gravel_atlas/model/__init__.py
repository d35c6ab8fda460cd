"""Data model for drawn segments.

- GeoPoint: Coordinate atom (lon, lat)
- ElevationSample / ElevationProfilePoint: Sampled elevations and the profile
- ProfileStats: Gain, loss, min, max of a profile
- GradeBucket / GradeSegment: Grade color buckets and bucket runs
- RoadStats: Highway/surface breakdown of snapped legs
- LineStringGeometry / LineStringFeature: Validated GeoJSON
- FinishedSegment: Payload of a finished drawing
- Message: User-facing status and toast messages
- errors: Error taxonomy
"""

from gravel_atlas.model.elevation import (
    ElevationProfilePoint,
    ElevationSample,
    ProfileStats,
    build_profile,
    elevation_changes,
    nearest_profile_point,
)
from gravel_atlas.model.errors import (
    ElevationSampleError,
    GeoJSONValidationError,
    GravelAtlasError,
    InsufficientPointsError,
    PersistenceError,
    SnapUnavailableError,
)
from gravel_atlas.model.finished_segment import FinishedSegment, assemble_segment
from gravel_atlas.model.geo_point import GeoPoint
from gravel_atlas.model.geojson import LineStringFeature, LineStringGeometry
from gravel_atlas.model.grade_segment import GradeBucket, GradeSegment
from gravel_atlas.model.message import Message, MessageLevel, ToastMessage
from gravel_atlas.model.road_stats import RoadStats

__all__ = [
    "GeoPoint",
    "ElevationSample",
    "ElevationProfilePoint",
    "ProfileStats",
    "build_profile",
    "elevation_changes",
    "nearest_profile_point",
    "GradeBucket",
    "GradeSegment",
    "RoadStats",
    "LineStringGeometry",
    "LineStringFeature",
    "FinishedSegment",
    "assemble_segment",
    "Message",
    "MessageLevel",
    "ToastMessage",
    "GravelAtlasError",
    "ElevationSampleError",
    "InsufficientPointsError",
    "PersistenceError",
    "SnapUnavailableError",
    "GeoJSONValidationError",
]
