"""Core foundation for elevation sampling and route analysis.

- GeoCalculator: Haversine distances
- tile_math: Web-Mercator tile/pixel addressing and terrain-RGB decoding
- ElevationSampler: Concurrent best-effort sampling (import from elevation_sampler)
- GradeAnalyzer: Windowed grades and color buckets (import from grade_analyzer)
- RoadNetworkSnapper: Snap-to-road (import from road_snapper)
- SegmentStore: Segment persistence client (import from segment_store)
"""

from gravel_atlas.core.geo_calculator import GeoCalculator
from gravel_atlas.core.tile_math import (
    PixelOffset,
    TileAddress,
    decode_elevation,
    point_to_pixel,
    point_to_tile,
)

# The remaining core modules depend on gravel_atlas.model, which itself uses
# GeoCalculator. Import them directly, e.g.:
# from gravel_atlas.core.grade_analyzer import GradeAnalyzer

__all__ = [
    # Geo calculator
    "GeoCalculator",
    # Tile math
    "TileAddress",
    "PixelOffset",
    "point_to_tile",
    "point_to_pixel",
    "decode_elevation",
]
