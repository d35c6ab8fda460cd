"""Print the elevation profile and grade buckets of a GeoJSON route.

Developer utility for checking sampled elevations and grade colors against
the map without drawing the route by hand.

Usage:
    export MAPBOX_ACCESS_TOKEN=...
    python scripts/profile_route.py route.geojson

The file must contain a GeoJSON Feature with a LineString geometry.
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path

from gravel_atlas.core.elevation_sampler import ElevationSampler, HttpTileSource
from gravel_atlas.core.grade_analyzer import GradeAnalyzer
from gravel_atlas.model.elevation import ProfileStats, build_profile
from gravel_atlas.model.geojson import LineStringFeature


async def profile_route(path: Path) -> None:
    """Sample every vertex of the route and print profile, grades and totals."""
    feature = LineStringFeature.from_dict(json.loads(path.read_text(encoding="utf-8")))
    points = feature.geometry.to_points()

    source = HttpTileSource()
    try:
        sampler = ElevationSampler(tile_source=source)
        samples = await sampler.sample_elevations(points=points)
        print(f"Sampled {len(samples)} points from {sampler.cached_tile_count} tiles")
    finally:
        source.close()

    profile = build_profile(points=points, elevations=[s.elevation_m for s in samples])
    grades = GradeAnalyzer.compute_grades(profile=profile)

    print(f"{'km':>8} {'elev m':>8} {'grade %':>8}  bucket")
    for profile_point, grade in zip(profile, grades):
        bucket = GradeAnalyzer.grade_bucket(grade_pct=grade)
        print(f"{profile_point.distance_km:8.3f} {profile_point.elevation_m:8.0f} {grade:8.1f}  {bucket.label}")

    print("\nGrade segments:")
    for segment in GradeAnalyzer.group_segments(profile=profile, grades=grades):
        print(f"  {segment!r} {segment.color}")

    stats = ProfileStats.from_profile(profile)
    if stats is not None:
        print(
            f"\nDistance: {stats.distance_km:.2f} km | Gain: {stats.elevation_gain_m:.0f} m | "
            f"Loss: {stats.elevation_loss_m:.0f} m | Min/Max: {stats.min_elevation_m:.0f}/{stats.max_elevation_m:.0f} m"
        )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("route", type=Path, help="GeoJSON file with a LineString Feature")
    parser.add_argument("--verbose", action="store_true", help="Log tile fetches and sample failures")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    asyncio.run(profile_route(path=args.route))
