"""Grade derivation for elevation profiles.

Computes windowed grade (rise/run percentage) along a profile and maps
grade magnitude to discrete color buckets for colored line rendering.

Window algorithm:
1. Start a window at index i and extend its end forward until the run
   reaches GradeConfig.WINDOW_KM or the profile ends
2. grade = rise / run * 100, rounded to GradeConfig.DECIMALS
3. Assign the grade to every index in [i, end] not already assigned by an
   earlier window (the shared boundary point keeps the earlier grade)
4. Continue from end
A window with zero run (only possible at the profile end) is skipped and its
points inherit the last computed grade, or 0 if none was computed.
"""

import logging
from typing import Sequence

from gravel_atlas.constants import GradeConfig
from gravel_atlas.model.elevation import ElevationProfilePoint
from gravel_atlas.model.grade_segment import GradeBucket, GradeSegment

logger = logging.getLogger(__name__)


class GradeAnalyzer:
    """Static methods for grade computation and bucketing.

    Example:
        grades = GradeAnalyzer.compute_grades(profile=profile)
        segments = GradeAnalyzer.group_segments(profile=profile, grades=grades)
    """

    @staticmethod
    def compute_grades(
        profile: Sequence[ElevationProfilePoint],
        window_km: float = GradeConfig.WINDOW_KM,
    ) -> list[float]:
        """Compute one grade percentage per profile point.

        Args:
            profile: Profile with non-decreasing distance_km
            window_km: Minimum horizontal run of a window

        Returns:
            List of grades (percent), same length as profile. All zeros for
            profiles with fewer than 2 points.
        """
        n = len(profile)
        grades: list[float | None] = [None] * n
        last_grade: float | None = None

        start = 0
        while start < n - 1:
            end = start + 1
            while end < n - 1 and profile[end].distance_km - profile[start].distance_km < window_km:
                end += 1

            run_m = (profile[end].distance_km - profile[start].distance_km) * 1000
            if run_m > 0:
                rise_m = profile[end].elevation_m - profile[start].elevation_m
                last_grade = round(rise_m / run_m * 100, GradeConfig.DECIMALS)
                for idx in range(start, end + 1):
                    if grades[idx] is None:
                        grades[idx] = last_grade
            start = end

        fill = last_grade if last_grade is not None else 0.0
        return [g if g is not None else fill for g in grades]

    @staticmethod
    def grade_bucket(grade_pct: float) -> GradeBucket:
        """Map a grade to its color bucket by magnitude.

        Buckets partition [0, inf): <2, <4, <6, <8, <10, <14, else.
        """
        magnitude = abs(grade_pct)
        for idx, upper in enumerate(GradeConfig.BUCKET_UPPER_BOUNDS_PCT):
            if magnitude < upper:
                return GradeBucket(idx)
        return GradeBucket(len(GradeConfig.BUCKET_UPPER_BOUNDS_PCT))

    @staticmethod
    def group_segments(
        profile: Sequence[ElevationProfilePoint],
        grades: Sequence[float] | None = None,
    ) -> list[GradeSegment]:
        """Partition a profile into maximal runs sharing one color bucket.

        Args:
            profile: Elevation profile
            grades: Precomputed grades (computed from profile if omitted)

        Returns:
            GradeSegments in profile order; together they cover every point
            exactly once.
        """
        if grades is None:
            grades = GradeAnalyzer.compute_grades(profile=profile)
        if len(grades) != len(profile):
            raise ValueError(f"Got {len(grades)} grades for {len(profile)} profile points")
        if not profile:
            return []

        segments: list[GradeSegment] = []
        run_start = 0
        run_bucket = GradeAnalyzer.grade_bucket(grade_pct=grades[0])
        for idx in range(1, len(profile) + 1):
            bucket = GradeAnalyzer.grade_bucket(grade_pct=grades[idx]) if idx < len(profile) else None
            if bucket != run_bucket:
                segments.append(
                    GradeSegment(
                        start_index=run_start,
                        points=tuple(profile[run_start:idx]),
                        grade_pct=grades[run_start],
                        bucket=run_bucket,
                    )
                )
                if bucket is not None:
                    run_start = idx
                    run_bucket = bucket

        logger.debug(f"Grouped {len(profile)} profile points into {len(segments)} grade segments")
        return segments
