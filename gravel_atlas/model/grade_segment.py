"""GradeSegment - A run of profile points sharing one grade color bucket."""

from dataclasses import dataclass
from enum import IntEnum

from gravel_atlas.constants import GradeConfig, StyleConfig
from gravel_atlas.model.elevation import ElevationProfilePoint


class GradeBucket(IntEnum):
    """Discrete color bucket for |grade|, flattest (0) to steepest (6)."""

    BUCKET_0 = 0
    BUCKET_1 = 1
    BUCKET_2 = 2
    BUCKET_3 = 3
    BUCKET_4 = 4
    BUCKET_5 = 5
    BUCKET_6 = 6

    @property
    def color(self) -> str:
        """Hex color used for map lines and chart traces."""
        return StyleConfig.GRADE_COLORS[self.value]

    @property
    def color_rgba(self) -> tuple[int, int, int, int]:
        return StyleConfig.GRADE_COLORS_RGBA[self.value]

    @property
    def label(self) -> str:
        """Human-readable range, e.g. '4-6%' or '14%+'."""
        bounds = GradeConfig.BUCKET_UPPER_BOUNDS_PCT
        if self.value == 0:
            return f"<{bounds[0]:g}%"
        if self.value == len(bounds):
            return f"{bounds[-1]:g}%+"
        return f"{bounds[self.value - 1]:g}-{bounds[self.value]:g}%"


@dataclass(frozen=True)
class GradeSegment:
    """Maximal contiguous run of profile points in the same bucket.

    Attributes:
        start_index: Index of the first point in the full profile
        points: The contiguous profile points of this run
        grade_pct: Grade of the run's first point (runs can mix grades
            that fall in the same bucket)
        bucket: Color bucket shared by every point of the run
    """

    start_index: int
    points: tuple[ElevationProfilePoint, ...]
    grade_pct: float
    bucket: GradeBucket

    @property
    def end_index(self) -> int:
        """Index of the last point in the full profile (inclusive)."""
        return self.start_index + len(self.points) - 1

    @property
    def color(self) -> str:
        return self.bucket.color

    def __repr__(self) -> str:
        return (
            f"GradeSegment([{self.start_index}..{self.end_index}], {self.grade_pct:.1f}%, "
            f"bucket={self.bucket.value})"
        )
