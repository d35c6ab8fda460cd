"""Error taxonomy for the drawing and elevation pipeline.

Only PersistenceError and InsufficientPointsError are expected to surface to
the user; the others are contained at the operation that raised them.
"""


class GravelAtlasError(Exception):
    """Base class for all Gravel Atlas errors."""


class ElevationSampleError(GravelAtlasError):
    """Sampling one point failed (network, HTTP status, decode or range).

    Recovered by the sampler, which substitutes the fallback elevation.
    """


class InsufficientPointsError(GravelAtlasError):
    """A segment needs at least two points."""

    def __init__(self, point_count: int, required: int = 2) -> None:
        self.point_count = point_count
        self.required = required
        super().__init__(f"Segment needs at least {required} points, got {point_count}")


class PersistenceError(GravelAtlasError):
    """Saving or loading segments failed. Never retried automatically."""

    def __init__(self, message: str, status_code: int | None = None, details: str | None = None) -> None:
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def __str__(self) -> str:
        text = super().__str__()
        if self.status_code is not None:
            text = f"{text} (HTTP {self.status_code})"
        if self.details:
            text = f"{text}: {self.details}"
        return text


class SnapUnavailableError(GravelAtlasError):
    """Road snapping produced no candidate; the raw point is used instead."""


class GeoJSONValidationError(GravelAtlasError, ValueError):
    """Malformed GeoJSON rejected at the persistence boundary."""
