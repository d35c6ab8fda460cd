"""Configuration constants for Gravel Atlas.

All configurable parameters are centralized here for easy tuning.

Classes:
    TileConfig: Terrain tile pyramid and tile service parameters
    ElevationConfig: Terrain-RGB decoding and plausibility range
    GradeConfig: Grade window and color bucket thresholds
    StyleConfig: Map line and chart colors
    SnapConfig: Road snapping distance and surface vocabularies
    PersistenceConfig: Segment storage API
    DrawConfig: Draw mode behaviour
    ChartConfig: Profile chart dimensions
    MapConfig: Map view for the rendered drawing
"""


class TileConfig:
    """Terrain tile pyramid and tile service parameters."""

    # Zoom 14 gives ~10 m/pixel at mid latitudes
    ZOOM = 14
    TILE_SIZE_PX = 256

    # Mapbox terrain-RGB tiles (lossless PNG, 3 channels)
    URL_TEMPLATE = "https://api.mapbox.com/v4/mapbox.terrain-rgb/{z}/{x}/{y}.pngraw?access_token={token}"
    ACCESS_TOKEN_ENV = "MAPBOX_ACCESS_TOKEN"

    REQUEST_TIMEOUT_S = 10
    MAX_CONCURRENT_REQUESTS = 8


class ElevationConfig:
    """Terrain-RGB decoding: elevation = BASE_OFFSET_M + (r*65536 + g*256 + b) * SCALE_M."""

    BASE_OFFSET_M = -10000.0
    SCALE_M = 0.1

    # Decoded values outside this range are treated as failed samples
    MIN_VALID_M = -11000.0  # Deeper than the Challenger Deep
    MAX_VALID_M = 9000.0  # Higher than Everest

    # Best-effort contract: a failed sample reads as sea level
    FALLBACK_ELEVATION_M = 0


class GradeConfig:
    """Grade (slope) window and color bucket thresholds."""

    # Minimum horizontal run of one grade window
    WINDOW_KM = 0.1
    DECIMALS = 1

    # Upper bounds (exclusive) of |grade| for buckets 0..5; bucket 6 is unbounded
    BUCKET_UPPER_BOUNDS_PCT = (2.0, 4.0, 6.0, 8.0, 10.0, 14.0)
    BUCKET_COUNT = len(BUCKET_UPPER_BOUNDS_PCT) + 1


assert list(GradeConfig.BUCKET_UPPER_BOUNDS_PCT) == sorted(
    GradeConfig.BUCKET_UPPER_BOUNDS_PCT
), "Grade bucket bounds must be ascending"


class StyleConfig:
    """Visual colors and styling."""

    # Grade bucket colors (Tailwind CSS palette), flattest to steepest
    GRADE_COLORS = (
        "#10B981",  # emerald-500
        "#84CC16",  # lime-500
        "#EAB308",  # yellow-500
        "#F97316",  # orange-500
        "#EF4444",  # red-500
        "#991B1B",  # red-800
        "#581C87",  # purple-900
    )
    assert len(GRADE_COLORS) == GradeConfig.BUCKET_COUNT

    GRADE_COLORS_RGBA = tuple(
        (int(c[1:3], 16), int(c[3:5], 16), int(c[5:7], 16), 230) for c in GRADE_COLORS
    )

    # In-progress drawing line
    DRAWING_LINE_COLOR = "#FF0000"
    DRAWING_LINE_COLOR_RGBA = (255, 0, 0, 255)
    DRAWING_LINE_WIDTH_PX = 3
    GRADE_LINE_WIDTH_PX = 5

    PROFILE_LINE_COLOR = "#6366F1"  # indigo-500, used while grades are unknown


class SnapConfig:
    """Road snapping parameters."""

    # Clicks farther than this from every known road are not snapped
    MAX_SNAP_DISTANCE_M = 50.0

    # OSM surface=* values grouped for the paved/unpaved breakdown
    PAVED_SURFACES = frozenset({"paved", "asphalt", "concrete", "paving_stones", "sett", "chipseal"})
    UNPAVED_SURFACES = frozenset(
        {"unpaved", "gravel", "fine_gravel", "compacted", "dirt", "earth", "ground", "grass", "sand", "pebblestone"}
    )
    assert not PAVED_SURFACES & UNPAVED_SURFACES

    UNKNOWN = "unknown"


class PersistenceConfig:
    """Segment storage API."""

    BASE_URL = "http://localhost:3000"
    SAVE_PATH = "/api/segments/save"
    LIST_PATH = "/api/segments"
    REQUEST_TIMEOUT_S = 15
    AUTH_TOKEN_ENV = "GRAVEL_ATLAS_API_TOKEN"

    DEFAULT_PAGE_LIMIT = 10


class DrawConfig:
    """Draw mode behaviour."""

    MIN_POINTS_TO_FINISH = 2
    LAYER_ID_PREFIX = "drawing"
    GRADE_LAYER_ID_PREFIX = "drawing-grade"

    # Snap-to-road is a session-independent toggle, on by default
    SNAP_TO_ROAD_DEFAULT = True


class ChartConfig:
    """Profile chart rendering dimensions."""

    PROFILE_WIDTH = 300
    PROFILE_HEIGHT = 150

    # Y-axis padding below min / above max elevation
    ELEVATION_PADDING_M = 10


class MapConfig:
    """Map view for the rendered drawing."""

    # Fallback view when nothing is drawn yet (central Europe)
    START_CENTER_LAT = 47.5
    START_CENTER_LON = 11.0
    DEFAULT_ZOOM = 13
    MAP_STYLE = "road"
