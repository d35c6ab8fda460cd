"""Web-Mercator tile math and terrain-RGB decoding.

Pure functions used by the elevation sampler:
- point_to_tile: slippy-map tile address containing a point
- point_to_pixel: pixel offset of the point inside that tile
- decode_elevation: terrain-RGB pixel to meters

Latitude must stay strictly inside (-90, 90); the Mercator transform is
undefined at the poles. Callers validate ranges (GeoPoint does).
"""

from dataclasses import dataclass
from math import asinh, floor, pi, radians, tan

from gravel_atlas.constants import ElevationConfig, TileConfig


@dataclass(frozen=True)
class TileAddress:
    """Slippy-map tile address (z/x/y)."""

    zoom: int
    x: int
    y: int

    def __str__(self) -> str:
        return f"{self.zoom}/{self.x}/{self.y}"


@dataclass(frozen=True)
class PixelOffset:
    """Pixel offset inside a tile, both axes in [0, tile_size)."""

    x: int
    y: int


def _mercator_fraction(lon: float, lat: float) -> tuple[float, float]:
    """Normalized world position in [0, 1] (y grows southward)."""
    frac_x = (lon + 180.0) / 360.0
    frac_y = (1.0 - asinh(tan(radians(lat))) / pi) / 2.0
    return frac_x, frac_y


def point_to_tile(lon: float, lat: float, zoom: int = TileConfig.ZOOM) -> TileAddress:
    """Tile address containing a point.

    Args:
        lon: Longitude in decimal degrees, [-180, 180]
        lat: Latitude in decimal degrees, (-90, 90)
        zoom: Tile pyramid level

    Returns:
        TileAddress at the given zoom.
    """
    frac_x, frac_y = _mercator_fraction(lon=lon, lat=lat)
    n = 2**zoom
    return TileAddress(zoom=zoom, x=floor(frac_x * n), y=floor(frac_y * n))


def point_to_pixel(
    lon: float,
    lat: float,
    zoom: int = TileConfig.ZOOM,
    tile_size: int = TileConfig.TILE_SIZE_PX,
) -> PixelOffset:
    """Pixel offset of a point inside its tile.

    The projection is applied at world-pixel scale and reduced modulo the
    tile size, so both coordinates always land in [0, tile_size).
    """
    frac_x, frac_y = _mercator_fraction(lon=lon, lat=lat)
    world_size = (2**zoom) * tile_size
    return PixelOffset(
        x=floor(frac_x * world_size) % tile_size,
        y=floor(frac_y * world_size) % tile_size,
    )


def decode_elevation(r: int, g: int, b: int) -> float:
    """Decode a terrain-RGB pixel to elevation in meters.

    elevation = -10000 + (r * 65536 + g * 256 + b) * 0.1

    Args:
        r, g, b: 8-bit channel values in [0, 255]

    Returns:
        Elevation in meters.
    """
    return ElevationConfig.BASE_OFFSET_M + (int(r) * 65536 + int(g) * 256 + int(b)) * ElevationConfig.SCALE_M
