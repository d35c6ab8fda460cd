"""Elevation sampling from terrain-RGB raster tiles.

For each point: compute the tile address and pixel offset, fetch the tile
from a TileSource, decode the pixel and round to whole meters.

Sampling is best-effort. A failure for one point (network error, HTTP
status, undecodable image, out-of-range value) yields the fallback elevation
for that point only and never fails the batch. Results keep input order
regardless of which fetch completes first.

Tiles are cached per sampler because neighbouring clicks at zoom 14 usually
fall on the same tile; concurrent requests for one tile share a single fetch.
"""

import asyncio
import logging
import os
import warnings
from typing import Optional, Protocol, Sequence

import numpy as np
import requests
from rasterio.errors import NotGeoreferencedWarning, RasterioError
from rasterio.io import MemoryFile

from gravel_atlas.constants import ElevationConfig, TileConfig
from gravel_atlas.core.tile_math import TileAddress, decode_elevation, point_to_pixel, point_to_tile
from gravel_atlas.model.elevation import ElevationSample
from gravel_atlas.model.errors import ElevationSampleError
from gravel_atlas.model.geo_point import GeoPoint

logger = logging.getLogger(__name__)


class TileSource(Protocol):
    """Anything that can deliver a decoded terrain tile.

    fetch_tile returns a uint8 array of shape (bands, height, width) with at
    least 3 bands (R, G, B) and raises ElevationSampleError on failure.
    """

    async def fetch_tile(self, tile: TileAddress) -> np.ndarray: ...


def decode_tile_image(content: bytes) -> np.ndarray:
    """Decode encoded raster bytes (PNG) into a (bands, height, width) array.

    Raises:
        ElevationSampleError: If the bytes are not a readable raster.
    """
    try:
        with warnings.catch_warnings():
            # Map tiles carry no georeferencing; position comes from the tile address
            warnings.simplefilter("ignore", NotGeoreferencedWarning)
            with MemoryFile(content) as memfile, memfile.open() as dataset:
                return dataset.read()
    except (RasterioError, OSError, ValueError) as exc:
        raise ElevationSampleError(f"Could not decode tile image ({len(content)} bytes): {exc}") from exc


def _retrieve_exception(future: "asyncio.Future[np.ndarray]") -> None:
    # A shared fetch may fail after every waiter was cancelled
    if not future.cancelled():
        future.exception()


class HttpTileSource:
    """Fetches terrain-RGB tiles over HTTP.

    The blocking requests call runs in a worker thread so the event loop
    stays free for further clicks.

    Example:
        source = HttpTileSource()  # token from $MAPBOX_ACCESS_TOKEN
        sampler = ElevationSampler(tile_source=source)
    """

    def __init__(
        self,
        url_template: str = TileConfig.URL_TEMPLATE,
        access_token: Optional[str] = None,
        timeout_s: float = TileConfig.REQUEST_TIMEOUT_S,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url_template = url_template
        self.access_token = access_token if access_token is not None else os.environ.get(TileConfig.ACCESS_TOKEN_ENV, "")
        self.timeout_s = timeout_s
        self._session = session or requests.Session()
        if "{token}" in url_template and not self.access_token:
            logger.warning(f"No tile access token set (${TileConfig.ACCESS_TOKEN_ENV}); tile requests will fail")

    def tile_url(self, tile: TileAddress) -> str:
        return self.url_template.format(z=tile.zoom, x=tile.x, y=tile.y, token=self.access_token)

    def fetch_tile_bytes(self, tile: TileAddress) -> bytes:
        """Download the encoded tile image.

        Raises:
            ElevationSampleError: On transport errors or non-success status.
        """
        try:
            response = self._session.get(self.tile_url(tile=tile), timeout=self.timeout_s)
        except requests.RequestException as exc:
            raise ElevationSampleError(f"Tile {tile} request failed: {exc}") from exc
        if not response.ok:
            raise ElevationSampleError(f"Tile {tile} returned HTTP {response.status_code}")
        return response.content

    async def fetch_tile(self, tile: TileAddress) -> np.ndarray:
        content = await asyncio.to_thread(self.fetch_tile_bytes, tile)
        return decode_tile_image(content=content)

    def close(self) -> None:
        self._session.close()


class ElevationSampler:
    """Concurrent, order-preserving, failure-isolating elevation sampler.

    Example:
        sampler = ElevationSampler(tile_source=HttpTileSource())
        samples = await sampler.sample_elevations(points=[a, b, c])
    """

    def __init__(
        self,
        tile_source: TileSource,
        zoom: int = TileConfig.ZOOM,
        cache_tiles: bool = True,
        max_concurrent_requests: int = TileConfig.MAX_CONCURRENT_REQUESTS,
    ) -> None:
        self.tile_source = tile_source
        self.zoom = zoom
        self.cache_tiles = cache_tiles
        self.max_concurrent_requests = max_concurrent_requests
        self._tile_cache: dict[TileAddress, np.ndarray] = {}
        self._in_flight: dict[TileAddress, asyncio.Future] = {}
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._semaphore_loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def cached_tile_count(self) -> int:
        return len(self._tile_cache)

    def clear_cache(self) -> None:
        self._tile_cache.clear()

    async def sample_elevations(self, points: Sequence[GeoPoint]) -> list[ElevationSample]:
        """Sample elevations for an ordered sequence of points.

        Returns:
            One ElevationSample per input point, index-aligned with the input.
        """
        if not points:
            return []
        samples = await asyncio.gather(*(self._sample_point(point=p) for p in points))
        logger.debug(f"[SAMPLE] Sampled {len(samples)} points")
        return list(samples)

    async def sample_elevation(self, point: GeoPoint) -> ElevationSample:
        """Sample a single point (same failure policy as the batch)."""
        return await self._sample_point(point=point)

    async def _sample_point(self, point: GeoPoint) -> ElevationSample:
        try:
            elevation = await self._elevation_at(point=point)
        except ElevationSampleError as exc:
            logger.warning(f"[SAMPLE] {point!r} failed, using {ElevationConfig.FALLBACK_ELEVATION_M}m: {exc}")
            return ElevationSample(point=point, elevation_m=ElevationConfig.FALLBACK_ELEVATION_M)
        except Exception as exc:
            logger.warning(
                f"[SAMPLE] {point!r} failed unexpectedly, using {ElevationConfig.FALLBACK_ELEVATION_M}m: {exc!r}"
            )
            return ElevationSample(point=point, elevation_m=ElevationConfig.FALLBACK_ELEVATION_M)
        return ElevationSample(point=point, elevation_m=int(round(elevation)))

    async def _elevation_at(self, point: GeoPoint) -> float:
        """Decode the elevation under a point.

        Raises:
            ElevationSampleError: For any fetch, decode or range failure.
        """
        tile = point_to_tile(lon=point.lon, lat=point.lat, zoom=self.zoom)
        data = await self._get_tile(tile=tile)

        if data.ndim != 3 or data.shape[0] < 3 or data.shape[1] != data.shape[2]:
            raise ElevationSampleError(f"Tile {tile} has unexpected shape {data.shape}")
        tile_size = data.shape[2]
        pixel = point_to_pixel(lon=point.lon, lat=point.lat, zoom=self.zoom, tile_size=tile_size)
        r, g, b = (int(data[band, pixel.y, pixel.x]) for band in range(3))
        elevation = decode_elevation(r=r, g=g, b=b)

        if not ElevationConfig.MIN_VALID_M <= elevation <= ElevationConfig.MAX_VALID_M:
            raise ElevationSampleError(f"Decoded elevation {elevation:.1f}m out of range at {point!r}")
        return elevation

    async def _get_tile(self, tile: TileAddress) -> np.ndarray:
        cached = self._tile_cache.get(tile)
        if cached is not None:
            return cached

        future = self._in_flight.get(tile)
        if future is None:
            future = asyncio.ensure_future(self._load_tile(tile=tile))
            self._in_flight[tile] = future
            future.add_done_callback(lambda _f, key=tile: self._in_flight.pop(key, None))
            future.add_done_callback(_retrieve_exception)
        # Shield so one cancelled waiter does not cancel the shared fetch
        return await asyncio.shield(future)

    async def _load_tile(self, tile: TileAddress) -> np.ndarray:
        async with self._get_semaphore():
            logger.debug(f"[SAMPLE] Fetching tile {tile}")
            data = await self.tile_source.fetch_tile(tile)
        if self.cache_tiles:
            self._tile_cache[tile] = data
        return data

    def _get_semaphore(self) -> asyncio.Semaphore:
        """Semaphore bound to the running loop (recreated if the loop changed)."""
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.max_concurrent_requests)
            self._semaphore_loop = loop
        return self._semaphore
