"""Shared pytest fixtures for gravel_atlas workflow tests.

Provides in-memory collaborators for DrawModeController: a tile source that
can hold fetches until released, a recording line renderer and a one-road
snapper. Kept self-contained: nothing is imported from tests/.

COORDINATE SYSTEM:
    Tests use coordinates near the equator (lat~0) and prime meridian (lon~0)
    where 0.001 degree ≈ 111 m in both directions. Every point used here
    lies on the same zoom-14 tile.
"""

import asyncio
from typing import Optional

import numpy as np
import pytest

from gravel_atlas.constants import ElevationConfig, TileConfig
from gravel_atlas.core.elevation_sampler import ElevationSampler
from gravel_atlas.core.road_snapper import Road, RoadNetworkSnapper
from gravel_atlas.core.tile_math import TileAddress
from gravel_atlas.model.geo_point import GeoPoint
from gravel_atlas.ui.draw_mode import DrawModeController
from gravel_atlas.ui.state_machine import DrawStateMachine


class GatedTileSource:
    """Uniform terrain whose fetches can be held open.

    With gated=False tiles are served immediately. With gated=True every
    fetch waits until release() is called, so a test can undo, clear or
    finish while samples are in flight.
    """

    def __init__(self, elevation_m: float = 250.0, gated: bool = False) -> None:
        self.elevation_m = elevation_m
        self.gated = gated
        self.fetch_count = 0
        self._gate: Optional[asyncio.Event] = None

    def _event(self) -> asyncio.Event:
        if self._gate is None:
            self._gate = asyncio.Event()
        return self._gate

    async def fetch_tile(self, tile: TileAddress) -> np.ndarray:
        self.fetch_count += 1
        if self.gated:
            await self._event().wait()
        value = int(round((self.elevation_m - ElevationConfig.BASE_OFFSET_M) / ElevationConfig.SCALE_M))
        size = TileConfig.TILE_SIZE_PX
        tile_data = np.zeros((3, size, size), dtype=np.uint8)
        tile_data[0, :, :] = value // 65536
        tile_data[1, :, :] = (value // 256) % 256
        tile_data[2, :, :] = value % 256
        return tile_data

    def release(self) -> None:
        self._event().set()


class RecordingRenderer:
    """LineRenderer recording the current lines and every removal."""

    def __init__(self) -> None:
        self.lines: dict[str, list[tuple[float, float]]] = {}
        self.grade_segments: dict[str, Optional[list]] = {}
        self.removed: list[str] = []

    def add_line(self, layer_id: str, coordinates: list[tuple[float, float]]) -> str:
        assert layer_id not in self.lines, f"Line {layer_id} added twice"
        self.lines[layer_id] = list(coordinates)
        self.grade_segments[layer_id] = None
        return layer_id

    def update_line(self, handle: str, coordinates: list[tuple[float, float]], grade_segments: Optional[list] = None) -> None:
        assert handle in self.lines, f"Update of unknown line {handle}"
        self.lines[handle] = list(coordinates)
        self.grade_segments[handle] = list(grade_segments) if grade_segments is not None else None

    def remove_line(self, handle: str) -> None:
        assert handle in self.lines, f"Removal of unknown line {handle}"
        del self.lines[handle]
        self.removed.append(handle)


# Type alias for draw_setup fixture return value
DrawSetup = tuple[DrawModeController, RecordingRenderer, GatedTileSource]


@pytest.fixture
def gated_source() -> GatedTileSource:
    return GatedTileSource(gated=True)


@pytest.fixture
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture
def equator_road() -> Road:
    """Gravel track along the equator from lon 0 to 0.01."""
    return Road(id="w-equator", coordinates=((0.0, 0.0), (0.01, 0.0)), highway="track", surface="gravel")


@pytest.fixture
def draw_setup(renderer: RecordingRenderer) -> DrawSetup:
    """Controller with immediate tiles at 250 m and snapping off."""
    source = GatedTileSource(elevation_m=250.0)
    draw = DrawModeController(sampler=ElevationSampler(tile_source=source), renderer=renderer)
    draw.toggle_snap_to_road(False)
    return draw, renderer, source


@pytest.fixture
def gated_setup(renderer: RecordingRenderer, gated_source: GatedTileSource) -> DrawSetup:
    """Controller whose elevation samples wait for gated_source.release()."""
    draw = DrawModeController(sampler=ElevationSampler(tile_source=gated_source), renderer=renderer)
    draw.toggle_snap_to_road(False)
    return draw, renderer, gated_source


@pytest.fixture
def snapping_setup(renderer: RecordingRenderer, equator_road: Road) -> DrawSetup:
    """Controller snapping onto the equator road."""
    source = GatedTileSource(elevation_m=250.0)
    draw = DrawModeController(
        sampler=ElevationSampler(tile_source=source),
        renderer=renderer,
        snapper=RoadNetworkSnapper(roads=[equator_road]),
    )
    draw.toggle_snap_to_road(True)
    return draw, renderer, source


@pytest.fixture
def sm() -> DrawStateMachine:
    """Bare state machine without renderer."""
    machine, _ = DrawStateMachine.create()
    return machine


@pytest.fixture
def route() -> list[GeoPoint]:
    """Four points heading east along the equator, ~111 m apart."""
    return [GeoPoint(lon=0.001 * i, lat=0.0) for i in range(4)]
