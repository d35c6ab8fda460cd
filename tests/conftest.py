"""Shared pytest fixtures for gravel_atlas tests.

Fake collaborators and synthetic terrain helpers are defined in fakes.py.
"""

import pytest

from gravel_atlas.core.elevation_sampler import ElevationSampler
from gravel_atlas.model.geo_point import GeoPoint

from fakes import FakeRenderer, FakeTileSource


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def flat_source() -> FakeTileSource:
    """Every tile is flat at 100 m."""
    return FakeTileSource(elevation_for=lambda tile: 100.0)


@pytest.fixture
def sampler(flat_source: FakeTileSource) -> ElevationSampler:
    return ElevationSampler(tile_source=flat_source)


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def equator_points() -> list[GeoPoint]:
    """Four points heading east along the equator, ~111 m apart, one tile."""
    return [GeoPoint(lon=0.001 * i, lat=0.0) for i in range(4)]
