"""Pytest configuration and fixtures for route-map tests."""

import asyncio
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from domain.models import GeoCoordinate, TileIndex  # noqa: E402
from shared.constants import TILE_SIZE  # noqa: E402

TILE_COLOR = (10, 200, 30, 255)


class SolidTileSource:
    """Deterministic tile source: every tile is one solid colour."""

    def __init__(self, color=TILE_COLOR, size=TILE_SIZE, fail_on=None, delay=0.0):
        self.color = color
        self.size = size
        self.fail_on = set(fail_on or ())
        self.delay = delay
        self.calls: list[tuple[TileIndex, int]] = []
        self.cancelled: list[TileIndex] = []

    async def fetch_tile(self, tile, zoom):
        self.calls.append((tile, zoom))
        if tile in self.fail_on:
            msg = f'boom at {tile}'
            raise ConnectionError(msg)
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.cancelled.append(tile)
                raise
        return Image.new('RGBA', (self.size, self.size), self.color)


@pytest.fixture
def vienna():
    """Vienna city centre."""
    return GeoCoordinate(lon=16.3738, lat=48.2082)


@pytest.fixture
def vienna_east():
    """Point north-east of Vienna centre used as route end."""
    return GeoCoordinate(lon=16.4, lat=48.22)


@pytest.fixture
def tile_source():
    return SolidTileSource()
