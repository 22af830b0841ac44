"""Tile planning and fetching.

This module provides:
- plan_tile_grid: tile grid covering a bounding box
- TileSource / OsmTileSource: raster tile providers
- TileFetcher: bounded-concurrency fetcher that fails the whole batch on error
"""

from tiles.coverage import plan_tile_grid
from tiles.fetcher import TileFetcher, validate_tile_raster
from tiles.source import OsmTileSource, TileHTTPError, TileSource

__all__ = [
    'OsmTileSource',
    'TileFetcher',
    'TileHTTPError',
    'TileSource',
    'plan_tile_grid',
    'validate_tile_raster',
]
