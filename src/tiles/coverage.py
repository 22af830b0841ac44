"""Tile grid planning: which tiles cover a bounding box at a zoom level."""

from __future__ import annotations

import logging

from domain.errors import OversizedGridError
from domain.models import BoundingBox, TileGrid
from geo.projection import lonlat_to_tile
from shared.constants import MAX_GRID_TILES_X, MAX_GRID_TILES_Y, TILE_SIZE

logger = logging.getLogger(__name__)


def plan_tile_grid(
    bbox: BoundingBox,
    zoom: int,
    *,
    max_tiles_x: int = MAX_GRID_TILES_X,
    max_tiles_y: int = MAX_GRID_TILES_Y,
    tile_size: int = TILE_SIZE,
) -> TileGrid:
    """
    Вычисляет сетку тайлов, покрывающую bbox.

    Верхний левый тайл берётся по северо-западному углу (max_lat, min_lon),
    нижний правый по юго-восточному (min_lat, max_lon): ось Y тайлов
    направлена на юг, поэтому большей широте соответствует меньший Y.

    Raises:
        OversizedGridError: сетка превышает max_tiles_x x max_tiles_y.

    """
    top_left = lonlat_to_tile(bbox.min_lon, bbox.max_lat, zoom, tile_size)
    bottom_right = lonlat_to_tile(bbox.max_lon, bbox.min_lat, zoom, tile_size)

    tiles_x = bottom_right.x - top_left.x + 1
    tiles_y = bottom_right.y - top_left.y + 1
    if tiles_x > max_tiles_x or tiles_y > max_tiles_y:
        raise OversizedGridError(tiles_x, tiles_y, max_tiles_x, max_tiles_y)

    grid = TileGrid(top_left=top_left, bottom_right=bottom_right, tile_size=tile_size)
    logger.info(
        'Tile grid z=%d: top_left=(%d, %d) bottom_right=(%d, %d) tiles=%dx%d canvas=%dx%d px',
        zoom,
        top_left.x,
        top_left.y,
        bottom_right.x,
        bottom_right.y,
        grid.tiles_x,
        grid.tiles_y,
        grid.width_px,
        grid.height_px,
    )
    return grid
