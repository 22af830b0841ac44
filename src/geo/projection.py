"""
Web Mercator projection between WGS84, slippy-tile indices and world pixels.

World pixel space spans ``tile_size * 2**zoom`` pixels per axis with the
origin at the north-west corner of the world. Tile indices are always derived
from world pixels, so ``lonlat_to_tile == floor(lonlat_to_pixel / tile_size)``
holds for every accepted input.
"""

from __future__ import annotations

import math

from domain.errors import ProjectionOutOfRangeError
from domain.models import GeoCoordinate, TileIndex
from shared.constants import (
    MAX_ZOOM,
    MERCATOR_MAX_LAT_DEG,
    TILE_SIZE,
    WORLD_LAT_MAX_DEG,
    WORLD_LNG_HALF_SPAN_DEG,
    WORLD_LNG_SPAN_DEG,
)


def _check_zoom(lon: float, lat: float, zoom: int) -> None:
    if isinstance(zoom, bool) or not isinstance(zoom, int):
        msg = 'Zoom level must be an integer'
        raise ProjectionOutOfRangeError(msg, lon=lon, lat=lat, zoom=zoom)
    if not (0 <= zoom <= MAX_ZOOM):
        msg = f'Zoom level outside supported range 0..{MAX_ZOOM}'
        raise ProjectionOutOfRangeError(msg, lon=lon, lat=lat, zoom=zoom)


def _check_lonlat(lon: float, lat: float, zoom: int) -> None:
    if not (math.isfinite(lon) and math.isfinite(lat)):
        msg = 'Coordinate is not finite'
        raise ProjectionOutOfRangeError(msg, lon=lon, lat=lat, zoom=zoom)
    if abs(lon) > WORLD_LNG_HALF_SPAN_DEG:
        msg = 'Longitude outside [-180, 180]'
        raise ProjectionOutOfRangeError(msg, lon=lon, lat=lat, zoom=zoom)
    if abs(lat) > WORLD_LAT_MAX_DEG:
        msg = 'Latitude outside [-90, 90]'
        raise ProjectionOutOfRangeError(msg, lon=lon, lat=lat, zoom=zoom)


def world_size_px(zoom: int, tile_size: int = TILE_SIZE) -> int:
    """Размер «мира» в пикселях на заданном зуме."""
    return tile_size * (2**zoom)


def lonlat_to_pixel(
    lon: float,
    lat: float,
    zoom: int,
    tile_size: int = TILE_SIZE,
) -> tuple[float, float]:
    """
    Преобразует WGS84 (lon, lat) в «мировые» пиксели Web Mercator.

    Широты за пределами ±85.0511° прижимаются к границе проекции,
    иначе у полюсов получаются бесконечности.
    """
    _check_zoom(lon, lat, zoom)
    _check_lonlat(lon, lat, zoom)

    lat_c = min(max(lat, -MERCATOR_MAX_LAT_DEG), MERCATOR_MAX_LAT_DEG)
    world = world_size_px(zoom, tile_size)
    lat_rad = math.radians(lat_c)

    x = (lon + WORLD_LNG_HALF_SPAN_DEG) / WORLD_LNG_SPAN_DEG * world
    merc = math.log(math.tan(math.pi / 4 + lat_rad / 2))
    y = (1.0 - merc / math.pi) / 2.0 * world

    # Восточная и южная граница мира прижимаются внутрь последнего тайла,
    # иначе floor(px / tile_size) даёт несуществующий индекс 2**zoom
    edge = math.nextafter(float(world), 0.0)
    x = min(max(x, 0.0), edge)
    y = min(max(y, 0.0), edge)
    return x, y


def lonlat_to_tile(
    lon: float,
    lat: float,
    zoom: int,
    tile_size: int = TILE_SIZE,
) -> TileIndex:
    """
    Возвращает индекс тайла, содержащего точку.

    Восточная (lon=180) и южная граница мира попадают в последний
    столбец/строку, так как пиксели на границе прижаты внутрь мира.
    """
    px, py = lonlat_to_pixel(lon, lat, zoom, tile_size)
    return TileIndex(math.floor(px / tile_size), math.floor(py / tile_size))


def coord_to_pixel(
    coord: GeoCoordinate,
    zoom: int,
    tile_size: int = TILE_SIZE,
) -> tuple[float, float]:
    return lonlat_to_pixel(coord.lon, coord.lat, zoom, tile_size)


def coord_to_tile(
    coord: GeoCoordinate,
    zoom: int,
    tile_size: int = TILE_SIZE,
) -> TileIndex:
    return lonlat_to_tile(coord.lon, coord.lat, zoom, tile_size)


def pixel_to_lonlat(
    x: float,
    y: float,
    zoom: int,
    tile_size: int = TILE_SIZE,
) -> GeoCoordinate:
    """Обратное преобразование: «мировые» пиксели -> WGS84."""
    _check_zoom(x, y, zoom)
    world = world_size_px(zoom, tile_size)
    if not (0.0 <= x <= world and 0.0 <= y <= world):
        msg = 'Pixel outside world bounds'
        raise ProjectionOutOfRangeError(msg, lon=x, lat=y, zoom=zoom)
    lon = x / world * WORLD_LNG_SPAN_DEG - WORLD_LNG_HALF_SPAN_DEG
    merc = math.pi * (1.0 - 2.0 * y / world)
    lat = math.degrees(math.atan(math.sinh(merc)))
    return GeoCoordinate(lon=lon, lat=lat)


def tile_to_lonlat(
    tile: TileIndex,
    zoom: int,
    tile_size: int = TILE_SIZE,
) -> GeoCoordinate:
    """Северо-западный угол тайла."""
    return pixel_to_lonlat(tile.x * tile_size, tile.y * tile_size, zoom, tile_size)
