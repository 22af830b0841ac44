"""Crop the stitched canvas to the exact pixel rectangle of a bounding box."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from domain.errors import InvalidGeometryError
from geo.projection import lonlat_to_pixel

if TYPE_CHECKING:
    from PIL import Image

    from domain.models import BoundingBox, TileGrid
    from imaging.composer import MapCanvas

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CropRect:
    left: int
    top: int
    width: int
    height: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        """(left, upper, right, lower) для Image.crop."""
        return self.left, self.top, self.left + self.width, self.top + self.height


def compute_crop_rect(bbox: BoundingBox, grid: TileGrid, zoom: int) -> CropRect:
    """
    Пиксельный прямоугольник bbox в координатах холста.

    Углы: северо-запад (max_lat, min_lon) и юго-восток (min_lat, max_lon).
    Ширина и высота: разность мировых пикселей углов, отброшенная до целого.

    Raises:
        InvalidGeometryError: ширина или высота <= 0, либо прямоугольник
            выходит за пределы холста.

    """
    tl_x, tl_y = lonlat_to_pixel(bbox.min_lon, bbox.max_lat, zoom, grid.tile_size)
    br_x, br_y = lonlat_to_pixel(bbox.max_lon, bbox.min_lat, zoom, grid.tile_size)
    ox, oy = grid.origin_px

    width = int(br_x - tl_x)
    height = int(br_y - tl_y)
    if width <= 0 or height <= 0:
        msg = f'Invalid dimensions for the cropped image: {width}x{height} at zoom {zoom}'
        raise InvalidGeometryError(msg, width=width, height=height)

    rect = CropRect(
        left=math.floor(tl_x - ox),
        top=math.floor(tl_y - oy),
        width=width,
        height=height,
    )
    right, lower = rect.box[2], rect.box[3]
    if rect.left < 0 or rect.top < 0 or right > grid.width_px or lower > grid.height_px:
        msg = (
            f'Crop rect {rect.box} exceeds canvas {grid.width_px}x{grid.height_px}'
        )
        raise InvalidGeometryError(msg, width=width, height=height)
    return rect


def crop_canvas(canvas: MapCanvas, bbox: BoundingBox) -> Image.Image:
    """
    Возвращает новое изображение с пикселями bbox; холст не изменяется.

    Прямоугольник вычисляется полностью до чтения каких-либо пикселей.
    """
    rect = compute_crop_rect(bbox, canvas.grid, canvas.zoom)
    logger.info(
        'Crop rect: left=%d top=%d width=%d height=%d',
        rect.left,
        rect.top,
        rect.width,
        rect.height,
    )
    return canvas.image.crop(rect.box)
