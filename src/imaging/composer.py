"""Canvas compositing: tiles, then the route polyline, then markers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw

from domain.errors import TileFetchError
from geo.projection import coord_to_pixel
from imaging.markers import get_marker_icon
from shared.constants import (
    CANVAS_BACKGROUND,
    MIN_POINTS_FOR_LINE,
    ROUTE_COLOR,
    ROUTE_WIDTH_PX,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from domain.models import GeoCoordinate, MarkerPlacement, TileGrid, TileIndex
    from imaging.markers import MarkerIcon

logger = logging.getLogger(__name__)


class MapCanvas:
    """
    Сшитый растр одной карты, принадлежащий одному запросу.

    Все координаты отсчитываются от верхнего левого угла верхнего левого
    тайла сетки. Маршрут и маркеры можно рисовать только после того, как
    размещены все тайлы сетки.
    """

    def __init__(
        self,
        grid: TileGrid,
        zoom: int,
        *,
        background: tuple[int, int, int, int] = CANVAS_BACKGROUND,
    ) -> None:
        self.grid = grid
        self.zoom = zoom
        self.image = Image.new('RGBA', (grid.width_px, grid.height_px), background)
        self._placed: set[TileIndex] = set()

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def is_complete(self) -> bool:
        return len(self._placed) == len(self.grid)

    def missing_tiles(self) -> list[TileIndex]:
        return [t for t in self.grid if t not in self._placed]

    def to_canvas_px(self, coord: GeoCoordinate) -> tuple[float, float]:
        """Мировые пиксели точки за вычетом пиксельного начала холста."""
        wx, wy = coord_to_pixel(coord, self.zoom, self.grid.tile_size)
        ox, oy = self.grid.origin_px
        return wx - ox, wy - oy

    def is_within_bounds(self, x: float, y: float) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def place_tile(self, tile: TileIndex, raster: Image.Image) -> None:
        """Вставляет растр тайла на его место; повторная вставка перезаписывает."""
        if tile not in self.grid:
            msg = f'Tile ({tile.x}, {tile.y}) is outside the planned grid'
            raise ValueError(msg)
        size = self.grid.tile_size
        if raster.size != (size, size):
            msg = f'Tile raster is {raster.size[0]}x{raster.size[1]}, expected {size}x{size}'
            raise TileFetchError(msg, tile=tile, zoom=self.zoom)
        if raster.mode != 'RGBA':
            raster = raster.convert('RGBA')
        self.image.paste(raster, self.grid.tile_offset_px(tile))
        self._placed.add(tile)

    def _require_complete(self) -> None:
        if not self.is_complete:
            missing = self.missing_tiles()
            msg = (
                f'Cannot draw overlays: {len(missing)} of {len(self.grid)} tiles '
                f'not placed (first missing: {missing[0]})'
            )
            raise RuntimeError(msg)

    def draw_route(
        self,
        waypoints: Sequence[GeoCoordinate],
        *,
        color: tuple[int, int, int, int] = ROUTE_COLOR,
        width_px: int = ROUTE_WIDTH_PX,
    ) -> int:
        """
        Рисует маршрут отрезками между соседними точками.

        Отрезок рисуется, только если оба его конца лежат внутри холста;
        иначе он пропускается целиком.

        Returns:
            Количество нарисованных отрезков.

        """
        self._require_complete()
        if len(waypoints) < MIN_POINTS_FOR_LINE:
            return 0

        draw = ImageDraw.Draw(self.image)
        points = [self.to_canvas_px(wp) for wp in waypoints]
        drawn = 0
        for p1, p2 in zip(points, points[1:]):
            if self.is_within_bounds(*p1) and self.is_within_bounds(*p2):
                draw.line([p1, p2], fill=color, width=width_px)
                drawn += 1
            else:
                logger.debug('Route segment %s -> %s outside canvas, skipped', p1, p2)
        skipped = len(points) - 1 - drawn
        if skipped:
            logger.info('Route: %d segments drawn, %d skipped', drawn, skipped)
        return drawn

    def draw_marker(self, coord: GeoCoordinate, icon: MarkerIcon) -> bool:
        """Рисует иконку так, чтобы её точка привязки совпала с координатой."""
        self._require_complete()
        x, y = self.to_canvas_px(coord)
        if not self.is_within_bounds(x, y):
            logger.debug('Marker at (%.2f, %.2f) outside canvas, skipped', x, y)
            return False
        ax, ay = icon.anchor
        dest = (int(x) - ax, int(y) - ay)
        # paste с маской обрезает части иконки за краем холста
        self.image.paste(icon.image, dest, icon.image)
        return True

    def draw_markers(self, markers: Iterable[MarkerPlacement]) -> int:
        return sum(
            1 for m in markers if self.draw_marker(m.coord, get_marker_icon(m.style))
        )
