"""
Route map generation pipeline.

generate_map_image: bbox -> tile grid -> concurrent tile fetch composited by a
single coroutine -> route -> markers -> crop. RouteMapService wraps it with
geocoding, directions and PNG persistence.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from domain.models import BoundingBox, MapSettings, MarkerPlacement
from imaging.composer import MapCanvas
from imaging.crop import compute_crop_rect, crop_canvas
from infrastructure.http.client import make_http_session, mask_api_key, resolve_cache_dir
from infrastructure.http.openroute import OpenRouteServiceClient
from shared.progress import ConsoleProgress
from tiles.coverage import plan_tile_grid
from tiles.fetcher import TileFetcher
from tiles.source import OsmTileSource

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from PIL import Image

    from domain.models import GeoCoordinate
    from tiles.source import TileSource

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r'[^\w\-. ,]+')


async def composite_tiles(
    canvas: MapCanvas,
    source: TileSource,
    *,
    concurrency: int,
) -> None:
    """
    Загружает все тайлы сетки и вставляет их в холст.

    Загрузки идут параллельно, но в холст пишет только эта корутина,
    в порядке завершения загрузок. Ошибка любой загрузки отменяет остальные.
    """
    progress = ConsoleProgress(total=len(canvas.grid), label='Tiles')
    fetcher = TileFetcher(
        source,
        zoom=canvas.zoom,
        concurrency=concurrency,
        tile_size=canvas.grid.tile_size,
        progress=progress,
    )
    async with contextlib.aclosing(fetcher.stream(canvas.grid)) as tiles:
        async for tile, img in tiles:
            canvas.place_tile(tile, img)

    if not canvas.is_complete:
        missing = canvas.missing_tiles()
        msg = f'{len(missing)} tiles missing after fetch phase'
        raise RuntimeError(msg)


async def generate_map_image(
    start: GeoCoordinate,
    end: GeoCoordinate,
    waypoints: Sequence[GeoCoordinate],
    zoom: int,
    markers: Iterable[MarkerPlacement],
    tile_source: TileSource,
    *,
    options: MapSettings | None = None,
) -> Image.Image:
    """
    Собирает растр карты маршрута между start и end.

    Args:
        start: Начальная точка
        end: Конечная точка
        waypoints: Точки маршрута в порядке следования
        zoom: Уровень приближения
        markers: Маркеры (координата + стиль)
        tile_source: Источник тайлов
        options: Параметры отрисовки; zoom из них не используется

    Returns:
        RGBA-изображение, обрезанное по bbox (если options.crop_image)

    Raises:
        RouteMapError: любая ошибка прерывает весь запрос

    """
    options = options or MapSettings()
    bbox = BoundingBox.from_endpoints(start, end)
    grid = plan_tile_grid(
        bbox,
        zoom,
        max_tiles_x=options.max_tiles_x,
        max_tiles_y=options.max_tiles_y,
    )
    # Вырожденный bbox отклоняем до загрузки тайлов
    if options.crop_image:
        compute_crop_rect(bbox, grid, zoom)

    canvas = MapCanvas(grid, zoom)
    await composite_tiles(canvas, tile_source, concurrency=options.download_concurrency)

    canvas.draw_route(
        waypoints,
        color=options.route_color,
        width_px=options.route_width_px,
    )
    placed = canvas.draw_markers(markers)
    logger.info('Markers drawn: %d', placed)

    if not options.crop_image:
        return canvas.image.copy()
    result = crop_canvas(canvas, bbox)
    logger.info('Map image ready: %dx%d px', result.width, result.height)
    return result


def generate_map_image_sync(
    start: GeoCoordinate,
    end: GeoCoordinate,
    waypoints: Sequence[GeoCoordinate],
    zoom: int,
    markers: Iterable[MarkerPlacement],
    tile_source: TileSource,
    *,
    options: MapSettings | None = None,
) -> Image.Image:
    """Синхронная обёртка для вызова вне event loop."""
    return asyncio.run(
        generate_map_image(
            start,
            end,
            waypoints,
            zoom,
            markers,
            tile_source,
            options=options,
        )
    )


def safe_filename(name: str) -> str:
    cleaned = _UNSAFE_FILENAME_CHARS.sub('_', name).strip(' .')
    return cleaned or 'map'


class RouteMapService:
    """Карта маршрута между двумя адресами, сохранённая в PNG."""

    def __init__(
        self,
        api_key: str,
        settings: MapSettings | None = None,
    ) -> None:
        self.api_key = api_key
        self.settings = settings or MapSettings()

    async def render(self, address_start: str, address_end: str) -> Image.Image:
        s = self.settings
        cache_dir = resolve_cache_dir() if s.http_cache_enabled else None
        logger.info(
            'Rendering route map: zoom=%d, key=%s, cache=%s',
            s.zoom,
            mask_api_key(self.api_key),
            cache_dir,
        )
        async with make_http_session(cache_dir, user_agent=s.user_agent) as session:
            ors = OpenRouteServiceClient(session, self.api_key)
            start, end = await asyncio.gather(
                ors.geocode(address_start),
                ors.geocode(address_end),
            )
            waypoints = await ors.fetch_route(start, end)
            source = OsmTileSource(
                session,
                url_template=s.tile_url_template,
                user_agent=s.user_agent,
            )
            markers = [
                MarkerPlacement(start, s.marker_style),
                MarkerPlacement(end, s.marker_style),
            ]
            return await generate_map_image(
                start,
                end,
                waypoints,
                s.zoom,
                markers,
                source,
                options=s,
            )

    async def get_map(self, address_start: str, address_end: str) -> Path:
        """Генерирует карту и сохраняет её; возвращает путь к PNG."""
        image = await self.render(address_start, address_end)
        return self.save_image(image, f'{address_start}-{address_end}')

    def save_image(self, image: Image.Image, name: str) -> Path:
        out_dir = Path(self.settings.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / f'{safe_filename(name)}.png'
        logger.info('Saving image to: %s', path)
        image.save(path, format='PNG')
        return path
