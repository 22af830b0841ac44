from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from domain.errors import TileFetchError
from shared.constants import DOWNLOAD_CONCURRENCY, TILE_SIZE

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable

    from PIL import Image

    from domain.models import TileIndex
    from shared.progress import ConsoleProgress
    from tiles.source import TileSource

logger = logging.getLogger(__name__)


def validate_tile_raster(
    img: Image.Image | None,
    tile: TileIndex,
    zoom: int,
    tile_size: int = TILE_SIZE,
) -> Image.Image:
    """Reject rasters that break the tile_size x tile_size contract."""
    if img is None:
        msg = 'Tile source returned no image'
        raise TileFetchError(msg, tile=tile, zoom=zoom)
    if img.size != (tile_size, tile_size):
        msg = f'Tile raster is {img.size[0]}x{img.size[1]}, expected {tile_size}x{tile_size}'
        raise TileFetchError(msg, tile=tile, zoom=zoom)
    if img.mode != 'RGBA':
        img = img.convert('RGBA')
    return img


class TileFetcher:
    """
    Загружает тайлы параллельно с ограничением через семафор.

    Результаты отдаются в порядке завершения загрузок. Первая же ошибка
    отменяет все оставшиеся загрузки и пробрасывается как TileFetchError.
    """

    def __init__(
        self,
        source: TileSource,
        *,
        zoom: int,
        concurrency: int = DOWNLOAD_CONCURRENCY,
        tile_size: int = TILE_SIZE,
        progress: ConsoleProgress | None = None,
    ) -> None:
        self.source = source
        self.zoom = zoom
        self.tile_size = tile_size
        self.progress = progress
        self._sem = asyncio.Semaphore(max(1, concurrency))

    async def fetch_one(self, tile: TileIndex) -> tuple[TileIndex, Image.Image]:
        async with self._sem:
            try:
                img = await self.source.fetch_tile(tile, self.zoom)
            except TileFetchError:
                raise
            except Exception as e:
                msg = f'Tile fetch failed: {e}'
                raise TileFetchError(msg, tile=tile, zoom=self.zoom) from e
        img = validate_tile_raster(img, tile, self.zoom, self.tile_size)
        if self.progress is not None:
            await self.progress.step(1)
        return tile, img

    async def stream(
        self,
        tiles: Iterable[TileIndex],
    ) -> AsyncIterator[tuple[TileIndex, Image.Image]]:
        """Yield (tile, image) pairs as fetches complete."""
        tasks = [asyncio.create_task(self.fetch_one(t)) for t in tiles]
        try:
            for fut in asyncio.as_completed(tasks):
                yield await fut
        finally:
            pending = [t for t in tasks if not t.done()]
            for t in pending:
                t.cancel()
            if pending:
                logger.info('Cancelling %d in-flight tile fetches', len(pending))
            # Забираем результаты всех задач, чтобы не было "exception never retrieved"
            await asyncio.gather(*tasks, return_exceptions=True)
