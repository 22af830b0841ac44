from __future__ import annotations

import asyncio
import logging
from http import HTTPStatus
from io import BytesIO
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import aiohttp
from PIL import Image

from shared.constants import (
    DEFAULT_USER_AGENT,
    HTTP_5XX_MAX,
    HTTP_5XX_MIN,
    HTTP_BACKOFF_FACTOR,
    HTTP_RETRIES_DEFAULT,
    HTTP_TIMEOUT_DEFAULT,
    OSM_TILE_URL_TEMPLATE,
)

if TYPE_CHECKING:
    from domain.models import TileIndex

logger = logging.getLogger(__name__)


class TileHTTPError(RuntimeError):
    """Non-retryable HTTP status from the tile server."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.status = status


@runtime_checkable
class TileSource(Protocol):
    """Supplies the raster of one tile; retries and timeouts are its own concern."""

    async def fetch_tile(self, tile: TileIndex, zoom: int) -> Image.Image: ...


class OsmTileSource:
    """
    Загрузчик XYZ-тайлов по шаблону URL (по умолчанию tile.openstreetmap.org).

    - 401/403/404: ошибка без повторов;
    - 429/5xx и сетевые ошибки: повторы с экспоненциальной задержкой.
    """

    def __init__(
        self,
        client: aiohttp.ClientSession,
        *,
        url_template: str = OSM_TILE_URL_TEMPLATE,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = HTTP_TIMEOUT_DEFAULT,
        retries: int = HTTP_RETRIES_DEFAULT,
        backoff: float = HTTP_BACKOFF_FACTOR,
    ) -> None:
        self.client = client
        self.url_template = url_template
        self.user_agent = user_agent
        self.timeout = timeout
        self.retries = max(1, retries)
        self.backoff = backoff

    def tile_url(self, tile: TileIndex, zoom: int) -> str:
        return self.url_template.format(z=zoom, x=tile.x, y=tile.y)

    async def fetch_tile(self, tile: TileIndex, zoom: int) -> Image.Image:
        url = self.tile_url(tile, zoom)
        headers = {'User-Agent': self.user_agent}

        last_exc: Exception | None = None
        for attempt in range(self.retries):
            try:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                async with self.client.get(url, headers=headers, timeout=timeout) as resp:
                    sc = resp.status
                    if sc == HTTPStatus.OK:
                        data = await resp.read()
                        if not data:
                            msg = f'Empty tile body z/x/y={zoom}/{tile.x}/{tile.y}'
                            raise RuntimeError(msg)
                        # Контент может быть png/jpg/webp, PIL откроет всё
                        return Image.open(BytesIO(data)).convert('RGBA')
                    if sc in (
                        HTTPStatus.UNAUTHORIZED,
                        HTTPStatus.FORBIDDEN,
                        HTTPStatus.NOT_FOUND,
                    ):
                        msg = f'HTTP {sc} for tile z/x/y={zoom}/{tile.x}/{tile.y} url={url}'
                        raise TileHTTPError(msg, sc)
                    is_rate_or_5xx = (sc == HTTPStatus.TOO_MANY_REQUESTS) or (
                        HTTP_5XX_MIN <= sc < HTTP_5XX_MAX
                    )
                    if is_rate_or_5xx:
                        last_exc = RuntimeError(
                            f'HTTP {sc} while loading tile z/x/y={zoom}/{tile.x}/{tile.y}'
                        )
                    else:
                        last_exc = RuntimeError(
                            f'Unexpected HTTP {sc} for tile z/x/y={zoom}/{tile.x}/{tile.y}'
                        )
            except (aiohttp.ClientError, TimeoutError) as e:
                last_exc = e
            logger.warning(
                'Tile z/x/y=%d/%d/%d attempt %d/%d failed: %s',
                zoom,
                tile.x,
                tile.y,
                attempt + 1,
                self.retries,
                last_exc,
            )
            if attempt + 1 < self.retries:
                await asyncio.sleep(self.backoff**attempt)
        msg = f'Failed to load tile z/x/y={zoom}/{tile.x}/{tile.y}: {last_exc}'
        raise RuntimeError(msg)
