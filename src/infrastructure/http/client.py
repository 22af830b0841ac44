from __future__ import annotations

import contextlib
import os
import sqlite3
import ssl
from datetime import timedelta
from pathlib import Path

import aiohttp
import certifi
from aiohttp_client_cache import CachedSession, SQLiteBackend

from shared.constants import (
    API_KEY_VISIBLE_PREFIX_LEN,
    DEFAULT_USER_AGENT,
    HTTP_CACHE_DIR,
    HTTP_CACHE_EXPIRE_HOURS,
)


def resolve_cache_dir() -> Path:
    raw_dir = Path(HTTP_CACHE_DIR)
    if raw_dir.is_absolute():
        return raw_dir

    xdg = os.getenv('XDG_CACHE_HOME')
    if xdg:
        return (Path(xdg) / 'route-map' / 'tiles').resolve()
    return (Path.home() / '.cache' / 'route-map' / 'tiles').resolve()


def mask_api_key(api_key: str) -> str:
    """Ключ для логов: первые символы и звёздочки."""
    if len(api_key) <= API_KEY_VISIBLE_PREFIX_LEN:
        return '*' * len(api_key)
    return api_key[:API_KEY_VISIBLE_PREFIX_LEN] + '*' * (
        len(api_key) - API_KEY_VISIBLE_PREFIX_LEN
    )


def make_http_session(
    cache_dir: Path | None = None,
    *,
    user_agent: str = DEFAULT_USER_AGENT,
) -> aiohttp.ClientSession:
    """
    Создаёт HTTP-сессию с SSL-контекстом certifi.

    Если передан cache_dir, ответы кэшируются в SQLite (aiohttp-client-cache):
    повторная генерация той же карты не скачивает тайлы заново.
    """
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)
    headers = {'User-Agent': user_agent}

    if cache_dir is not None:
        cache_dir.mkdir(parents=True, exist_ok=True)
        cache_path = cache_dir / 'http_cache.sqlite'
        with contextlib.suppress(sqlite3.Error):
            if not cache_path.exists():
                with sqlite3.connect(cache_path) as _conn:
                    _conn.execute('PRAGMA journal_mode=WAL;')
        expire_td = timedelta(hours=max(0, int(HTTP_CACHE_EXPIRE_HOURS)))
        backend = SQLiteBackend(
            str(cache_path), expire_after=expire_td, cache_control=True
        )
        return CachedSession(
            cache=backend,
            connector=connector,
            headers=headers,
        )
    return aiohttp.ClientSession(connector=connector, headers=headers)
