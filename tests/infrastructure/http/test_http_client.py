"""Tests for infrastructure.http.client module."""

from pathlib import Path
from unittest.mock import patch

import aiohttp
import pytest

from infrastructure.http.client import make_http_session, mask_api_key, resolve_cache_dir


class TestResolveCacheDir:
    """Tests for resolve_cache_dir function."""

    def test_returns_path(self):
        """Should return a Path object."""
        assert isinstance(resolve_cache_dir(), Path)

    def test_uses_xdg_cache_home(self, tmp_path, monkeypatch):
        """XDG_CACHE_HOME is honoured."""
        monkeypatch.setenv('XDG_CACHE_HOME', str(tmp_path))
        assert resolve_cache_dir() == (tmp_path / 'route-map' / 'tiles').resolve()

    def test_fallback_to_home(self, monkeypatch):
        """Falls back to ~/.cache without XDG_CACHE_HOME."""
        monkeypatch.delenv('XDG_CACHE_HOME', raising=False)
        result = resolve_cache_dir()
        assert result.parts[-3:] == ('.cache', 'route-map', 'tiles')


class TestMaskApiKey:
    """Tests for mask_api_key function."""

    def test_long_key(self):
        """Only the prefix stays visible."""
        assert mask_api_key('abcdefgh') == 'abcd****'

    def test_short_key(self):
        """Short keys are fully hidden."""
        assert mask_api_key('abc') == '***'


class TestMakeHttpSession:
    """Tests for make_http_session function."""

    @pytest.mark.asyncio
    async def test_plain_session(self):
        """Without cache dir a plain aiohttp session is returned."""
        session = make_http_session(user_agent='ua-test')
        try:
            assert isinstance(session, aiohttp.ClientSession)
            assert session.headers['User-Agent'] == 'ua-test'
        finally:
            await session.close()

    @pytest.mark.asyncio
    async def test_cached_session(self, tmp_path):
        """With cache dir an SQLite-backed cached session is built."""
        cache_dir = tmp_path / 'cache'
        with (
            patch('infrastructure.http.client.SQLiteBackend') as backend_cls,
            patch('infrastructure.http.client.CachedSession') as session_cls,
        ):
            result = make_http_session(cache_dir, user_agent='ua-test')

        assert result is session_cls.return_value
        assert cache_dir.is_dir()
        assert (cache_dir / 'http_cache.sqlite').exists()
        backend_args = backend_cls.call_args
        assert backend_args.args[0] == str(cache_dir / 'http_cache.sqlite')
        assert backend_args.kwargs['cache_control'] is True
        kwargs = session_cls.call_args.kwargs
        assert kwargs['cache'] is backend_cls.return_value
        assert kwargs['headers'] == {'User-Agent': 'ua-test'}
        await kwargs['connector'].close()
