"""openrouteservice client: geocoding and driving directions."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

import aiohttp

from domain.errors import DirectionsError, GeocodingError
from domain.models import GeoCoordinate
from shared.constants import (
    HTTP_TIMEOUT_DEFAULT,
    OPENROUTESERVICE_BASE,
    OPENROUTESERVICE_DIRECTIONS_PATH,
    OPENROUTESERVICE_GEOCODE_PATH,
)

logger = logging.getLogger(__name__)


def _format_lonlat(coord: GeoCoordinate) -> str:
    # repr float даёт точку как разделитель независимо от локали
    return f'{coord.lon!r},{coord.lat!r}'


def parse_geocode_response(payload: dict[str, Any]) -> GeoCoordinate:
    """Первая найденная точка из GeoJSON FeatureCollection."""
    try:
        lon, lat = payload['features'][0]['geometry']['coordinates'][:2]
        return GeoCoordinate(lon=float(lon), lat=float(lat))
    except (KeyError, IndexError, TypeError, ValueError) as e:
        msg = f'Malformed geocoding response: {e!r}'
        raise GeocodingError(msg) from e


def parse_route_waypoints(payload: dict[str, Any]) -> list[GeoCoordinate]:
    """
    Точки маршрута из features[0].geometry.coordinates, в исходном порядке.

    Raises:
        DirectionsError: в ответе нет геометрии маршрута.

    """
    features = payload.get('features')
    if not features:
        msg = "No 'features' in directions response"
        raise DirectionsError(msg)
    geometry = features[0].get('geometry')
    if not geometry:
        msg = "No 'geometry' in the first directions feature"
        raise DirectionsError(msg)
    coordinates = geometry.get('coordinates')
    if coordinates is None:
        msg = "No 'coordinates' in directions geometry"
        raise DirectionsError(msg)
    try:
        return [GeoCoordinate(lon=float(c[0]), lat=float(c[1])) for c in coordinates]
    except (IndexError, TypeError, ValueError) as e:
        msg = f'Malformed route coordinate: {e!r}'
        raise DirectionsError(msg) from e


class OpenRouteServiceClient:
    def __init__(
        self,
        client: aiohttp.ClientSession,
        api_key: str,
        *,
        base_url: str = OPENROUTESERVICE_BASE,
        timeout: float = HTTP_TIMEOUT_DEFAULT,
    ) -> None:
        self.client = client
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    async def _get_json(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        url = f'{self.base_url}{path}'
        query = {'api_key': self.api_key, **params}
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with self.client.get(url, params=query, timeout=timeout) as resp:
            if resp.status != HTTPStatus.OK:
                body = await resp.text()
                msg = f'HTTP {resp.status} from {path}: {body[:200]}'
                raise aiohttp.ClientResponseError(
                    resp.request_info,
                    resp.history,
                    status=resp.status,
                    message=msg,
                )
            return await resp.json(content_type=None)

    async def geocode(self, address: str) -> GeoCoordinate:
        """Преобразует адрес в координату (первый результат поиска)."""
        try:
            payload = await self._get_json(
                OPENROUTESERVICE_GEOCODE_PATH, {'text': address, 'size': '1'}
            )
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            msg = f'Geocoding failed for {address!r}: {e}'
            raise GeocodingError(msg) from e
        coord = parse_geocode_response(payload)
        logger.info('Geocoded %r -> lon=%.6f lat=%.6f', address, coord.lon, coord.lat)
        return coord

    async def fetch_route(
        self,
        start: GeoCoordinate,
        end: GeoCoordinate,
    ) -> list[GeoCoordinate]:
        """Маршрут на автомобиле от start до end как упорядоченный список точек."""
        params = {'start': _format_lonlat(start), 'end': _format_lonlat(end)}
        try:
            payload = await self._get_json(OPENROUTESERVICE_DIRECTIONS_PATH, params)
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            msg = f'Directions request failed: {e}'
            raise DirectionsError(msg) from e
        waypoints = parse_route_waypoints(payload)
        logger.info('Route received: %d waypoints', len(waypoints))
        return waypoints
