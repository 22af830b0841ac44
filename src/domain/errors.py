"""Error hierarchy for map generation.

Every error aborts the whole request: a caller that receives one of these
has no usable raster.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.models import TileIndex


class RouteMapError(Exception):
    """Base class for all map generation errors."""


class InvalidGeometryError(RouteMapError):
    """Crop rectangle or bounding box has no area."""

    def __init__(
        self,
        message: str,
        *,
        width: int | None = None,
        height: int | None = None,
    ) -> None:
        super().__init__(message)
        self.width = width
        self.height = height


class TileFetchError(RouteMapError):
    """A tile could not be fetched or violated the raster contract."""

    def __init__(self, message: str, *, tile: TileIndex, zoom: int) -> None:
        super().__init__(f'{message} (tile x={tile.x} y={tile.y} z={zoom})')
        self.tile = tile
        self.zoom = zoom


class OversizedGridError(RouteMapError):
    """Planned tile grid exceeds the configured maximum."""

    def __init__(
        self,
        tiles_x: int,
        tiles_y: int,
        max_tiles_x: int,
        max_tiles_y: int,
    ) -> None:
        super().__init__(
            f'Tile grid {tiles_x}x{tiles_y} exceeds the limit '
            f'{max_tiles_x}x{max_tiles_y}; lower the zoom level'
        )
        self.tiles_x = tiles_x
        self.tiles_y = tiles_y
        self.max_tiles_x = max_tiles_x
        self.max_tiles_y = max_tiles_y


class ProjectionOutOfRangeError(RouteMapError):
    """Coordinate or zoom level cannot be projected."""

    def __init__(self, message: str, *, lon: float, lat: float, zoom: int) -> None:
        super().__init__(f'{message} (lon={lon}, lat={lat}, zoom={zoom})')
        self.lon = lon
        self.lat = lat
        self.zoom = zoom


class GeocodingError(RouteMapError):
    """Address could not be resolved to a coordinate."""


class DirectionsError(RouteMapError):
    """Route between two coordinates could not be obtained."""
