"""Domain layer - business models, errors and profiles."""
from domain.errors import (
    DirectionsError,
    GeocodingError,
    InvalidGeometryError,
    OversizedGridError,
    ProjectionOutOfRangeError,
    RouteMapError,
    TileFetchError,
)
from domain.models import (
    BoundingBox,
    GeoCoordinate,
    MapSettings,
    MarkerPlacement,
    TileGrid,
    TileIndex,
)

__all__ = [
    'BoundingBox',
    'DirectionsError',
    'GeoCoordinate',
    'GeocodingError',
    'InvalidGeometryError',
    'MapSettings',
    'MarkerPlacement',
    'OversizedGridError',
    'ProjectionOutOfRangeError',
    'RouteMapError',
    'TileFetchError',
    'TileGrid',
    'TileIndex',
]
