"""Services package - route map generation."""

from services.map_service import (
    RouteMapService,
    composite_tiles,
    generate_map_image,
    generate_map_image_sync,
)

__all__ = [
    'RouteMapService',
    'composite_tiles',
    'generate_map_image',
    'generate_map_image_sync',
]
