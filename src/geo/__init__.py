"""Geo module - Web Mercator projection."""

from .projection import (
    lonlat_to_pixel,
    lonlat_to_tile,
    pixel_to_lonlat,
    tile_to_lonlat,
)

__all__ = [
    'lonlat_to_pixel',
    'lonlat_to_tile',
    'pixel_to_lonlat',
    'tile_to_lonlat',
]
