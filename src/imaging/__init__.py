"""Imaging package - canvas compositing, markers and cropping."""

from imaging.composer import MapCanvas
from imaging.crop import CropRect, compute_crop_rect, crop_canvas
from imaging.markers import MarkerIcon, get_marker_icon

__all__ = [
    'CropRect',
    'MapCanvas',
    'MarkerIcon',
    'compute_crop_rect',
    'crop_canvas',
    'get_marker_icon',
]
