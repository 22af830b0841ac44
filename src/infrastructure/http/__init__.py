"""HTTP client infrastructure."""
from infrastructure.http.client import (
    make_http_session,
    mask_api_key,
    resolve_cache_dir,
)
from infrastructure.http.openroute import OpenRouteServiceClient

__all__ = [
    'OpenRouteServiceClient',
    'make_http_session',
    'mask_api_key',
    'resolve_cache_dir',
]
