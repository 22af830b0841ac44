"""
Sectioned TOML layout for MapSettings.

Profiles group fields under ``[map]``, ``[render]``, ``[http]`` and
``[output]`` with shorter key names; MapSettings itself stays flat.
Fields without a section are written to ``[common]``. On load, unknown
sections and top-level keys are passed through unchanged so that old flat
profiles keep working.
"""

from __future__ import annotations

from typing import Any

# (секция, ((поле MapSettings, ключ в TOML), ...))
SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        'map',
        (
            ('zoom', 'zoom'),
            ('crop_image', 'crop'),
            ('max_tiles_x', 'max_tiles_x'),
            ('max_tiles_y', 'max_tiles_y'),
        ),
    ),
    (
        'render',
        (
            ('route_color', 'route_color'),
            ('route_width_px', 'route_width_px'),
            ('marker_style', 'marker_style'),
        ),
    ),
    (
        'http',
        (
            ('download_concurrency', 'concurrency'),
            ('tile_url_template', 'tile_url'),
            ('user_agent', 'user_agent'),
            ('http_cache_enabled', 'cache'),
        ),
    ),
    ('output', (('output_dir', 'dir'),)),
)

COMMON_SECTION = 'common'

_FIELD_LOCATION: dict[str, tuple[str, str]] = {
    field: (section, key) for section, pairs in SECTIONS for field, key in pairs
}
_SECTION_KEYS: dict[str, dict[str, str]] = {
    section: {key: field for field, key in pairs} for section, pairs in SECTIONS
}


def flat_to_sectioned(flat: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Group a flat settings dump into TOML sections."""
    sectioned: dict[str, dict[str, Any]] = {}
    for field, value in flat.items():
        section, key = _FIELD_LOCATION.get(field, (COMMON_SECTION, field))
        sectioned.setdefault(section, {})[key] = value
    return sectioned


def sectioned_to_flat(data: dict[str, Any]) -> dict[str, Any]:
    """Flatten a parsed TOML document back to MapSettings field names."""
    flat: dict[str, Any] = {}
    for name, value in data.items():
        if not isinstance(value, dict):
            flat[name] = value
            continue
        keys = _SECTION_KEYS.get(name, {})
        flat.update({keys.get(k, k): v for k, v in value.items()})
    return flat
