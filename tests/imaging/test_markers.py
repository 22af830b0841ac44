"""Tests for imaging.markers module."""

import pytest

from imaging.markers import get_marker_icon
from shared.constants import MarkerStyle


@pytest.mark.parametrize(
    ('style', 'size'),
    [
        (MarkerStyle.PIN_RED_16PX, 16),
        (MarkerStyle.PIN_RED_32PX, 32),
        (MarkerStyle.MARKER_RED_16PX, 16),
        (MarkerStyle.MARKER_RED_32PX, 32),
    ],
)
def test_icon_size(style, size):
    """Icon size follows the style name."""
    icon = get_marker_icon(style)
    assert icon.size == (size, size)
    assert icon.image.mode == 'RGBA'


@pytest.mark.parametrize('style', list(MarkerStyle))
def test_anchor_is_opaque(style):
    """Anchor pixel is always fully opaque."""
    icon = get_marker_icon(style)
    assert icon.anchor_color()[3] == 255


def test_pin_anchor_at_tip():
    """Pins anchor at the bottom centre."""
    icon = get_marker_icon(MarkerStyle.PIN_RED_32PX)
    assert icon.anchor == (16, 31)
    assert get_marker_icon(MarkerStyle.PIN_RED_16PX).anchor == (8, 15)


def test_round_marker_anchor_at_centre():
    """Round markers anchor at their centre."""
    assert get_marker_icon(MarkerStyle.MARKER_RED_32PX).anchor == (16, 16)


def test_corners_transparent():
    """Icons do not cover their bounding square corners."""
    for style in MarkerStyle:
        icon = get_marker_icon(style)
        assert icon.image.getpixel((0, 0))[3] == 0


def test_icons_cached():
    """Same style returns the same icon object; names are accepted too."""
    assert get_marker_icon(MarkerStyle.PIN_RED_32PX) is get_marker_icon(MarkerStyle.PIN_RED_32PX)
    assert get_marker_icon('MARKER_RED_16PX').size == (16, 16)
