"""
Marker icons for start/end points.

Icons are drawn with Pillow for the closed set of MarkerStyle values. Each icon
has an anchor: the pixel that lands exactly on the projected coordinate. Pins
anchor at the bottom tip, round markers at their centre. The anchor pixel is
always fully opaque.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from PIL import Image, ImageDraw

from shared.constants import MARKER_OUTLINE, MARKER_RED, MarkerStyle

_STYLE_SIZE_PX: dict[MarkerStyle, int] = {
    MarkerStyle.PIN_RED_16PX: 16,
    MarkerStyle.PIN_RED_32PX: 32,
    MarkerStyle.MARKER_RED_16PX: 16,
    MarkerStyle.MARKER_RED_32PX: 32,
}

_PIN_STYLES = frozenset({MarkerStyle.PIN_RED_16PX, MarkerStyle.PIN_RED_32PX})


@dataclass(frozen=True)
class MarkerIcon:
    image: Image.Image
    anchor: tuple[int, int]

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def anchor_color(self) -> tuple[int, int, int, int]:
        return self.image.getpixel(self.anchor)  # type: ignore[return-value]


def _draw_pin(size: int) -> MarkerIcon:
    img = Image.new('RGBA', (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    cx = size // 2
    head_d = max(6, round(size * 0.6))
    head_r = head_d // 2
    head_top = 0
    head_box = (cx - head_r, head_top, cx - head_r + head_d - 1, head_top + head_d - 1)

    # Конус от головки к острию
    draw.polygon(
        [(cx - head_r + 1, head_r), (cx + head_r - 1, head_r), (cx, size - 1)],
        fill=MARKER_RED,
    )
    draw.ellipse(head_box, fill=MARKER_RED, outline=MARKER_OUTLINE)
    dot_r = max(1, head_d // 6)
    draw.ellipse(
        (cx - dot_r, head_r - dot_r, cx + dot_r, head_r + dot_r),
        fill=(255, 255, 255, 255),
    )
    # Стержень до острия: гарантирует непрозрачный пиксель привязки
    stem_half = max(1, size // 16)
    draw.rectangle(
        (cx - stem_half, head_top + head_d, cx + stem_half, size - 1),
        fill=MARKER_OUTLINE,
    )
    return MarkerIcon(image=img, anchor=(cx, size - 1))


def _draw_round(size: int) -> MarkerIcon:
    img = Image.new('RGBA', (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.ellipse((0, 0, size - 1, size - 1), fill=MARKER_RED, outline=MARKER_OUTLINE)
    c = size // 2
    dot_r = max(1, size // 8)
    draw.ellipse((c - dot_r, c - dot_r, c + dot_r, c + dot_r), fill=MARKER_OUTLINE)
    return MarkerIcon(image=img, anchor=(c, c))


@lru_cache(maxsize=len(MarkerStyle))
def get_marker_icon(style: MarkerStyle) -> MarkerIcon:
    """Returns the (cached, read-only) icon for a marker style."""
    style = MarkerStyle(style)
    size = _STYLE_SIZE_PX[style]
    if style in _PIN_STYLES:
        return _draw_pin(size)
    return _draw_round(size)
