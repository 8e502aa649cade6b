# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Watermarker
Stamps the configured watermark text onto a finished (already cropped)
card. The default position is centred along the bottom edge; the
watermarkPosition setting moves it to any of nine anchor points.
Contrast follows the image-panel colour: dark text on white panels,
light text otherwise.
"""

from __future__ import annotations

from PIL import Image, ImageDraw

from app.models.asset import WatermarkConfig, WatermarkPosition
from app.modules.rendering.surface import FontBook
from app.utils.color_utils import is_light_background

# Text sits 8 logical units (24 px at 3x) in from the nearest edge
WATERMARK_EDGE_OFFSET_PX = 24
MIN_FONT_SIZE = 12

LIGHT_PANEL_FILL = (0, 0, 0, 64)         # rgba(0,0,0,0.25)
DARK_PANEL_FILL = (255, 255, 255, 102)   # rgba(255,255,255,0.4)

# Pillow text anchors: horizontal l/m/r, vertical t/m/b
_ANCHORS: dict[WatermarkPosition, str] = {
    WatermarkPosition.TOP_LEFT: "lt",
    WatermarkPosition.TOP_CENTER: "mt",
    WatermarkPosition.TOP_RIGHT: "rt",
    WatermarkPosition.MIDDLE_LEFT: "lm",
    WatermarkPosition.MIDDLE_CENTER: "mm",
    WatermarkPosition.MIDDLE_RIGHT: "rm",
    WatermarkPosition.BOTTOM_LEFT: "lb",
    WatermarkPosition.BOTTOM_CENTER: "mb",
    WatermarkPosition.BOTTOM_RIGHT: "rb",
}


def watermark_font_size(canvas_width: int) -> float:
    return max(MIN_FONT_SIZE, canvas_width / 40)


def watermark_anchor(
    size: tuple[int, int], position: WatermarkPosition
) -> tuple[tuple[float, float], str]:
    """Return ((x, y), pillow_anchor) for a position on a canvas of this size."""
    width, height = size
    anchor = _ANCHORS[position]
    x = {
        "l": WATERMARK_EDGE_OFFSET_PX,
        "m": width / 2,
        "r": width - WATERMARK_EDGE_OFFSET_PX,
    }[anchor[0]]
    y = {
        "t": WATERMARK_EDGE_OFFSET_PX,
        "m": height / 2,
        "b": height - WATERMARK_EDGE_OFFSET_PX,
    }[anchor[1]]
    return (x, y), anchor


def watermark_band(canvas: Image.Image, fonts: FontBook, config: WatermarkConfig) -> tuple[int, int]:
    """(top, bottom) pixel rows the watermark may touch on this canvas."""
    font = fonts.get(watermark_font_size(canvas.width))
    xy, anchor = watermark_anchor(canvas.size, config.position)
    _, top, _, bottom = ImageDraw.Draw(canvas).textbbox(xy, config.text, font=font, anchor=anchor)
    # One pixel of slack either side for anti-aliasing
    return max(0, top - 1), min(canvas.height, bottom + 2)


def apply_watermark(
    canvas: Image.Image,
    config: WatermarkConfig,
    panel_background: str,
    fonts: FontBook,
) -> Image.Image:
    """Return the canvas with the watermark applied; unchanged when disabled."""
    if not config.enabled or not config.text.strip():
        return canvas

    fill = LIGHT_PANEL_FILL if is_light_background(panel_background) else DARK_PANEL_FILL
    font = fonts.get(watermark_font_size(canvas.width))
    xy, anchor = watermark_anchor(canvas.size, config.position)

    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    ImageDraw.Draw(overlay).text(xy, config.text, font=font, fill=fill, anchor=anchor)
    base = canvas if canvas.mode == "RGBA" else canvas.convert("RGBA")
    return Image.alpha_composite(base, overlay)
