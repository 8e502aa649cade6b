# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Rasterizer / Encoder
Draws a CardLayout at 3x supersampling onto a canvas from the render
surface, trims the bottom seam and encodes the result as PNG.

Output width is always CARD_WIDTH * SCALE = 990 px. The 3 px bottom
crop removes the anti-aliased seam left under the last block.
"""

from __future__ import annotations

from PIL import Image, ImageDraw

from app.modules.rendering.layout import (
    BADGE_FONT_SIZE,
    BADGE_INSET,
    BADGE_OPACITY,
    BADGE_PAD_X,
    BADGE_PAD_Y,
    DETAILS_PADDING,
    IMAGE_PADDING,
    NAME_FONT_SIZE,
    NAME_HEIGHT,
    NAME_MARGIN,
    PRICE_FONT_SIZE,
    ROW_FONT_SIZE,
    ROW_GAP,
    ROW_LINE_HEIGHT,
    ROWS_TOP_GAP,
    SUBTITLE_FONT_SIZE,
    SUBTITLE_HEIGHT,
    CardLayout,
    DetailsBlock,
    ImagePanelBlock,
    PriceBarBlock,
)
from app.modules.rendering.surface import SurfaceSession
from app.utils.color_utils import to_rgba
from app.utils.image_utils import bgr_to_png_bytes, pil_to_bgr

SCALE = 3
BOTTOM_CROP_PX = 3


def _px(units: float) -> int:
    return int(round(units * SCALE))


# ─── Block painters ──────────────────────────────────────────────────────────

def _draw_price_bar(
    canvas: Image.Image, session: SurfaceSession, top: int, block: PriceBarBlock
) -> None:
    draw = ImageDraw.Draw(canvas)
    y0, y1 = _px(top), _px(top + block.height)
    draw.rectangle([0, y0, canvas.width, y1], fill=to_rgba(block.background))
    font = session.fonts.get(_px(PRICE_FONT_SIZE), bold=True)
    draw.text(
        (canvas.width // 2, (y0 + y1) // 2),
        block.text,
        font=font,
        fill=to_rgba(block.font_color),
        anchor="mm",
    )


def _draw_badge(
    canvas: Image.Image,
    session: SurfaceSession,
    panel_bottom: int,
    block: ImagePanelBlock,
) -> None:
    badge = block.badge
    if badge is None:
        return
    font = session.fonts.get(_px(BADGE_FONT_SIZE), bold=True)
    overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)

    left, top, right, bottom = draw.textbbox((0, 0), badge.text, font=font)
    pill_w = (right - left) + 2 * _px(BADGE_PAD_X)
    pill_h = (bottom - top) + 2 * _px(BADGE_PAD_Y)
    x1 = canvas.width - _px(BADGE_INSET)
    y1 = panel_bottom - _px(BADGE_INSET)
    x0, y0 = x1 - pill_w, y1 - pill_h

    alpha = int(round(255 * BADGE_OPACITY))
    draw.rounded_rectangle(
        [x0, y0, x1, y1],
        radius=pill_h // 2,
        fill=to_rgba(badge.fill, alpha),
        outline=badge.border,
        width=SCALE,
    )
    draw.text(
        ((x0 + x1) // 2, (y0 + y1) // 2),
        badge.text,
        font=font,
        fill=to_rgba(badge.text_color, alpha),
        anchor="mm",
    )
    canvas.alpha_composite(overlay)


def _draw_image_panel(
    canvas: Image.Image, session: SurfaceSession, top: int, block: ImagePanelBlock
) -> None:
    draw = ImageDraw.Draw(canvas)
    y0, y1 = _px(top), _px(top + block.height)
    draw.rectangle([0, y0, canvas.width, y1], fill=to_rgba(block.background))

    w, h = block.image_size
    if block.image is not None and w and h:
        target = (_px(w), _px(h))
        photo = block.image.convert("RGBA").resize(target, Image.Resampling.LANCZOS)
        x = (canvas.width - target[0]) // 2
        canvas.alpha_composite(photo, dest=(x, y0 + _px(IMAGE_PADDING)))

    _draw_badge(canvas, session, y1, block)


def _draw_details(
    canvas: Image.Image, session: SurfaceSession, top: int, block: DetailsBlock
) -> None:
    draw = ImageDraw.Draw(canvas)
    y0, y1 = _px(top), _px(top + block.height)
    draw.rectangle([0, y0, canvas.width, y1], fill=to_rgba(block.background))
    fill = to_rgba(block.font_color)
    cx = canvas.width // 2
    pad = _px(DETAILS_PADDING)

    y = top + DETAILS_PADDING
    draw.text(
        (cx, _px(y + NAME_MARGIN)),
        block.name,
        font=session.fonts.get(_px(NAME_FONT_SIZE), bold=True),
        fill=fill,
        anchor="mt",
    )
    y += NAME_HEIGHT

    if block.subtitle:
        draw.text(
            (cx, _px(y)),
            f"({block.subtitle})",
            font=session.fonts.get(_px(SUBTITLE_FONT_SIZE), italic=True),
            fill=fill,
            anchor="mt",
        )
        y += SUBTITLE_HEIGHT

    if not block.rows:
        return
    row_font = session.fonts.get(_px(ROW_FONT_SIZE))
    # Colons line up one space after the widest label
    label_w = max(draw.textlength(label, font=row_font) for label, _ in block.rows)
    colon_x = pad + int(label_w + draw.textlength(" ", font=row_font))
    value_x = colon_x + int(draw.textlength(":  ", font=row_font))

    y += ROWS_TOP_GAP + ROW_GAP
    for label, value in block.rows:
        baseline = _px(y + ROW_LINE_HEIGHT / 2)
        draw.text((pad, baseline), label, font=row_font, fill=fill, anchor="lm")
        draw.text((colon_x, baseline), ":", font=row_font, fill=fill, anchor="lm")
        draw.text((value_x, baseline), value, font=row_font, fill=fill, anchor="lm")
        y += ROW_LINE_HEIGHT + ROW_GAP


_PAINTERS = {
    "price": _draw_price_bar,
    "image": _draw_image_panel,
    "details": _draw_details,
}


# ─── Public API ──────────────────────────────────────────────────────────────

def rasterize_layout(layout: CardLayout, session: SurfaceSession) -> Image.Image:
    """Paint every block, top to bottom, at SCALE x the logical size."""
    canvas = session.new_canvas(_px(layout.width), _px(layout.height))
    for top, block in layout.placements():
        _PAINTERS[block.kind](canvas, session, top, block)
    return canvas


def crop_bottom_seam(canvas: Image.Image) -> Image.Image:
    """Remove exactly BOTTOM_CROP_PX rows from the bottom edge."""
    if canvas.height <= BOTTOM_CROP_PX:
        raise ValueError(f"Canvas too short to crop: {canvas.height}px")
    return canvas.crop((0, 0, canvas.width, canvas.height - BOTTOM_CROP_PX))


def encode_png(canvas: Image.Image) -> bytes:
    """Flatten to opaque BGR and encode losslessly via OpenCV."""
    return bgr_to_png_bytes(pil_to_bgr(canvas))
