# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Layout Compositor
Turns a ProductRenderSpec into an ordered list of measured blocks in
logical units (card width 330). Nothing is drawn here; the rasterizer
consumes the layout at 3x scale.

  Wholesale: [price bar, image panel, details]
  Resell:    [image panel, details, price bar]

Heights come from fixed typographic constants plus the fitted image
size, so the same product always yields the same geometry.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from PIL import Image

from app.models.product import ProductRenderSpec, RenderMode
from app.utils.color_utils import is_light_background, lighten_color
from app.utils.image_utils import decode_to_pil
from app.utils.logger import get_logger

log = get_logger(__name__)

CARD_WIDTH = 330

# ─── Price bar ───────────────────────────────────────────────────────────────
PRICE_PADDING = 8
PRICE_FONT_SIZE = 19
PRICE_LINE_HEIGHT = round(PRICE_FONT_SIZE * 1.2)
PRICE_BAR_HEIGHT = PRICE_PADDING * 2 + PRICE_LINE_HEIGHT

# ─── Image panel ─────────────────────────────────────────────────────────────
IMAGE_PADDING = 16
IMAGE_MAX_WIDTH = CARD_WIDTH - 2 * IMAGE_PADDING
IMAGE_MAX_HEIGHT = 300

BADGE_FONT_SIZE = 13
BADGE_PAD_X = 10
BADGE_PAD_Y = 6
BADGE_INSET = 12
BADGE_OPACITY = 0.95

# ─── Details ─────────────────────────────────────────────────────────────────
DETAILS_PADDING = 10
NAME_FONT_SIZE = 28
NAME_MARGIN = 3
NAME_HEIGHT = round(NAME_FONT_SIZE * 1.2) + 2 * NAME_MARGIN
SUBTITLE_FONT_SIZE = 18
SUBTITLE_HEIGHT = round(SUBTITLE_FONT_SIZE * 1.2) + 10
ROWS_TOP_GAP = 6
ROW_FONT_SIZE = 17
ROW_LINE_HEIGHT = round(ROW_FONT_SIZE * 1.4)
ROW_GAP = 2


@dataclass(frozen=True)
class BadgeStyle:
    text: str
    fill: str
    text_color: str
    border: tuple[int, int, int, int]


@dataclass(frozen=True)
class PriceBarBlock:
    text: str
    background: str
    font_color: str
    kind: str = field(default="price", init=False)

    @property
    def height(self) -> int:
        return PRICE_BAR_HEIGHT


@dataclass(frozen=True)
class ImagePanelBlock:
    # None when the source could not be decoded (zero-size placeholder)
    image: Optional[Image.Image] = field(compare=False, repr=False)
    image_size: tuple[int, int]
    background: str
    badge: Optional[BadgeStyle] = None
    kind: str = field(default="image", init=False)

    @property
    def height(self) -> int:
        return IMAGE_PADDING * 2 + self.image_size[1]


@dataclass(frozen=True)
class DetailsBlock:
    name: str
    subtitle: Optional[str]
    rows: tuple[tuple[str, str], ...]
    background: str
    font_color: str
    kind: str = field(default="details", init=False)

    @property
    def height(self) -> int:
        h = DETAILS_PADDING + NAME_HEIGHT
        if self.subtitle:
            h += SUBTITLE_HEIGHT
        if self.rows:
            h += ROWS_TOP_GAP + len(self.rows) * ROW_LINE_HEIGHT + (len(self.rows) + 1) * ROW_GAP
        return h + DETAILS_PADDING


Block = Union[PriceBarBlock, ImagePanelBlock, DetailsBlock]


@dataclass(frozen=True)
class CardLayout:
    blocks: tuple[Block, ...]
    # Image panel colour decides watermark contrast
    panel_background: str
    width: int = CARD_WIDTH

    @property
    def height(self) -> int:
        return sum(b.height for b in self.blocks)

    @property
    def kinds(self) -> list[str]:
        return [b.kind for b in self.blocks]

    def placements(self) -> Iterator[tuple[int, Block]]:
        """Yield (top offset, block) pairs in draw order."""
        top = 0
        for block in self.blocks:
            yield top, block
            top += block.height


# ─── Block builders ──────────────────────────────────────────────────────────

def fit_image(width: int, height: int) -> tuple[int, int]:
    """Contain-fit into the panel without upscaling."""
    if width <= 0 or height <= 0:
        return 0, 0
    scale = min(1.0, IMAGE_MAX_WIDTH / width, IMAGE_MAX_HEIGHT / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def format_price(value: str, unit: Optional[str], currency_symbol: str) -> str:
    text = f"Price   :   {currency_symbol}{value}"
    if unit and unit.strip():
        text += f" {unit.strip()}"
    return text


def badge_style(text: str, panel_background: str) -> BadgeStyle:
    if is_light_background(panel_background):
        return BadgeStyle(text=text.upper(), fill="#fff", text_color="#000", border=(0, 0, 0, 102))
    return BadgeStyle(text=text.upper(), fill="#000", text_color="#fff", border=(255, 255, 255, 102))


def _with_unit(value: str, unit: Optional[str]) -> str:
    if unit and unit.strip() and unit.strip() != "N/A":
        return f"{value} {unit.strip()}"
    return value


def detail_rows(spec: ProductRenderSpec) -> tuple[tuple[str, str], ...]:
    """Colour / Package / Age Group rows; rows without a value are skipped."""
    rows = []
    if spec.colour.strip():
        rows.append(("Colour", spec.colour.strip()))
    if spec.package.strip():
        rows.append(("Package", _with_unit(spec.package.strip(), spec.package_unit)))
    if spec.age.strip():
        rows.append(("Age Group", _with_unit(spec.age.strip(), spec.age_unit)))
    return tuple(rows)


async def compose_card_layout(
    spec: ProductRenderSpec,
    mode: RenderMode,
    image_bytes: bytes,
    currency_symbol: str = "₹",
) -> CardLayout:
    """
    Measure every block for one card.
    The image is decoded off the event loop and awaited before the
    panel is measured. Undecodable bytes produce an empty panel; missing
    bytes are a caller error.
    """
    if not image_bytes:
        raise ValueError(f"No image bytes for product {spec.product_id}")

    colors = spec.colors
    try:
        image = await asyncio.to_thread(decode_to_pil, image_bytes)
        size = fit_image(*image.size)
    except ValueError as exc:
        log.warning("image_decode_failed", product_id=spec.product_id, error=str(exc))
        image, size = None, (0, 0)

    badge = badge_style(spec.badge, colors.image_panel) if spec.badge and spec.badge.strip() else None
    panel = ImagePanelBlock(
        image=image,
        image_size=size,
        background=colors.image_panel,
        badge=badge,
    )
    details = DetailsBlock(
        name=spec.name,
        subtitle=spec.subtitle.strip() if spec.subtitle and spec.subtitle.strip() else None,
        rows=detail_rows(spec),
        background=lighten_color(colors.background),
        font_color=colors.font,
    )
    value, unit = spec.price_for(mode)
    price = PriceBarBlock(
        text=format_price(value, unit, currency_symbol),
        background=colors.background,
        font_color=colors.font,
    )

    if mode.price_on_top:
        blocks: tuple[Block, ...] = (price, panel, details)
    else:
        blocks = (panel, details, price)
    return CardLayout(blocks=blocks, panel_background=colors.image_panel)
