# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 3 - Layout compositor tests.
Block ordering per mode, intrinsic heights, badge and price text.
Images are generated in memory with OpenCV.
"""

import cv2
import numpy as np
import pytest

from app.models.product import ProductRenderSpec, RenderMode


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _png(w=200, h=100, color=(120, 60, 30)) -> bytes:
    img = np.zeros((h, w, 3), dtype=np.uint8)
    img[:] = color
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


def _spec(**overrides) -> ProductRenderSpec:
    fields = dict(
        product_id="p1",
        name="Party Dress",
        wholesale="120",
        resell="180",
        colour="Blue",
        package="6",
        age="12",
    )
    fields.update(overrides)
    return ProductRenderSpec(**fields)


# ─── Ordering ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_wholesale_price_bar_first():
    from app.modules.rendering.layout import compose_card_layout

    layout = await compose_card_layout(_spec(), RenderMode.WHOLESALE, _png())
    assert layout.kinds == ["price", "image", "details"]


@pytest.mark.asyncio
async def test_resell_price_bar_last():
    from app.modules.rendering.layout import compose_card_layout

    layout = await compose_card_layout(_spec(), RenderMode.RESELL, _png())
    assert layout.kinds == ["image", "details", "price"]


@pytest.mark.asyncio
async def test_price_channel_follows_mode():
    from app.modules.rendering.layout import compose_card_layout

    wholesale = await compose_card_layout(_spec(), RenderMode.WHOLESALE, _png())
    resell = await compose_card_layout(_spec(), RenderMode.RESELL, _png())
    assert wholesale.blocks[0].text == "Price   :   ₹120 / piece"
    assert resell.blocks[-1].text == "Price   :   ₹180 / piece"


@pytest.mark.asyncio
async def test_currency_symbol_and_missing_unit():
    from app.modules.rendering.layout import compose_card_layout

    layout = await compose_card_layout(
        _spec(resell_unit=""), RenderMode.RESELL, _png(), currency_symbol="$"
    )
    assert layout.blocks[-1].text == "Price   :   $180"


# ─── Geometry ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_width_is_fixed_and_height_sums_blocks():
    from app.modules.rendering.layout import CARD_WIDTH, compose_card_layout

    layout = await compose_card_layout(_spec(), RenderMode.RESELL, _png())
    assert layout.width == CARD_WIDTH == 330
    assert layout.height == sum(b.height for b in layout.blocks)
    tops = [top for top, _ in layout.placements()]
    assert tops[0] == 0
    assert tops[1] == layout.blocks[0].height


def test_fit_image_contains_without_upscaling():
    from app.modules.rendering.layout import fit_image

    assert fit_image(600, 300) == (298, 149)
    assert fit_image(100, 900) == (33, 300)
    assert fit_image(50, 40) == (50, 40)
    assert fit_image(0, 10) == (0, 0)


@pytest.mark.asyncio
async def test_image_panel_height_tracks_image():
    from app.modules.rendering.layout import IMAGE_PADDING, compose_card_layout

    layout = await compose_card_layout(_spec(), RenderMode.RESELL, _png(600, 300))
    panel = layout.blocks[0]
    assert panel.image_size == (298, 149)
    assert panel.height == 2 * IMAGE_PADDING + 149


@pytest.mark.asyncio
async def test_subtitle_adds_height():
    from app.modules.rendering.layout import SUBTITLE_HEIGHT, compose_card_layout

    plain = await compose_card_layout(_spec(), RenderMode.RESELL, _png())
    titled = await compose_card_layout(_spec(subtitle="Cotton"), RenderMode.RESELL, _png())
    assert titled.blocks[1].height - plain.blocks[1].height == SUBTITLE_HEIGHT
    assert titled.blocks[1].subtitle == "Cotton"


@pytest.mark.asyncio
async def test_empty_detail_rows_are_skipped():
    from app.modules.rendering.layout import compose_card_layout

    full = await compose_card_layout(_spec(), RenderMode.RESELL, _png())
    sparse = await compose_card_layout(_spec(colour="", age=""), RenderMode.RESELL, _png())

    assert [label for label, _ in full.blocks[1].rows] == ["Colour", "Package", "Age Group"]
    assert sparse.blocks[1].rows == (("Package", "6 pcs / set"),)
    assert sparse.blocks[1].height < full.blocks[1].height


@pytest.mark.asyncio
async def test_details_background_is_lightened():
    from app.modules.rendering.layout import compose_card_layout

    layout = await compose_card_layout(_spec(bg_color="#102030"), RenderMode.WHOLESALE, _png())
    assert layout.blocks[0].background == "#102030"
    assert layout.blocks[2].background == "rgb(56, 72, 88)"


# ─── Badge ───────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_badge_on_white_panel():
    from app.modules.rendering.layout import compose_card_layout

    layout = await compose_card_layout(_spec(badge="new"), RenderMode.RESELL, _png())
    badge = layout.blocks[0].badge
    assert badge.text == "NEW"
    assert (badge.fill, badge.text_color) == ("#fff", "#000")


@pytest.mark.asyncio
async def test_badge_on_dark_panel():
    from app.modules.rendering.layout import compose_card_layout

    layout = await compose_card_layout(
        _spec(badge="sale", image_bg_color="#222222"), RenderMode.RESELL, _png()
    )
    badge = layout.blocks[0].badge
    assert (badge.fill, badge.text_color) == ("#000", "#fff")


@pytest.mark.asyncio
async def test_no_badge_when_blank():
    from app.modules.rendering.layout import compose_card_layout

    layout = await compose_card_layout(_spec(badge="  "), RenderMode.RESELL, _png())
    assert layout.blocks[0].badge is None


# ─── Image edge cases ────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_undecodable_image_gives_empty_panel():
    from app.modules.rendering.layout import IMAGE_PADDING, compose_card_layout

    layout = await compose_card_layout(_spec(), RenderMode.RESELL, b"definitely not an image")
    panel = layout.blocks[0]
    assert panel.image is None
    assert panel.image_size == (0, 0)
    assert panel.height == 2 * IMAGE_PADDING


@pytest.mark.asyncio
async def test_missing_image_bytes_is_an_error():
    from app.modules.rendering.layout import compose_card_layout

    with pytest.raises(ValueError):
        await compose_card_layout(_spec(), RenderMode.RESELL, b"")
