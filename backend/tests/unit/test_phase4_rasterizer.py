# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 4 - Rasterizer, watermark and card renderer tests.
Pillow / OpenCV only, using whatever fonts the host provides
(Pillow's bundled face as the last resort).
"""

import cv2
import numpy as np
import pytest
from PIL import Image

from app.models.product import ProductRenderSpec, RenderTarget


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _png(w=240, h=160, color=(30, 140, 220)) -> bytes:
    img = np.zeros((h, w, 3), dtype=np.uint8)
    img[:] = color
    cv2.circle(img, (w // 2, h // 2), min(w, h) // 3, (255, 255, 255), -1)
    ok, buf = cv2.imencode(".png", img)
    assert ok
    return buf.tobytes()


def _spec(**overrides) -> ProductRenderSpec:
    fields = dict(
        product_id="42",
        name="Twirl Frock",
        subtitle="Cotton",
        badge="new",
        wholesale="120",
        resell="180",
        colour="Red",
        package="6",
        age="24",
    )
    fields.update(overrides)
    return ProductRenderSpec(**fields)


def _decode(png: bytes) -> np.ndarray:
    img = cv2.imdecode(np.frombuffer(png, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert img is not None
    return img


# ─── Surface ─────────────────────────────────────────────────────────────────

def test_surface_is_exclusive():
    from app.api.middleware.error_handler import SurfaceBusyError
    from app.modules.rendering.surface import open_surface

    surface = open_surface()
    with surface.acquire():
        assert surface.in_use
        with pytest.raises(SurfaceBusyError):
            with surface.acquire():
                pass
    assert not surface.in_use


@pytest.mark.asyncio
async def test_surface_stays_held_across_awaits():
    import asyncio
    from app.api.middleware.error_handler import SurfaceBusyError
    from app.modules.rendering.surface import open_surface

    surface = open_surface()
    entered = asyncio.Event()
    release = asyncio.Event()

    async def holder():
        with surface.acquire():
            entered.set()
            await release.wait()

    task = asyncio.create_task(holder())
    await entered.wait()
    with pytest.raises(SurfaceBusyError):
        with surface.acquire():
            pass
    release.set()
    await task
    assert not surface.in_use


def test_open_surface_failure_is_typed():
    from app.api.middleware.error_handler import SurfaceAcquisitionError
    from app.modules.rendering import surface as surface_mod

    with __import__("unittest.mock", fromlist=["patch"]).patch.object(
        surface_mod.FontBook, "get", side_effect=OSError("no fonts")
    ):
        with pytest.raises(SurfaceAcquisitionError):
            surface_mod.open_surface()


def test_font_book_caches_by_style():
    from app.modules.rendering.surface import FontBook

    fonts = FontBook()
    assert fonts.get(30) is fonts.get(30)
    assert fonts.get(30, bold=True) is fonts.get(30, bold=True)


# ─── Rasterizer ──────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_rasterize_scales_layout_by_three():
    from app.modules.rendering.layout import compose_card_layout
    from app.modules.rendering.rasterizer import SCALE, rasterize_layout
    from app.modules.rendering.surface import open_surface

    layout = await compose_card_layout(_spec(), RenderTarget.for_mode("wholesale").mode, _png())
    with open_surface().acquire() as session:
        canvas = rasterize_layout(layout, session)

    assert canvas.size == (layout.width * SCALE, layout.height * SCALE)
    assert canvas.width == 990


def test_crop_bottom_seam_removes_three_rows():
    from app.modules.rendering.rasterizer import crop_bottom_seam

    canvas = Image.new("RGBA", (990, 600), (255, 0, 0, 255))
    cropped = crop_bottom_seam(canvas)
    assert cropped.size == (990, 597)


def test_crop_bottom_seam_rejects_tiny_canvas():
    from app.modules.rendering.rasterizer import crop_bottom_seam

    with pytest.raises(ValueError):
        crop_bottom_seam(Image.new("RGBA", (10, 3)))


def test_encode_png_is_lossless():
    from app.modules.rendering.rasterizer import encode_png

    canvas = Image.new("RGBA", (30, 20), (10, 200, 90, 255))
    img = _decode(encode_png(canvas))
    assert img.shape == (20, 30, 3)
    # BGR order after decode
    assert tuple(img[5, 5]) == (90, 200, 10)


# ─── Watermark ───────────────────────────────────────────────────────────────

def _flat_canvas(color=(173, 216, 230, 255)) -> Image.Image:
    return Image.new("RGBA", (990, 1200), color)


def test_watermark_touches_only_bottom_band():
    from app.models.asset import WatermarkConfig
    from app.modules.rendering.surface import FontBook
    from app.modules.rendering.watermark import apply_watermark, watermark_band

    fonts = FontBook()
    config = WatermarkConfig()
    base = _flat_canvas()
    marked = apply_watermark(base, config, "white", fonts)

    diff = np.any(np.array(base) != np.array(marked), axis=2)
    rows = np.nonzero(diff.any(axis=1))[0]
    assert rows.size > 0

    top, bottom = watermark_band(base, fonts, config)
    assert rows.min() >= top
    assert rows.max() < bottom
    assert bottom <= base.height - 24 + 2


def test_watermark_disabled_is_noop():
    from app.models.asset import WatermarkConfig
    from app.modules.rendering.surface import FontBook
    from app.modules.rendering.watermark import apply_watermark

    base = _flat_canvas()
    marked = apply_watermark(base, WatermarkConfig(enabled=False), "white", FontBook())
    assert np.array_equal(np.array(base), np.array(marked))


def test_watermark_contrast_follows_panel():
    from app.models.asset import WatermarkConfig
    from app.modules.rendering.surface import FontBook
    from app.modules.rendering.watermark import apply_watermark

    fonts = FontBook()
    base = _flat_canvas((128, 128, 128, 255))
    on_light = np.array(apply_watermark(base, WatermarkConfig(), "white", fonts))
    on_dark = np.array(apply_watermark(base, WatermarkConfig(), "#333333", fonts))

    # Light panels darken the text pixels, dark panels lighten them
    assert on_light[..., :3].min() < 128
    assert on_dark[..., :3].max() > 128


def test_watermark_font_size_floor():
    from app.modules.rendering.watermark import watermark_font_size

    assert watermark_font_size(990) == 24.75
    assert watermark_font_size(100) == 12


def test_watermark_top_left_stays_in_its_corner():
    from app.models.asset import WatermarkConfig, WatermarkPosition
    from app.modules.rendering.surface import FontBook
    from app.modules.rendering.watermark import apply_watermark

    base = _flat_canvas()
    config = WatermarkConfig(position=WatermarkPosition.TOP_LEFT)
    marked = apply_watermark(base, config, "white", FontBook())

    diff = np.any(np.array(base) != np.array(marked), axis=2)
    rows = np.nonzero(diff.any(axis=1))[0]
    cols = np.nonzero(diff.any(axis=0))[0]
    assert rows.size > 0
    assert rows.max() < base.height // 2
    assert cols.min() >= 24 - 2
    assert cols.min() < base.width // 4


def test_watermark_middle_right_anchor():
    from app.models.asset import WatermarkPosition
    from app.modules.rendering.watermark import watermark_anchor

    assert watermark_anchor((990, 1200), WatermarkPosition.MIDDLE_RIGHT) == ((966, 600), "rm")
    assert watermark_anchor((990, 1200), WatermarkPosition.BOTTOM_CENTER) == ((495, 1176), "mb")


# ─── render_card ─────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_render_card_dimensions():
    from app.core.settings_store import InMemorySettingsStore
    from app.modules.rendering.card_renderer import render_card
    from app.modules.rendering.layout import compose_card_layout
    from app.modules.rendering.rasterizer import BOTTOM_CROP_PX, SCALE
    from app.modules.rendering.surface import open_surface

    target = RenderTarget.for_mode("resell")
    png = await render_card(_spec(), target, _png(), open_surface(), InMemorySettingsStore())
    img = _decode(png)

    layout = await compose_card_layout(_spec(), target.mode, _png())
    assert img.shape[1] == 990
    assert img.shape[0] == layout.height * SCALE - BOTTOM_CROP_PX


@pytest.mark.asyncio
async def test_render_card_is_deterministic():
    from app.core.settings_store import InMemorySettingsStore
    from app.modules.rendering.card_renderer import render_card
    from app.modules.rendering.surface import open_surface

    surface = open_surface()
    settings = InMemorySettingsStore()
    target = RenderTarget.for_mode("wholesale")
    first = await render_card(_spec(), target, _png(), surface, settings)
    second = await render_card(_spec(), target, _png(), surface, settings)
    assert first == second


@pytest.mark.asyncio
async def test_render_card_reads_settings_each_time():
    from app.core.settings_store import InMemorySettingsStore
    from app.modules.rendering.card_renderer import render_card
    from app.modules.rendering.surface import open_surface

    surface = open_surface()
    settings = InMemorySettingsStore({"showWatermark": True})
    target = RenderTarget.for_mode("resell")

    marked = _decode(await render_card(_spec(), target, _png(), surface, settings))
    settings.set("showWatermark", "false")
    plain = _decode(await render_card(_spec(), target, _png(), surface, settings))

    assert marked.shape == plain.shape
    diff_rows = np.nonzero(np.any(marked != plain, axis=(1, 2)))[0]
    assert diff_rows.size > 0
    # Only the bottom strip differs
    assert diff_rows.min() > marked.shape[0] - 100


@pytest.mark.asyncio
async def test_render_card_stage_failure_is_labelled():
    from app.api.middleware.error_handler import RenderStageError
    from app.core.settings_store import InMemorySettingsStore
    from app.modules.rendering import card_renderer
    from app.modules.rendering.surface import open_surface

    surface = open_surface()
    with __import__("unittest.mock", fromlist=["patch"]).patch.object(
        card_renderer, "encode_png", side_effect=RuntimeError("encoder down")
    ):
        with pytest.raises(RenderStageError) as exc_info:
            await card_renderer.render_card(
                _spec(), RenderTarget.for_mode("resell"), _png(), surface, InMemorySettingsStore()
            )
    assert exc_info.value.stage == "encode"
    # Surface released even though the render failed
    assert not surface.in_use


# ─── Catalogue PDF ───────────────────────────────────────────────────────────

def test_assemble_pdf_one_page_per_card():
    from PIL import PdfParser
    from app.modules.rendering.pdf_export import assemble_pdf

    pdf = assemble_pdf([_png(), _png(color=(10, 10, 10)), _png(w=90, h=300)], title="Summer")

    assert pdf.startswith(b"%PDF")
    assert len(PdfParser.PdfParser(buf=pdf).pages) == 3


def test_assemble_pdf_rejects_empty_and_garbage():
    from app.modules.rendering.pdf_export import assemble_pdf

    with pytest.raises(ValueError):
        assemble_pdf([])
    with pytest.raises(ValueError):
        assemble_pdf([b"not an image"])
