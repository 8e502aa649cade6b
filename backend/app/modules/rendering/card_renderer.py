# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Card Renderer
Runs one product through compose -> rasterize -> crop -> watermark ->
encode while holding the render surface. Any failure is reported as
RenderStageError naming the stage that broke.
"""

from __future__ import annotations

import asyncio

from app.api.middleware.error_handler import RenderStageError
from app.core.settings_store import (
    SettingsProvider,
    read_currency_symbol,
    read_watermark_config,
)
from app.models.product import ProductRenderSpec, RenderTarget
from app.modules.rendering.layout import compose_card_layout
from app.modules.rendering.rasterizer import crop_bottom_seam, encode_png, rasterize_layout
from app.modules.rendering.surface import RenderSurface
from app.modules.rendering.watermark import apply_watermark
from app.utils.logger import get_logger

log = get_logger(__name__)


async def render_card(
    spec: ProductRenderSpec,
    target: RenderTarget,
    image_bytes: bytes,
    surface: RenderSurface,
    settings: SettingsProvider,
) -> bytes:
    """
    Render one card and return its PNG bytes.

    Settings are read here, per card. The surface is held for the whole
    chain; SurfaceBusyError propagates untouched.
    """
    watermark = read_watermark_config(settings)
    currency = read_currency_symbol(settings)

    with surface.acquire() as session:
        try:
            layout = await compose_card_layout(spec, target.mode, image_bytes, currency)
        except Exception as exc:
            raise RenderStageError("compose", str(exc)) from exc

        try:
            canvas = await asyncio.to_thread(rasterize_layout, layout, session)
            canvas = crop_bottom_seam(canvas)
        except Exception as exc:
            raise RenderStageError("rasterize", str(exc)) from exc

        try:
            canvas = apply_watermark(canvas, watermark, layout.panel_background, session.fonts)
        except Exception as exc:
            raise RenderStageError("watermark", str(exc)) from exc

        try:
            png = await asyncio.to_thread(encode_png, canvas)
        except Exception as exc:
            raise RenderStageError("encode", str(exc)) from exc

    log.debug(
        "card_rendered",
        product_id=spec.product_id,
        folder=target.folder_label,
        blocks=layout.kinds,
        size_bytes=len(png),
    )
    return png
