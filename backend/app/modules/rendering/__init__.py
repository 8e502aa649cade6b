# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Rendering Module
Public API for the card compositing stage.
"""

from app.modules.rendering.card_renderer import render_card
from app.modules.rendering.layout import CardLayout, compose_card_layout
from app.modules.rendering.pdf_export import assemble_pdf
from app.modules.rendering.rasterizer import crop_bottom_seam, encode_png, rasterize_layout
from app.modules.rendering.surface import FontBook, RenderSurface, open_surface
from app.modules.rendering.watermark import apply_watermark

__all__ = [
    "CardLayout",
    "compose_card_layout",
    "rasterize_layout",
    "crop_bottom_seam",
    "encode_png",
    "apply_watermark",
    "assemble_pdf",
    "FontBook",
    "RenderSurface",
    "open_surface",
    "render_card",
]
