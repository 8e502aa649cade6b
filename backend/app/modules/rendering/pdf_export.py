# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Catalogue PDF
Bundles already-rendered cards into one document, one card per page,
in the order given. Pages keep the card's logical size in points.
"""

from __future__ import annotations

import io
from typing import Sequence

from app.modules.rendering.rasterizer import SCALE
from app.utils.image_utils import decode_to_pil

PDF_MIME = "application/pdf"
DEFAULT_PDF_TITLE = "Product Catalogue"

# 72 dpi per logical unit, times the raster scale
PDF_RESOLUTION = 72.0 * SCALE


def assemble_pdf(cards: Sequence[bytes], title: str = DEFAULT_PDF_TITLE) -> bytes:
    """
    Build a multi-page PDF from encoded card images.
    Raises ValueError when there are no cards or one cannot be decoded.
    """
    if not cards:
        raise ValueError("No cards to assemble into a PDF.")

    pages = [decode_to_pil(card).convert("RGB") for card in cards]
    buf = io.BytesIO()
    pages[0].save(
        buf,
        format="PDF",
        save_all=True,
        append_images=pages[1:],
        resolution=PDF_RESOLUTION,
        title=title,
    )
    return buf.getvalue()
