# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Render Surface
The drawing resource every card render goes through: a font book plus
a canvas factory. A batch opens one surface up front and acquires it
exclusively for each card, so concurrent renders can never interleave
on shared drawing state.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from PIL import Image, ImageDraw, ImageFont

from app.api.middleware.error_handler import SurfaceAcquisitionError, SurfaceBusyError
from app.utils.logger import get_logger

log = get_logger(__name__)

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont

# Pillow resolves bare file names against the system font directories
_REGULAR_CANDIDATES = [
    "DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/System/Library/Fonts/Helvetica.ttc",
]
_BOLD_CANDIDATES = [
    "DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf",
]
_ITALIC_CANDIDATES = [
    "DejaVuSans-Oblique.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Italic.ttf",
]


class FontBook:
    """
    Size/style keyed font cache.
    Lookup order: configured font_path, system DejaVu / Liberation faces,
    then Pillow's bundled default face.
    """

    def __init__(self, font_path: Optional[Path] = None) -> None:
        self._font_path = font_path
        self._cache: dict[tuple[float, bool, bool], FontType] = {}

    def get(self, size: float, bold: bool = False, italic: bool = False) -> FontType:
        key = (size, bold, italic)
        font = self._cache.get(key)
        if font is None:
            font = self._load(size, bold, italic)
            self._cache[key] = font
        return font

    def _load(self, size: float, bold: bool, italic: bool) -> FontType:
        if bold:
            candidates = list(_BOLD_CANDIDATES)
        elif italic:
            candidates = list(_ITALIC_CANDIDATES)
        else:
            candidates = []
        if self._font_path is not None:
            candidates.insert(0, str(self._font_path))
        candidates += _REGULAR_CANDIDATES

        for path in candidates:
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                continue
        log.debug("font_fallback_default", size=size, bold=bold, italic=italic)
        return ImageFont.load_default(size=size)


class SurfaceSession:
    """Handle given to one render while it holds the surface."""

    def __init__(self, fonts: FontBook) -> None:
        self.fonts = fonts

    def new_canvas(
        self,
        width: int,
        height: int,
        background: tuple[int, int, int, int] = (0, 0, 0, 0),
    ) -> Image.Image:
        return Image.new("RGBA", (width, height), background)


class RenderSurface:
    """
    Exclusive drawing resource. One acquisition at a time.
    Ownership is a plain flag; acquire and release only run on the event loop.
    """

    def __init__(self, fonts: FontBook) -> None:
        self.fonts = fonts
        self._held = False

    @property
    def in_use(self) -> bool:
        return self._held

    @contextmanager
    def acquire(self) -> Iterator[SurfaceSession]:
        if self._held:
            raise SurfaceBusyError("Render surface is already in use.")
        self._held = True
        try:
            yield SurfaceSession(self.fonts)
        finally:
            self._held = False


def open_surface(font_path: Optional[Path] = None) -> RenderSurface:
    """
    Build a surface and prove it can draw text before any card is attempted.
    Raises SurfaceAcquisitionError when fonts or canvases are unusable.
    """
    fonts = FontBook(font_path)
    try:
        probe = Image.new("RGBA", (8, 8))
        ImageDraw.Draw(probe).text((0, 0), "A", font=fonts.get(12))
    except (OSError, ValueError, MemoryError) as exc:
        log.error("surface_open_failed", error=str(exc))
        raise SurfaceAcquisitionError(f"Could not open render surface: {exc}") from exc
    log.debug("surface_opened", font_path=str(font_path) if font_path else None)
    return RenderSurface(fonts)
