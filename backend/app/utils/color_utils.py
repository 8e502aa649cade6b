# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Colour Derivation
Pure helpers for the card palette: lightened title colours and the
binary light/dark decision that picks badge and watermark contrast.
"""

from __future__ import annotations

import re

from PIL import ImageColor

from app.utils.logger import get_logger

log = get_logger(__name__)

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")
_RGB_RE = re.compile(r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$")

_LIGHT_NAMES = frozenset({"white", "#ffffff"})

RGBA = tuple[int, int, int, int]


def _parse_channels(color: str) -> tuple[int, int, int] | None:
    match = _HEX_RE.match(color)
    if match:
        return tuple(int(part, 16) for part in match.groups())  # type: ignore[return-value]
    match = _RGB_RE.match(color)
    if match:
        return tuple(min(255, int(part)) for part in match.groups())  # type: ignore[return-value]
    return None


def lighten_color(color: str, amount: int = 40) -> str:
    """
    Add `amount` to each channel of a #rrggbb or rgb(r, g, b) colour,
    clamped to 255, and return it as 'rgb(r, g, b)'.
    Any other notation (named colours, 3-digit hex) is returned unchanged.
    """
    channels = _parse_channels(color.strip())
    if channels is None:
        return color
    r, g, b = (min(255, c + amount) for c in channels)
    return f"rgb({r}, {g}, {b})"


def is_light_background(color: str) -> bool:
    """Only exact white ('white' or '#ffffff', any case) counts as light."""
    return color.strip().lower() in _LIGHT_NAMES


def to_rgba(color: str, alpha: int = 255) -> RGBA:
    """Convert a CSS colour to a Pillow RGBA tuple. Unknown colours become black."""
    try:
        rgb = ImageColor.getrgb(color.strip())
    except ValueError:
        log.warning("unparseable_color", color=color)
        rgb = (0, 0, 0)
    return rgb[0], rgb[1], rgb[2], alpha
