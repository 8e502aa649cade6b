# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Asset Models
AssetKey maps (product id, folder label) to the deterministic relative
path of a rendered card. WatermarkConfig is the read-only view of the
watermark settings taken at render time.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

CARD_EXTENSION = ".png"
DEFAULT_WATERMARK_TEXT = "created using CatShare"


def card_file_name(product_id: str, folder_label: str) -> str:
    return f"product_{product_id}_{folder_label}{CARD_EXTENSION}"


class AssetKey(BaseModel):
    """
    Identity of one rendered card.
    Path: {folder_label}/product_{product_id}_{folder_label}.png
    """
    model_config = ConfigDict(frozen=True)

    product_id: str
    folder_label: str

    @field_validator("product_id", "folder_label")
    @classmethod
    def _no_path_segments(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        if "/" in value or "\\" in value or value in (".", "..") or "\x00" in value:
            raise ValueError(f"'{value}' is not a valid path segment")
        return value

    @property
    def file_name(self) -> str:
        return card_file_name(self.product_id, self.folder_label)

    @property
    def relative_path(self) -> str:
        return f"{self.folder_label}/{self.file_name}"

    def __str__(self) -> str:
        return self.relative_path


class RenderedAsset(BaseModel):
    """Encoded card bytes tied to their key."""
    key: AssetKey
    data: bytes = Field(..., repr=False)

    @property
    def size_bytes(self) -> int:
        return len(self.data)


class WatermarkPosition(str, Enum):
    TOP_LEFT = "top-left"
    TOP_CENTER = "top-center"
    TOP_RIGHT = "top-right"
    MIDDLE_LEFT = "middle-left"
    MIDDLE_CENTER = "middle-center"
    MIDDLE_RIGHT = "middle-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_CENTER = "bottom-center"
    BOTTOM_RIGHT = "bottom-right"

    @classmethod
    def parse(cls, value: object) -> "WatermarkPosition":
        """
        Accepts hyphen, underscore and camelCase spellings, optionally
        wrapped in JSON quotes. Anything unrecognised is bottom-center.
        """
        text = str(value or "").strip()
        if len(text) >= 2 and text[0] == text[-1] == '"':
            text = text[1:-1]
        text = re.sub(r"([a-z])([A-Z])", r"\1-\2", text).replace("_", "-").lower()
        try:
            return cls(text)
        except ValueError:
            return cls.BOTTOM_CENTER


class WatermarkConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    text: str = DEFAULT_WATERMARK_TEXT
    position: WatermarkPosition = WatermarkPosition.BOTTOM_CENTER
