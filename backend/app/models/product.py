# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Product Render Models
The transient product record consumed by the card compositor, plus the
render mode / target that decides price channel, price-bar placement
and the destination folder label.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RenderMode(str, Enum):
    WHOLESALE = "wholesale"
    RESELL = "resell"

    @property
    def default_folder(self) -> str:
        return "Wholesale" if self is RenderMode.WHOLESALE else "Resell"

    @property
    def price_on_top(self) -> bool:
        """Wholesale cards lead with the price bar; resell cards end with it."""
        return self is RenderMode.WHOLESALE


class RenderTarget(BaseModel):
    """
    A render mode paired with the folder label used for both the
    destination directory and the card file name.
    """
    model_config = ConfigDict(frozen=True)

    mode: RenderMode
    folder_label: str

    @classmethod
    def for_mode(cls, mode: str | RenderMode, folder: Optional[str] = None) -> "RenderTarget":
        """
        Build a target from a mode name and an optional catalogue label.
        'retail' is accepted for older catalogues: it renders the resell
        price channel into the Retail folder.
        """
        if isinstance(mode, str) and mode.lower() == "retail":
            return cls(mode=RenderMode.RESELL, folder_label=folder or "Retail")
        render_mode = RenderMode(mode)
        return cls(mode=render_mode, folder_label=folder or render_mode.default_folder)


class CardColors(BaseModel):
    font: str = "white"
    background: str = "#add8e6"
    image_panel: str = "white"


_TEXT_FIELDS = ("wholesale", "resell", "package", "age", "colour")


class ProductRenderSpec(BaseModel):
    """
    Everything needed to composite one product card.
    Field aliases accept the camelCase keys of the catalogue export.
    """
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="id")
    name: str = ""
    subtitle: Optional[str] = None

    font_color: str = Field("white", alias="fontColor")
    bg_color: str = Field("#add8e6", alias="bgColor")
    image_bg_color: str = Field("white", alias="imageBgColor")

    badge: Optional[str] = None

    # ── Detail rows ──
    colour: str = Field("", alias="color")
    package: str = ""
    package_unit: str = Field("pcs / set", alias="packageUnit")
    age: str = ""
    age_unit: str = Field("months", alias="ageUnit")

    # ── Price channels ──
    wholesale: str = ""
    wholesale_unit: str = Field("/ piece", alias="wholesaleUnit")
    resell: str = ""
    resell_unit: str = Field("/ piece", alias="resellUnit")

    # ── Image source: in-memory bytes, a data URI, or a stored reference ──
    image_bytes: Optional[bytes] = Field(None, exclude=True)
    image_data_uri: Optional[str] = Field(None, alias="image")
    image_path: Optional[str] = Field(None, alias="imagePath")

    @field_validator("product_id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _coerce_numeric(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            # 120.0 renders as "120", matching how the catalogue displays prices
            if isinstance(value, float) and value.is_integer():
                return str(int(value))
            return str(value)
        return value

    @property
    def colors(self) -> CardColors:
        return CardColors(
            font=self.font_color,
            background=self.bg_color,
            image_panel=self.image_bg_color,
        )

    def price_for(self, mode: RenderMode) -> tuple[str, str]:
        """Return (value, unit) of the price channel rendered for a mode."""
        if mode is RenderMode.WHOLESALE:
            return self.wholesale, self.wholesale_unit
        return self.resell, self.resell_unit

    def has_image_source(self) -> bool:
        return bool(self.image_bytes or self.image_data_uri or self.image_path)
