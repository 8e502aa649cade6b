# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Settings Provider
Read-only view of the user's key/value preferences. The renderer pulls
watermark and currency settings through this interface on every card,
so a change takes effect on the next render without any cache reset.

Keys:
    showWatermark      bool (JSON-string booleans accepted), default true
    watermarkText      str, default "created using CatShare"
    watermarkPosition  one of nine positions, default "bottom-center"
    defaultCurrency    ISO code, default "INR"
"""

from __future__ import annotations

import json
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from app.models.asset import DEFAULT_WATERMARK_TEXT, WatermarkConfig, WatermarkPosition
from app.utils.logger import get_logger

log = get_logger(__name__)

SHOW_WATERMARK_KEY = "showWatermark"
WATERMARK_TEXT_KEY = "watermarkText"
WATERMARK_POSITION_KEY = "watermarkPosition"
CURRENCY_KEY = "defaultCurrency"

DEFAULT_CURRENCY = "INR"
CURRENCIES: dict[str, str] = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "AED": "د.إ",
    "AUD": "A$",
    "CAD": "C$",
    "SGD": "S$",
    "BDT": "৳",
    "PKR": "₨",
    "LKR": "Rs",
    "NPR": "रू",
}


# ─── Abstract Interface ──────────────────────────────────────────────────────

class SettingsProvider(ABC):

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Return the current value for key, or default."""


# ─── Implementations ─────────────────────────────────────────────────────────

class InMemorySettingsStore(SettingsProvider):
    """Dict-backed provider for tests and embedding."""

    def __init__(self, values: dict[str, Any] | None = None) -> None:
        self._values = dict(values or {})
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value


class JsonSettingsStore(SettingsProvider):
    """
    Reads a JSON object from disk on every lookup.
    A missing or corrupt file behaves like an empty store.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("settings_unreadable", path=str(self.path), error=str(exc))
            return {}
        if not isinstance(data, dict):
            log.warning("settings_not_an_object", path=str(self.path))
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)


# ─── Typed readers ───────────────────────────────────────────────────────────

def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
    return default


def read_watermark_config(provider: SettingsProvider) -> WatermarkConfig:
    enabled = _as_bool(provider.get(SHOW_WATERMARK_KEY, True), True)
    text = provider.get(WATERMARK_TEXT_KEY) or DEFAULT_WATERMARK_TEXT
    position = WatermarkPosition.parse(provider.get(WATERMARK_POSITION_KEY))
    return WatermarkConfig(enabled=enabled, text=str(text), position=position)


def read_currency_symbol(provider: SettingsProvider) -> str:
    code = str(provider.get(CURRENCY_KEY) or DEFAULT_CURRENCY).upper()
    return CURRENCIES.get(code, CURRENCIES[DEFAULT_CURRENCY])
