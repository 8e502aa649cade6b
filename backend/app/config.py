# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Application Configuration
All settings are loaded from environment variables with defaults suited
to a single-device catalogue. Override via backend/.env or environment.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ─── Storage ─────────────────────────────────────────────────────────────
    storage_root: Path = Path("./storage")

    # ─── Collaborators ───────────────────────────────────────────────────────
    # Read-only catalogue export consumed by JsonProductRepository
    catalogue_file: Path = Path("./storage/catalogue.json")
    # Key/value store holding showWatermark, watermarkText, defaultCurrency
    settings_file: Path = Path("./storage/settings.json")

    # ─── Rendering ───────────────────────────────────────────────────────────
    # Optional TTF used instead of the bundled DejaVu / Pillow default faces
    font_path: Optional[Path] = None

    # ─── Share ───────────────────────────────────────────────────────────────
    share_dialog_title: str = "Share Products"
    max_batch_size: int = 500

    # ─── Logging ─────────────────────────────────────────────────────────────
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # ─── Server ──────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000

    # ─── Derived helpers ─────────────────────────────────────────────────────
    @property
    def private_root(self) -> Path:
        return self.storage_root / "private"

    @property
    def originals_dir(self) -> Path:
        return self.private_root / "originals"

    @property
    def share_root(self) -> Path:
        return self.storage_root / "exports"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached singleton Settings instance."""
    return Settings()
