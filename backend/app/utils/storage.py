# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Storage Layout
Two roots under storage_root: a private one for source photos and a
shareable one for rendered cards.

Layout:
    storage/
        private/
            originals/
                {image reference} ...
        exports/
            {folder_label}/
                product_{product_id}_{folder_label}.png ...
"""

from pathlib import Path

from app.config import get_settings
from app.models.asset import AssetKey


# ─── Root Builders ───────────────────────────────────────────────────────────

def share_dir() -> Path:
    return get_settings().share_root


def originals_dir() -> Path:
    return get_settings().originals_dir


def folder_dir(folder_label: str, root: Path | None = None) -> Path:
    return (root or share_dir()) / folder_label


# ─── Asset Paths ─────────────────────────────────────────────────────────────

def asset_path(key: AssetKey, root: Path | None = None) -> Path:
    return folder_dir(key.folder_label, root) / key.file_name


def safe_join(base: Path, relative: str) -> Path:
    """
    Join a relative reference onto base, refusing anything that escapes it.
    Raises ValueError on traversal attempts.
    """
    base_resolved = base.resolve()
    candidate = (base_resolved / relative).resolve()
    try:
        candidate.relative_to(base_resolved)
    except ValueError:
        raise ValueError(f"Path escapes storage root: {relative}") from None
    return candidate


def original_image_path(reference: str, root: Path | None = None) -> Path:
    """Resolve a stored image reference under the private originals root."""
    return safe_join(root or originals_dir(), reference)


# ─── Lifecycle Helpers ───────────────────────────────────────────────────────

def init_storage_dirs() -> None:
    """
    Create the private and shareable roots.
    Safe to call multiple times (exist_ok=True).
    """
    for d in [originals_dir(), share_dir()]:
        d.mkdir(parents=True, exist_ok=True)


def get_asset_url(key: AssetKey) -> str:
    """Build the public URL for a rendered card."""
    return f"/assets/{key.folder_label}/{key.file_name}"
