# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - AssetStore
Keyed storage for rendered cards. The orchestrator and the share
resolver only see this interface, so the local export folder and the
in-memory development store are interchangeable.

All methods are synchronous; async callers go through asyncio.to_thread.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from pathlib import Path

from app.api.middleware.error_handler import HandleUnavailableError
from app.models.asset import CARD_EXTENSION, AssetKey
from app.utils.logger import get_logger
from app.utils.storage import asset_path, folder_dir

log = get_logger(__name__)


# ─── Abstract Interface ──────────────────────────────────────────────────────

class AssetStore(ABC):

    @abstractmethod
    def exists(self, key: AssetKey) -> bool:
        """True if a card is stored under key."""

    @abstractmethod
    def write(self, key: AssetKey, data: bytes) -> None:
        """Store data under key, overwriting any previous card."""

    @abstractmethod
    def read(self, key: AssetKey) -> bytes:
        """Return stored bytes. Raises FileNotFoundError if absent."""

    @abstractmethod
    def resolve_handle(self, key: AssetKey) -> str:
        """
        Return a URI the platform share sheet can open.
        Raises HandleUnavailableError if the store cannot produce one.
        """

    @abstractmethod
    def delete(self, key: AssetKey) -> bool:
        """Remove the card under key. Returns False if nothing was stored."""

    @abstractmethod
    def list_keys(self, folder_label: str) -> list[AssetKey]:
        """All keys currently stored under one folder label."""

    @abstractmethod
    def folders(self) -> list[str]:
        """Folder labels that currently hold at least one card."""

    def delete_product(self, product_id: str) -> int:
        """
        Remove a product's card from every folder.
        Called when the catalogue item itself is removed.
        """
        removed = 0
        for label in self.folders():
            key = AssetKey(product_id=product_id, folder_label=label)
            if self.delete(key):
                removed += 1
        log.info("product_assets_deleted", product_id=product_id, removed=removed)
        return removed


# ─── Local Filesystem Implementation ─────────────────────────────────────────

def _parse_file_name(file_name: str, folder_label: str) -> str | None:
    """Recover the product id from product_{id}_{label}.png, or None."""
    prefix = "product_"
    suffix = f"_{folder_label}{CARD_EXTENSION}"
    if file_name.startswith(prefix) and file_name.endswith(suffix):
        product_id = file_name[len(prefix):-len(suffix)]
        return product_id or None
    return None


class LocalAssetStore(AssetStore):
    """Cards stored as PNG files under {root}/{folder_label}/."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def path_for(self, key: AssetKey) -> Path:
        return asset_path(key, self.root)

    def exists(self, key: AssetKey) -> bool:
        return self.path_for(key).is_file()

    def write(self, key: AssetKey, data: bytes) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_bytes(data)
        tmp.replace(path)
        log.debug("asset_written", path=key.relative_path, size_bytes=len(data))

    def read(self, key: AssetKey) -> bytes:
        path = self.path_for(key)
        if not path.is_file():
            raise FileNotFoundError(f"Asset not found: {key.relative_path}")
        return path.read_bytes()

    def resolve_handle(self, key: AssetKey) -> str:
        path = self.path_for(key)
        try:
            return path.resolve(strict=True).as_uri()
        except (OSError, ValueError) as exc:
            raise HandleUnavailableError(
                f"No URI for {key.relative_path}: {exc}"
            ) from exc

    def delete(self, key: AssetKey) -> bool:
        path = self.path_for(key)
        if not path.is_file():
            return False
        path.unlink()
        log.debug("asset_deleted", path=key.relative_path)
        return True

    def list_keys(self, folder_label: str) -> list[AssetKey]:
        directory = folder_dir(folder_label, self.root)
        if not directory.is_dir():
            return []
        keys = []
        for entry in sorted(directory.glob(f"*{CARD_EXTENSION}")):
            product_id = _parse_file_name(entry.name, folder_label)
            if product_id is not None:
                keys.append(AssetKey(product_id=product_id, folder_label=folder_label))
        return keys

    def folders(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(d.name for d in self.root.iterdir() if d.is_dir())


# ─── In-Memory Implementation ────────────────────────────────────────────────

class InMemoryAssetStore(AssetStore):
    """
    Dict-backed store for development and tests.
    With resolvable=False it behaves like a platform that refuses to
    hand out file URIs, leaving only the inline fallback.
    """

    def __init__(self, resolvable: bool = True) -> None:
        self.resolvable = resolvable
        self._data: dict[AssetKey, bytes] = {}
        self._lock = threading.RLock()

    def exists(self, key: AssetKey) -> bool:
        with self._lock:
            return key in self._data

    def write(self, key: AssetKey, data: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(data)

    def read(self, key: AssetKey) -> bytes:
        with self._lock:
            try:
                return self._data[key]
            except KeyError:
                raise FileNotFoundError(f"Asset not found: {key.relative_path}") from None

    def resolve_handle(self, key: AssetKey) -> str:
        if not self.resolvable:
            raise HandleUnavailableError("In-memory store does not expose URIs.")
        if not self.exists(key):
            raise HandleUnavailableError(f"No URI for {key.relative_path}: not stored")
        return f"memory://{key.relative_path}"

    def delete(self, key: AssetKey) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def list_keys(self, folder_label: str) -> list[AssetKey]:
        with self._lock:
            return sorted(
                (k for k in self._data if k.folder_label == folder_label),
                key=lambda k: k.product_id,
            )

    def folders(self) -> list[str]:
        with self._lock:
            return sorted({k.folder_label for k in self._data})
