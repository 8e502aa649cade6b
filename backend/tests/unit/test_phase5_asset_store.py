# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 5 - AssetKey and AssetStore tests.
Local store runs against a temp directory; no real storage paths needed.
"""

import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from app.models.asset import AssetKey


# ─── AssetKey ────────────────────────────────────────────────────────────────

def test_asset_key_path_is_deterministic():
    a = AssetKey(product_id="42", folder_label="Wholesale")
    b = AssetKey(product_id="42", folder_label="Wholesale")
    assert a == b
    assert a.relative_path == "Wholesale/product_42_Wholesale.png"
    assert str(a) == a.relative_path


def test_asset_keys_do_not_collide_across_labels():
    labels = ["Wholesale", "Resell", "Retail", "Summer Sale"]
    paths = {AssetKey(product_id="1", folder_label=label).relative_path for label in labels}
    assert len(paths) == len(labels)


@pytest.mark.parametrize("bad", ["", "  ", "a/b", "a\\b", "..", "."])
def test_asset_key_rejects_path_segments(bad):
    with pytest.raises(ValidationError):
        AssetKey(product_id="1", folder_label=bad)
    with pytest.raises(ValidationError):
        AssetKey(product_id=bad, folder_label="Resell")


# ─── LocalAssetStore ─────────────────────────────────────────────────────────

def test_local_store_write_read_exists():
    from app.core.asset_store import LocalAssetStore

    with tempfile.TemporaryDirectory() as tmp:
        store = LocalAssetStore(Path(tmp))
        key = AssetKey(product_id="7", folder_label="Resell")

        assert not store.exists(key)
        store.write(key, b"first")
        assert store.exists(key)
        assert (Path(tmp) / "Resell" / "product_7_Resell.png").read_bytes() == b"first"

        store.write(key, b"second")
        assert store.read(key) == b"second"


def test_local_store_resolve_handle_is_file_uri():
    from app.core.asset_store import LocalAssetStore

    with tempfile.TemporaryDirectory() as tmp:
        store = LocalAssetStore(Path(tmp))
        key = AssetKey(product_id="7", folder_label="Resell")
        store.write(key, b"png")

        uri = store.resolve_handle(key)
        assert uri.startswith("file://")
        assert uri.endswith("/Resell/product_7_Resell.png")


def test_local_store_resolve_missing_raises():
    from app.api.middleware.error_handler import HandleUnavailableError
    from app.core.asset_store import LocalAssetStore

    with tempfile.TemporaryDirectory() as tmp:
        store = LocalAssetStore(Path(tmp))
        with pytest.raises(HandleUnavailableError):
            store.resolve_handle(AssetKey(product_id="x", folder_label="Resell"))


def test_local_store_read_missing_raises():
    from app.core.asset_store import LocalAssetStore

    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(FileNotFoundError):
            LocalAssetStore(Path(tmp)).read(AssetKey(product_id="x", folder_label="Resell"))


def test_local_store_list_and_delete_product():
    from app.core.asset_store import LocalAssetStore

    with tempfile.TemporaryDirectory() as tmp:
        store = LocalAssetStore(Path(tmp))
        for label in ("Wholesale", "Resell"):
            for pid in ("1", "2"):
                store.write(AssetKey(product_id=pid, folder_label=label), b"png")
        # Stray file that does not follow the naming pattern
        (Path(tmp) / "Resell" / "notes.png").write_bytes(b"x")

        assert [k.product_id for k in store.list_keys("Resell")] == ["1", "2"]
        assert store.folders() == ["Resell", "Wholesale"]

        assert store.delete_product("1") == 2
        assert [k.product_id for k in store.list_keys("Wholesale")] == ["2"]
        assert store.delete_product("1") == 0


def test_local_store_delete_returns_false_when_absent():
    from app.core.asset_store import LocalAssetStore

    with tempfile.TemporaryDirectory() as tmp:
        store = LocalAssetStore(Path(tmp))
        assert store.delete(AssetKey(product_id="1", folder_label="Resell")) is False
        assert store.list_keys("Nowhere") == []


# ─── InMemoryAssetStore ──────────────────────────────────────────────────────

def test_memory_store_roundtrip_and_folders():
    from app.core.asset_store import InMemoryAssetStore

    store = InMemoryAssetStore()
    key = AssetKey(product_id="3", folder_label="Wholesale")
    store.write(key, b"data")

    assert store.exists(key)
    assert store.read(key) == b"data"
    assert store.resolve_handle(key) == "memory://Wholesale/product_3_Wholesale.png"
    assert store.folders() == ["Wholesale"]
    assert store.delete(key) is True
    assert not store.exists(key)


def test_memory_store_can_refuse_uris():
    from app.api.middleware.error_handler import HandleUnavailableError
    from app.core.asset_store import InMemoryAssetStore

    store = InMemoryAssetStore(resolvable=False)
    key = AssetKey(product_id="3", folder_label="Wholesale")
    store.write(key, b"data")

    with pytest.raises(HandleUnavailableError):
        store.resolve_handle(key)
    assert store.read(key) == b"data"
