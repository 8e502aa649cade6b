# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 8 - Catalogue collaborator tests.
Product repository adapters, image source lookup order, data URI helpers.
"""

import json
import tempfile
from pathlib import Path

import pytest

from app.models.product import ProductRenderSpec


# ─── JsonProductRepository ───────────────────────────────────────────────────

def test_json_repository_reads_on_every_lookup():
    from app.core.catalogue import JsonProductRepository

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "catalogue.json"
        repo = JsonProductRepository(path)
        assert repo.get_by_id("1") is None

        path.write_text(json.dumps([{"id": 1, "name": "Frock", "resell": 99}]))
        spec = repo.get_by_id("1")
        assert spec.name == "Frock"
        assert spec.resell == "99"

        path.write_text(json.dumps({"products": [{"id": "1", "name": "Renamed"}]}))
        assert repo.get_by_id("1").name == "Renamed"


def test_json_repository_tolerates_bad_files():
    from app.core.catalogue import JsonProductRepository

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "catalogue.json"
        path.write_text("[{broken")
        assert JsonProductRepository(path).get_by_id("1") is None

        path.write_text(json.dumps([{"id": "1", "name": ["not", "a", "string"]}]))
        assert JsonProductRepository(path).get_by_id("1") is None


def test_in_memory_repository_add_remove():
    from app.core.catalogue import InMemoryProductRepository

    repo = InMemoryProductRepository()
    repo.add(ProductRenderSpec(product_id="1"))
    assert repo.get_by_id("1") is not None
    repo.remove("1")
    assert repo.get_by_id("1") is None


# ─── ImageSource ─────────────────────────────────────────────────────────────

def test_image_source_prefers_in_memory_bytes():
    from app.core.catalogue import ImageSource
    from app.utils.image_utils import encode_data_uri

    spec = ProductRenderSpec(
        product_id="1",
        image_bytes=b"raw",
        image_data_uri=encode_data_uri(b"from-uri"),
    )
    assert ImageSource().load(spec) == b"raw"


def test_image_source_decodes_data_uri():
    from app.core.catalogue import ImageSource
    from app.utils.image_utils import encode_data_uri

    spec = ProductRenderSpec(product_id="1", image_data_uri=encode_data_uri(b"from-uri", "image/jpeg"))
    assert ImageSource().load(spec) == b"from-uri"


def test_image_source_reads_stored_reference():
    from app.core.catalogue import ImageSource

    with tempfile.TemporaryDirectory() as tmp:
        root = Path(tmp)
        (root / "shop").mkdir()
        (root / "shop" / "p1.jpg").write_bytes(b"jpeg-bytes")
        source = ImageSource(root)

        assert source.load(ProductRenderSpec(product_id="1", image_path="shop/p1.jpg")) == b"jpeg-bytes"
        assert source.load(ProductRenderSpec(product_id="2", image_path="shop/none.jpg")) is None
        assert source.load(ProductRenderSpec(product_id="3", image_path="../../etc/passwd")) is None


def test_image_source_nothing_configured():
    from app.core.catalogue import ImageSource
    assert ImageSource().load(ProductRenderSpec(product_id="1")) is None


def test_image_source_overlong_reference_is_none():
    from app.core.catalogue import ImageSource

    with tempfile.TemporaryDirectory() as tmp:
        spec = ProductRenderSpec(product_id="1", image_path="y" * 300 + ".png")
        assert ImageSource(Path(tmp)).load(spec) is None


# ─── Data URI helpers ────────────────────────────────────────────────────────

def test_decode_data_uri_rejects_non_base64():
    from app.utils.image_utils import decode_data_uri

    with pytest.raises(ValueError):
        decode_data_uri("https://example.com/a.png")
    with pytest.raises(ValueError):
        decode_data_uri("data:image/png,plain")
    with pytest.raises(ValueError):
        decode_data_uri("data:image/png;base64,@@@")
