# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Catalogue Collaborators
Read-only product lookup and source-image loading. The catalogue itself
is owned elsewhere; these adapters only read it.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ValidationError

from app.models.product import ProductRenderSpec
from app.utils.image_utils import decode_data_uri
from app.utils.logger import get_logger
from app.utils.storage import original_image_path

log = get_logger(__name__)


# ─── Product Repository ──────────────────────────────────────────────────────

class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Optional[ProductRenderSpec]:
        """Return the product, or None if it is not in the catalogue."""


class InMemoryProductRepository(ProductRepository):

    def __init__(self, products: Iterable[ProductRenderSpec] = ()) -> None:
        self._products = {p.product_id: p for p in products}

    def add(self, product: ProductRenderSpec) -> None:
        self._products[product.product_id] = product

    def remove(self, product_id: str) -> None:
        self._products.pop(product_id, None)

    def get_by_id(self, product_id: str) -> Optional[ProductRenderSpec]:
        return self._products.get(product_id)


class JsonProductRepository(ProductRepository):
    """
    Reads a JSON list of catalogue products on every lookup, so edits
    made by the catalogue screens are visible to the next render.
    Records that fail validation are skipped with a warning.
    """

    def __init__(self, catalogue_file: Path) -> None:
        self.catalogue_file = catalogue_file

    def _records(self) -> list[dict]:
        if not self.catalogue_file.exists():
            return []
        try:
            data = json.loads(self.catalogue_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            log.warning("catalogue_unreadable", path=str(self.catalogue_file), error=str(exc))
            return []
        if isinstance(data, dict):
            data = data.get("products", [])
        return [r for r in data if isinstance(r, dict)]

    def get_by_id(self, product_id: str) -> Optional[ProductRenderSpec]:
        for record in self._records():
            if str(record.get("id")) != product_id:
                continue
            try:
                return ProductRenderSpec.model_validate(record)
            except ValidationError as exc:
                log.warning("catalogue_record_invalid", product_id=product_id, error=str(exc))
                return None
        return None


# ─── Image Source ────────────────────────────────────────────────────────────

class ImageSource:
    """
    Loads a product's source photo from, in order: in-memory bytes,
    an embedded data URI, or a reference under the private originals root.
    """

    def __init__(self, originals_dir: Optional[Path] = None) -> None:
        self.originals_dir = originals_dir

    def load(self, spec: ProductRenderSpec) -> Optional[bytes]:
        if spec.image_bytes:
            return spec.image_bytes

        if spec.image_data_uri:
            try:
                return decode_data_uri(spec.image_data_uri)
            except ValueError as exc:
                log.warning("image_data_uri_invalid", product_id=spec.product_id, error=str(exc))

        if spec.image_path:
            try:
                path = original_image_path(spec.image_path, self.originals_dir)
            except (ValueError, OSError) as exc:
                log.warning("image_path_rejected", product_id=spec.product_id, error=str(exc))
                return None
            try:
                if path.is_file():
                    return path.read_bytes()
            except OSError as exc:
                log.warning("image_file_unreadable", product_id=spec.product_id, error=str(exc))
                return None
            log.warning("image_file_missing", product_id=spec.product_id, path=spec.image_path)

        return None
