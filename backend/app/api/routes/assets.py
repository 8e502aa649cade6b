# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Asset routes
GET    /assets/{folder_label}/{file_name}  streams a rendered card
DELETE /products/{product_id}/assets       drops a removed product's cards
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from app.config import get_settings
from app.dependencies import ServicesDep
from app.models.asset import CARD_EXTENSION
from app.utils.logger import get_logger
from app.utils.storage import safe_join

router = APIRouter(tags=["assets"])
log = get_logger(__name__)


def _safe_resolve(folder_label: str, file_name: str) -> Path:
    """
    Resolve and validate the requested card path.
    - Ensures the path is inside the share root
    - Rejects path traversal attempts (../ etc.)
    - Only PNG cards are servable
    Raises HTTPException on any violation.
    """
    try:
        requested = safe_join(get_settings().share_root, f"{folder_label}/{file_name}")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Path traversal not allowed.",
        )

    if requested.suffix.lower() != CARD_EXTENSION:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"File type '{requested.suffix}' not servable.",
        )

    return requested


@router.get(
    "/assets/{folder_label}/{file_name}",
    summary="Retrieve a rendered card",
    description=(
        "Stream a rendered card from the share root, e.g. "
        "'/assets/Wholesale/product_42_Wholesale.png'."
    ),
)
async def get_asset(folder_label: str, file_name: str) -> FileResponse:
    resolved = _safe_resolve(folder_label, file_name)

    if not resolved.is_file():
        log.warning("asset_not_found", folder=folder_label, file_name=file_name)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card '{folder_label}/{file_name}' has not been rendered.",
        )

    log.debug("asset_served", folder=folder_label, file_name=file_name)
    return FileResponse(path=str(resolved), media_type="image/png")


@router.delete(
    "/products/{product_id}/assets",
    summary="Delete a product's rendered cards",
    description="Removes the product's card from every folder. Used when the catalogue item is deleted.",
)
async def delete_product_assets(product_id: str, services: ServicesDep) -> dict:
    if "/" in product_id or "\\" in product_id or product_id in (".", ".."):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"'{product_id}' is not a valid product id.",
        )
    removed = services.store.delete_product(product_id)
    return {"product_id": product_id, "removed": removed}
