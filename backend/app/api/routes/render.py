# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - POST /render
Synchronous batch render: ensures a card exists for every requested
product and returns per-item successes and failures.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from app.config import get_settings
from app.core.pipeline import render_on_demand
from app.dependencies import ServicesDep
from app.models.job import BatchRequest, RenderResponse
from app.utils.logger import get_logger

router = APIRouter(tags=["render"])
log = get_logger(__name__)


def check_batch_size(request: BatchRequest) -> None:
    limit = get_settings().max_batch_size
    if len(request.product_ids) > limit:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Batch of {len(request.product_ids)} exceeds the limit of {limit} products.",
        )


@router.post(
    "/render",
    response_model=RenderResponse,
    summary="Render missing product cards",
    description=(
        "Render cards for the given products in the target folder. "
        "Cards that already exist are reused, not re-rendered. "
        "Per-product problems are reported in result.failures."
    ),
)
async def render_batch(request: BatchRequest, services: ServicesDep) -> RenderResponse:
    check_batch_size(request)
    target = request.to_target()

    result = await render_on_demand(request.product_ids, target, services)

    log.info(
        "render_request_complete",
        folder=target.folder_label,
        rendered=result.rendered_count,
        reused=result.reused_count,
        failed=len(result.failures),
    )
    return RenderResponse(
        folder_label=target.folder_label,
        mode=target.mode,
        rendered=result.rendered_count,
        reused=result.reused_count,
        result=result,
    )
