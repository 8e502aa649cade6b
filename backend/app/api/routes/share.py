# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - POST /share
Creates a share job and runs render-on-demand plus handle resolution
as a FastAPI background task. Progress is polled via GET /status/{job_id}.
With ?wait=true the batch runs inline and the handles are returned directly.
POST /share/pdf returns the shareable cards as one multi-page PDF.
"""

from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, BackgroundTasks, status
from fastapi.responses import JSONResponse, Response

from app.api.routes.render import check_batch_size
from app.config import get_settings
from app.core.pipeline import run_share_job, share_products, share_products_pdf
from app.dependencies import JobStoreDep, ServicesDep
from app.models.job import BatchRequest, ShareJobResponse
from app.modules.rendering.pdf_export import PDF_MIME
from app.utils.logger import get_logger

router = APIRouter(tags=["share"])
log = get_logger(__name__)


@router.post(
    "/share",
    response_model=None,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Submit a share batch",
    description=(
        "Renders any missing cards, then resolves every card to a shareable "
        "handle. Returns a job_id for polling progress via GET /status/{job_id}. "
        "The finished job carries the handles plus a diagnostic for each "
        "product that could not be shared. With wait=true the result is "
        "returned directly, or 422 when no card at all could be shared."
    ),
)
async def submit_share(
    request: BatchRequest,
    background_tasks: BackgroundTasks,
    store: JobStoreDep,
    services: ServicesDep,
    wait: bool = False,
) -> ShareJobResponse | JSONResponse:
    check_batch_size(request)
    target = request.to_target()
    title = get_settings().share_dialog_title

    if wait:
        # EmptyShareError propagates to the 422 handler
        result = await share_products(request.product_ids, target, services, title=title)
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content=result.model_dump(mode="json"),
        )

    job = store.create_job()
    store.update_job(job.job_id, total=len(request.product_ids))

    background_tasks.add_task(
        run_share_job,
        job.job_id,
        store,
        services,
        list(request.product_ids),
        target,
        title,
    )
    log.info(
        "share_job_submitted",
        job_id=job.job_id,
        folder=target.folder_label,
        count=len(request.product_ids),
    )
    return ShareJobResponse(job_id=job.job_id)


@router.post(
    "/share/pdf",
    response_class=Response,
    summary="Share a batch as one PDF",
    description=(
        "Renders any missing cards, resolves them and returns every "
        "shareable card as one page of a PDF, in request order. "
        "Returns 422 when no card at all could be shared."
    ),
)
async def share_pdf(request: BatchRequest, services: ServicesDep) -> Response:
    check_batch_size(request)
    target = request.to_target()

    result, pdf = await share_products_pdf(request.product_ids, target, services)
    file_name = quote(f"catalogue_{target.folder_label}.pdf")
    return Response(
        content=pdf,
        media_type=PDF_MIME,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{file_name}",
            "X-Cards-Shared": str(len(result.handles)),
            "X-Cards-Unavailable": str(len(result.diagnostics)),
        },
    )
