# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - GET /status/{job_id}
Returns current share-job status, stage, and progress for polling.
"""

from __future__ import annotations

from fastapi import APIRouter

from app.api.middleware.error_handler import JobNotFoundError
from app.dependencies import JobStoreDep
from app.utils.logger import get_logger

router = APIRouter(tags=["status"])
log = get_logger(__name__)


@router.get(
    "/status/{job_id}",
    summary="Poll share job progress",
    description=(
        "Returns status, stage, processed/total and a progress percentage (0-100) "
        "for the current stage. When status is 'done', result.handles lists the "
        "shareable cards and result.diagnostics explains any that were skipped. "
        "A 'failed' job with a result means nothing could be shared."
    ),
)
async def get_status(job_id: str, store: JobStoreDep) -> dict:
    job = store.get_job(job_id)
    if job is None:
        raise JobNotFoundError(job_id)

    log.debug("status_polled", job_id=job_id, status=job.status.value, progress=job.progress)
    return job.to_status_response()
