# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Global Error Handler
Domain exceptions raised by the render and share pipeline, and the
handlers that convert them into structured JSON error responses.
Registered on the FastAPI app in main.py.
"""

from __future__ import annotations

import traceback
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.utils.logger import get_logger

if TYPE_CHECKING:
    from app.models.result import ShareBatchResult

log = get_logger(__name__)


class PipelineError(RuntimeError):
    """Raised when a pipeline stage fails in a recoverable way."""


class RenderStageError(PipelineError):
    """A single card failed in one of compose / rasterize / watermark / encode."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage}: {message}")
        self.stage = stage


class SurfaceAcquisitionError(PipelineError):
    """The render surface could not be obtained. Fatal for the whole batch."""


class SurfaceBusyError(SurfaceAcquisitionError):
    """The render surface is already held by another render."""


class HandleUnavailableError(PipelineError):
    """The asset store cannot produce a shareable URI for a stored card."""


class EmptyShareError(PipelineError):
    """No card in a share batch could be resolved to a handle."""

    def __init__(self, result: "ShareBatchResult") -> None:
        super().__init__(result.diagnostic_report())
        self.result = result


class JobNotFoundError(KeyError):
    """Raised when a job_id does not exist in the store."""


def _error_body(code: str, message: str, detail: str | list | None = None) -> dict:
    body = {"error": {"code": code, "message": message}}
    if detail:
        body["error"]["detail"] = detail
    return body


def register_error_handlers(app: FastAPI) -> None:
    """
    Register all global exception handlers on the FastAPI application.
    Call this in main.py after creating the app instance.
    """

    @app.exception_handler(EmptyShareError)
    async def empty_share_handler(
        req: Request, exc: EmptyShareError
    ) -> JSONResponse:
        log.warning(
            "empty_share",
            path=str(req.url),
            unresolved=len(exc.result.diagnostics),
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=_error_body(
                code="EMPTY_SHARE",
                message=str(exc),
                detail=[d.model_dump(mode="json") for d in exc.result.diagnostics],
            ),
        )

    @app.exception_handler(SurfaceAcquisitionError)
    async def surface_handler(
        req: Request, exc: SurfaceAcquisitionError
    ) -> JSONResponse:
        log.error("surface_unavailable", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=_error_body(
                code="SURFACE_UNAVAILABLE",
                message="Rendering surface could not be acquired.",
                detail=str(exc),
            ),
        )

    @app.exception_handler(JobNotFoundError)
    async def job_not_found_handler(
        req: Request, exc: JobNotFoundError
    ) -> JSONResponse:
        log.warning("job_not_found", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=_error_body(
                code="JOB_NOT_FOUND",
                message=f"Job not found: {exc}",
            ),
        )

    @app.exception_handler(PipelineError)
    async def pipeline_error_handler(
        req: Request, exc: PipelineError
    ) -> JSONResponse:
        log.error("pipeline_error", path=str(req.url), error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                code="PIPELINE_ERROR",
                message=str(exc),
            ),
        )

    @app.exception_handler(Exception)
    async def generic_handler(req: Request, exc: Exception) -> JSONResponse:
        tb = traceback.format_exc()
        log.error(
            "unhandled_exception",
            path=str(req.url),
            error=str(exc),
            exc_type=type(exc).__name__,
            traceback=tb,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(
                code="INTERNAL_SERVER_ERROR",
                message="An unexpected error occurred.",
            ),
        )
