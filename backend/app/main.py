# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - FastAPI Application Entry Point
Creates the app, registers lifespan events, CORS, routers,
and global error handlers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.middleware.error_handler import register_error_handlers
from app.api.routes import assets, render, share, status
from app.config import get_settings
from app.dependencies import init_job_store, init_services
from app.utils.logger import configure_logging, get_logger

log = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Startup: configure logging, initialise JobStore and render services.
    """
    # ── Startup ──────────────────────────────────────────────────────────────
    configure_logging()
    settings = get_settings()

    log.info(
        "catshare_startup",
        version=VERSION,
        storage_root=str(settings.storage_root),
        font_path=str(settings.font_path) if settings.font_path else None,
        max_batch_size=settings.max_batch_size,
    )

    init_job_store()
    init_services()

    log.info("catshare_ready")
    yield

    # ── Shutdown ─────────────────────────────────────────────────────────────
    log.info("catshare_shutdown")


def create_app() -> FastAPI:
    app = FastAPI(
        title="CatShare Cards",
        summary="On-demand product card rendering and share-handle resolution.",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",   # Vite dev server
            "http://localhost:3000",   # Alternative dev port
            "capacitor://localhost",   # Mobile shell
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Error Handlers ───────────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────────────
    app.include_router(render.router)
    app.include_router(share.router)
    app.include_router(status.router)
    app.include_router(assets.router)

    # ── Health Check ─────────────────────────────────────────────────────────
    @app.get("/health", tags=["health"], summary="Health check")
    async def health() -> dict:
        return {
            "status": "ok",
            "service": "catshare-cards",
            "version": VERSION,
        }

    return app


# Module-level app instance for uvicorn
app = create_app()
