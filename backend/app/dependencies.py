# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - FastAPI Dependencies
Singleton providers for the JobStore and the render services (asset
store, catalogue, image source, settings). Instantiated once at startup
via the lifespan event in main.py; route handlers receive them through
FastAPI's Depends() injection.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends

from app.config import get_settings
from app.core.asset_store import LocalAssetStore
from app.core.catalogue import ImageSource, JsonProductRepository
from app.core.job_store import InMemoryJobStore, JobStore
from app.core.pipeline import RenderServices
from app.core.settings_store import JsonSettingsStore
from app.utils.logger import get_logger
from app.utils.storage import init_storage_dirs

log = get_logger(__name__)

# ─── JobStore Singleton ───────────────────────────────────────────────────────

_job_store: JobStore | None = None


def init_job_store() -> None:
    """Initialise the JobStore singleton. Called once during lifespan startup."""
    global _job_store
    log.info("init_job_store", backend="memory")
    _job_store = InMemoryJobStore()


def get_job_store() -> JobStore:
    """
    FastAPI dependency: inject the JobStore singleton into route handlers.

    Usage in a route:
        @router.get("/status/{job_id}")
        def get_status(job_id: str, store: JobStoreDep):
            job = store.get_job(job_id)
            ...
    """
    if _job_store is None:
        raise RuntimeError(
            "JobStore has not been initialised. "
            "Ensure init_job_store() is called during app lifespan startup."
        )
    return _job_store


# ─── Render Services Singleton ───────────────────────────────────────────────

_services: RenderServices | None = None


def init_services() -> None:
    """Create storage roots and wire the render collaborators from config."""
    global _services
    settings = get_settings()
    init_storage_dirs()
    _services = RenderServices(
        store=LocalAssetStore(settings.share_root),
        products=JsonProductRepository(settings.catalogue_file),
        images=ImageSource(settings.originals_dir),
        settings=JsonSettingsStore(settings.settings_file),
        font_path=settings.font_path,
    )
    log.info(
        "init_services",
        share_root=str(settings.share_root),
        catalogue=str(settings.catalogue_file),
    )


def get_services() -> RenderServices:
    if _services is None:
        raise RuntimeError(
            "Render services have not been initialised. "
            "Ensure init_services() is called during app lifespan startup."
        )
    return _services


# Annotated type aliases for clean route signatures
JobStoreDep = Annotated[JobStore, Depends(get_job_store)]
ServicesDep = Annotated[RenderServices, Depends(get_services)]
