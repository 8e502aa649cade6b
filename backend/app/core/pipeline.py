# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Render-on-Demand Orchestrator
Drives a batch of products through render and share, strictly one item
at a time, with progress reporting and per-item structured failures.

Per product:
  1. card already stored         -> resolve handle, no render
  2. product lookup              -> ProductMissing
  3. source image                -> ImageMissing
  4. render -> write -> resolve  -> RenderFailure(stage) / PersistFailure /
                                    ResolutionFailure
  5. progress(processed, total)

Only a render-surface acquisition failure aborts the batch.
share_products_pdf bundles the shareable cards of a batch into one PDF.
"""

from __future__ import annotations

import asyncio
import traceback
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Sequence

import structlog
from pydantic import ValidationError

from app.api.middleware.error_handler import EmptyShareError, PipelineError, RenderStageError
from app.core.asset_store import AssetStore
from app.core.catalogue import ImageSource, ProductRepository
from app.core.job_store import JobStore
from app.core.settings_store import SettingsProvider
from app.core.share_resolver import Resolved, require_handles, resolve_asset, resolve_share_batch
from app.models.asset import AssetKey, RenderedAsset, card_file_name
from app.models.job import JobStage
from app.models.product import RenderTarget
from app.models.result import (
    FailureReason,
    ItemFailure,
    RenderBatchResult,
    RenderedItem,
    ShareBatchResult,
    ShareHandle,
)
from app.modules.rendering.card_renderer import render_card
from app.modules.rendering.pdf_export import DEFAULT_PDF_TITLE, assemble_pdf
from app.modules.rendering.surface import RenderSurface, open_surface
from app.utils.logger import get_logger

log = get_logger(__name__)

ProgressSink = Callable[[int, int], None]
StageHook = Callable[[JobStage, int], None]


@dataclass
class RenderServices:
    """Collaborators one batch needs. Built once per app, shared by batches."""
    store: AssetStore
    products: ProductRepository
    images: ImageSource
    settings: SettingsProvider
    font_path: Optional[Path] = None


# ─── Share Sheet Collaborator ────────────────────────────────────────────────

@dataclass(frozen=True)
class ShareOutcome:
    completed: bool
    activity: Optional[str] = None


class ShareSheet(ABC):
    """The platform dialog that receives resolved handles."""

    @abstractmethod
    async def share(self, handles: Sequence[ShareHandle], title: str) -> ShareOutcome:
        """Present handles to the user under a dialog title."""


# ─── Helpers ─────────────────────────────────────────────────────────────────

def _expected_path(product_id: str, folder_label: str) -> str:
    return f"{folder_label}/{card_file_name(product_id, folder_label)}"


def _failure(
    product_id: str,
    target: RenderTarget,
    reason: FailureReason,
    stage: Optional[str] = None,
    detail: Optional[str] = None,
) -> ItemFailure:
    return ItemFailure(
        product_id=product_id,
        path=_expected_path(product_id, target.folder_label),
        reason=reason,
        stage=stage,
        detail=detail,
    )


def _make_key(product_id: str, target: RenderTarget) -> Optional[AssetKey]:
    try:
        return AssetKey(product_id=product_id, folder_label=target.folder_label)
    except ValidationError:
        return None


async def _resolve_into(
    result: RenderBatchResult,
    key: AssetKey,
    store: AssetStore,
    target: RenderTarget,
    rendered: bool,
) -> None:
    outcome = await asyncio.to_thread(resolve_asset, key, store)
    if isinstance(outcome, Resolved):
        result.successes.append(
            RenderedItem(product_id=key.product_id, handle=outcome.handle, rendered=rendered)
        )
    else:
        result.failures.append(
            _failure(key.product_id, target, FailureReason.RESOLUTION_FAILURE, detail=outcome.detail)
        )


async def _render_one(
    product_id: str,
    target: RenderTarget,
    services: RenderServices,
    surface: RenderSurface,
    result: RenderBatchResult,
) -> None:
    key = _make_key(product_id, target)
    if key is None:
        result.failures.append(
            _failure(product_id, target, FailureReason.PRODUCT_MISSING, detail="invalid product id")
        )
        return

    try:
        stored = await asyncio.to_thread(services.store.exists, key)
    except OSError as exc:
        log.warning("card_lookup_failed", product_id=product_id, error=str(exc))
        result.failures.append(
            _failure(product_id, target, FailureReason.PERSIST_FAILURE, detail=str(exc))
        )
        return
    if stored:
        log.debug("card_reused", product_id=product_id)
        await _resolve_into(result, key, services.store, target, rendered=False)
        return

    spec = await asyncio.to_thread(services.products.get_by_id, product_id)
    if spec is None:
        log.warning("product_missing", product_id=product_id)
        result.failures.append(_failure(product_id, target, FailureReason.PRODUCT_MISSING))
        return

    if not spec.has_image_source():
        log.warning("image_missing", product_id=product_id, reason="no image configured")
        result.failures.append(_failure(product_id, target, FailureReason.IMAGE_MISSING))
        return

    try:
        image_bytes = await asyncio.to_thread(services.images.load, spec)
    except OSError as exc:
        log.warning("image_unreadable", product_id=product_id, error=str(exc))
        result.failures.append(
            _failure(product_id, target, FailureReason.IMAGE_MISSING, detail=str(exc))
        )
        return
    if not image_bytes:
        log.warning("image_missing", product_id=product_id)
        result.failures.append(_failure(product_id, target, FailureReason.IMAGE_MISSING))
        return

    try:
        png = await render_card(spec, target, image_bytes, surface, services.settings)
    except RenderStageError as exc:
        log.warning("card_render_failed", product_id=product_id, stage=exc.stage, error=str(exc))
        result.failures.append(
            _failure(product_id, target, FailureReason.RENDER_FAILURE, stage=exc.stage, detail=str(exc))
        )
        return

    asset = RenderedAsset(key=key, data=png)
    try:
        await asyncio.to_thread(services.store.write, asset.key, asset.data)
    except OSError as exc:
        log.error("card_persist_failed", product_id=product_id, error=str(exc))
        result.failures.append(
            _failure(product_id, target, FailureReason.PERSIST_FAILURE, detail=str(exc))
        )
        return

    log.info("card_persisted", product_id=product_id, path=key.relative_path, size_bytes=asset.size_bytes)
    await _resolve_into(result, key, services.store, target, rendered=True)


# ─── Public API ──────────────────────────────────────────────────────────────

async def render_on_demand(
    product_ids: Sequence[str],
    target: RenderTarget,
    services: RenderServices,
    progress: Optional[ProgressSink] = None,
    surface: Optional[RenderSurface] = None,
) -> RenderBatchResult:
    """
    Ensure a card exists for every product id, rendering only the missing ones.
    Raises SurfaceAcquisitionError if no surface can be opened; every other
    problem is recorded per item in the returned result.
    """
    if surface is None:
        surface = await asyncio.to_thread(open_surface, services.font_path)

    result = RenderBatchResult()
    total = len(product_ids)

    with structlog.contextvars.bound_contextvars(batch_id=uuid.uuid4().hex[:12], folder=target.folder_label):
        log.info("render_batch_start", mode=target.mode.value, total=total)
        for i, product_id in enumerate(product_ids, start=1):
            await _render_one(product_id, target, services, surface, result)
            if progress is not None:
                progress(i, total)
        log.info(
            "render_batch_complete",
            rendered=result.rendered_count,
            reused=result.reused_count,
            failed=len(result.failures),
        )
    return result


async def share_products(
    product_ids: Sequence[str],
    target: RenderTarget,
    services: RenderServices,
    share_sheet: Optional[ShareSheet] = None,
    title: str = "Share Products",
    progress: Optional[ProgressSink] = None,
    on_stage: Optional[StageHook] = None,
    surface: Optional[RenderSurface] = None,
) -> ShareBatchResult:
    """
    Render whatever is missing, resolve every card to a share handle and
    hand the handles to the share sheet.
    Raises EmptyShareError when not a single card could be resolved.
    """
    total = len(product_ids)

    if on_stage is not None:
        on_stage(JobStage.RENDERING, total)
    rendered = await render_on_demand(product_ids, target, services, progress, surface)

    keys = []
    invalid = []
    for product_id in product_ids:
        key = _make_key(product_id, target)
        if key is None:
            invalid.append(_failure(product_id, target, FailureReason.ASSET_MISSING, detail="invalid product id"))
        else:
            keys.append(key)

    if on_stage is not None:
        on_stage(JobStage.RESOLVING, len(keys))
    result = await resolve_share_batch(keys, services.store, progress)
    result.folder_label = target.folder_label
    result.diagnostics.extend(invalid)
    result.render_failures = list(rendered.failures)

    try:
        require_handles(result)
    except EmptyShareError:
        log.warning("share_empty", folder=target.folder_label, requested=total)
        raise

    if share_sheet is not None:
        outcome = await share_sheet.share(result.handles, title)
        log.info("share_sheet_closed", completed=outcome.completed, activity=outcome.activity)

    log.info(
        "share_complete",
        folder=target.folder_label,
        shared=len(result.handles),
        unavailable=len(result.diagnostics),
    )
    return result


async def share_products_pdf(
    product_ids: Sequence[str],
    target: RenderTarget,
    services: RenderServices,
    title: str = DEFAULT_PDF_TITLE,
    progress: Optional[ProgressSink] = None,
    surface: Optional[RenderSurface] = None,
) -> tuple[ShareBatchResult, bytes]:
    """
    Render and resolve like share_products, then bundle every shareable
    card into one multi-page PDF in request order.
    Raises EmptyShareError when no card could be resolved or read back.
    """
    result = await share_products(
        product_ids, target, services, title=title, progress=progress, surface=surface
    )

    cards = []
    handles = []
    for handle in result.handles:
        key = AssetKey(product_id=handle.product_id, folder_label=result.folder_label)
        try:
            cards.append(await asyncio.to_thread(services.store.read, key))
        except OSError as exc:
            log.warning("pdf_card_unreadable", product_id=handle.product_id, error=str(exc))
            result.diagnostics.append(
                _failure(handle.product_id, target, FailureReason.RESOLUTION_FAILURE, detail=str(exc))
            )
            continue
        handles.append(handle)
    result.handles = handles
    require_handles(result)

    try:
        pdf = await asyncio.to_thread(assemble_pdf, cards, title)
    except (ValueError, OSError) as exc:
        raise PipelineError(f"PDF assembly failed: {exc}") from exc
    log.info("share_pdf_built", folder=target.folder_label, pages=len(cards), size_bytes=len(pdf))
    return result, pdf


# ─── Background Job ──────────────────────────────────────────────────────────

async def run_share_job(
    job_id: str,
    job_store: JobStore,
    services: RenderServices,
    product_ids: Sequence[str],
    target: RenderTarget,
    title: str = "Share Products",
    share_sheet: Optional[ShareSheet] = None,
) -> None:
    """
    Share batch coroutine. Runs as a FastAPI background task.
    Progress flows into the JobStore; any unexpected exception marks the
    job FAILED with the error message.
    """
    structlog.contextvars.bind_contextvars(job_id=job_id, folder=target.folder_label)

    def _stage(stage: JobStage, total: int) -> None:
        job_store.advance_stage(job_id, stage, total=total)
        log.info("stage_start", stage=stage.value, total=total)

    try:
        result = await share_products(
            product_ids,
            target,
            services,
            share_sheet=share_sheet,
            title=title,
            progress=job_store.progress_sink(job_id),
            on_stage=_stage,
        )
        job_store.update_job(job_id, result=result)
        job_store.advance_stage(job_id, JobStage.DONE)
        log.info("share_job_complete", job_id=job_id, partial=result.is_partial)
    except EmptyShareError as exc:
        job_store.update_job(job_id, result=exc.result)
        job_store.fail_job(job_id, str(exc))
    except Exception as exc:
        err_msg = f"{type(exc).__name__}: {exc}"
        log.error(
            "share_job_fatal_error",
            job_id=job_id,
            error=err_msg,
            traceback=traceback.format_exc(),
        )
        job_store.fail_job(job_id, err_msg)
    finally:
        structlog.contextvars.clear_contextvars()
