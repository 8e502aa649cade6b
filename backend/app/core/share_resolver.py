# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Share Resolver
Turns stored cards into handles the share sheet can consume.

Per key, evaluated in order until one yields a handle:
  1. existence gate   - missing card  -> AssetMissing (expected path reported)
  2. platform URI     - store.resolve_handle()
  3. inline payload   - data:image/png;base64,...
All strategies failing -> ResolutionFailure.

Strategies return typed Resolved / Unresolved values; the next strategy
is tried on Unresolved, never on a raised exception.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from app.api.middleware.error_handler import EmptyShareError, HandleUnavailableError
from app.core.asset_store import AssetStore
from app.models.asset import AssetKey
from app.models.result import (
    FailureReason,
    HandleKind,
    ItemFailure,
    ShareBatchResult,
    ShareHandle,
)
from app.utils.image_utils import encode_data_uri
from app.utils.logger import get_logger
from app.utils.storage import get_asset_url

log = get_logger(__name__)

ProgressSink = Callable[[int, int], None]


@dataclass(frozen=True)
class Resolved:
    handle: ShareHandle


@dataclass(frozen=True)
class Unresolved:
    key: AssetKey
    reason: FailureReason
    detail: str = ""

    def to_failure(self) -> ItemFailure:
        return ItemFailure(
            product_id=self.key.product_id,
            path=self.key.relative_path,
            reason=self.reason,
            detail=self.detail or None,
        )


Resolution = Union[Resolved, Unresolved]
Strategy = Callable[[AssetKey, AssetStore], Resolution]


# ─── Strategies ──────────────────────────────────────────────────────────────

def platform_uri(key: AssetKey, store: AssetStore) -> Resolution:
    try:
        uri = store.resolve_handle(key)
    except (HandleUnavailableError, OSError) as exc:
        return Unresolved(key, FailureReason.RESOLUTION_FAILURE, f"uri: {exc}")
    return Resolved(ShareHandle(
        product_id=key.product_id,
        path=key.relative_path,
        uri=uri,
        kind=HandleKind.URI,
        url=get_asset_url(key),
    ))


def inline_payload(key: AssetKey, store: AssetStore) -> Resolution:
    try:
        data = store.read(key)
    except OSError as exc:
        return Unresolved(key, FailureReason.RESOLUTION_FAILURE, f"inline: {exc}")
    if not data:
        return Unresolved(key, FailureReason.RESOLUTION_FAILURE, "inline: empty asset")
    return Resolved(ShareHandle(
        product_id=key.product_id,
        path=key.relative_path,
        uri=encode_data_uri(data),
        kind=HandleKind.INLINE,
        url=get_asset_url(key),
    ))


SHARE_STRATEGIES: tuple[Strategy, ...] = (platform_uri, inline_payload)


# ─── Resolution ──────────────────────────────────────────────────────────────

def resolve_asset(
    key: AssetKey,
    store: AssetStore,
    strategies: Sequence[Strategy] = SHARE_STRATEGIES,
) -> Resolution:
    """Run the existence gate, then each strategy in order."""
    try:
        present = store.exists(key)
    except OSError as exc:
        return Unresolved(key, FailureReason.ASSET_MISSING, str(exc))
    if not present:
        return Unresolved(key, FailureReason.ASSET_MISSING, "no card stored at expected path")

    details = []
    for strategy in strategies:
        outcome = strategy(key, store)
        if isinstance(outcome, Resolved):
            return outcome
        details.append(outcome.detail)
    return Unresolved(key, FailureReason.RESOLUTION_FAILURE, "; ".join(d for d in details if d))


async def resolve_share_batch(
    keys: Sequence[AssetKey],
    store: AssetStore,
    progress: Optional[ProgressSink] = None,
    strategies: Sequence[Strategy] = SHARE_STRATEGIES,
) -> ShareBatchResult:
    """
    Resolve every key, one at a time. Never raises for per-item failures;
    an empty handle list is the caller's decision (see require_handles).
    """
    folder = keys[0].folder_label if keys else ""
    result = ShareBatchResult(folder_label=folder)
    total = len(keys)

    for i, key in enumerate(keys, start=1):
        outcome = await asyncio.to_thread(resolve_asset, key, store, strategies)
        if isinstance(outcome, Resolved):
            result.handles.append(outcome.handle)
            log.debug("share_item_resolved", product_id=key.product_id, kind=outcome.handle.kind.value)
        else:
            result.diagnostics.append(outcome.to_failure())
            log.warning(
                "share_item_unresolved",
                product_id=key.product_id,
                path=key.relative_path,
                reason=outcome.reason.value,
                detail=outcome.detail,
            )
        if progress is not None:
            progress(i, total)

    log.info(
        "share_batch_resolved",
        folder=folder,
        resolved=len(result.handles),
        unresolved=len(result.diagnostics),
    )
    return result


def require_handles(result: ShareBatchResult) -> ShareBatchResult:
    """Raise EmptyShareError only when nothing at all could be shared."""
    if result.is_empty:
        raise EmptyShareError(result)
    return result
