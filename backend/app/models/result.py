# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Batch Result Models
Per-item outcomes of a render-on-demand batch and of a share batch.
Failures are data, not exceptions: every item either yields a handle
or a structured diagnostic {product_id, path, reason}.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.models.asset import card_file_name


class FailureReason(str, Enum):
    PRODUCT_MISSING = "ProductMissing"
    IMAGE_MISSING = "ImageMissing"
    RENDER_FAILURE = "RenderFailure"
    PERSIST_FAILURE = "PersistFailure"
    ASSET_MISSING = "AssetMissing"
    RESOLUTION_FAILURE = "ResolutionFailure"


class HandleKind(str, Enum):
    URI = "uri"
    INLINE = "inline"


class ShareHandle(BaseModel):
    """An opaque reference the share collaborator can consume."""
    product_id: str
    path: str
    uri: str = Field(..., repr=False)
    kind: HandleKind = HandleKind.URI
    # HTTP path the card is served from via GET /assets
    url: Optional[str] = None


class ItemFailure(BaseModel):
    """Diagnostic for one product that could not be rendered or resolved."""
    product_id: str
    path: str = Field(..., description="Expected relative asset path")
    reason: FailureReason
    stage: Optional[str] = Field(None, description="Failing render stage, if any")
    detail: Optional[str] = None


class RenderedItem(BaseModel):
    product_id: str
    handle: ShareHandle
    # False when the card already existed and was only resolved
    rendered: bool = False


class RenderBatchResult(BaseModel):
    successes: list[RenderedItem] = Field(default_factory=list)
    failures: list[ItemFailure] = Field(default_factory=list)

    @property
    def rendered_count(self) -> int:
        return sum(1 for s in self.successes if s.rendered)

    @property
    def reused_count(self) -> int:
        return sum(1 for s in self.successes if not s.rendered)


class ShareBatchResult(BaseModel):
    folder_label: str
    handles: list[ShareHandle] = Field(default_factory=list)
    diagnostics: list[ItemFailure] = Field(default_factory=list)
    # Failures recorded while rendering missing cards before resolution
    render_failures: list[ItemFailure] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.handles

    @property
    def is_partial(self) -> bool:
        return bool(self.handles) and bool(self.diagnostics)

    def uris(self) -> list[str]:
        return [h.uri for h in self.handles]

    def diagnostic_report(self) -> str:
        """
        Aggregated, user-facing explanation of why items could not be shared.
        Lists every expected path and the remediation steps.
        """
        total = len(self.handles) + len(self.diagnostics)
        lines = [
            f"Resolved {len(self.handles)} of {total} card(s) "
            f"in folder '{self.folder_label}'.",
        ]
        if self.diagnostics:
            lines.append("Unavailable cards:")
            render_reasons = {f.product_id: f for f in self.render_failures}
            for diag in self.diagnostics:
                line = f"  - product {diag.product_id}: {diag.reason.value} at {diag.path}"
                cause = render_reasons.get(diag.product_id)
                if cause is not None:
                    suffix = f" ({cause.stage})" if cause.stage else ""
                    line += f" [render: {cause.reason.value}{suffix}]"
                if diag.detail:
                    line += f" - {diag.detail}"
                lines.append(line)
        lines.append(
            "Expected file pattern: "
            f"{self.folder_label}/{card_file_name('<productId>', self.folder_label)}"
        )
        lines.append(
            "Remediation: re-render the listed products (make sure each has an "
            "image), then check that the export folder is readable and writable."
        )
        return "\n".join(lines)
