# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - Job State Models
Tracks a share batch from submission through render-on-demand and
handle resolution. Backs the progress UI via GET /status/{job_id}.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.product import RenderMode, RenderTarget
from app.models.result import RenderBatchResult, ShareBatchResult


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class JobStage(str, Enum):
    """Batch stage labels, used for progress UI display."""
    QUEUED = "queued"
    RENDERING = "rendering"
    RESOLVING = "resolving"
    DONE = "done"
    FAILED = "failed"


class Job(BaseModel):
    """Full job state record stored in JobStore."""
    job_id: str
    status: JobStatus = JobStatus.PENDING
    stage: JobStage = JobStage.QUEUED
    # (processed, total) of the current stage, as reported by the batch
    processed: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    error: Optional[str] = None
    result: Optional[ShareBatchResult] = None
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def progress(self) -> int:
        """Percentage of the current stage, 0-100."""
        if self.total == 0:
            return 100 if self.status == JobStatus.DONE else 0
        return int(self.processed * 100 / self.total)

    def to_status_response(self) -> dict:
        """Serialise to the shape returned by GET /status/{job_id}."""
        resp = {
            "job_id": self.job_id,
            "status": self.status.value,
            "stage": self.stage.value,
            "processed": self.processed,
            "total": self.total,
            "progress": self.progress,
            "error": self.error,
        }
        if self.result:
            resp["result"] = self.result.model_dump(mode="json")
        return resp


# ─── API Request/Response Schemas ────────────────────────────────────────────

class BatchRequest(BaseModel):
    """Request body for POST /render and POST /share."""
    product_ids: list[str] = Field(..., min_length=1)
    mode: str = Field("resell", description="'wholesale', 'resell' or 'retail'")
    folder: Optional[str] = Field(
        None, description="Catalogue label; defaults to the mode's folder"
    )

    @field_validator("mode")
    @classmethod
    def _known_mode(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ("wholesale", "resell", "retail"):
            raise ValueError(f"Unknown render mode '{value}'")
        return value

    @field_validator("folder")
    @classmethod
    def _plain_label(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value or "/" in value or "\\" in value or value in (".", ".."):
            raise ValueError(f"'{value}' is not a valid folder label")
        return value

    def to_target(self) -> RenderTarget:
        return RenderTarget.for_mode(self.mode, self.folder)


class RenderResponse(BaseModel):
    """Response body for POST /render."""
    folder_label: str
    mode: RenderMode
    rendered: int = 0
    reused: int = 0
    result: RenderBatchResult


class ShareJobResponse(BaseModel):
    """Response body for POST /share."""
    job_id: str
    status: JobStatus = JobStatus.PENDING
    message: str = "Share job created. Poll /status/{job_id} for progress."
