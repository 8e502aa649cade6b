# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
CatShare Cards - JobStore
Clean interface over share-job state. The pipeline only talks to the
abstract JobStore, so the progress UI backend can be swapped without
touching the render or share code.
"""

from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Optional

from app.models.job import Job, JobStage, JobStatus
from app.models.result import ShareBatchResult
from app.utils.logger import get_logger

log = get_logger(__name__)


# ─── Abstract Interface ──────────────────────────────────────────────────────

class JobStore(ABC):
    """
    Abstract base class for all job state backends.
    All methods are synchronous; the share job calls them between awaits.
    """

    @abstractmethod
    def create_job(self) -> Job:
        """Create a new job with PENDING status. Returns the Job."""

    @abstractmethod
    def get_job(self, job_id: str) -> Optional[Job]:
        """Return Job by ID, or None if not found."""

    @abstractmethod
    def update_job(
        self,
        job_id: str,
        *,
        status: Optional[JobStatus] = None,
        stage: Optional[JobStage] = None,
        processed: Optional[int] = None,
        total: Optional[int] = None,
        error: Optional[str] = None,
        result: Optional[ShareBatchResult] = None,
    ) -> None:
        """Partially update a job record. Only provided fields are changed."""

    def advance_stage(self, job_id: str, stage: JobStage, total: int = 0) -> None:
        """Enter a new stage and reset its progress counter."""
        if stage == JobStage.DONE:
            status = JobStatus.DONE
        elif stage == JobStage.FAILED:
            status = JobStatus.FAILED
        else:
            status = JobStatus.RUNNING
        self.update_job(job_id, stage=stage, status=status, processed=0, total=total)

    def fail_job(self, job_id: str, error: str) -> None:
        """Mark a job as failed with an error message."""
        self.update_job(
            job_id,
            status=JobStatus.FAILED,
            stage=JobStage.FAILED,
            error=error,
        )
        log.error("job_failed", job_id=job_id, error=error)

    def progress_sink(self, job_id: str) -> Callable[[int, int], None]:
        """Adapt a job record into a (processed, total) progress callback."""

        def _report(processed: int, total: int) -> None:
            self.update_job(job_id, processed=processed, total=total)

        return _report


# ─── In-Memory Implementation ────────────────────────────────────────────────

class InMemoryJobStore(JobStore):
    """
    Thread-safe in-memory job store using a dict + RLock.
    Suitable for a single-process service. All data is lost on restart.
    """

    def __init__(self) -> None:
        self._store: dict[str, Job] = {}
        self._lock = threading.RLock()

    def create_job(self) -> Job:
        job = Job(job_id=str(uuid.uuid4()))
        with self._lock:
            self._store[job.job_id] = job
        log.info("job_created", job_id=job.job_id)
        return job

    def get_job(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._store.get(job_id)

    def update_job(
        self,
        job_id: str,
        *,
        status: Optional[JobStatus] = None,
        stage: Optional[JobStage] = None,
        processed: Optional[int] = None,
        total: Optional[int] = None,
        error: Optional[str] = None,
        result: Optional[ShareBatchResult] = None,
    ) -> None:
        with self._lock:
            job = self._store.get(job_id)
            if job is None:
                log.warning("update_job_not_found", job_id=job_id)
                return
            if status is not None:
                job.status = status
            if stage is not None:
                job.stage = stage
            if processed is not None:
                job.processed = processed
            if total is not None:
                job.total = total
            if error is not None:
                job.error = error
            if result is not None:
                job.result = result
            job.updated_at = datetime.now(timezone.utc)
            self._store[job_id] = job

        log.debug(
            "job_updated",
            job_id=job_id,
            stage=stage.value if stage else None,
            processed=processed,
            total=total,
        )

    def count(self) -> int:
        """Return total number of jobs in store (useful for health checks)."""
        with self._lock:
            return len(self._store)
