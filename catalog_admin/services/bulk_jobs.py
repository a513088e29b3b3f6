"""
In-memory registry of bulk discount jobs

A job is the server-side counterpart of the bulk discount dialog: it exists
from the moment a batch starts until the admin dismisses it, starts another
batch, or it outlives the retention window. Each caller can have at most one
running job and only sees its own jobs.
"""
import logging
import threading
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from catalog_admin.config import settings
from catalog_admin.services.bulk_discount import (
    BatchProgress,
    BatchResult,
    BulkDiscountMode,
    BulkDiscountOrchestrator,
)
from catalog_admin.services.errors import BatchInProgressError, BulkJobNotFoundError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BulkJobStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class BulkJob:
    id: str
    owner: str
    progress: BatchProgress
    status: BulkJobStatus = BulkJobStatus.RUNNING
    result: Optional[BatchResult] = None
    closed: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data = self.progress.to_dict()
        data.update({
            "jobId": self.id,
            "status": self.status.value,
            "outcome": self.result.outcome.value if self.result else None,
            "summary": self.result.summary if self.result else None,
            "autoClose": self.result.auto_close if self.result else False,
            "closed": self.closed,
            "createdAt": self.created_at.isoformat(),
        })
        return data


class BulkJobStore:
    def __init__(self, retention_seconds: float = 3600):
        self._jobs: Dict[str, BulkJob] = {}
        self._lock = threading.Lock()
        self.retention = timedelta(seconds=retention_seconds)

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _evict(self, owner: str) -> None:
        # Starting a batch resets the caller's dialog; other callers' jobs go
        # once they are closed or past the retention window
        now = _utcnow()
        stale = [
            job_id for job_id, job in self._jobs.items()
            if job.status is BulkJobStatus.COMPLETED
            and (job.owner == owner or job.closed or now - job.finished_at >= self.retention)
        ]
        for job_id in stale:
            del self._jobs[job_id]
        if stale:
            logger.debug(f"Evicted {len(stale)} finished bulk discount jobs")

    def _owned(self, job_id: str, owner: Optional[str]) -> BulkJob:
        job = self._jobs.get(job_id)
        # someone else's job is reported exactly like a missing one
        if job is None or (owner is not None and job.owner != owner):
            raise BulkJobNotFoundError(f"Bulk discount job {job_id} not found")
        return job

    def create(
        self,
        owner: str,
        mode: BulkDiscountMode,
        total: int,
        discount_percent: Optional[Decimal] = None,
    ) -> BulkJob:
        with self._lock:
            for job in self._jobs.values():
                if job.owner == owner and job.status is BulkJobStatus.RUNNING:
                    raise BatchInProgressError("A bulk discount is already being applied")

            self._evict(owner)
            job = BulkJob(
                id=str(uuid.uuid4()),
                owner=owner,
                progress=BatchProgress(mode=mode, total=total, discount_percent=discount_percent),
            )
            self._jobs[job.id] = job
            return replace(job)

    def get(self, job_id: str, owner: Optional[str] = None) -> BulkJob:
        with self._lock:
            return replace(self._owned(job_id, owner))

    def update(self, job_id: str, progress: BatchProgress) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is not None:
                job.progress = progress

    def complete(self, job_id: str, result: BatchResult) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is not None:
                job.progress = result.progress
                job.result = result
                job.status = BulkJobStatus.COMPLETED
                job.finished_at = _utcnow()

    def close(self, job_id: str) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is not None:
                job.closed = True

    def discard(self, job_id: str, owner: Optional[str] = None) -> None:
        with self._lock:
            job = self._owned(job_id, owner)
            if job.status is BulkJobStatus.RUNNING:
                raise BatchInProgressError("Cannot dismiss a bulk discount while it is running")
            del self._jobs[job_id]


def run_bulk_job(
    store: BulkJobStore,
    job_id: str,
    orchestrator: BulkDiscountOrchestrator,
    product_ids: List[str],
    mode: BulkDiscountMode,
    discount_percent: Optional[Decimal] = None,
) -> BatchResult:
    """Run a registered job to completion, publishing every snapshot to the store"""
    result = orchestrator.run_batch(
        product_ids,
        mode,
        discount_percent,
        on_progress=lambda progress: store.update(job_id, progress),
        on_complete=lambda _: store.close(job_id),
    )
    store.complete(job_id, result)
    logger.info(f"Bulk discount job {job_id} completed: {result.outcome.value}")
    return result


bulk_job_store = BulkJobStore(retention_seconds=settings.BULK_JOB_RETENTION_SECONDS)
