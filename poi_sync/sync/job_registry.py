"""
In-memory registry of background sync jobs.

Entries are process-local and expire ``retention_seconds`` after their
last update. Expired entries are collected on every ``create_job``.
"""
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass
class SyncJob:
    job_id: str
    status: JobStatus
    error: Optional[str]
    updated_at: float


class JobRegistry:
    """Thread-safe job id → status map."""

    def __init__(self, retention_seconds: int = 3600, clock: Callable[[], float] = time.time):
        self.retention_seconds = retention_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._jobs: Dict[str, SyncJob] = {}

    def create_job(self) -> str:
        job_id = str(uuid.uuid4())
        now = self._clock()
        with self._lock:
            self._collect_expired(now)
            self._jobs[job_id] = SyncJob(job_id, JobStatus.IN_PROGRESS, None, now)
        logger.info(f"[JOBS] Created job {job_id}")
        return job_id

    def set_status(self, job_id: str, status: JobStatus, error: Optional[str] = None):
        """Overwrite status and error. Unknown ids are accepted."""
        with self._lock:
            self._jobs[job_id] = SyncJob(job_id, status, error, self._clock())
        logger.info(f"[JOBS] Job {job_id} -> {status.value}" + (f" ({error})" if error else ""))

    def get_status(self, job_id: str) -> Tuple[Optional[JobStatus], Optional[str]]:
        """
        Returns:
            (status, error); (None, None) for unknown or expired ids
        """
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or self._is_expired(job, self._clock()):
                return None, None
            return job.status, job.error or None

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _is_expired(self, job: SyncJob, now: float) -> bool:
        return now - job.updated_at > self.retention_seconds

    def _collect_expired(self, now: float):
        expired = [job_id for job_id, job in self._jobs.items() if self._is_expired(job, now)]
        for job_id in expired:
            del self._jobs[job_id]
        if expired:
            logger.debug(f"[JOBS] Collected {len(expired)} expired jobs")
