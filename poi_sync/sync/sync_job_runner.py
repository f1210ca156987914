"""
Background execution of location sync jobs.

Requests only validate and enqueue; the pipeline runs on this runner's
own executor, independent of the request that started it.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Optional

from .job_registry import JobRegistry

if TYPE_CHECKING:
    from ..service.location_sync_service import LocationSyncService

logger = logging.getLogger(__name__)


class SyncJobRunner:

    def __init__(
        self,
        sync_service: "LocationSyncService",
        job_registry: JobRegistry,
        workers: int = 2,
        executor: Optional[ThreadPoolExecutor] = None
    ):
        self.sync_service = sync_service
        self.job_registry = job_registry
        self._executor = executor or ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sync-job")
        self._futures = {}

    def submit(self, lat: float, lng: float, radius_meters: float, place_type: str) -> str:
        """
        Validate, register and schedule a sync job.

        Raises:
            ValidationError: before any job is created

        Returns:
            job id, status IN_PROGRESS
        """
        self.sync_service.validate_request(lat, lng, radius_meters)

        job_id = self.job_registry.create_job()
        future = self._executor.submit(
            self.sync_service.run_sync, lat, lng, radius_meters, place_type, job_id
        )
        self._futures[job_id] = future
        future.add_done_callback(lambda _: self._futures.pop(job_id, None))

        logger.info(f"[SYNC] Job {job_id} scheduled")
        return job_id

    def future_for(self, job_id: str) -> Optional[Future]:
        """Future of a still-running job, None once it finished."""
        return self._futures.get(job_id)

    def shutdown(self, wait: bool = True):
        logger.info("[SYNC] Shutting down sync job runner")
        self._executor.shutdown(wait=wait)
