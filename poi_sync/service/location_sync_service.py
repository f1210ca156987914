"""
Location Sync Service - Bulk POI Synchronization
=================================================

Purpose:
- Fetch place stubs around a point from Google
- Enrich every stub with a concurrent detail lookup
- Upsert the enriched records into MongoDB

Job states: IN_PROGRESS → COMPLETED | FAILED. No retries in the pipeline;
transient HTTP errors are retried by the Google client itself.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional

from ..model.google import PlaceDetails
from ..model.place import PlaceRecord
from ..providers.base_provider import BaseProvider
from ..repo.mongo.interfaces import POIRepositoryInterface
from ..sync.job_registry import JobRegistry, JobStatus
from ..utils.validation_helpers import validate_coordinates, validate_radius

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Counters for one pipeline run."""
    stubs: int = 0
    fetched: int = 0
    failed: int = 0
    saved: int = 0
    skipped: int = 0
    status: JobStatus = JobStatus.IN_PROGRESS
    error: Optional[str] = None


class LocationSyncService:
    """
    Location Sync Service

    Example:
        service = LocationSyncService(provider, poi_repo, job_registry)
        service.validate_request(41.0082, 28.9784, 2000)
        job_id = job_registry.create_job()
        result = service.run_sync(41.0082, 28.9784, 2000, "restaurant", job_id)
    """

    def __init__(
        self,
        provider: BaseProvider,
        poi_repo: POIRepositoryInterface,
        job_registry: JobRegistry,
        max_concurrency: int = 8,
        max_radius_meters: float = 50000
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.provider = provider
        self.poi_repo = poi_repo
        self.job_registry = job_registry
        self.max_concurrency = max_concurrency
        self.max_radius_meters = max_radius_meters

    def validate_request(self, lat: float, lng: float, radius_meters: float):
        """
        Raises:
            ValidationError: naming the offending field
        """
        validate_coordinates(lat, lng)
        validate_radius(radius_meters, self.max_radius_meters)

    def run_sync(self, lat: float, lng: float, radius_meters: float, place_type: str, job_id: str) -> SyncResult:
        """
        Run the whole pipeline and move the job to its terminal state.

        Never raises: any unexpected error marks the job FAILED with its
        message.
        """
        result = SyncResult()
        logger.info(f"[SYNC] Job {job_id} started: ({lat}, {lng}) r={radius_meters}m type={place_type}")

        try:
            stubs = self.provider.search_nearby(lat, lng, radius_meters, place_type).places
            result.stubs = len(stubs)

            if not stubs:
                logger.info(f"[SYNC] Job {job_id}: no places found")
                return self._finish(job_id, result, JobStatus.COMPLETED)

            details = self._fetch_details([stub.id for stub in stubs], job_id)
            result.fetched = len(details)
            result.failed = result.stubs - result.fetched

            if not details:
                error = f"All {result.stubs} detail lookups failed"
                return self._finish(job_id, result, JobStatus.FAILED, error)

            for item in details:
                try:
                    self.poi_repo.upsert(PlaceRecord.from_details(item, place_type))
                    result.saved += 1
                except Exception as e:
                    result.skipped += 1
                    logger.error(f"[SYNC] Job {job_id}: failed to save {item.id}: {e}")

            logger.info(
                f"[SYNC] Job {job_id} done: stubs={result.stubs} fetched={result.fetched} "
                f"failed={result.failed} saved={result.saved} skipped={result.skipped}"
            )
            return self._finish(job_id, result, JobStatus.COMPLETED)

        except Exception as e:
            logger.error(f"[SYNC] Job {job_id} failed: {e}", exc_info=True)
            return self._finish(job_id, result, JobStatus.FAILED, str(e) or type(e).__name__)

    # ========== PRIVATE HELPER METHODS ==========

    def _fetch_details(self, place_ids: List[str], job_id: str) -> List[PlaceDetails]:
        """Bounded fan-out; a failing lookup drops only its own stub."""
        details: List[PlaceDetails] = []
        workers = min(self.max_concurrency, len(place_ids))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sync-details") as pool:
            futures = {pool.submit(self.provider.get_details, place_id): place_id for place_id in place_ids}
            for future in as_completed(futures):
                place_id = futures[future]
                try:
                    details.append(future.result())
                except Exception as e:
                    logger.warning(f"[SYNC] Job {job_id}: details for {place_id} failed: {e}")

        return details

    def _finish(self, job_id: str, result: SyncResult, status: JobStatus, error: Optional[str] = None) -> SyncResult:
        result.status = status
        result.error = error
        self.job_registry.set_status(job_id, status, error)
        return result
