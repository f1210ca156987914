"""
Sync Controller - Background Location Sync
===========================================

- POST /sync/locations?lat&lng&radius&type - start a sync job (202 + jobId)
- GET  /sync/status/{job_id} - job status (404 for unknown or expired ids)
"""

from flask import Blueprint, current_app, request
import logging

from ...common.exceptions import NotFoundError
from ...core.container import ServiceContainer
from ...core.rate_limiter import rate_limit
from ...middleware import api_key_required
from ...sync.job_registry import JobRegistry
from ...sync.sync_job_runner import SyncJobRunner
from ...utils.response_helpers import build_success_response
from ...utils.validation_helpers import parse_float_arg

logger = logging.getLogger(__name__)


class SyncController:

    def __init__(self, blueprint: Blueprint, container: ServiceContainer):
        self.container = container
        blueprint.add_url_rule(
            "/locations", "sync_locations",
            api_key_required(rate_limit("sync")(self.sync_locations)), methods=["POST"]
        )
        blueprint.add_url_rule(
            "/status/<job_id>", "sync_status",
            api_key_required(rate_limit()(self.get_status)), methods=["GET"]
        )

    def sync_locations(self):
        """
        Validates synchronously; the sync itself runs in the background.

        Example:
            POST /sync/locations?lat=41.0082&lng=28.9784&radius=2000&type=restaurant
            → 202 {"jobId": "..."}
        """
        config = current_app.config
        lat = parse_float_arg(request.args, "lat")
        lng = parse_float_arg(request.args, "lng")
        radius = parse_float_arg(request.args, "radius", default=config["DEFAULT_RADIUS_METERS"])
        place_type = request.args.get("type", "").strip() or config["DEFAULT_PLACE_TYPE"]

        runner: SyncJobRunner = self.container.resolve(SyncJobRunner.__name__)
        job_id = runner.submit(lat, lng, radius, place_type)

        return build_success_response(
            "Sync job accepted",
            "SYNC_ACCEPTED",
            data={"jobId": job_id},
            status_code=202
        )

    def get_status(self, job_id: str):
        registry: JobRegistry = self.container.resolve(JobRegistry.__name__)
        status, error = registry.get_status(job_id)
        if status is None:
            raise NotFoundError("Job", job_id)

        data = {"jobId": job_id, "status": status.value}
        if error:
            data["error"] = error
        return build_success_response(f"Job is {status.value}", "SYNC_STATUS", data=data)
