"""
Places Controller - API Endpoints for POI Lookups
==================================================

Purpose:
- Nearby, text and detail lookups through the tiered resolution engine
- Offline text search against the local store
- Request validation and standardized responses
"""

from flask import Blueprint, current_app, request
from pydantic import ValidationError as PydanticValidationError
import logging

from ...common.exceptions import ValidationError
from ...core.container import ServiceContainer
from ...core.rate_limiter import rate_limit
from ...middleware import api_key_required
from ...model.google import LocationBias
from ...service.places_service import PlacesService
from ...utils.response_helpers import build_success_response, dump_model
from ...utils.validation_helpers import (
    get_json_or_error,
    parse_float_arg,
    validate_coordinates,
    validate_radius,
    validate_required_fields,
)

logger = logging.getLogger(__name__)

MAX_RESULT_COUNT = 20


class PlacesController:
    """
    Places Controller

    Endpoints:
    - GET  /places/nearby?lat&lng&radius&type - Nearby search (local-first)
    - POST /places/search-text - Free-text search (always upstream on miss)
    - GET  /places/local-search?q - Text search against stored POIs only
    - GET  /places/{place_id} - Place details (local-first)

    All endpoints require the API key (when configured) and are rate
    limited per user or per IP.
    """

    def __init__(self, blueprint: Blueprint, container: ServiceContainer):
        self.container = container
        self._register_routes(blueprint)

    @property
    def places_service(self) -> PlacesService:
        return self.container.resolve(PlacesService.__name__)

    def _register_routes(self, bp: Blueprint):
        # Static paths first so "nearby" is never taken for a place id
        routes = [
            ("/nearby", "nearby", self.search_nearby, "GET"),
            ("/search-text", "search_text", self.search_text, "POST"),
            ("/local-search", "local_search", self.local_search, "GET"),
            ("/<place_id>", "details", self.get_details, "GET"),
        ]
        for rule, endpoint, view, method in routes:
            bp.add_url_rule(rule, endpoint, api_key_required(rate_limit()(view)), methods=[method])

    def search_nearby(self):
        """
        Query Parameters:
            lat (required), lng (required)
            radius (optional): meters, default DEFAULT_RADIUS_METERS
            type (optional): place type, default DEFAULT_PLACE_TYPE
            languageCode (optional)

        Example:
            GET /places/nearby?lat=41.0082&lng=28.9784&radius=1000&type=cafe
        """
        config = current_app.config
        lat = parse_float_arg(request.args, "lat")
        lng = parse_float_arg(request.args, "lng")
        radius = parse_float_arg(request.args, "radius", default=config["DEFAULT_RADIUS_METERS"])
        place_type = request.args.get("type", "").strip() or config["DEFAULT_PLACE_TYPE"]
        lang = request.args.get("languageCode") or None

        validate_coordinates(lat, lng)
        validate_radius(radius, config["SYNC_MAX_RADIUS_METERS"])

        response = self.places_service.search_nearby(lat, lng, radius, place_type, lang)
        return build_success_response(
            f"Found {len(response.places)} places",
            "PLACES_NEARBY_SUCCESS",
            data=dump_model(response)
        )

    def search_text(self):
        """
        Body:
            {
                "textQuery": "coffee",
                "languageCode": "en",
                "maxResultCount": 10,
                "locationBias": {"circle": {"center": {"latitude": .., "longitude": ..}, "radius": 500}}
            }
        """
        config = current_app.config
        data = get_json_or_error(request)
        validate_required_fields(data, ["textQuery"])

        query = str(data["textQuery"])
        lang = data.get("languageCode") or config["DEFAULT_LANGUAGE_CODE"]
        max_results = data.get("maxResultCount", config["DEFAULT_MAX_RESULTS"])
        if isinstance(max_results, bool) or not isinstance(max_results, int) or not 1 <= max_results <= MAX_RESULT_COUNT:
            raise ValidationError(
                f"maxResultCount must be an integer between 1 and {MAX_RESULT_COUNT}",
                field="maxResultCount"
            )

        location_bias = None
        if data.get("locationBias") is not None:
            try:
                location_bias = LocationBias.model_validate(data["locationBias"])
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid locationBias: {e.errors()[0]['msg']}", field="locationBias")

        response = self.places_service.search_text(query, lang, max_results, location_bias)
        return build_success_response(
            f"Found {len(response.places)} places",
            "PLACES_SEARCH_SUCCESS",
            data=dump_model(response)
        )

    def local_search(self):
        """
        Query Parameters:
            q (required): text matched against stored name and address
            limit (optional): default 20, max 100
        """
        query = request.args.get("q", "").strip()
        if not query:
            raise ValidationError("Query parameter 'q' is required", field="q")
        limit = request.args.get("limit", default=20, type=int)
        if not 1 <= limit <= 100:
            raise ValidationError("limit must be between 1 and 100", field="limit")

        records = self.places_service.search_local_text(query, limit)
        return build_success_response(
            f"Found {len(records)} stored places",
            "PLACES_LOCAL_SEARCH_SUCCESS",
            data={
                "results": [record.model_dump(mode="json", exclude_none=True) for record in records],
                "total": len(records)
            }
        )

    def get_details(self, place_id: str):
        lang = request.args.get("languageCode") or None
        details = self.places_service.get_details(place_id, lang)
        return build_success_response(
            "Place details retrieved",
            "PLACE_DETAILS_SUCCESS",
            data={"place": dump_model(details)}
        )
