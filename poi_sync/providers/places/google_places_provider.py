"""
Google Places Provider Implementation
Integrates with Google Places API (New) for POI data
"""

import logging
import requests
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from ..base_provider import BaseProvider
from ...common.exceptions import ExternalSourceError
from ...model.google import (
    LocationBias,
    PlaceDetails,
    SearchNearbyResponse,
    SearchTextResponse,
)
from ...utils.retry_backoff import retry_with_backoff

logger = logging.getLogger(__name__)

SERVICE_NAME = "Google Places API"

# Transient HTTP statuses
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


def _is_transient(error: Exception) -> bool:
    if isinstance(error, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(error, requests.HTTPError) and error.response is not None:
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return False


class GooglePlacesProvider(BaseProvider):
    """
    Google Places API (New) provider implementation

    APIs used:
    - Nearby Search: place stubs around a point, filtered by type
    - Text Search: find places by query
    - Place Details: full details of a place

    Docs: https://developers.google.com/maps/documentation/places/web-service/overview
    """

    DEFAULT_BASE_URL = "https://places.googleapis.com/v1"

    # Field masks per endpoint
    FIELD_MASK_NEARBY_SEARCH = "places.id,places.displayName,places.location"
    FIELD_MASK_TEXT_SEARCH = "places.id,places.displayName,places.formattedAddress,places.location"
    FIELD_MASK_DETAILS = "id,displayName,formattedAddress,regularOpeningHours,location"

    MAX_RESULT_COUNT = 20

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 15,
        max_retries: int = 2,
        retry_base_delay: float = 0.5,
        session: Optional[requests.Session] = None
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self._send = retry_with_backoff(
            max_retries=max_retries,
            base_delay=retry_base_delay,
            exceptions=(requests.RequestException,),
            should_retry=_is_transient
        )(self._send_once)

        if not self.api_key:
            logger.warning("[GOOGLE] GOOGLE_PLACES_API_KEY not configured, every call will fail")
        else:
            logger.info("[GOOGLE] GooglePlacesProvider initialized with API key")

    @classmethod
    def from_config(cls, config) -> "GooglePlacesProvider":
        return cls(
            api_key=config.GOOGLE_PLACES_API_KEY,
            base_url=config.GOOGLE_PLACES_BASE_URL,
            timeout=config.GOOGLE_PLACES_TIMEOUT,
            max_retries=config.GOOGLE_PLACES_MAX_RETRIES
        )

    def get_provider_name(self) -> str:
        return SERVICE_NAME

    def search_nearby(self, lat: float, lng: float, radius: float, place_type: str) -> SearchNearbyResponse:
        logger.info(f"[GOOGLE] Nearby search: lat={lat}, lng={lng}, radius={radius}m, type={place_type}")
        payload = {
            "includedTypes": [place_type],
            "maxResultCount": self.MAX_RESULT_COUNT,
            "locationRestriction": {
                "circle": {
                    "center": {"latitude": lat, "longitude": lng},
                    "radius": radius
                }
            }
        }
        data = self._execute("POST", "/places:searchNearby", self.FIELD_MASK_NEARBY_SEARCH, payload)
        return self._parse(SearchNearbyResponse, data)

    def search_text(
        self,
        query: str,
        lang: str,
        max_results: int,
        location_bias: Optional[LocationBias] = None
    ) -> SearchTextResponse:
        logger.info(f"[GOOGLE] Text search: query='{query}', lang={lang}, max={max_results}")
        payload: Dict[str, Any] = {
            "textQuery": query,
            "languageCode": lang,
            "maxResultCount": min(max_results, self.MAX_RESULT_COUNT)
        }
        if location_bias is not None:
            payload["locationBias"] = location_bias.model_dump(by_alias=True, exclude_none=True)

        data = self._execute("POST", "/places:searchText", self.FIELD_MASK_TEXT_SEARCH, payload)
        return self._parse(SearchTextResponse, data)

    def get_details(self, place_id: str) -> PlaceDetails:
        logger.debug(f"[GOOGLE] Details: id={place_id}")
        data = self._execute("GET", f"/places/{place_id}", self.FIELD_MASK_DETAILS)
        return self._parse(PlaceDetails, data)

    # ========== PRIVATE HELPER METHODS ==========

    def _execute(self, method: str, path: str, field_mask: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.api_key:
            raise ExternalSourceError("Google Places API key not configured", service_name=SERVICE_NAME)

        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": field_mask
        }

        try:
            return self._send(method, f"{self.base_url}{path}", headers, payload)
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            logger.error(f"[GOOGLE] HTTP error {status} on {method} {path}")
            raise ExternalSourceError(
                f"Google Places API returned HTTP {status}",
                service_name=SERVICE_NAME,
                cause=e
            ) from e
        except (requests.RequestException, ValueError) as e:
            logger.error(f"[GOOGLE] Request failed on {method} {path}: {e}")
            raise ExternalSourceError(
                f"Google Places API request failed: {e}",
                service_name=SERVICE_NAME,
                cause=e
            ) from e

    def _send_once(self, method: str, url: str, headers: Dict[str, str], payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        response = self.session.request(method, url, json=payload, headers=headers, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _parse(self, model, data: Dict[str, Any]):
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            logger.error(f"[GOOGLE] Unexpected response shape for {model.__name__}: {e}")
            raise ExternalSourceError(
                f"Google Places API returned an unexpected {model.__name__} payload",
                service_name=SERVICE_NAME,
                cause=e
            ) from e
