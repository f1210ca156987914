"""
Places Service - Tiered Resolution Engine
==========================================

Purpose:
- Resolve nearby, text and detail lookups through cache → store → Google
- Write results through to the store and the cache
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from ..common.exceptions import CacheError
from ..core.cache.redis_cache import CacheInterface
from ..model.google import (
    GoogleModel,
    LocationBias,
    NearbyPlace,
    PlaceDetails,
    SearchNearbyResponse,
    SearchTextResponse,
)
from ..model.place import PlaceRecord
from ..providers.base_provider import BaseProvider
from ..repo.mongo.interfaces import POIRepositoryInterface

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

COORDINATE_QUANTUM = Decimal("0.000001")


class PlacesService:
    """
    Places Service - Tiered Resolution

    Architecture:
        Request
            ↓
        1. Redis cache (hit → return, no further I/O)
            ↓ miss
        2. MongoDB place store (nearby and details only)
            ↓ empty
        3. Google Places API
            ↓
        4. Write-through: store, then cache

    Text search skips step 2 and always goes upstream on a cache miss.

    Cache failures are logged and treated as a miss. Store read errors and
    ``ExternalSourceError`` propagate to the caller.
    """

    def __init__(
        self,
        provider: BaseProvider,
        poi_repo: POIRepositoryInterface,
        cache: CacheInterface,
        search_ttl: int = 600,
        details_ttl: int = 86400,
        default_lang: str = "en",
        executor: Optional[ThreadPoolExecutor] = None
    ):
        self.provider = provider
        self.poi_repo = poi_repo
        self.cache = cache
        self.search_ttl = search_ttl
        self.details_ttl = details_ttl
        self.default_lang = default_lang
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="poi-persist")

    # ========== CACHE KEYS ==========

    @staticmethod
    def round_coordinate(value: float) -> Decimal:
        """Round to 6 decimal places (~0.11 m), half up."""
        return Decimal(str(value)).quantize(COORDINATE_QUANTUM, rounding=ROUND_HALF_UP)

    @classmethod
    def nearby_cache_key(cls, lat: float, lng: float, radius: float, place_type: str) -> str:
        """
        Example:
            >>> PlacesService.nearby_cache_key(41.00820049, 28.9784, 1000.0, "cafe")
            'search:nearby:41.008200:28.978400:1000.0:cafe'
        """
        return CacheInterface.build_key(
            "search", "nearby",
            cls.round_coordinate(lat), cls.round_coordinate(lng),
            radius, place_type
        )

    @staticmethod
    def text_cache_key(query: str, lang: str) -> str:
        return CacheInterface.build_key("search", "text", query.strip().lower(), lang)

    @staticmethod
    def details_cache_key(place_id: str) -> str:
        return CacheInterface.build_key("details", place_id)

    # ========== OPERATIONS ==========

    def search_nearby(
        self,
        lat: float,
        lng: float,
        radius_meters: float,
        place_type: str,
        lang: Optional[str] = None
    ) -> SearchNearbyResponse:
        """
        Nearby search, local-first.

        A non-empty store result is returned without calling Google. On an
        empty store the Google stubs are persisted in the background; the
        caller does not wait for that write.
        """
        lang = lang or self.default_lang
        cache_key = self.nearby_cache_key(lat, lng, radius_meters, place_type)

        cached = self._cache_get(cache_key, SearchNearbyResponse)
        if cached is not None:
            logger.info(f"[CACHE] HIT {cache_key}")
            return cached

        records = self.poi_repo.find_near(lat, lng, radius_meters / 1000, place_type)
        if records:
            logger.info(f"[PLACES] {len(records)} nearby POIs served from store")
            response = SearchNearbyResponse(places=[r.to_nearby_place(lang) for r in records])
            self._cache_set(cache_key, response, self.search_ttl)
            return response

        response = self.provider.search_nearby(lat, lng, radius_meters, place_type)
        logger.info(f"[PLACES] {len(response.places)} nearby POIs fetched from {self.provider.get_provider_name()}")

        if response.places:
            self._executor.submit(self._persist_detached, response.places, place_type)

        self._cache_set(cache_key, response, self.search_ttl)
        return response

    def search_text(
        self,
        query: str,
        lang: Optional[str] = None,
        max_results: int = 20,
        location_bias: Optional[LocationBias] = None
    ) -> SearchTextResponse:
        """Free-text search. Always upstream on a cache miss."""
        lang = lang or self.default_lang
        cache_key = self.text_cache_key(query, lang)

        cached = self._cache_get(cache_key, SearchTextResponse)
        if cached is not None:
            logger.info(f"[CACHE] HIT {cache_key}")
            return cached

        response = self.provider.search_text(query, lang, max_results, location_bias)

        if response.places:
            self._persist(
                lambda: self.poi_repo.upsert_many(self._to_records(response.places, PlaceRecord.from_text_search)),
                f"{len(response.places)} text results"
            )

        self._cache_set(cache_key, response, self.search_ttl)
        return response

    def get_details(self, place_id: str, lang: Optional[str] = None) -> PlaceDetails:
        """Place details, local-first, cached with the long TTL."""
        lang = lang or self.default_lang
        cache_key = self.details_cache_key(place_id)

        cached = self._cache_get(cache_key, PlaceDetails)
        if cached is not None:
            logger.info(f"[CACHE] HIT {cache_key}")
            return cached

        record = self.poi_repo.find_by_id(place_id)
        if record is not None:
            details = record.to_place_details(lang)
            self._cache_set(cache_key, details, self.details_ttl)
            return details

        details = self.provider.get_details(place_id)
        self._persist(lambda: self.poi_repo.upsert(PlaceRecord.from_details(details)), f"details of {place_id}")

        self._cache_set(cache_key, details, self.details_ttl)
        return details

    def search_local_text(self, query: str, limit: int = 20) -> List[PlaceRecord]:
        """Text-index lookup against the store only."""
        return self.poi_repo.find_by_text(query, limit)

    def shutdown(self, wait: bool = True):
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    # ========== PRIVATE HELPER METHODS ==========

    def _cache_get(self, key: str, model: Type[T]) -> Optional[T]:
        try:
            payload = self.cache.get(key)
        except CacheError as e:
            logger.warning(f"[CACHE] Read failed, treating as miss: {e}")
            return None

        if payload is None:
            return None
        try:
            return model.model_validate_json(payload)
        except PydanticValidationError as e:
            logger.warning(f"[CACHE] Corrupt entry {key}, treating as miss: {e}")
            return None

    def _cache_set(self, key: str, value: GoogleModel, ttl: int):
        try:
            self.cache.set(key, value.to_json(), ttl)
        except CacheError as e:
            logger.warning(f"[CACHE] Write failed for {key}: {e}")

    def _persist(self, write: Callable[[], object], what: str):
        try:
            write()
        except Exception as e:
            logger.error(f"[PLACES] Failed to persist {what}: {e}")

    def _persist_detached(self, places: List[NearbyPlace], place_type: str):
        try:
            records = self._to_records(places, lambda place: PlaceRecord.from_nearby(place, place_type))
            written = self.poi_repo.upsert_many(records)
            logger.info(f"[PLACES] Background persist of {written} nearby stubs done")
        except Exception as e:
            logger.error(f"[PLACES] Background persist of {len(places)} nearby stubs failed: {e}", exc_info=True)

    @staticmethod
    def _to_records(places, mapper: Callable[[BaseModel], PlaceRecord]) -> List[PlaceRecord]:
        """Map upstream items to records, dropping the ones that do not validate."""
        records = []
        for place in places:
            try:
                records.append(mapper(place))
            except PydanticValidationError as e:
                logger.warning(f"[PLACES] Skipping unstorable place {place.id}: {e}")
        return records
