import math
import threading
from concurrent.futures import Future
from unittest.mock import MagicMock

import pytest

from config import TestingConfig
from poi_sync import create_app
from poi_sync.common.exceptions import CacheError, ExternalSourceError, StoreError
from poi_sync.config.di_setup import REDIS_CLIENT_KEY
from poi_sync.core.cache.redis_cache import CacheInterface
from poi_sync.core.clients.mongodb_client import MongoDBClient
from poi_sync.core.rate_limiter.counter_store import CounterStore, InMemoryCounterStore
from poi_sync.model.google import (
    DisplayName,
    LatLng,
    NearbyPlace,
    OpeningHours,
    PlaceDetails,
    SearchNearbyResponse,
    SearchTextResponse,
    TextSearchPlace,
)
from poi_sync.model.place import GeoJSONLocation, PlaceRecord
from poi_sync.providers.base_provider import BaseProvider
from poi_sync.repo.mongo.interfaces import POIRepositoryInterface
from poi_sync.service.places_service import PlacesService


class ManualClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class InlineExecutor:
    """Runs submitted work immediately on the calling thread."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs):
        self.submitted += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True):
        pass


class FakeCache(CacheInterface):
    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key):
        if self.fail_reads:
            raise CacheError("redis down")
        return self.data.get(key)

    def set(self, key, value, ttl):
        if self.fail_writes:
            raise CacheError("redis down")
        self.data[key] = value
        self.ttls[key] = ttl


def _distance_km(lat1, lng1, lat2, lng2):
    lat1, lng1, lat2, lng2 = map(math.radians, (lat1, lng1, lat2, lng2))
    a = math.sin((lat2 - lat1) / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin((lng2 - lng1) / 2) ** 2
    return 6371.0 * 2 * math.asin(math.sqrt(a))


class FakePOIRepository(POIRepositoryInterface):
    def __init__(self):
        self.records = {}
        self.fail_ids = set()
        self.fail_all = False
        self.calls = []
        self._lock = threading.Lock()

    def _check(self, place_id=None):
        if self.fail_all or (place_id is not None and place_id in self.fail_ids):
            raise StoreError(f"write failed for {place_id}")

    def find_by_id(self, place_id):
        self.calls.append(("find_by_id", place_id))
        return self.records.get(place_id)

    def find_near(self, lat, lng, distance_km, place_type=None):
        self.calls.append(("find_near", lat, lng, distance_km, place_type))
        found = []
        for record in self.records.values():
            if record.location is None or (place_type and record.type != place_type):
                continue
            r_lng, r_lat = record.location.coordinates
            if _distance_km(lat, lng, r_lat, r_lng) <= distance_km:
                found.append(record)
        return found

    def find_by_text(self, query, limit=20):
        self.calls.append(("find_by_text", query, limit))
        query = query.lower()
        return [r for r in self.records.values() if query in r.name.lower() or query in r.address.lower()][:limit]

    def upsert(self, record):
        self._check(record.place_id)
        with self._lock:
            self.records[record.place_id] = record
        return record

    def upsert_many(self, records):
        records = list(records)
        self._check()
        for record in records:
            self.upsert(record)
        return len(records)

    def count(self):
        return len(self.records)


class FakeProvider(BaseProvider):
    def __init__(self):
        self.nearby_places = []
        self.text_places = []
        self.details = {}
        self.failing_details = set()
        self.nearby_error = None
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.detail_delay = 0.0
        self._lock = threading.Lock()

    def search_nearby(self, lat, lng, radius, place_type):
        self.calls.append(("search_nearby", lat, lng, radius, place_type))
        if self.nearby_error is not None:
            raise self.nearby_error
        return SearchNearbyResponse(places=list(self.nearby_places))

    def search_text(self, query, lang, max_results, location_bias=None):
        self.calls.append(("search_text", query, lang, max_results, location_bias))
        return SearchTextResponse(places=list(self.text_places))

    def get_details(self, place_id):
        with self._lock:
            self.calls.append(("get_details", place_id))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.detail_delay:
                threading.Event().wait(self.detail_delay)
            if place_id in self.failing_details:
                raise ExternalSourceError("boom", service_name="Google Places API")
            return self.details[place_id]
        finally:
            with self._lock:
                self.in_flight -= 1

    def get_provider_name(self):
        return "Google Places API"

    def count(self, method):
        return sum(1 for call in self.calls if call[0] == method)


def make_details(place_id, name="Cafe", lat=41.0, lng=29.0, address="Istiklal Cd. 1"):
    return PlaceDetails(
        id=place_id,
        display_name=DisplayName(text=name, language_code="en"),
        formatted_address=address,
        location=LatLng(latitude=lat, longitude=lng),
        opening_hours=OpeningHours(open_now=True, weekday_descriptions=["Monday: 9:00 AM - 5:00 PM"]),
    )


def make_stub(place_id, name="Cafe", lat=41.0, lng=29.0):
    return NearbyPlace(id=place_id, display_name=DisplayName(text=name), location=LatLng(latitude=lat, longitude=lng))


def make_text_place(place_id, name="Cafe", address="Istiklal Cd. 1"):
    return TextSearchPlace(
        id=place_id,
        display_name=DisplayName(text=name),
        formatted_address=address,
        location=LatLng(latitude=41.0, longitude=29.0),
    )


def make_record(place_id, name="Stored Cafe", lat=41.0, lng=29.0, place_type="cafe", address="Galata"):
    return PlaceRecord(
        place_id=place_id,
        name=name,
        address=address,
        type=place_type,
        location=GeoJSONLocation(coordinates=[lng, lat]),
    )


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def poi_repo():
    return FakePOIRepository()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def executor():
    return InlineExecutor()


@pytest.fixture
def places_service(provider, poi_repo, cache, executor):
    return PlacesService(provider, poi_repo, cache, search_ttl=600, details_ttl=86400, default_lang="en", executor=executor)


@pytest.fixture
def config_class(tmp_path):
    class _Config(TestingConfig):
        LOG_DIR = str(tmp_path / "logs")
    return _Config


@pytest.fixture
def app(config_class, provider, poi_repo, cache, places_service):
    overrides = {
        MongoDBClient.__name__: MagicMock(spec=MongoDBClient),
        REDIS_CLIENT_KEY: None,
        CacheInterface.__name__: cache,
        CounterStore.__name__: InMemoryCounterStore(),
        BaseProvider.__name__: provider,
        POIRepositoryInterface.__name__: poi_repo,
        PlacesService.__name__: places_service,
    }
    app = create_app(config_class, overrides=overrides)
    yield app

    from poi_sync.sync.sync_job_runner import SyncJobRunner
    container = app.extensions["poi_sync"]
    if SyncJobRunner.__name__ in container.resolved_keys():
        container.resolve(SyncJobRunner.__name__).shutdown(wait=True)


@pytest.fixture
def client(app):
    return app.test_client()
