import logging
import uuid
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock

import pytest

from poi_sync import create_app
from poi_sync.common.logging_config import CorrelationIdFilter
from poi_sync.config.di_setup import REDIS_CLIENT_KEY
from poi_sync.core.clients.mongodb_client import MongoDBClient
from poi_sync.core.rate_limiter.counter_store import CounterStore, InMemoryCounterStore

from conftest import make_record

API_KEY = "k-test-123"


@pytest.fixture
def counter_store():
    return InMemoryCounterStore()


@pytest.fixture
def keyed_app(config_class, provider, poi_repo, cache, places_service, counter_store):
    class KeyedConfig(config_class):
        API_KEY_HEADER = "X-API-Key"
        API_KEY_VALUE = API_KEY
        RATE_LIMIT_ANONYMOUS = 100
        RATE_LIMIT_AUTHENTICATED = 3

    poi_repo.records["p1"] = make_record("p1")
    return create_app(KeyedConfig, overrides={
        MongoDBClient.__name__: MagicMock(spec=MongoDBClient),
        REDIS_CLIENT_KEY: None,
        CounterStore.__name__: counter_store,
        "BaseProvider": provider,
        "POIRepositoryInterface": poi_repo,
        "CacheInterface": cache,
        "PlacesService": places_service,
    })


class TestApiKeyGuard:
    def test_missing_key_is_401(self, keyed_app):
        response = keyed_app.test_client().get("/places/p1")

        assert response.status_code == 401
        assert response.get_json()["code"] == "AUTH001"

    def test_wrong_key_is_401(self, keyed_app):
        response = keyed_app.test_client().get("/places/p1", headers={"X-API-Key": "nope"})
        assert response.status_code == 401

    def test_valid_key_passes(self, keyed_app):
        response = keyed_app.test_client().get("/places/p1", headers={"X-API-Key": API_KEY})

        assert response.status_code == 200
        assert response.get_json()["place"]["id"] == "p1"

    def test_sync_endpoints_are_guarded(self, keyed_app):
        client = keyed_app.test_client()

        assert client.post("/sync/locations?lat=41&lng=29").status_code == 401
        assert client.get("/sync/status/abc").status_code == 401

    def test_health_is_exempt(self, keyed_app):
        assert keyed_app.test_client().get("/health").status_code == 200

    def test_requests_are_counted_per_key(self, keyed_app):
        client = keyed_app.test_client()
        headers = {"X-API-Key": API_KEY}

        codes = [client.get("/places/p1", headers=headers).status_code for _ in range(4)]

        assert codes == [200, 200, 200, 429]

    def test_missing_keys_share_one_counter(self, keyed_app, counter_store):
        client = keyed_app.test_client()

        codes = [client.get("/places/p1").status_code for _ in range(4)]

        assert codes == [401, 401, 401, 429]
        assert counter_store.increment("apikey:unknown", 60) == 5

    def test_guard_is_off_without_configured_key(self, client, poi_repo):
        poi_repo.records["p1"] = make_record("p1")
        assert client.get("/places/p1").status_code == 200


class TestCorrelationId:
    def test_incoming_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "req-42"})
        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_id_is_generated_when_absent(self, client):
        generated = client.get("/health").headers["X-Correlation-ID"]
        assert str(uuid.UUID(generated)) == generated

    def test_error_responses_carry_the_id(self, client):
        response = client.get("/sync/status/missing", headers={"X-Correlation-ID": "req-7"})

        assert response.status_code == 404
        assert response.headers["X-Correlation-ID"] == "req-7"

    def test_log_records_are_stamped(self, app):
        record = logging.LogRecord("poi_sync", logging.INFO, __file__, 1, "msg", None, None)

        with app.test_request_context("/health", headers={"X-Correlation-ID": "req-9"}):
            app.preprocess_request()
            CorrelationIdFilter().filter(record)

        assert record.correlation_id == "req-9"

    def test_records_outside_a_request_get_a_placeholder(self):
        record = logging.LogRecord("poi_sync", logging.INFO, __file__, 1, "msg", None, None)

        CorrelationIdFilter().filter(record)

        assert record.correlation_id == "-"

    def test_file_handler_carries_the_filter(self, app):
        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]

        assert len(file_handlers) == 1
        assert any(isinstance(f, CorrelationIdFilter) for f in file_handlers[0].filters)
