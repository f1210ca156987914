from unittest.mock import MagicMock

import pytest
import redis

from poi_sync.common.exceptions import CacheError
from poi_sync.core.cache import CacheInterface, RedisCache


def test_build_key():
    assert CacheInterface.build_key("search", "text", "coffee", "en") == "search:text:coffee:en"


def test_get_and_set():
    client = MagicMock()
    client.get.return_value = '{"places": []}'
    cache = RedisCache(client)

    assert cache.get("k") == '{"places": []}'
    cache.set("k", "v", 600)

    client.setex.assert_called_once_with("k", 600, "v")


def test_errors_are_wrapped():
    client = MagicMock()
    client.get.side_effect = redis.ConnectionError("refused")
    client.setex.side_effect = redis.TimeoutError("slow")
    cache = RedisCache(client)

    with pytest.raises(CacheError):
        cache.get("k")
    with pytest.raises(CacheError):
        cache.set("k", "v", 10)


def test_without_client_every_lookup_misses():
    cache = RedisCache(None)

    assert cache.get("k") is None
    cache.set("k", "v", 10)


def test_disabled_cache_does_not_touch_redis():
    client = MagicMock()
    cache = RedisCache(client, enabled=False)

    assert cache.get("k") is None
    cache.set("k", "v", 10)

    client.get.assert_not_called()
    client.setex.assert_not_called()
