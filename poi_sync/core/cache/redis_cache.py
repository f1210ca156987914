"""
Cache tier for resolved POI payloads.

Values are JSON strings with a per-entry TTL. Errors are raised as
``CacheError`` so the caller decides how to degrade; the resolution
engine treats any cache failure as a miss.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional

import redis

from ...common.exceptions import CacheError

logger = logging.getLogger(__name__)


class CacheInterface(ABC):
    """Key/value store with per-entry TTL."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the cached payload or None on miss."""
        pass

    @abstractmethod
    def set(self, key: str, value: str, ttl: int) -> None:
        """Store a payload for ``ttl`` seconds."""
        pass

    @staticmethod
    def build_key(*parts) -> str:
        """
        Build cache key from parts.

        Example:
            build_key('details', 'ChIJ123') -> 'details:ChIJ123'
        """
        return ':'.join(str(part) for part in parts)


class RedisCache(CacheInterface):
    """Redis-backed cache tier."""

    def __init__(self, redis_client: Optional[redis.Redis], enabled: bool = True):
        self.redis_client = redis_client
        self.enabled = enabled and redis_client is not None
        if not self.enabled:
            logger.warning("[CACHE] Redis cache disabled or unavailable, every lookup is a miss")

    def get(self, key: str) -> Optional[str]:
        if not self.enabled:
            return None
        try:
            return self.redis_client.get(key)
        except redis.RedisError as e:
            raise CacheError(f"Cache get failed for key '{key}': {e}") from e

    def set(self, key: str, value: str, ttl: int) -> None:
        if not self.enabled:
            return
        try:
            self.redis_client.setex(key, ttl, value)
        except redis.RedisError as e:
            raise CacheError(f"Cache set failed for key '{key}': {e}") from e

