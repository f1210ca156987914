"""Cache tier module."""
from .redis_cache import CacheInterface, RedisCache

__all__ = ['CacheInterface', 'RedisCache']
