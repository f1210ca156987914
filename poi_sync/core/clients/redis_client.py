"""
Redis Client Configuration and Connection Management.

One Redis connection is shared by the cache tier and the rate-limit
counter store. When Redis cannot be reached at startup the service runs
in degraded mode: no cache, rate limiter fails open.
"""
import redis
import logging
from typing import Optional

logger = logging.getLogger(__name__)


def create_redis_client(config) -> Optional[redis.Redis]:
    """
    Build a Redis client from configuration and verify it with PING.

    Returns:
        redis.Redis instance, or None if Redis is unreachable
    """
    try:
        redis_url = getattr(config, 'REDIS_URL', None)
        if redis_url:
            connection_kwargs = {
                'decode_responses': True,
                'socket_connect_timeout': 10,
                'socket_keepalive': True,
                'health_check_interval': 30
            }
            client = redis.from_url(redis_url, **connection_kwargs)
            logger.info(f"[REDIS] Connecting via REDIS_URL (TLS: {redis_url.startswith('rediss://')})")
        else:
            client = redis.Redis(
                host=config.REDIS_HOST,
                port=config.REDIS_PORT,
                db=config.REDIS_DB,
                password=config.REDIS_PASSWORD,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_keepalive=True,
                health_check_interval=30
            )
            logger.info(f"[REDIS] Connecting to {config.REDIS_HOST}:{config.REDIS_PORT}")

        client.ping()
        logger.info("[REDIS] Connected successfully")
        return client

    except redis.RedisError as e:
        logger.error(f"[REDIS] Connection failed: {str(e)}")
        logger.warning("[REDIS] Application will continue without Redis (degraded mode)")
        return None
