"""
Service wiring for one application instance.

Every collaborator is registered as a factory, so nothing connects until
first use and tests can replace any key before it is resolved.
"""
import logging

from ..core.container import ServiceContainer

logger = logging.getLogger(__name__)

REDIS_CLIENT_KEY = "RedisClient"


def init_di(container: ServiceContainer, config):
    """Register all dependencies in the container."""
    from ..core.clients.mongodb_client import MongoDBClient
    from ..core.clients.redis_client import create_redis_client
    from ..core.cache.redis_cache import CacheInterface, RedisCache
    from ..core.rate_limiter.counter_store import CounterStore, RedisCounterStore, InMemoryCounterStore
    from ..core.rate_limiter.rate_limiter import RateLimiter
    from ..core.rate_limiter.auth_attempt_limiter import AuthAttemptLimiter
    from ..providers.base_provider import BaseProvider
    from ..providers.places.google_places_provider import GooglePlacesProvider
    from ..repo.mongo.interfaces import POIRepositoryInterface
    from ..repo.mongo.poi_repository import POIRepository
    from ..service.places_service import PlacesService
    from ..service.location_sync_service import LocationSyncService
    from ..sync.job_registry import JobRegistry
    from ..sync.sync_job_runner import SyncJobRunner

    # Clients
    container.register(MongoDBClient.__name__, lambda c: MongoDBClient.from_config(config))
    container.register(REDIS_CLIENT_KEY, lambda c: create_redis_client(config))

    # Cache tier and rate limiting
    def create_cache(c):
        return RedisCache(c.resolve(REDIS_CLIENT_KEY), enabled=config.CACHE_ENABLED)

    def create_counter_store(c):
        redis_client = c.resolve(REDIS_CLIENT_KEY)
        if redis_client is None:
            logger.warning("[RATE_LIMIT] Redis unavailable, using process-local counters")
            return InMemoryCounterStore()
        return RedisCounterStore(redis_client, key_prefix=config.RATE_LIMIT_KEY_PREFIX)

    def create_rate_limiter(c):
        return RateLimiter(c.resolve(CounterStore.__name__), enabled=config.RATE_LIMIT_ENABLED)

    def create_auth_attempt_limiter(c):
        return AuthAttemptLimiter(
            max_attempts=config.AUTH_MAX_USER_ATTEMPTS,
            max_ip_attempts=config.AUTH_MAX_IP_ATTEMPTS,
            block_duration_seconds=config.AUTH_BLOCK_DURATION_SECONDS
        )

    container.register(CacheInterface.__name__, create_cache)
    container.register(CounterStore.__name__, create_counter_store)
    container.register(RateLimiter.__name__, create_rate_limiter)
    container.register(AuthAttemptLimiter.__name__, create_auth_attempt_limiter)

    # Provider and repository
    container.register(BaseProvider.__name__, lambda c: GooglePlacesProvider.from_config(config))
    container.register(
        POIRepositoryInterface.__name__,
        lambda c: POIRepository(c.resolve(MongoDBClient.__name__).get_collection())
    )

    # Services
    def create_places_service(c):
        return PlacesService(
            provider=c.resolve(BaseProvider.__name__),
            poi_repo=c.resolve(POIRepositoryInterface.__name__),
            cache=c.resolve(CacheInterface.__name__),
            search_ttl=config.CACHE_SEARCH_TTL,
            details_ttl=config.CACHE_DETAILS_TTL,
            default_lang=config.DEFAULT_LANGUAGE_CODE
        )

    def create_job_registry(c):
        return JobRegistry(retention_seconds=config.JOB_RETENTION_SECONDS)

    def create_location_sync_service(c):
        return LocationSyncService(
            provider=c.resolve(BaseProvider.__name__),
            poi_repo=c.resolve(POIRepositoryInterface.__name__),
            job_registry=c.resolve(JobRegistry.__name__),
            max_concurrency=config.SYNC_MAX_CONCURRENCY,
            max_radius_meters=config.SYNC_MAX_RADIUS_METERS
        )

    def create_sync_job_runner(c):
        return SyncJobRunner(
            sync_service=c.resolve(LocationSyncService.__name__),
            job_registry=c.resolve(JobRegistry.__name__),
            workers=config.SYNC_WORKERS
        )

    container.register(PlacesService.__name__, create_places_service)
    container.register(JobRegistry.__name__, create_job_registry)
    container.register(LocationSyncService.__name__, create_location_sync_service)
    container.register(SyncJobRunner.__name__, create_sync_job_runner)

    logger.info("[INIT] Services registered")
