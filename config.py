import os
from dotenv import load_dotenv
from pathlib import Path


env_path = Path(".") / ".env"
load_dotenv(dotenv_path=env_path)


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "secret_key")
    PORT = int(os.environ.get("PORT", 5000))

    # MongoDB (Place Store)
    MONGODB_URI = os.environ.get("MONGODB_URI", "mongodb://localhost:27017/poi_sync")
    MONGODB_DB_NAME = os.environ.get("MONGODB_DB_NAME", "poi_sync")
    MONGODB_POI_COLLECTION = os.environ.get("MONGODB_POI_COLLECTION", "pois")
    MONGODB_MAX_POOL_SIZE = int(os.environ.get("MONGODB_MAX_POOL_SIZE", 50))
    MONGODB_SERVER_SELECTION_TIMEOUT_MS = int(os.environ.get("MONGODB_SERVER_SELECTION_TIMEOUT_MS", 5000))
    MONGODB_CONNECT_TIMEOUT_MS = int(os.environ.get("MONGODB_CONNECT_TIMEOUT_MS", 10000))

    # Redis Configuration (cache tier + rate limit counters)
    REDIS_URL = os.environ.get("REDIS_URL")
    REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.environ.get("REDIS_PORT", 6379))
    REDIS_DB = int(os.environ.get("REDIS_DB", 0))
    REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD", None)

    # Cache Configuration
    # Searches are volatile (10 minutes), details change rarely (24 hours)
    CACHE_ENABLED = os.environ.get("CACHE_ENABLED", "True").lower() == "true"
    CACHE_SEARCH_TTL = int(os.environ.get("CACHE_SEARCH_TTL", 600))
    CACHE_DETAILS_TTL = int(os.environ.get("CACHE_DETAILS_TTL", 86400))

    # Google Places API (New)
    GOOGLE_PLACES_API_KEY = os.environ.get("GOOGLE_PLACES_API_KEY")
    GOOGLE_PLACES_BASE_URL = os.environ.get("GOOGLE_PLACES_BASE_URL", "https://places.googleapis.com/v1")
    GOOGLE_PLACES_TIMEOUT = int(os.environ.get("GOOGLE_PLACES_TIMEOUT", 15))
    GOOGLE_PLACES_MAX_RETRIES = int(os.environ.get("GOOGLE_PLACES_MAX_RETRIES", 2))

    # Background sync
    SYNC_MAX_CONCURRENCY = int(os.environ.get("SYNC_MAX_CONCURRENCY", 8))  # detail lookups in flight per job
    SYNC_WORKERS = int(os.environ.get("SYNC_WORKERS", 2))  # jobs running at once
    SYNC_MAX_RADIUS_METERS = float(os.environ.get("SYNC_MAX_RADIUS_METERS", 50000))
    JOB_RETENTION_SECONDS = int(os.environ.get("JOB_RETENTION_SECONDS", 3600))  # 1 hour

    # Rate Limiting Configuration
    RATE_LIMIT_ENABLED = os.environ.get("RATE_LIMIT_ENABLED", "True").lower() == "true"
    RATE_LIMIT_ANONYMOUS = int(os.environ.get("RATE_LIMIT_ANONYMOUS", 20))
    RATE_LIMIT_AUTHENTICATED = int(os.environ.get("RATE_LIMIT_AUTHENTICATED", 100))
    RATE_LIMIT_PERIOD_SECONDS = int(os.environ.get("RATE_LIMIT_PERIOD_SECONDS", 60))
    RATE_LIMIT_KEY_PREFIX = os.environ.get("RATE_LIMIT_KEY_PREFIX", "poi_sync:rate_limit")

    # API key guard (off while API_KEY_VALUE is unset)
    API_KEY_HEADER = os.environ.get("API_KEY_HEADER", "X-API-Key")
    API_KEY_VALUE = os.environ.get("API_KEY_VALUE")

    # Number of reverse proxies in front of the app; 0 ignores X-Forwarded-For
    PROXY_FIX_X_FOR = int(os.environ.get("PROXY_FIX_X_FOR", 0))

    # Login / registration attempt limits
    AUTH_MAX_USER_ATTEMPTS = int(os.environ.get("AUTH_MAX_USER_ATTEMPTS", 5))
    AUTH_MAX_IP_ATTEMPTS = int(os.environ.get("AUTH_MAX_IP_ATTEMPTS", 20))
    AUTH_BLOCK_DURATION_SECONDS = int(os.environ.get("AUTH_BLOCK_DURATION_SECONDS", 900))  # 15 minutes

    # Request defaults
    DEFAULT_LANGUAGE_CODE = os.environ.get("DEFAULT_LANGUAGE_CODE", "en")
    DEFAULT_RADIUS_METERS = float(os.environ.get("DEFAULT_RADIUS_METERS", 5000))
    DEFAULT_PLACE_TYPE = os.environ.get("DEFAULT_PLACE_TYPE", "restaurant")
    DEFAULT_MAX_RESULTS = int(os.environ.get("DEFAULT_MAX_RESULTS", 20))

    # Logging
    LOG_DIR = os.environ.get("LOG_DIR", "logs")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret-key-with-at-least-32-bytes"
    CACHE_ENABLED = True
    RATE_LIMIT_ENABLED = True
    GOOGLE_PLACES_API_KEY = "test-key"
    API_KEY_VALUE = None
    PROXY_FIX_X_FOR = 0
    SYNC_MAX_CONCURRENCY = 4
    SYNC_WORKERS = 1
