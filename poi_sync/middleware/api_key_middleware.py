"""
API key guard for the public endpoints.

Every guarded request is first counted against ``apikey:<value>``
(``apikey:unknown`` when the header is absent), then the key itself is
checked. With ``API_KEY_VALUE`` unset the guard is off.
"""
import hmac
import logging
from functools import wraps

from flask import current_app, request

from ..common.exceptions import RateLimitExceeded, UnauthorizedError
from ..core.container import get_container
from ..core.rate_limiter.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

UNKNOWN_API_KEY = "unknown"


def api_key_required(f):
    """Decorator to require the configured API key header."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        config = current_app.config
        expected = config.get("API_KEY_VALUE")
        if not expected:
            return f(*args, **kwargs)

        provided = request.headers.get(config["API_KEY_HEADER"])
        window = config["RATE_LIMIT_PERIOD_SECONDS"]

        limiter: RateLimiter = get_container().resolve(RateLimiter.__name__)
        if limiter.is_exceeded(f"apikey:{provided or UNKNOWN_API_KEY}", config["RATE_LIMIT_AUTHENTICATED"], window):
            raise RateLimitExceeded(
                f"Too many requests. Try again in {window} seconds.",
                retry_after=window
            )

        if not provided or not hmac.compare_digest(provided, expected):
            logger.warning(f"[API_KEY] Rejected {request.method} {request.path}: key missing or invalid")
            raise UnauthorizedError()

        return f(*args, **kwargs)

    return decorated_function
