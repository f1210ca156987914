"""
Rate Limiter.

Fixed-window request counting per subject key (``user:<id>``,
``ip:<addr>``, ``apikey:<value>``), plus the Flask decorator that guards
API endpoints with it.

The limiter fails open: if the counter store is unavailable the request
is allowed, so a Redis outage never turns into a denial of service.
"""
import logging
import functools
from typing import Callable, Optional, Tuple

import jwt
from flask import request, current_app

from ...common.exceptions import RateLimitExceeded
from ..container import get_container
from .counter_store import CounterStore

logger = logging.getLogger(__name__)


class RateLimiter:
    """Fixed-window rate limiter on top of a ``CounterStore``."""

    def __init__(self, counter_store: CounterStore, enabled: bool = True):
        self.counter_store = counter_store
        self.enabled = enabled

    def is_exceeded(self, key: str, limit: int, window_seconds: int) -> bool:
        """
        Count one request for ``key`` and report whether it is over the limit.

        Args:
            key: Subject key (e.g., "user:42", "ip:10.0.0.1")
            limit: Maximum requests allowed in the window
            window_seconds: Window length in seconds

        Returns:
            True iff the post-increment count exceeds ``limit``
        """
        if not self.enabled:
            return False

        try:
            count = self.counter_store.increment(key, window_seconds)
        except Exception as e:
            logger.warning(f"[RATE_LIMIT] Counter store error for '{key}', allowing request: {e}")
            return False

        if count > limit:
            logger.warning(f"[RATE_LIMIT] Rate limit exceeded for {key}: {count}/{limit} in {window_seconds}s")
            return True
        return False


def get_client_ip() -> str:
    """
    Peer address of the request.

    X-Forwarded-For is honoured only through ProxyFix (PROXY_FIX_X_FOR),
    which rewrites ``remote_addr`` from the entries added by trusted proxies.
    """
    return request.remote_addr or 'unknown'


def get_identifier_from_auth_token(secret_key: str) -> Optional[str]:
    """Extract ``user:<id>`` from a valid Authorization bearer token, else None."""
    auth_header = request.headers.get('Authorization')
    if not auth_header or not auth_header.startswith('Bearer '):
        return None
    token = auth_header[len('Bearer '):]
    try:
        payload = jwt.decode(token, secret_key, algorithms=['HS256'])
    except jwt.InvalidTokenError:
        return None
    user_id = payload.get('user_id') or payload.get('sub')
    if user_id:
        return f"user:{user_id}"
    return None


def resolve_subject() -> Tuple[str, int]:
    """Pick the rate-limit subject and its limit for the current request."""
    config = current_app.config
    user_key = get_identifier_from_auth_token(config['SECRET_KEY'])
    if user_key:
        return user_key, config['RATE_LIMIT_AUTHENTICATED']
    return f"ip:{get_client_ip()}", config['RATE_LIMIT_ANONYMOUS']


def rate_limit(key_prefix: str = ""):
    """
    Decorator for rate limiting Flask endpoints.

    Authenticated callers are counted per user with the higher limit,
    anonymous callers per IP. Raises ``RateLimitExceeded`` (HTTP 429).

    Example:
        @places_bp.route('/nearby')
        @rate_limit()
        def nearby():
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            subject, limit = resolve_subject()
            if key_prefix:
                subject = f"{key_prefix}:{subject}"
            window = current_app.config['RATE_LIMIT_PERIOD_SECONDS']

            limiter: RateLimiter = get_container().resolve(RateLimiter.__name__)
            if limiter.is_exceeded(subject, limit, window):
                raise RateLimitExceeded(
                    f"Too many requests. Try again in {window} seconds.",
                    retry_after=window
                )
            return func(*args, **kwargs)

        return wrapper
    return decorator
