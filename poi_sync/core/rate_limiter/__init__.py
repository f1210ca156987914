"""
Rate Limiter Module
====================

- Fixed-window request throttling (Redis or in-memory counters), fail-open
- Per-user and per-IP limiting via the ``rate_limit`` decorator
- Attempt lockout for login/registration flows
"""

from .counter_store import CounterStore, RedisCounterStore, InMemoryCounterStore
from .rate_limiter import (
    RateLimiter,
    rate_limit,
    get_client_ip,
    get_identifier_from_auth_token
)
from .auth_attempt_limiter import AuthAttemptLimiter

__all__ = [
    'CounterStore',
    'RedisCounterStore',
    'InMemoryCounterStore',
    'RateLimiter',
    'rate_limit',
    'get_client_ip',
    'get_identifier_from_auth_token',
    'AuthAttemptLimiter'
]
