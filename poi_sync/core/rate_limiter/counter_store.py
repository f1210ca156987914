"""
Counter stores for fixed-window rate limiting.

A counter store atomically increments the counter of a subject key and
arms the window expiry on the first increment of a fresh window. Once the
window has elapsed the next increment starts again at 1.

The in-memory store drops closed windows on a sweep that runs at most
once per ``sweep_interval_seconds``, so subject keys taken from client
headers cannot pile up for the life of the process.
"""
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

import redis


class CounterStore(ABC):
    """Backing storage for rate-limit counters."""

    @abstractmethod
    def increment(self, key: str, window_seconds: int) -> int:
        """Increment ``key`` and return the post-increment count in the current window."""
        pass


class RedisCounterStore(CounterStore):
    """
    Redis-backed counters shared by every worker process using the same Redis.

    ``SET key 0 EX window NX`` followed by ``INCR`` inside one MULTI/EXEC:
    the NX set only succeeds when no window is open, so the expiry is armed
    exactly once per window and INCR keeps the existing TTL.
    """

    def __init__(self, redis_client: Optional[redis.Redis], key_prefix: str = "rate_limit"):
        self.redis_client = redis_client
        self.key_prefix = key_prefix

    def increment(self, key: str, window_seconds: int) -> int:
        if self.redis_client is None:
            raise ConnectionError("Redis unavailable")

        redis_key = f"{self.key_prefix}:{key}" if self.key_prefix else key
        pipe = self.redis_client.pipeline(transaction=True)
        pipe.set(redis_key, 0, ex=window_seconds, nx=True)
        pipe.incr(redis_key)
        _, count = pipe.execute()
        return int(count)


class InMemoryCounterStore(CounterStore):
    """Process-local counters, used when Redis is not configured and in tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic, sweep_interval_seconds: float = 60):
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (count, window_expires_at)
        self._counters: Dict[str, Tuple[int, float]] = {}
        self._sweep_interval = sweep_interval_seconds
        self._next_sweep = clock() + sweep_interval_seconds

    def increment(self, key: str, window_seconds: int) -> int:
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            count, expires_at = self._counters.get(key, (0, 0.0))
            if now >= expires_at:
                count, expires_at = 0, now + window_seconds
            count += 1
            self._counters[key] = (count, expires_at)
            return count

    def reset(self, key: str) -> None:
        with self._lock:
            self._counters.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._counters)

    def _sweep(self, now: float) -> None:
        # Caller holds the lock
        expired = [key for key, (_, expires_at) in self._counters.items() if now >= expires_at]
        for key in expired:
            del self._counters[key]
        self._next_sweep = now + self._sweep_interval
