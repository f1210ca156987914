"""
Attempt limiter for sensitive flows (login, registration).

Unlike the request throttle, a subject that crosses its threshold is
locked out for ``block_duration_seconds``. Users and IPs have separate
thresholds and separate tables. Entries idle for longer than the block
duration are dropped by a sweep that runs at most once per block duration.
"""
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ...common.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

ERROR_TOO_MANY_USER_ATTEMPTS = "Too many attempts for user. Try again later."
ERROR_TOO_MANY_IP_ATTEMPTS = "Too many attempts from IP. Try again later."


@dataclass(frozen=True)
class Attempt:
    count: int
    last_attempt: float
    blocked_until: float


class AuthAttemptLimiter:
    """In-process attempt counters with lockout."""

    def __init__(
        self,
        max_attempts: int = 5,
        max_ip_attempts: int = 20,
        block_duration_seconds: int = 900,
        clock: Callable[[], float] = time.monotonic
    ):
        self.max_attempts = max_attempts
        self.max_ip_attempts = max_ip_attempts
        self.block_duration = block_duration_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._attempts: Dict[str, Attempt] = {}
        self._ip_attempts: Dict[str, Attempt] = {}
        self._next_sweep = clock() + block_duration_seconds

    def check_and_increase(self, key: str, ip: Optional[str] = None) -> None:
        """
        Record an attempt for ``key`` (and ``ip``) and raise while blocked.

        Raises:
            RateLimitExceeded: the user or the IP is locked out
        """
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            attempt = self._bump(self._attempts, key, self.max_attempts, now)
            if attempt.blocked_until > now:
                logger.warning(f"[AUTH_LIMIT] User attempts blocked: {key}")
                raise RateLimitExceeded(
                    ERROR_TOO_MANY_USER_ATTEMPTS,
                    retry_after=math.ceil(attempt.blocked_until - now)
                )

            if ip is not None:
                ip_attempt = self._bump(self._ip_attempts, ip, self.max_ip_attempts, now)
                if ip_attempt.blocked_until > now:
                    logger.warning(f"[AUTH_LIMIT] IP attempts blocked: {ip}")
                    raise RateLimitExceeded(
                        ERROR_TOO_MANY_IP_ATTEMPTS,
                        retry_after=math.ceil(ip_attempt.blocked_until - now)
                    )

    def reset(self, key: str) -> None:
        """Forget a user's attempts (e.g., after a successful login)."""
        with self._lock:
            self._attempts.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._attempts) + len(self._ip_attempts)

    def _sweep(self, now: float) -> None:
        for table in (self._attempts, self._ip_attempts):
            stale = [key for key, attempt in table.items() if self._is_stale(attempt, now)]
            for key in stale:
                del table[key]
        self._next_sweep = now + self.block_duration

    def _is_stale(self, attempt: Attempt, now: float) -> bool:
        return attempt.blocked_until <= now and attempt.last_attempt + self.block_duration < now

    def _bump(self, table: Dict[str, Attempt], key: str, limit: int, now: float) -> Attempt:
        prev = table.get(key) or Attempt(0, now, 0.0)
        if prev.blocked_until > now:
            current = prev
        elif prev.last_attempt + self.block_duration < now:
            current = Attempt(1, now, 0.0)
        else:
            count = prev.count + 1
            blocked_until = now + self.block_duration if count > limit else 0.0
            current = Attempt(count, now, blocked_until)
        table[key] = current
        return current
