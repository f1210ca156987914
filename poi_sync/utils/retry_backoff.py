"""
Retry with Exponential Backoff
================================

Retries transient failures of outbound calls (Google Places HTTP
requests). The sync pipeline itself never retries; this lives at the
I/O-client level only.
"""

import time
import random
import logging
from functools import wraps
from typing import Callable, Optional, Tuple, Type

logger = logging.getLogger(__name__)


def retry_with_backoff(
    max_retries: int = 2,
    base_delay: float = 0.5,
    max_delay: float = 8.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    should_retry: Optional[Callable[[Exception], bool]] = None,
    sleep: Callable[[float], None] = time.sleep
):
    """
    Decorator for automatic retry with exponential backoff and jitter.

    Args:
        max_retries: Retries after the first attempt
        base_delay: Delay before the first retry, doubled each time
        max_delay: Upper bound for a single delay
        exceptions: Exception types eligible for retry
        should_retry: Optional predicate; returning False re-raises immediately
        sleep: Sleep function (injectable for tests)

    Example:
        @retry_with_backoff(max_retries=2, exceptions=(requests.ConnectionError,))
        def fetch():
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if should_retry is not None and not should_retry(e):
                        raise
                    attempt += 1
                    if attempt > max_retries:
                        logger.error(f"[RETRY] {func.__name__} failed after {max_retries} retries: {e}")
                        raise

                    delay = min(base_delay * (2 ** (attempt - 1)), max_delay)
                    # Jitter range: [50%, 150%] of calculated delay
                    delay = delay * (0.5 + random.random())
                    logger.warning(
                        f"[RETRY] {func.__name__} failed (attempt {attempt}/{max_retries}), "
                        f"retrying in {delay:.2f}s: {type(e).__name__}: {e}"
                    )
                    sleep(delay)

        return wrapper
    return decorator
