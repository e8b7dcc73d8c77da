"""Retry and rate limiting helpers for data provider calls."""

import functools
import time
from typing import Any, Callable

from stocklens.utils.errors import RateLimitException, is_retryable_error
from stocklens.utils.logging import get_logger

logger = get_logger(__name__)


def retry(
    max_attempts: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    on_retry: Callable[[int, Exception], None] | None = None,
) -> Callable:
    """Retry a function on transient errors with exponential backoff.

    Only errors for which ``is_retryable_error`` is true are retried; any
    other exception propagates immediately.

    Args:
        max_attempts: Maximum number of attempts (including the first)
        initial_delay: Delay before the first retry in seconds
        max_delay: Upper bound for a single delay in seconds
        exponential_base: Multiplier applied to the delay after each retry
        on_retry: Optional callback invoked with (attempt, exception)

    Returns:
        Decorator
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            delay = initial_delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not is_retryable_error(e) or attempt == max_attempts:
                        raise

                    wait = delay
                    if isinstance(e, RateLimitException) and e.retry_after:
                        wait = max(wait, e.retry_after)
                    wait = min(wait, max_delay)

                    logger.warning(
                        f"{func.__name__} failed (attempt {attempt}/{max_attempts}): {e}. "
                        f"Retrying in {wait:.2f}s"
                    )
                    if on_retry:
                        on_retry(attempt, e)

                    time.sleep(wait)
                    delay *= exponential_base

        return wrapper

    return decorator


class RateLimiter:
    """Token bucket rate limiter.

    Holds up to ``rate`` tokens, refilled continuously over ``period``
    seconds. Meant to be created by the caller and injected into providers,
    so its lifetime is explicit: create, ``acquire``/``wait_if_needed``,
    ``reset``.
    """

    def __init__(self, rate: int, period: float = 1.0):
        """Initialize rate limiter.

        Args:
            rate: Number of calls allowed per period
            period: Period length in seconds
        """
        self.rate = rate
        self.period = period
        self.tokens: float = rate
        self._last_refill = time.monotonic()

    def _refill(self) -> None:
        """Add tokens for the time elapsed since the last refill."""
        now = time.monotonic()
        elapsed = now - self._last_refill
        self.tokens = min(self.rate, self.tokens + elapsed * self.rate / self.period)
        self._last_refill = now

    def acquire(self, tokens: int = 1) -> bool:
        """Try to take tokens without waiting.

        Args:
            tokens: Number of tokens to take

        Returns:
            True if the tokens were taken
        """
        self._refill()
        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def wait_if_needed(self, tokens: int = 1) -> None:
        """Block until tokens are available, then take them.

        Args:
            tokens: Number of tokens to take
        """
        while not self.acquire(tokens):
            missing = tokens - self.tokens
            time.sleep(max(missing * self.period / self.rate, 0.01))

    def reset(self) -> None:
        """Refill the bucket completely."""
        self.tokens = self.rate
        self._last_refill = time.monotonic()
