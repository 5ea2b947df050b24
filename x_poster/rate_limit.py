"""
Client-side rate limiting and retry/backoff helpers.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from x_poster.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

RATE_LIMIT_WINDOW = 900.0
MAX_REQUESTS_PER_WINDOW = 300


class SleepStrategy(Protocol):
    """Strategy responsible for sleeping/backing off."""

    def __call__(self, seconds: float) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Attempt budget and exponential backoff schedule for API requests."""

    max_attempts: int = 3
    base_delay: float = 1.0
    exponential_base: float = 2.0
    max_delay: float = 60.0

    def calculate_delay(self, attempt: int) -> float:
        """Delay to wait after the zero-based ``attempt`` failed: 1s, 2s, 4s, ..."""

        delay = self.base_delay * (self.exponential_base**attempt)
        return min(delay, self.max_delay)


class RateLimiter:
    """
    Fixed-window admission counter approximating the server's posting limit.

    This is an optimistic local pre-flight check only: the server stays
    authoritative and its 429 responses go through the retry path.
    """

    def __init__(
        self,
        window: float = RATE_LIMIT_WINDOW,
        quota: int = MAX_REQUESTS_PER_WINDOW,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window = window
        self.quota = quota
        self._clock = clock
        self._window_start = clock()
        self._count = 0
        self._lock = threading.Lock()

    def admit(self) -> bool:
        """
        Count one request against the current window.

        Raises:
            RateLimitExceeded: when the window's quota is already used up.
        """

        with self._lock:
            now = self._clock()
            if now - self._window_start >= self.window:
                self._window_start = now
                self._count = 0

            if self._count >= self.quota:
                reset_at = self._window_start + self.window
                logger.warning(
                    "Local rate limit of %d requests per %.0fs reached", self.quota, self.window
                )
                raise RateLimitExceeded(
                    "Rate limit exceeded. Please wait before sending more requests.",
                    reset_at=reset_at,
                )

            self._count += 1
            return True

    @property
    def remaining(self) -> int:
        with self._lock:
            if self._clock() - self._window_start >= self.window:
                return self.quota
            return self.quota - self._count

    @property
    def reset_at(self) -> float:
        with self._lock:
            return self._window_start + self.window
