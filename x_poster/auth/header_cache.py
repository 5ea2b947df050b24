"""
Short-lived cache of signed request headers keyed by method and URL.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_HEADER_TTL = 300.0


@dataclass(frozen=True, slots=True)
class SignedHeaderEntry:
    headers: Mapping[str, str]
    generated_at: float


class HeaderCache:
    """Process-local, non-authoritative store; a miss simply means re-sign."""

    def __init__(
        self,
        ttl: float = DEFAULT_HEADER_TTL,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, SignedHeaderEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def key(method: str, url: str) -> str:
        return f"{method.upper()}:{url or 'default'}"

    def get(self, method: str, url: str) -> dict[str, str] | None:
        cache_key = self.key(method, url)
        with self._lock:
            entry = self._entries.get(cache_key)
            if entry is None:
                return None
            if self._clock() - entry.generated_at >= self.ttl:
                del self._entries[cache_key]
                logger.debug("Signed headers for %s expired", cache_key)
                return None
            return dict(entry.headers)

    def put(self, method: str, url: str, headers: Mapping[str, str]) -> None:
        with self._lock:
            self._entries[self.key(method, url)] = SignedHeaderEntry(
                headers=dict(headers), generated_at=self._clock()
            )

    def invalidate(self, method: str, url: str) -> None:
        with self._lock:
            self._entries.pop(self.key(method, url), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
