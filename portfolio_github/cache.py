"""Simple TTL-based in-memory cache store."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Union

from .models import CacheStats

logger = logging.getLogger(__name__)

TTL = Union[timedelta, int, float]


@dataclass(frozen=True)
class CacheEntry:
    """A cached value together with its insertion and expiry times."""

    value: Any
    stored_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


def _to_timedelta(ttl: TTL) -> timedelta:
    if isinstance(ttl, timedelta):
        delta = ttl
    else:
        delta = timedelta(seconds=ttl)
    if delta <= timedelta(0):
        raise ValueError(f"Cache TTL must be positive, got {ttl!r}")
    return delta


class CacheStore:
    """A process-local TTL cache for GitHub API responses.

    Expiry is lazy: an expired entry is only evicted when ``get`` or ``has``
    touches it, so ``stats`` may still count it until then.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._store: Dict[str, CacheEntry] = {}
        self._clock = clock
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[Any]:
        """Get cached value if it has not expired."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                logger.debug(f"Cache miss for key: {key}")
                return None
            now = self._clock()
            if entry.is_expired(now):
                logger.debug(f"Cache expired for key: {key}")
                self._store.pop(key, None)
                return None
            remaining = int((entry.expires_at - now).total_seconds() // 60)
            logger.debug(f"Cache hit for key: {key} (expires in {remaining} minutes)")
            return entry.value

    def set(self, key: str, value: Any, ttl: TTL) -> None:
        """Cache a value, replacing any existing entry for the key.

        Raises:
            ValueError: If ``ttl`` is zero or negative.
        """
        delta = _to_timedelta(ttl)
        now = self._clock()
        with self._lock:
            self._store[key] = CacheEntry(value=value, stored_at=now, expires_at=now + delta)
        logger.debug(
            f"Cached data for key: {key} (expires in {int(delta.total_seconds() // 60)} minutes)"
        )

    def delete(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)
        logger.debug(f"Cleared cache for key: {key}")

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
        logger.debug("Cleared all cache")

    def has(self, key: str) -> bool:
        """Return True if a live entry exists for ``key``."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False
            if entry.is_expired(self._clock()):
                self._store.pop(key, None)
                return False
            return True

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(size=len(self._store), keys=list(self._store.keys()))
