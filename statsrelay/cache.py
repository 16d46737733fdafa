"""
Time-bounded cache for download statistics.

Only an in-process implementation exists; the cache lives as long as the
server process and is not shared between instances.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Protocol

from cachetools import TLRUCache

from statsrelay.types import CacheEntry, DownloadStats

DEFAULT_TTL_SECONDS = 8 * 60 * 60
DEFAULT_MAX_ENTRIES = 10_000


def _entry_expiry(_key: str, entry: CacheEntry, _now: float) -> float:
    return entry.expires_at


class StatsCache(Protocol):
    """Operations the request handler needs from the cache."""

    def get(self, key: str) -> Optional[DownloadStats]:
        ...

    def set(self, key: str, value: DownloadStats, ttl_seconds: float) -> None:
        ...


class InMemoryStatsCache:
    """
    TTL cache keyed by package identifier, safe for concurrent requests.

    Backed by a cachetools TLRUCache so every entry carries its own expiry;
    an entry is gone once `now - inserted_at >= ttl_seconds`. A full cache
    drops an entry to make room for a new one.
    """

    def __init__(
        self,
        maxsize: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: TLRUCache = TLRUCache(
            maxsize=maxsize, ttu=_entry_expiry, timer=clock
        )

    def get(self, key: str) -> Optional[DownloadStats]:
        with self._lock:
            entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def set(
        self, key: str, value: DownloadStats, ttl_seconds: float = DEFAULT_TTL_SECONDS
    ) -> None:
        entry = CacheEntry(
            value=value, inserted_at=self._clock(), ttl_seconds=ttl_seconds
        )
        with self._lock:
            self._entries[key] = entry

    def purge_expired(self) -> int:
        """
        Drop every expired entry.

        Returns:
            int: The number of entries removed.
        """
        with self._lock:
            return len(list(self._entries.expire()))

    def __len__(self) -> int:
        with self._lock:
            self._entries.expire()
            return len(self._entries)
