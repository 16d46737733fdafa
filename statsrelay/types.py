"""
Value types shared by the upstream client, the cache and the handler.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DownloadStats:
    package_id: str
    downloads_lastday: int
    downloads_lastweek: int
    downloads_lastmonth: int


@dataclass(frozen=True)
class CacheEntry:
    value: DownloadStats
    inserted_at: float
    ttl_seconds: float

    @property
    def expires_at(self) -> float:
        return self.inserted_at + self.ttl_seconds
