"""
Request orchestration: input checks, referrer check, cache, upstream.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from statsrelay.cache import DEFAULT_TTL_SECONDS, StatsCache
from statsrelay.types import DownloadStats

logger = logging.getLogger(__name__)

PYPI_ORIGIN = "https://pypi.org"


class StatsClient(Protocol):
    def fetch(self, package_id: str) -> Optional[DownloadStats]:
        ...


class RequestHandler:
    """
    Resolves a package identifier to download stats.

    Every rejection and failure collapses to None so callers cannot tell an
    invalid request from a missing package or an upstream outage.
    """

    def __init__(
        self,
        cache: StatsCache,
        client: StatsClient,
        *,
        enforce_referrer: bool = True,
        trusted_origin: str = PYPI_ORIGIN,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
    ):
        self.cache = cache
        self.client = client
        self.enforce_referrer = enforce_referrer
        self.trusted_origin = trusted_origin
        self.ttl_seconds = ttl_seconds

    def is_trusted_referrer(self, referrer: Optional[str]) -> bool:
        if not referrer or not referrer.strip():
            return False
        return referrer.startswith(self.trusted_origin)

    def handle(
        self, package_id: Optional[str], referrer: Optional[str] = None
    ) -> Optional[DownloadStats]:
        if not package_id or not package_id.strip():
            logger.debug("Rejected empty package id")
            return None
        if self.enforce_referrer and not self.is_trusted_referrer(referrer):
            logger.debug("Rejected %r: untrusted referrer %r", package_id, referrer)
            return None

        # The raw identifier is the cache key; only the upstream path is trimmed.
        cached = self.cache.get(package_id)
        if cached is not None:
            return cached

        try:
            stats = self.client.fetch(package_id.strip())
        except Exception:
            logger.exception("Unexpected error fetching stats for %r", package_id)
            return None
        if stats is None:
            return None

        self.cache.set(package_id, stats, self.ttl_seconds)
        return stats
