"""
Client for the pypistats.org JSON API.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from statsrelay.types import DownloadStats

logger = logging.getLogger(__name__)

PYPISTATS_BASE_URL = "https://pypistats.org/api/packages"
REQUEST_TIMEOUT = 30  # seconds
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_SECONDS = 1.024

COUNTER_FIELDS = ("last_day", "last_week", "last_month")


class FetchError(Exception):
    """Raised inside an attempt when the upstream response is unusable."""


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS


def parse_recent_payload(payload: object, package_id: str) -> DownloadStats:
    """
    Validates a `/recent` response body and converts it to DownloadStats.

    Args:
        payload: The decoded JSON body.
        package_id (str): Identifier stored on the returned stats.

    Raises:
        FetchError: If the package name is missing or a counter is not a
            non-negative integer.
    """
    if not isinstance(payload, dict):
        raise FetchError("payload is not an object")
    if not isinstance(payload.get("package"), str) or not payload["package"]:
        raise FetchError("payload has no package name")
    data = payload.get("data")
    if not isinstance(data, dict):
        raise FetchError("payload has no data object")

    counts = []
    for name in COUNTER_FIELDS:
        value = data.get(name)
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise FetchError(f"invalid counter {name}: {value!r}")
        counts.append(value)

    return DownloadStats(
        package_id=package_id,
        downloads_lastday=counts[0],
        downloads_lastweek=counts[1],
        downloads_lastmonth=counts[2],
    )


class PypistatsClient:
    """Fetches recent download counts with a fixed-delay retry loop."""

    def __init__(
        self,
        base_url: str = PYPISTATS_BASE_URL,
        timeout_seconds: float = REQUEST_TIMEOUT,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    def recent_url(self, package_id: str) -> str:
        return f"{self.base_url}/{package_id.strip()}/recent"

    def fetch(self, package_id: str) -> Optional[DownloadStats]:
        """
        Returns the recent download stats for a package, or None once every
        attempt has failed.
        """
        url = self.recent_url(package_id)
        attempts = self.retry_policy.max_attempts
        for attempt in range(1, attempts + 1):
            try:
                return self._fetch_once(url, package_id)
            except (requests.RequestException, ValueError, FetchError) as exc:
                logger.warning(
                    "pypistats attempt %d/%d failed for %s: %s",
                    attempt,
                    attempts,
                    url,
                    exc,
                )
                self._sleep(self.retry_policy.delay_seconds)

        logger.error("pypistats unavailable for %s after %d attempts", url, attempts)
        return None

    def _fetch_once(self, url: str, package_id: str) -> DownloadStats:
        # A new session per attempt so a broken connection is never reused.
        with requests.Session() as session:
            response = session.get(
                url,
                headers={"Accept": "application/json"},
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
            payload = response.json()
        return parse_recent_payload(payload, package_id)
