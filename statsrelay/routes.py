"""
HTTP routes for the stats relay.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header

from statsrelay.cache import InMemoryStatsCache
from statsrelay.dependencies import get_request_handler, get_stats_cache
from statsrelay.handler import RequestHandler
from statsrelay.schemas import DownloadStatsResponse, HealthResponse


router = APIRouter()


@router.post(
    "/package/{package_id}",
    response_model=Optional[DownloadStatsResponse],
    name="get_download_stats",
)
def get_download_stats(
    package_id: str,
    referer: Optional[str] = Header(default=None),
    handler: RequestHandler = Depends(get_request_handler),
):
    """
    Recent download counts for a package, or null when none are available.
    """
    stats = handler.handle(package_id, referer)
    if stats is None:
        return None
    return DownloadStatsResponse.from_stats(stats)


@router.get("/healthz", response_model=HealthResponse)
def healthz(cache: InMemoryStatsCache = Depends(get_stats_cache)):
    return HealthResponse(status="ok", cached_entries=len(cache))
