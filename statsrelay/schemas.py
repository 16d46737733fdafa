"""
Pydantic schemas for the HTTP surface.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from statsrelay.types import DownloadStats


class DownloadStatsResponse(BaseModel):
    package_id: str
    downloads_lastday: int = Field(..., ge=0)
    downloads_lastweek: int = Field(..., ge=0)
    downloads_lastmonth: int = Field(..., ge=0)

    @classmethod
    def from_stats(cls, stats: DownloadStats) -> "DownloadStatsResponse":
        return cls(
            package_id=stats.package_id,
            downloads_lastday=stats.downloads_lastday,
            downloads_lastweek=stats.downloads_lastweek,
            downloads_lastmonth=stats.downloads_lastmonth,
        )


class HealthResponse(BaseModel):
    status: str
    cached_entries: int
