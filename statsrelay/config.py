"""
Configuration and settings for the stats relay.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from statsrelay.cache import DEFAULT_MAX_ENTRIES, DEFAULT_TTL_SECONDS
from statsrelay.handler import PYPI_ORIGIN
from statsrelay.upstream import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_RETRY_DELAY_SECONDS,
    PYPISTATS_BASE_URL,
    REQUEST_TIMEOUT,
)


class Settings(BaseSettings):
    """Environment-backed settings, read from STATSRELAY_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="STATSRELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # "production" enforces the referrer check and hides the API docs.
    environment: Literal["production", "development"] = Field(default="production")

    # Only this origin may call the relay from a browser.
    trusted_origin: str = Field(default=PYPI_ORIGIN)

    # Upstream (pypistats.org)
    upstream_base_url: str = Field(default=PYPISTATS_BASE_URL)
    upstream_timeout_seconds: float = Field(default=REQUEST_TIMEOUT, gt=0)
    retry_max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)
    retry_delay_seconds: float = Field(default=DEFAULT_RETRY_DELAY_SECONDS, ge=0)

    cache_ttl_seconds: float = Field(default=DEFAULT_TTL_SECONDS, gt=0)
    cache_max_entries: int = Field(default=DEFAULT_MAX_ENTRIES, ge=1)

    # Server; TLS is terminated by the reverse proxy in front of us.
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    log_level: str = Field(default="INFO")

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
