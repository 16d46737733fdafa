"""
Dependency wiring for the FastAPI app.

`create_app` builds one cache, client and handler from its settings and keeps
them on `app.state`, so they live as long as the server process and every
request shares the same cache.
"""

from __future__ import annotations

from fastapi import FastAPI, Request

from statsrelay.cache import InMemoryStatsCache
from statsrelay.config import Settings
from statsrelay.handler import RequestHandler
from statsrelay.upstream import PypistatsClient, RetryPolicy

def build_stats_client(settings: Settings) -> PypistatsClient:
    return PypistatsClient(
        base_url=settings.upstream_base_url,
        timeout_seconds=settings.upstream_timeout_seconds,
        retry_policy=RetryPolicy(
            max_attempts=settings.retry_max_attempts,
            delay_seconds=settings.retry_delay_seconds,
        ),
    )

def build_request_handler(
    settings: Settings,
    cache: InMemoryStatsCache,
    client: PypistatsClient,
) -> RequestHandler:
    return RequestHandler(
        cache=cache,
        client=client,
        enforce_referrer=not settings.is_development,
        trusted_origin=settings.trusted_origin,
        ttl_seconds=settings.cache_ttl_seconds,
    )

def init_app_state(app: FastAPI, settings: Settings) -> None:
    cache = InMemoryStatsCache(maxsize=settings.cache_max_entries)
    client = build_stats_client(settings)
    app.state.settings = settings
    app.state.stats_cache = cache
    app.state.stats_client = client
    app.state.request_handler = build_request_handler(settings, cache, client)

def get_stats_cache(request: Request) -> InMemoryStatsCache:
    return request.app.state.stats_cache

def get_request_handler(request: Request) -> RequestHandler:
    return request.app.state.request_handler
