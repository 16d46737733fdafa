"""
FastAPI application entry point for the stats relay.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from statsrelay.config import Settings, get_settings
from statsrelay.dependencies import init_app_state
from statsrelay.routes import router


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    docs_enabled = settings.is_development
    app = FastAPI(
        title="pypistats relay",
        version="0.1.0",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.trusted_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    init_app_state(app, settings)
    app.include_router(router)
    return app


app = create_app()
