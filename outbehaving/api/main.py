"""FastAPI application factory

Run with `uvicorn outbehaving.api.main:create_app --factory`.
"""

from typing import Optional

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from outbehaving.api import webhook
from outbehaving.api.middleware import MetricsMiddleware, RequestIDMiddleware
from outbehaving.api.v1 import auth, goals, news, ownership, profile
from outbehaving.config import Settings, settings as default_settings
from outbehaving.infrastructure.clients.base import BackendConfig
from outbehaving.infrastructure.observability.logging import setup_logging
from outbehaving.state.app import StateRegistry


def create_app(settings: Optional[Settings] = None, backend_config: Optional[BackendConfig] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Raises:
        ConfigurationError: no backend URL or API key is configured
    """
    settings = settings or default_settings
    setup_logging(settings.log_level)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Savings goals, loyalty rewards and curated news",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.backend_config = backend_config or BackendConfig.from_settings(settings)
    app.state.registry = StateRegistry(max_users=settings.state_registry_max_users)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.app_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(webhook.router, tags=["webhook"])
    app.include_router(auth.router, prefix="/v1", tags=["auth"])
    app.include_router(goals.router, prefix="/v1", tags=["goals"])
    app.include_router(ownership.router, prefix="/v1", tags=["ownership"])
    app.include_router(news.router, prefix="/v1", tags=["news"])
    app.include_router(profile.router, prefix="/v1", tags=["profile"])

    return app
