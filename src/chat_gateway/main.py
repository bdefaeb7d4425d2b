"""FastAPI application entry-point.

Assembles routers, middleware, exception handlers, and lifecycle hooks.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from chat_gateway import __version__
from chat_gateway.adapters.inbound.rest.routers import (
    chat_router,
    health_router,
    providers_router,
)
from chat_gateway.config import Settings, get_settings
from chat_gateway.dependencies import build_gateway
from chat_gateway.shared.errors import register_exception_handlers
from chat_gateway.shared.middleware import (
    LoggingMiddleware,
    MetricsMiddleware,
    RequestIdMiddleware,
)
from chat_gateway.shared.observability import configure_logging
from chat_gateway.shared.providers import ChatGateway

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifecycle — startup & shutdown hooks."""
    settings: Settings = app.state.settings
    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.is_production,
    )
    gateway: ChatGateway = app.state.gateway
    logger.info(
        "application_starting",
        env=settings.app_env.value,
        providers=gateway.get_available_providers(),
    )
    yield
    await gateway.close()
    logger.info("application_shutdown")


def create_app(
    settings: Settings | None = None,
    gateway: ChatGateway | None = None,
) -> FastAPI:
    """Application factory — creates a fully configured FastAPI instance."""
    settings = settings or get_settings()

    app = FastAPI(
        title="Chat Gateway",
        description=(
            "Personal-finance chat assistant backed by several AI providers "
            "with priority failover and per-provider circuit breaking."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # One gateway per app; breaker state is shared by every request
    app.state.settings = settings
    app.state.gateway = gateway or build_gateway(settings)

    # ── Middleware (order matters: last added = outermost) ───
    allow_all_origins = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[] if allow_all_origins else settings.cors_origins,
        allow_origin_regex=".*" if allow_all_origins else None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.prometheus_enabled:
        app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # ── Exception handlers ───────────────────────────────────
    register_exception_handlers(app)

    # ── REST routers (versioned) ─────────────────────────────
    api_v1 = "/api/v1"
    app.include_router(health_router, prefix=api_v1)
    app.include_router(chat_router, prefix=api_v1)
    app.include_router(providers_router, prefix=api_v1)

    return app


def app_factory() -> FastAPI:
    """Uvicorn entry-point: ``uvicorn chat_gateway.main:app_factory --factory``."""
    return create_app()
