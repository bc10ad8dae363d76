"""Health Server — FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI

from health_server.core.config import HealthServerSettings, settings as default_settings
from health_server.routers import chat, health

from relay_shared.errors import register_error_handlers
from relay_shared.health import HealthRegistry
from relay_shared.middleware import RequestContextMiddleware
from relay_shared.openrouter import OpenRouterClient, build_http_client

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Readiness is driven by HealthServer.start()/stop(), not by the lifespan
    log.info("health_server starting up", model=app.state.settings.model_name)

    yield

    log.info("health_server shutting down")
    app.state.health.stop()
    await app.state.http_client.aclose()


def create_app(
    settings: HealthServerSettings | None = None,
    http_client: httpx.AsyncClient | None = None,
    registry: HealthRegistry | None = None,
) -> FastAPI:
    settings = settings or default_settings

    application = FastAPI(
        title="Health/Ready Server",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )

    application.state.settings = settings
    application.state.health = registry or HealthRegistry()
    application.state.http_client = http_client or build_http_client()
    application.state.openrouter = OpenRouterClient(application.state.http_client)

    register_error_handlers(application)
    application.add_middleware(RequestContextMiddleware)
    application.include_router(health.router)
    application.include_router(chat.router)

    return application
