"""Chat Gateway — FastAPI application factory.

Accepts ``{"prompt": ...}`` on ``POST /chat``, forwards it to OpenRouter and
returns the upstream JSON augmented with ``model_response`` and
``status_code``.

Run with ``gunicorn chat_gateway.main:app -c gunicorn_conf.py``.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI

from chat_gateway.core.config import ChatGatewaySettings, settings as default_settings
from chat_gateway.core.events import lifespan
from chat_gateway.routers import chat, health

from relay_shared.errors import register_error_handlers
from relay_shared.health import HealthRegistry
from relay_shared.logging import setup_logging
from relay_shared.middleware import RequestContextMiddleware
from relay_shared.openrouter import OpenRouterClient, build_http_client


def create_app(
    settings: ChatGatewaySettings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FastAPI:
    """Construct the gateway. *http_client* replaces the OpenRouter transport."""
    settings = settings or default_settings
    setup_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        service_name=settings.service_name,
    )

    application = FastAPI(
        title="OpenRouter Chat Gateway",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    application.state.settings = settings
    application.state.health = HealthRegistry()
    application.state.http_client = http_client or build_http_client()
    application.state.openrouter = OpenRouterClient(application.state.http_client)

    register_error_handlers(application)
    application.add_middleware(RequestContextMiddleware)
    application.include_router(health.router)
    application.include_router(chat.router)

    return application


app = create_app()
