"""Chat Gateway — application lifespan (startup / shutdown hooks)."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Mark the gateway ready on startup; drain and release on shutdown."""
    settings = app.state.settings
    log.info(
        "chat_gateway starting up",
        model=settings.model_name,
        port=settings.port,
        api_key_configured=settings.resolve_api_key() is not None,
    )
    app.state.health.start()

    yield

    log.info("chat_gateway shutting down")
    app.state.health.stop()
    await app.state.http_client.aclose()
