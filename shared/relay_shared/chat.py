"""Shared ``POST /chat`` router.

Both deployables mount the same handler. ``ChatMode`` picks how the
upstream answer is returned:

* ``normalize``: always 200, upstream JSON plus ``model_response`` and
  ``status_code``.
* ``passthrough``: upstream status code and body, byte for byte.
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
from collections.abc import Awaitable
from typing import TypeVar

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from relay_shared.config import BaseServiceSettings
from relay_shared.errors import ClientDisconnected, MissingCredential
from relay_shared.openrouter import OpenRouterClient
from relay_shared.translation import (
    build_upstream_request,
    normalize_response,
    parse_chat_prompt,
)

logger = structlog.get_logger()

T = TypeVar("T")

DISCONNECT_POLL_INTERVAL = 0.1


class ChatMode(str, enum.Enum):
    NORMALIZE = "normalize"
    PASSTHROUGH = "passthrough"


def get_settings(request: Request) -> BaseServiceSettings:
    return request.app.state.settings


def get_openrouter(request: Request) -> OpenRouterClient:
    return request.app.state.openrouter


async def run_until_disconnect(
    request: Request,
    awaitable: Awaitable[T],
    *,
    poll_interval: float = DISCONNECT_POLL_INTERVAL,
) -> T:
    """Await *awaitable*, cancelling it if the inbound client goes away.

    The upstream call runs as its own task; the caller's connection is
    polled while it is pending. Cancelling the task aborts the outbound
    httpx request and releases its connection.
    """
    task = asyncio.ensure_future(awaitable)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("chat_client_disconnected")
                raise ClientDisconnected()
    finally:
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


def create_chat_router(mode: ChatMode) -> APIRouter:
    """Build the ``/chat`` router for the given response *mode*."""
    router = APIRouter(tags=["chat"])

    @router.post("/chat", summary="Forward a prompt to OpenRouter")
    async def chat(
        request: Request,
        settings: BaseServiceSettings = Depends(get_settings),
        openrouter: OpenRouterClient = Depends(get_openrouter),
    ) -> Response:
        prompt = parse_chat_prompt(await request.body())

        api_key = settings.resolve_api_key()
        if api_key is None:
            raise MissingCredential()

        payload = build_upstream_request(prompt, settings.model_name)
        logger.info(
            "chat_forwarding",
            model=settings.model_name,
            mode=mode.value,
            prompt_chars=len(prompt),
        )

        if mode is ChatMode.PASSTHROUGH:
            reply = await run_until_disconnect(
                request, openrouter.forward(api_key, payload)
            )
            return Response(
                content=reply.content,
                status_code=reply.status_code,
                media_type=reply.content_type,
            )

        status_code, body = await run_until_disconnect(
            request, openrouter.complete(api_key, payload)
        )
        normalized = normalize_response(body, status_code)
        logger.info(
            "chat_completed",
            upstream_status=status_code,
            extracted="model_response" in normalized,
        )
        return JSONResponse(content=normalized)

    return router
