"""OpenRouter chat-completion client.

One POST per call, no retries. Transport failures surface as
``UpstreamUnavailable``; a non-JSON body surfaces as ``UpstreamMalformed``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from relay_shared.errors import UpstreamMalformed, UpstreamUnavailable
from relay_shared.translation import loads_strict

logger = structlog.get_logger()

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"
UPSTREAM_TIMEOUT = 20.0


@dataclass(frozen=True)
class UpstreamReply:
    """Raw upstream answer, used as-is in passthrough mode."""

    status_code: int
    content: bytes
    content_type: str


def build_http_client() -> httpx.AsyncClient:
    """Return the long-lived HTTP client an application uses for OpenRouter."""
    return httpx.AsyncClient(timeout=UPSTREAM_TIMEOUT)


class OpenRouterClient:
    """Thin wrapper around an ``httpx.AsyncClient`` bound to the OpenRouter endpoint."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        url: str = OPENROUTER_URL,
        timeout: float = UPSTREAM_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._url = url
        self._timeout = timeout

    async def forward(self, api_key: str, payload: dict[str, Any]) -> UpstreamReply:
        """POST *payload* and return the upstream status, body and content type."""
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._http.post(
                self._url,
                json=payload,
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "openrouter_request_failed",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise UpstreamUnavailable() from exc

        logger.info(
            "openrouter_responded",
            model=payload.get("model"),
            status_code=response.status_code,
            bytes=len(response.content),
        )
        return UpstreamReply(
            status_code=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type", "application/json"),
        )

    async def complete(
        self, api_key: str, payload: dict[str, Any]
    ) -> tuple[int, dict[str, Any]]:
        """POST *payload* and return ``(status_code, decoded JSON object)``."""
        reply = await self.forward(api_key, payload)
        try:
            body = loads_strict(reply.content)
        except ValueError as exc:
            raise UpstreamMalformed() from exc
        if not isinstance(body, dict):
            raise UpstreamMalformed()
        return reply.status_code, body
