"""
Shared fixtures for relay tests.

The OpenRouter endpoint is replaced by an ``httpx.MockTransport`` that
records every outbound request, so tests can assert both on what was sent
upstream and on whether anything was sent at all.
"""
from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio

from chat_gateway.core.config import ChatGatewaySettings
from chat_gateway.main import create_app as create_gateway_app
from health_server.core.config import HealthServerSettings
from health_server.main import create_app as create_health_app


class FakeOpenRouter:
    """Callable used as the MockTransport handler."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responder: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={"choices": []})
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._responder(request)

    def respond(self, status_code: int = 200, **kwargs: Any) -> None:
        self._responder = lambda request: httpx.Response(status_code, **kwargs)

    def fail(self, exc: Exception) -> None:
        def raiser(request: httpx.Request) -> httpx.Response:
            raise exc

        self._responder = raiser

    @property
    def called(self) -> bool:
        return bool(self.requests)

    def last_payload(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def upstream() -> FakeOpenRouter:
    return FakeOpenRouter()


@pytest.fixture
def upstream_http(upstream: FakeOpenRouter) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream))


@pytest.fixture
def gateway_settings() -> ChatGatewaySettings:
    return ChatGatewaySettings(
        openrouter_api_key="sk-test-gateway",
        model_name="openrouter/auto",
        log_level="WARNING",
    )


@pytest.fixture
def health_settings() -> HealthServerSettings:
    return HealthServerSettings(
        openrouter_api_key="sk-test-health",
        picoclaw_providers_openrouter_api_key=None,
        log_level="WARNING",
    )


@pytest.fixture
def gateway_app(gateway_settings, upstream_http):
    return create_gateway_app(gateway_settings, http_client=upstream_http)


@pytest.fixture
def health_app(health_settings, upstream_http):
    return create_health_app(health_settings, http_client=upstream_http)


@pytest_asyncio.fixture
async def gateway_client(gateway_app):
    transport = httpx.ASGITransport(app=gateway_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://gateway") as client:
        yield client


@pytest_asyncio.fixture
async def health_client(health_app):
    transport = httpx.ASGITransport(app=health_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://health") as client:
        yield client
