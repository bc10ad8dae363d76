"""
Unit tests for the OpenRouter client and upstream cancellation.
"""
import asyncio

import httpx
import pytest

from relay_shared.chat import run_until_disconnect
from relay_shared.errors import ClientDisconnected, UpstreamMalformed, UpstreamUnavailable
from relay_shared.openrouter import OPENROUTER_URL, OpenRouterClient

PAYLOAD = {"model": "openrouter/auto", "messages": [{"role": "user", "content": "hi"}]}


class TestOpenRouterClient:
    """Outbound request shape and error mapping."""

    @pytest.mark.asyncio
    async def test_request_shape(self, upstream, upstream_http):
        upstream.respond(200, json={"choices": []})
        client = OpenRouterClient(upstream_http)

        await client.complete("sk-abc", PAYLOAD)

        assert len(upstream.requests) == 1
        request = upstream.requests[0]
        assert request.method == "POST"
        assert str(request.url) == OPENROUTER_URL
        assert request.headers["Authorization"] == "Bearer sk-abc"
        assert request.headers["Content-Type"] == "application/json"
        assert upstream.last_payload() == PAYLOAD

    @pytest.mark.asyncio
    async def test_timeout_is_twenty_seconds(self, upstream, upstream_http):
        client = OpenRouterClient(upstream_http)
        await client.forward("k", PAYLOAD)
        timeout = upstream.requests[0].extensions["timeout"]
        assert timeout["connect"] == 20.0
        assert timeout["read"] == 20.0

    @pytest.mark.asyncio
    async def test_complete_returns_status_and_body(self, upstream, upstream_http):
        upstream.respond(429, json={"error": {"message": "slow down"}})
        client = OpenRouterClient(upstream_http)

        status_code, body = await client.complete("k", PAYLOAD)

        assert status_code == 429
        assert body == {"error": {"message": "slow down"}}

    @pytest.mark.asyncio
    async def test_forward_keeps_raw_body(self, upstream, upstream_http):
        upstream.respond(
            503, content=b"upstream overloaded", headers={"content-type": "text/plain"}
        )
        client = OpenRouterClient(upstream_http)

        reply = await client.forward("k", PAYLOAD)

        assert reply.status_code == 503
        assert reply.content == b"upstream overloaded"
        assert reply.content_type == "text/plain"

    @pytest.mark.asyncio
    async def test_network_error(self, upstream, upstream_http):
        upstream.fail(httpx.ConnectError("connection refused"))
        client = OpenRouterClient(upstream_http)

        with pytest.raises(UpstreamUnavailable) as excinfo:
            await client.complete("k", PAYLOAD)
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_error(self, upstream, upstream_http):
        upstream.fail(httpx.ReadTimeout("timed out"))
        client = OpenRouterClient(upstream_http)

        with pytest.raises(UpstreamUnavailable):
            await client.forward("k", PAYLOAD)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [
            b"<html>bad gateway</html>",
            b"[1, 2]",
            b"",
            b'{"choices": [], "score": NaN}',
        ],
    )
    async def test_non_object_body(self, upstream, upstream_http, content):
        upstream.respond(200, content=content)
        client = OpenRouterClient(upstream_http)

        with pytest.raises(UpstreamMalformed):
            await client.complete("k", PAYLOAD)


class FakeRequest:
    """Stands in for a Starlette request whose client may disconnect."""

    def __init__(self, disconnected: bool = False) -> None:
        self.disconnected = disconnected
        self.polls = 0

    async def is_disconnected(self) -> bool:
        self.polls += 1
        return self.disconnected


class TestRunUntilDisconnect:
    """Inbound disconnect cancels the outbound call."""

    @pytest.mark.asyncio
    async def test_returns_result(self):
        async def work():
            return 42

        assert await run_until_disconnect(FakeRequest(), work()) == 42

    @pytest.mark.asyncio
    async def test_disconnect_cancels_upstream(self):
        cancelled = asyncio.Event()

        async def slow_upstream():
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        request = FakeRequest(disconnected=True)
        with pytest.raises(ClientDisconnected):
            await run_until_disconnect(request, slow_upstream(), poll_interval=0.01)

        assert cancelled.is_set()
        assert request.polls == 1

    @pytest.mark.asyncio
    async def test_outer_cancellation_cancels_upstream(self):
        cancelled = asyncio.Event()
        started = asyncio.Event()

        async def slow_upstream():
            started.set()
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        handler = asyncio.ensure_future(
            run_until_disconnect(FakeRequest(), slow_upstream(), poll_interval=0.01)
        )
        await started.wait()
        handler.cancel()
        with pytest.raises(asyncio.CancelledError):
            await handler

        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        async def failing():
            raise UpstreamUnavailable()

        with pytest.raises(UpstreamUnavailable):
            await run_until_disconnect(FakeRequest(), failing())
