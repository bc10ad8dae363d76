"""Health Server — uvicorn-backed lifecycle wrapper.

``HealthServer`` owns the listening socket and the readiness flag:
``start`` marks the registry ready before serving, ``stop`` clears it and
asks uvicorn to shut down gracefully (stop accepting, let in-flight requests
finish within ``shutdown_timeout``, then close the socket).
"""

from __future__ import annotations

import asyncio

import structlog
import uvicorn
from fastapi import FastAPI

from health_server.core.config import HealthServerSettings
from health_server.main import create_app

from relay_shared.health import CheckFunc, CheckResult, HealthRegistry

log = structlog.get_logger()


class HealthServer:
    """Serves an app with uvicorn and drives its registry through start and stop."""

    def __init__(
        self,
        app: FastAPI,
        *,
        host: str = "0.0.0.0",
        port: int = 8080,
        shutdown_timeout: int = 5,
        log_level: str = "info",
    ) -> None:
        self.app = app
        self.registry: HealthRegistry = app.state.health
        config = uvicorn.Config(
            app,
            host=host,
            port=port,
            log_level=log_level.lower(),
            log_config=None,
            timeout_graceful_shutdown=shutdown_timeout,
        )
        self._server = uvicorn.Server(config)
        self._serve_task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(cls, settings: HealthServerSettings) -> HealthServer:
        return cls(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            shutdown_timeout=settings.shutdown_timeout,
            log_level=settings.log_level,
        )

    def set_ready(self, ready: bool) -> None:
        self.registry.set_ready(ready)

    def register_check(self, name: str, check: CheckFunc) -> CheckResult:
        return self.registry.register_check(name, check)

    async def start(self) -> None:
        """Mark ready and serve until uvicorn exits (signal or ``stop``)."""
        self.registry.start()
        log.info(
            "health_server listening",
            host=self._server.config.host,
            port=self._server.config.port,
        )
        self._serve_task = asyncio.ensure_future(self._server.serve())
        try:
            await self._serve_task
        finally:
            self.registry.stop()

    async def serve_until(self, stop_event: asyncio.Event) -> None:
        """Serve until *stop_event* is set, then shut down gracefully."""
        serving = asyncio.ensure_future(self.start())
        stopping = asyncio.ensure_future(stop_event.wait())
        done, _ = await asyncio.wait(
            {serving, stopping}, return_when=asyncio.FIRST_COMPLETED
        )
        if stopping in done:
            await self.stop()
        else:
            stopping.cancel()
        await serving

    async def stop(self) -> None:
        """Clear readiness and wait for uvicorn to drain and close the socket."""
        self.registry.stop()
        self._server.should_exit = True
        if self._serve_task is not None and not self._serve_task.done():
            await self._serve_task
        log.info("health_server stopped")
