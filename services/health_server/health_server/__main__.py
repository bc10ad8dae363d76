"""Health Server — process entry point (``python -m health_server``)."""

from __future__ import annotations

import asyncio

from health_server.core.config import settings
from health_server.server import HealthServer

from relay_shared.logging import setup_logging


def main() -> None:
    setup_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        service_name=settings.service_name,
    )
    server = HealthServer.from_settings(settings)
    # uvicorn installs its own SIGINT/SIGTERM handlers and shuts down gracefully
    asyncio.run(server.start())


if __name__ == "__main__":
    main()
