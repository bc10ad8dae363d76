"""Health Server — liveness and readiness endpoints."""

from __future__ import annotations

from relay_shared.health import create_health_router

router = create_health_router()
