"""Chat Gateway — health-check endpoints."""

from __future__ import annotations

from relay_shared.health import create_health_router

# No checks are registered for the gateway; upstream reachability is
# reported per request on /chat.
router = create_health_router()
