"""Health Server — environment-based configuration."""

from __future__ import annotations

from relay_shared.config import BaseServiceSettings


class HealthServerSettings(BaseServiceSettings):
    """Settings for the Health/Ready server."""

    service_name: str = "health_server"
    host: str = "0.0.0.0"

    # Seconds in-flight requests get to finish once shutdown starts
    shutdown_timeout: int = 5

    # Provider-scoped key, preferred over OPENROUTER_API_KEY when set
    picoclaw_providers_openrouter_api_key: str | None = None

    def resolve_api_key(self) -> str | None:
        return self.picoclaw_providers_openrouter_api_key or super().resolve_api_key()


settings = HealthServerSettings()
