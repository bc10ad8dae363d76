"""Base configuration using Pydantic Settings.

Both deployables inherit from ``BaseServiceSettings``. Values are loaded
from environment variables (case-insensitive) and an optional .env file.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL = "openrouter/auto"


class BaseServiceSettings(BaseSettings):
    """Common settings shared by the chat gateway and the health server."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        # model_name is a real setting here, not pydantic API
        protected_namespaces=("settings_",),
    )

    # ── General ───────────────────────────────
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"
    service_name: str = "openrouter_relay"
    port: int = 8080

    # ── Upstream ──────────────────────────────
    model_name: str = DEFAULT_MODEL
    openrouter_api_key: str | None = None

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def json_logs(self) -> bool:
        return self.is_production

    def resolve_api_key(self) -> str | None:
        """Return the bearer token for OpenRouter, or None when unset or empty."""
        return self.openrouter_api_key or None
