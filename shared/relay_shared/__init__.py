"""OpenRouter relay shared library: translation core, upstream client, health checks."""

from relay_shared.chat import ChatMode, create_chat_router
from relay_shared.config import BaseServiceSettings
from relay_shared.errors import RelayError, register_error_handlers
from relay_shared.health import HealthRegistry, create_health_router
from relay_shared.logging import setup_logging
from relay_shared.middleware import RequestContextMiddleware
from relay_shared.openrouter import OpenRouterClient, build_http_client

__all__ = [
    "BaseServiceSettings",
    "ChatMode",
    "HealthRegistry",
    "OpenRouterClient",
    "RelayError",
    "RequestContextMiddleware",
    "build_http_client",
    "create_chat_router",
    "create_health_router",
    "register_error_handlers",
    "setup_logging",
]
