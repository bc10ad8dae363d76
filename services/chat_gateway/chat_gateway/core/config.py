"""Chat Gateway — environment-based configuration."""

from __future__ import annotations

from relay_shared.config import BaseServiceSettings


class ChatGatewaySettings(BaseServiceSettings):
    """Settings for the Chat Gateway.

    The API key is read from ``OPENROUTER_API_KEY`` only.
    """

    service_name: str = "chat_gateway"


settings = ChatGatewaySettings()
