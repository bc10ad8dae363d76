"""Health Server — ``POST /chat`` passing the raw OpenRouter response through.

Kept so deployments running the full server instead of the gateway can
still serve simple chat requests. Unlike the gateway, the body is not
augmented with ``model_response`` / ``status_code``.
"""

from __future__ import annotations

from relay_shared.chat import ChatMode, create_chat_router

router = create_chat_router(ChatMode.PASSTHROUGH)
