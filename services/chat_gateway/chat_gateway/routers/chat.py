"""Chat Gateway — ``POST /chat`` returning the normalized upstream response."""

from __future__ import annotations

from relay_shared.chat import ChatMode, create_chat_router

router = create_chat_router(ChatMode.NORMALIZE)
