"""Translation between the relay's ``{"prompt": ...}`` contract and OpenRouter.

Inbound: ``parse_chat_prompt`` validates the raw body and
``build_upstream_request`` turns the prompt into a chat-completion payload.

Outbound: ``normalize_response`` keeps the upstream object as-is and adds
``model_response`` (best-effort extracted text) and ``status_code``.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel

from relay_shared.errors import InvalidBody, MissingField


# ── Schemas ──────────────────────────────────


class ChatMessage(BaseModel):
    role: Literal["user"] = "user"
    content: str


class UpstreamRequest(BaseModel):
    """Chat-completion payload sent to OpenRouter."""

    model: str
    messages: list[ChatMessage]


# ── Strict JSON ──────────────────────────────


def _reject_constant(token: str) -> Any:
    raise ValueError(f"non-standard JSON constant {token!r}")


def loads_strict(raw: bytes | str) -> Any:
    """``json.loads`` that refuses ``NaN``, ``Infinity`` and ``-Infinity``.

    Raises ``ValueError`` on any invalid input, including bad UTF-8.
    """
    return json.loads(raw, parse_constant=_reject_constant)


# ── Inbound ──────────────────────────────────


def parse_chat_prompt(raw: bytes) -> str:
    """Decode an inbound chat body and return its prompt unchanged.

    Raises:
        InvalidBody: body is not JSON, not an object, or ``prompt`` is not a string.
        MissingField: ``prompt`` is absent, empty, or only whitespace.
    """
    try:
        data = loads_strict(raw)
    except ValueError as exc:
        raise InvalidBody() from exc

    if not isinstance(data, dict):
        raise InvalidBody()

    prompt = data.get("prompt")
    if prompt is None:
        raise MissingField()
    if not isinstance(prompt, str):
        raise InvalidBody()
    if not prompt.strip():
        raise MissingField()
    return prompt


def build_upstream_request(prompt: str, model: str) -> dict[str, Any]:
    """Return the OpenRouter payload for a single user turn."""
    request = UpstreamRequest(
        model=model,
        messages=[ChatMessage(role="user", content=prompt)],
    )
    return request.model_dump()


# ── Outbound ─────────────────────────────────


def extract_model_text(body: dict[str, Any]) -> str | None:
    """Pull the reply text out of a chat-completion response.

    Checked in order, first non-empty string wins:

    1. ``choices[0].message.content`` (chat completion)
    2. ``choices[0].text`` (legacy completion)
    3. ``choices[0].delta.content`` (streaming chunk)
    """
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None

    message = first.get("message")
    delta = first.get("delta")
    candidates = (
        message.get("content") if isinstance(message, dict) else None,
        first.get("text"),
        delta.get("content") if isinstance(delta, dict) else None,
    )
    for candidate in candidates:
        if isinstance(candidate, str) and candidate:
            return candidate
    return None


def normalize_response(body: dict[str, Any], status_code: int) -> dict[str, Any]:
    """Return a copy of *body* with ``model_response`` and ``status_code`` added.

    ``model_response`` is left out entirely when no text can be extracted.
    """
    normalized = dict(body)
    text = extract_model_text(body)
    if text is not None:
        normalized["model_response"] = text
    normalized["status_code"] = status_code
    return normalized
