"""Error taxonomy for the relay and the FastAPI handler that renders it.

Every error is terminal for the request. Only the short public message
reaches the caller; the underlying cause goes to the log.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class RelayError(Exception):
    """Base class for errors mapped to an HTTP status by the relay."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "internal error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidBody(RelayError):
    """Request body is not a JSON object with a string ``prompt``."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "invalid request body"


class MissingField(RelayError):
    """``prompt`` is absent, empty, or whitespace only."""

    status_code = status.HTTP_400_BAD_REQUEST
    message = "prompt is required"


class MissingCredential(RelayError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "OPENROUTER_API_KEY is not set"


class UpstreamUnavailable(RelayError):
    """Network or protocol failure talking to OpenRouter."""

    status_code = status.HTTP_502_BAD_GATEWAY
    message = "failed to call OpenRouter"


class UpstreamMalformed(RelayError):
    """OpenRouter answered with a body that is not a JSON object."""

    status_code = status.HTTP_502_BAD_GATEWAY
    message = "invalid OpenRouter response"


class ClientDisconnected(RelayError):
    # Non-standard status, as logged by nginx
    status_code = 499
    message = "client closed request"


async def _relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    cause = exc.__cause__
    log_kwargs: dict[str, Any] = {
        "error": type(exc).__name__,
        "status_code": exc.status_code,
    }
    if cause is not None:
        log_kwargs["cause"] = repr(cause)

    if exc.status_code >= 500:
        logger.error("request_failed", **log_kwargs)
    else:
        logger.warning("request_rejected", **log_kwargs)

    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    """Install the ``RelayError`` → JSON response handler on *app*."""
    app.add_exception_handler(RelayError, _relay_error_handler)
