"""Health registry and the reusable ``/health`` + ``/ready`` router.

``HealthRegistry`` holds the readiness flag and the latest result of each
named check. It is created per application, stored on ``app.state.health``
and handed to the route handlers through ``get_registry``. Checks are
push-based: ``register_check`` runs the check once, immediately, and stores
the outcome until the same name is registered again.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Literal

import structlog
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

logger = structlog.get_logger()

CheckFunc = Callable[[], tuple[bool, str]]


class CheckResult(BaseModel):
    name: str
    status: Literal["ok", "fail"]
    message: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


def format_duration(seconds: float) -> str:
    """Render *seconds* the way Go prints a ``time.Duration``.

    >>> format_duration(3725.5)
    '1h2m5.5s'
    >>> format_duration(0.0123)
    '12.3ms'
    """
    ns = max(int(round(seconds * 1e9)), 0)
    if ns == 0:
        return "0s"
    if ns < 1_000:
        return f"{ns}ns"
    if ns < 1_000_000:
        return _decimal(ns, 1_000) + "µs"
    if ns < 1_000_000_000:
        return _decimal(ns, 1_000_000) + "ms"

    hours, rest = divmod(ns, 3_600 * 10**9)
    minutes, rest = divmod(rest, 60 * 10**9)
    text = _decimal(rest, 10**9) + "s"
    if hours:
        return f"{hours}h{minutes}m{text}"
    if minutes:
        return f"{minutes}m{text}"
    return text


def _decimal(value: int, scale: int) -> str:
    whole, frac = divmod(value, scale)
    if not frac:
        return str(whole)
    width = len(str(scale)) - 1
    return f"{whole}.{frac:0{width}d}".rstrip("0")


class HealthRegistry:
    """Readiness flag plus named check results, safe for concurrent use."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = ReadWriteLock()
        self._clock = clock
        self._started_at = clock()
        self._ready = False
        self._checks: dict[str, CheckResult] = {}

    # ── Lifecycle ────────────────────────────

    def start(self) -> None:
        self.set_ready(True)

    def stop(self) -> None:
        self.set_ready(False)

    def set_ready(self, ready: bool) -> None:
        with self._lock.write():
            self._ready = ready
        logger.info("readiness_changed", ready=ready)

    # ── Checks ───────────────────────────────

    def register_check(self, name: str, check: CheckFunc) -> CheckResult:
        """Run *check* now and store its outcome under *name*.

        A check that raises is recorded as failing with the exception text.
        """
        with self._lock.write():
            try:
                ok, message = check()
            except Exception as exc:
                logger.exception("health_check_raised", check=name)
                ok, message = False, f"error: {exc}"
            result = CheckResult(
                name=name,
                status="ok" if ok else "fail",
                message=message or None,
            )
            self._checks[name] = result

        logger.info("health_check_registered", check=name, status=result.status)
        return result

    def snapshot(self) -> tuple[bool, dict[str, CheckResult]]:
        """Return the ready flag and a copy of the check results."""
        with self._lock.read():
            return self._ready, dict(self._checks)

    def uptime(self) -> str:
        return format_duration(self._clock() - self._started_at)


def get_registry(request: Request) -> HealthRegistry:
    """FastAPI dependency returning the application's health registry."""
    return request.app.state.health


def _dump_checks(checks: dict[str, CheckResult]) -> dict[str, Any]:
    return {
        name: check.model_dump(mode="json", exclude_none=True)
        for name, check in checks.items()
    }


def create_health_router() -> APIRouter:
    """Build the liveness and readiness router.

    ``/health`` reports only that the process is serving. ``/ready`` answers
    503 while the registry is not ready or while any check is failing.
    """
    router = APIRouter(tags=["health"])

    @router.get("/health", summary="Liveness check")
    async def liveness(
        registry: HealthRegistry = Depends(get_registry),
    ) -> dict[str, str]:
        return {"status": "ok", "uptime": registry.uptime()}

    @router.get("/ready", summary="Readiness check")
    async def readiness(
        registry: HealthRegistry = Depends(get_registry),
    ) -> JSONResponse:
        ready, checks = registry.snapshot()
        failing = any(c.status == "fail" for c in checks.values())

        if not ready or failing:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not ready", "checks": _dump_checks(checks)},
            )

        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={
                "status": "ready",
                "uptime": registry.uptime(),
                "checks": _dump_checks(checks),
            },
        )

    return router
