"""
core_utils.health – health-check routes for FastAPI services.

attach_health_routes() wires /healthz (liveness) and /readyz (readiness).
"""

import asyncio
from typing import Awaitable, Callable, Mapping, Union

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse

# A health check returns a bool or a JSON dict, optionally awaitable.
HealthCheck = Callable[[], Union[bool, dict, Awaitable[Union[bool, dict]]]]
HealthChecks = Mapping[str, HealthCheck]


async def _run_check(fn: HealthCheck) -> Union[bool, dict]:
    res = fn()
    if asyncio.iscoroutine(res):
        res = await res
    return res


def attach_health_routes(app: FastAPI, *, checks: HealthChecks) -> None:
    """
    Register health-check endpoints on the app.

    Args:
        app: FastAPI application
        checks: mapping with keys "liveness" and/or "readiness" to callables.
            A dict result is returned as the body; readiness dicts carrying
            ``"ready": False`` (or a False result) answer 503.
    """
    router = APIRouter()
    liveness = checks.get("liveness")
    readiness = checks.get("readiness")

    @router.get("/healthz", include_in_schema=False)
    async def _healthz():
        if liveness is None:
            return {"status": "ok"}
        res = await _run_check(liveness)
        if isinstance(res, dict):
            return res
        return {"status": "ok" if res else "fail"}

    @router.get("/readyz", include_in_schema=False)
    async def _readyz():
        if readiness is None:
            return {"ready": True}
        res = await _run_check(readiness)
        body = res if isinstance(res, dict) else {"ready": bool(res)}
        return JSONResponse(status_code=200 if body.get("ready", True) else 503, content=body)

    app.include_router(router)


__all__ = ["attach_health_routes", "HealthCheck", "HealthChecks"]
