"""Liveness and readiness probes.

/health answers 200 whenever the process can respond; the body reports each
backing service so dashboards can show a degraded state without the
orchestrator restarting the container.  /ready answers 503 while PostgreSQL
is configured but unreachable, taking the instance out of rotation.  Redis is
not critical: the in-memory blacklist covers for it.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response, status

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _check_database(request: Request) -> str:
    database = request.app.state.database
    if database is None:
        return "not_configured"
    try:
        await database.ping()
    except Exception:
        logger.exception("Database health check failed")
        return "degraded"
    return "ok"


async def _check_redis(request: Request) -> str:
    client = request.app.state.redis
    if client is None:
        return "not_configured"
    try:
        await client.ping()  # type: ignore[misc]
    except Exception:
        logger.exception("Redis health check failed")
        return "degraded"
    return "ok"


@router.get("/health")
async def health(request: Request) -> dict:
    checks = {
        "database": await _check_database(request),
        "redis": await _check_redis(request),
    }
    overall = "degraded" if "degraded" in checks.values() else "ok"
    return {"status": overall, "checks": checks}


@router.get("/ready")
async def ready(request: Request) -> Response:
    if await _check_database(request) == "degraded":
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
