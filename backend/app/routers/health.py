"""Liveness and readiness checks.

  GET /health        → process is up (no dependency calls)
  GET /health/ready  → Postgres and Redis both answer; 503 otherwise
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.config import settings
from app.database import engine
from app.utils.cache import get_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


async def _ping_database() -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def _ping_redis() -> None:
    client = await get_redis()
    await client.ping()


READINESS_CHECKS: dict[str, Callable[[], Awaitable[None]]] = {
    "database": _ping_database,
    "redis": _ping_redis,
}


@router.get("/health")
async def health_check():
    return {
        "status": "ok",
        "service": "EasyRent",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check():
    """Staged uploads live in Redis, so the wizards are not ready without it."""
    checks: dict[str, str] = {}
    for name, check in READINESS_CHECKS.items():
        try:
            await check()
            checks[name] = "ok"
        except Exception as e:
            logger.warning(f"Readiness check {name} failed: {e}")
            checks[name] = f"error: {str(e)[:100]}"

    healthy = all(value == "ok" for value in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "service": "EasyRent",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
