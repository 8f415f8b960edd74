from __future__ import annotations

import time
from datetime import datetime, timezone

import structlog
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from partyhub.api.responses import error_content, success_response
from partyhub.db import engine
from partyhub.redis_client import get_redis
from partyhub.services.error_codes import ErrorCode

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

_STARTED_AT = time.monotonic()


def _database_status() -> str:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("health_database_unavailable", exc_info=True)
        return "disconnected"
    return "connected"


def _redis_status() -> str:
    try:
        get_redis().ping()
    except (RedisError, OSError):
        return "disconnected"
    return "connected"


@router.get("")
def health():
    database = _database_status()
    redis = _redis_status()

    if database != "connected":
        overall = "unhealthy"
    elif redis != "connected":
        overall = "degraded"
    else:
        overall = "healthy"

    if overall == "unhealthy":
        return JSONResponse(
            status_code=503,
            content=error_content("Service unhealthy", ErrorCode.SERVICE_UNAVAILABLE.value),
        )

    return success_response(
        {
            "status": overall,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - _STARTED_AT, 3),
            "services": {"database": database, "redis": redis},
        }
    )


@router.get("/ready")
def ready():
    if _database_status() != "connected":
        return JSONResponse(
            status_code=503,
            content=error_content("Service not ready", ErrorCode.SERVICE_UNAVAILABLE.value),
        )
    return success_response({"ready": True})


@router.get("/live")
def live():
    return success_response({"alive": True})
