"""
Health checks - for load balancers and monitoring.
Liveness is cheap; readiness pings the database and Redis.
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from solarpanels.cache.redis_client import Blacklist
from solarpanels.config import get_settings
from solarpanels.db.session import DbSession

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


@router.get("")
async def health():
    """Liveness: is the process up?"""
    return {"status": "ok", "app": settings.app_name}


@router.get("/ready")
async def ready(session: DbSession, blacklist: Blacklist):
    """Readiness: database and token blacklist reachable."""
    checks = {}
    try:
        await session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception:
        logger.warning("Readiness: database unavailable", exc_info=True)
        checks["database"] = "unavailable"
    try:
        await blacklist.client.ping()
        checks["redis"] = "ok"
    except Exception:
        logger.warning("Readiness: redis unavailable", exc_info=True)
        checks["redis"] = "unavailable"
    if all(v == "ok" for v in checks.values()):
        return {"status": "ready", "checks": checks}
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "unavailable", "checks": checks},
    )
