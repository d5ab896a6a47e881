"""
Health and operational API endpoints
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.config import config
from app.core.logger import logger
from app.db import mongodb

router = APIRouter()

# Track service start time
start_time = time.time()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": config.service_name,
        "timestamp": _now(),
        "version": config.service_version,
    }


@router.get("/health/live")
def liveness_check():
    """Liveness probe - check if the app is running"""
    return {
        "status": "alive",
        "service": config.service_name,
        "timestamp": _now(),
        "uptime": time.time() - start_time,
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness probe - the service is ready once MongoDB answers a ping"""
    database_ok = await mongodb.ping()
    check = {"name": "database", "status": "healthy" if database_ok else "unhealthy"}

    if database_ok:
        return {"status": "ready", "service": config.service_name, "timestamp": _now(), "checks": [check]}

    logger.warning("Readiness check failed", metadata={"event": "readiness_check_failed", "failed_checks": ["database"]})
    return JSONResponse(
        status_code=503,
        content={"status": "not ready", "service": config.service_name, "timestamp": _now(), "checks": [check]},
    )
