# snippetsync/routers/health.py
# Health check endpoints for monitoring and load balancers
# Provides liveness and readiness probes

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

DB_CHECK_TIMEOUT_SECONDS = 2.0


class HealthStatus(BaseModel):
    """Health check response model."""
    status: str  # "healthy", "unhealthy"
    timestamp: str
    version: str = "1.0.0"
    checks: Dict[str, Dict[str, Any]] = {}


class ComponentHealth(BaseModel):
    """Individual component health."""
    status: str
    latency_ms: float = 0.0
    message: str = ""


async def check_database_health(request: Request) -> ComponentHealth:
    """Run SELECT 1 against the application's database."""
    start = time.time()
    database = getattr(request.app.state, "database", None)
    if database is None:
        return ComponentHealth(status="unhealthy", message="Database not initialized")

    try:
        ok = await asyncio.wait_for(database.ping(), timeout=DB_CHECK_TIMEOUT_SECONDS)
        latency_ms = (time.time() - start) * 1000
        if not ok:
            return ComponentHealth(
                status="unhealthy",
                latency_ms=latency_ms,
                message="Database query returned unexpected result"
            )
        return ComponentHealth(
            status="healthy",
            latency_ms=latency_ms,
            message=database.dialect_name,
        )

    except asyncio.TimeoutError:
        return ComponentHealth(
            status="unhealthy",
            latency_ms=(time.time() - start) * 1000,
            message="Database connection timeout"
        )
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return ComponentHealth(
            status="unhealthy",
            latency_ms=(time.time() - start) * 1000,
            message=f"Database error: {type(e).__name__}"
        )


@router.get("/health", response_model=HealthStatus)
async def health_check(request: Request, response: Response):
    """Full health check: status of every component."""
    db_health = await check_database_health(request)
    checks = {
        "database": {
            "status": db_health.status,
            "latency_ms": round(db_health.latency_ms, 2),
            "message": db_health.message,
        }
    }

    overall_status = "healthy"
    if any(c["status"] == "unhealthy" for c in checks.values()):
        overall_status = "unhealthy"
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthStatus(
        status=overall_status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        checks=checks
    )


@router.get("/health/live")
async def liveness_probe():
    """Liveness probe; does NOT check external dependencies."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_probe(request: Request, response: Response):
    """Readiness probe; 200 only if the database answers."""
    db_health = await check_database_health(request)

    if db_health.status == "unhealthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "not_ready",
            "reason": db_health.message
        }

    return {"status": "ready"}
