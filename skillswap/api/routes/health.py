"""
Health check endpoint with infrastructure checks.
"""

import time

import structlog
from fastapi import APIRouter, Depends

from skillswap import __version__
from skillswap.api.dependencies import get_database, get_redis_client
from skillswap.api.models import ComponentHealth, HealthResponse
from skillswap.assignments.config import AssignmentConfig
from skillswap.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)


async def _check_database(db: Database) -> ComponentHealth:
    """Check database connectivity and measure latency."""
    start = time.perf_counter()
    healthy = await db.health_check()
    return ComponentHealth(
        status="healthy" if healthy else "unhealthy",
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
    )


async def _check_redis(redis_client) -> ComponentHealth:
    """Check Redis connectivity and measure latency."""
    start = time.perf_counter()
    try:
        await redis_client.ping()
        status = "healthy"
        details = {}
    except Exception as e:
        status = "unhealthy"
        details = {"error": str(e)}
    return ComponentHealth(
        status=status,
        latency_ms=round((time.perf_counter() - start) * 1000, 2),
        details=details,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Check the health of the service and its dependencies.",
)
async def health_check(db: Database = Depends(get_database)) -> HealthResponse:
    """
    Status logic:
    - unhealthy: database is down
    - degraded: Redis question cache configured but unreachable
    - healthy: all components operational
    """
    components = {"database": await _check_database(db)}

    if AssignmentConfig().cache_backend == "redis":
        components["redis"] = await _check_redis(await get_redis_client())

    if components["database"].status == "unhealthy":
        status = "unhealthy"
    elif any(c.status == "unhealthy" for c in components.values()):
        status = "degraded"
    else:
        status = "healthy"

    if status != "healthy":
        logger.warning("Health check not healthy", status=status)

    return HealthResponse(status=status, components=components, version=__version__)
