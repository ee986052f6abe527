"""
Postboard Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   Pings the document store and reports status, version, and uptime.

Status levels:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 200 with status=unhealthy)
"""

import logging
import time

from fastapi import APIRouter

from app import __version__
from app.config import settings
from app.database import ping
from app.schemas.post import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    """
    Check the service and the document store.

    The store check is a single `ping` command; it does not touch the posts
    collection.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        await ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uploads_path_configured=settings.uploads_path is not None,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
