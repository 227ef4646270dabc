"""
Catalog Backend: Health Check Route
====================================

What:  Health endpoint for container probes and load balancers.
How:   SELECT 1 against the database, ping against the media provider.

Status levels:
    - healthy:   database reachable, media provider available
    - degraded:  database reachable, media provider down or not configured
                 (reads still work, uploads fail)
    - unhealthy: database unreachable
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from catalog import __version__
from catalog.database import engine
from catalog.schemas.common import HealthResponse
from catalog.services.media_service import media_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health of the service, its database and the image store.",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", e)

    media_status = await media_service.health_check()
    if media_status != "available" and overall == "healthy":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        media=media_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
