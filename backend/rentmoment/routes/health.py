"""
Rent The Moment Backend — Health Check Route
===========================================

What:  GET /api/health for Docker health checks and load balancers.
How:   Runs SELECT 1 through the app's Database handle.

Status levels:
    OK        database reachable (HTTP 200)
    DEGRADED  database unreachable (HTTP 503, stop routing traffic here)
"""

import logging
import time

from fastapi import APIRouter, Request, Response, status

from rentmoment import __version__
from rentmoment.database import get_database
from rentmoment.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(request: Request, response: Response) -> HealthResponse:
    db_status = "connected"
    try:
        await get_database(request).ping()
    except Exception as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))

    if db_status != "connected":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return HealthResponse(
        status="OK" if db_status == "connected" else "DEGRADED",
        message="Server is running",
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
