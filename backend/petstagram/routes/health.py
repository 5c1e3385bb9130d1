"""
Petstagram Backend — Health Check Route
=========================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs SELECT 1 through the connection pool.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import time

from fastapi import APIRouter, Depends, Response

from petstagram import __version__
from petstagram.database import Database, get_database
from petstagram.schemas.common import HealthResponse

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(
    response: Response,
    database: Database = Depends(get_database),
) -> HealthResponse:
    connected = await database.ping()
    if not connected:
        response.status_code = 503

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
