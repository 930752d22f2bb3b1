"""
Corpdata Gateway - Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   Runs SELECT 1 through the same connection provider the API uses.
Who:   Called by container health checks and monitoring systems.

Status levels:
    - healthy:   database reachable
    - unhealthy: database unreachable (still HTTP 200; inspect the payload)
"""

import logging
import time

from fastapi import APIRouter, Depends

from gateway import __version__
from gateway.database import ConnectionProvider, get_connection_provider
from gateway.exceptions import DatabaseError
from gateway.schemas.api import HealthResponse
from gateway.services.query_service import query_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Returns the health status of the service and its database.",
)
async def health_check(
    provider: ConnectionProvider = Depends(get_connection_provider),
) -> HealthResponse:
    """
    Check the pool with SELECT 1 through the same provider the API uses.

    Returns: HTTP 200 in both states; monitors read `status` and `database`.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        await query_service.execute(provider, "SELECT 1")
    except DatabaseError as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", e.message)

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
