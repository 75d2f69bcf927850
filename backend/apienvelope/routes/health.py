"""
API Envelope — Health Check Route
===================================

What:  Liveness endpoint for monitoring and load balancer probes.
How:   Returns status, version and uptime. The envelope middleware wraps the
       payload like any other route, so probes should check statusCode/message.
"""

import logging
import time

from fastapi import APIRouter

from apienvelope import __version__
from apienvelope.schemas.envelope import HealthResponse

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
    Report service health.

    Example (as seen by the client):
        {"statusCode": 200, "message": "Success",
         "data": {"status": "healthy", "version": "1.0.0", "uptime_seconds": 12.5},
         "error": null}
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
