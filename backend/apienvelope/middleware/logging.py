"""
API Envelope — Access Logging Middleware
==========================================

What:  One log line per request with method, path, status, duration, request
       ID and caller identity.
When:  Wraps the envelope middleware, so the logged status is the one the
       client actually received.

Level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from apienvelope.middleware.request_id import request_id_var

logger = logging.getLogger("apienvelope.access")

# Probed every few seconds by load balancers; not worth a log line each
QUIET_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request after the response has been produced."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        rid = request_id_var.get("")
        user = getattr(request.state, "user", None)
        user_id = str(user.id) if user is not None and user.id is not None else "-"
        status = response.status_code

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] user=%s",
            request.method,
            path,
            status,
            duration_ms,
            rid,
            user_id,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "user_id": user_id,
            },
        )
        return response
