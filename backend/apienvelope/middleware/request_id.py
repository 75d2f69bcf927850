"""
API Envelope — Request ID Middleware
======================================

What:  Assigns a correlation ID to each request and echoes it on the response.
Why:   Fault logs written by the envelope middleware and access log lines for
       the same request share one ID, so a client-reported ID finds both.
How:   Reuses a well-formed X-Request-ID from the client or generates one,
       stores it in a ContextVar, sets it on the response headers.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Client IDs end up in log lines; only accept short, printable tokens
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


def new_request_id() -> str:
    return uuid.uuid4().hex[:12]


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Behavior:
        1. Take X-Request-ID from the client if it is a safe token
        2. Otherwise generate a new short ID
        3. Store in ContextVar (loggers) and request.state (routes)
        4. Add to the response headers, enveloped or not
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER, "")
        if not _VALID_REQUEST_ID.match(rid):
            rid = new_request_id()

        token = request_id_var.set(rid)
        request.state.request_id = rid
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = rid
        return response
