"""
API Envelope — Response Normalization Middleware
==================================================

What:  Rewrites every non-bypassed response into the canonical envelope
       {statusCode, message, data, error}.
Why:   Clients parse one shape for every endpoint and every failure mode,
       and never see a transport-level error or an empty body.
How:   Four steps per request:
       1. preprocess: bypass docs/downloads/OPTIONS; read caller identity
       2. capture   : buffer the downstream response in memory
       3. classifier: Completed/Faulted → outcome + status + ApiError
       4. envelope  : serialize and overwrite the buffer
       The buffer is then flushed to the client whatever happened above.
       Completed responses whose status forbids a body (1xx, 204, 304) are
       flushed as they are, without an envelope.

Placement:
    Must be the innermost user middleware (added first in create_app) so it
    sees raw route output: GZip and friends run on the envelope, not before it.

Fault policy:
    Every exception from downstream is logged once here and converted into
    an envelope. Nothing propagates to the host past this point.
"""

import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from apienvelope.config import Settings, settings as default_settings
from apienvelope.middleware.capture import ResponseCapture
from apienvelope.middleware.classifier import Completed, DownstreamResult, Faulted, classify
from apienvelope.middleware.envelope import write_envelope
from apienvelope.middleware.preprocess import is_bypassed, read_caller_identity
from apienvelope.middleware.request_id import request_id_var
from apienvelope.schemas.envelope import can_carry_envelope

logger = logging.getLogger(__name__)


class ApiResponseMiddleware(BaseHTTPMiddleware):
    """
    Envelope middleware.

    Args:
        app: The wrapped ASGI application.
        settings: Bypass rules, identity header and detail exposure. Defaults
            to the module-level settings singleton.
    """

    def __init__(self, app: ASGIApp, settings: Optional[Settings] = None) -> None:
        super().__init__(app)
        self.settings = settings or default_settings

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if is_bypassed(request, self.settings):
            return await call_next(request)

        with ResponseCapture() as capture:
            result = await self._invoke(request, call_next, capture)
            if isinstance(result, Completed) and not can_carry_envelope(result.status_code):
                # 1xx, 204 and 304 have no body to wrap
                return capture.flush()
            try:
                classification = classify(result, self.settings.expose_exception_details)
                write_envelope(capture, classification)
            except Exception:
                # Client still gets whatever the buffer holds; never zero bytes
                logger.exception(
                    "[%s] Envelope construction failed for %s %s",
                    request_id_var.get(""),
                    request.method,
                    request.url.path,
                )
            return capture.flush()

    async def _invoke(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
        capture: ResponseCapture,
    ) -> DownstreamResult:
        """
        Run everything that may fail because of the request or the handler,
        and turn the outcome into a DownstreamResult instead of an exception.
        """
        try:
            read_caller_identity(request, self.settings)
            response = await call_next(request)
            await capture.drain(response)
        except Exception as exc:
            logger.error(
                "[%s] %s %s raised %s: %s",
                request_id_var.get(""),
                request.method,
                request.url.path,
                type(exc).__name__,
                exc,
                exc_info=exc,
            )
            return Faulted(exc)
        return Completed(capture.status_code, capture.read_body())
