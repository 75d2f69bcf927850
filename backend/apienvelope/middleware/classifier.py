"""
API Envelope — Outcome Classification
=======================================

What:  Maps what happened downstream to one outcome category, a status code
       and an optional ApiError.
How:   The middleware converts the downstream call into a DownstreamResult
       (Completed or Faulted) at the invocation boundary. classify() is a pure
       function of that result; it never raises and never performs I/O.

Decision table:
    Completed, status 200           → SUCCESS       (status 200, no error)
    Completed, status 401           → UNAUTHORIZED  (status 401, no error)
    Completed, any other status     → FAILURE       (status kept, no error)
    Faulted(ApiException)           → EXCEPTION     (status from fault, error from fault)
    Faulted(UnauthorizedAccessError)→ EXCEPTION     (401, "Unauthorized Access")
    Faulted(anything else)          → EXCEPTION     (500, root-cause message + traceback)

Faulted outcomes carry no body: whatever downstream wrote is discarded in
favour of the ApiError.
"""

import traceback
from dataclasses import dataclass
from http import HTTPStatus
from typing import Optional, Union

from pydantic import ValidationError

from apienvelope.exceptions import ApiException, UnauthorizedAccessError
from apienvelope.middleware.capture import CapturedBody
from apienvelope.schemas.envelope import ApiError, ResponseMessage, can_carry_envelope

UNAUTHORIZED_MESSAGE = "Unauthorized Access"


@dataclass(frozen=True)
class Completed:
    """Downstream returned a response normally."""
    status_code: int
    body: CapturedBody


@dataclass(frozen=True)
class Faulted:
    """Downstream raised instead of returning."""
    exception: BaseException


DownstreamResult = Union[Completed, Faulted]


@dataclass(frozen=True)
class Classification:
    outcome: ResponseMessage
    status_code: int
    body: Optional[CapturedBody] = None
    error: Optional[ApiError] = None


def root_cause(exc: BaseException) -> BaseException:
    """Follow __cause__ / __context__ to the innermost exception."""
    seen = {id(exc)}
    current = exc
    while True:
        inner = current.__cause__ or current.__context__
        if inner is None or id(inner) in seen:
            return current
        seen.add(id(inner))
        current = inner


def format_trace(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def classify_status(status_code: int) -> ResponseMessage:
    # No 4xx/5xx split: every non-OK, non-401 code is a Failure
    if status_code == HTTPStatus.OK:
        return ResponseMessage.SUCCESS
    if status_code == HTTPStatus.UNAUTHORIZED:
        return ResponseMessage.UNAUTHORIZED
    return ResponseMessage.FAILURE


def classify_fault(exc: BaseException, include_details: bool = True) -> Classification:
    """
    Build the Exception outcome for a raised fault, keyed on its type.

    An ApiException whose fields no longer fit ApiError or whose status
    cannot carry a body (mutated after it was raised) is reported as an
    unclassified fault instead.
    """
    if isinstance(exc, ApiException) and can_carry_envelope(exc.status_code):
        try:
            error = ApiError(
                message=exc.message,
                validation_errors=exc.errors,
                reference_error_code=exc.reference_error_code,
                reference_document_link=exc.reference_document_link,
            )
        except ValidationError:
            return _unclassified(exc, include_details)
        return Classification(ResponseMessage.EXCEPTION, exc.status_code, error=error)

    if isinstance(exc, UnauthorizedAccessError):
        return Classification(
            ResponseMessage.EXCEPTION,
            HTTPStatus.UNAUTHORIZED,
            error=ApiError(message=UNAUTHORIZED_MESSAGE),
        )

    return _unclassified(exc, include_details)


def _unclassified(exc: BaseException, include_details: bool) -> Classification:
    cause = root_cause(exc)
    error = ApiError(
        message=str(cause) or type(cause).__name__,
        details=format_trace(exc) if include_details else None,
    )
    return Classification(
        ResponseMessage.EXCEPTION, HTTPStatus.INTERNAL_SERVER_ERROR, error=error
    )


def classify(result: DownstreamResult, include_details: bool = True) -> Classification:
    """
    Classify a downstream result.

    Args:
        result: What the invocation boundary observed.
        include_details: Attach tracebacks to unclassified faults
            (settings.expose_exception_details).
    """
    if isinstance(result, Faulted):
        return classify_fault(result.exception, include_details)
    return Classification(
        classify_status(result.status_code), result.status_code, body=result.body
    )
