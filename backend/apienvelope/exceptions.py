"""
API Envelope — Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions that the envelope middleware knows how
       to classify.
Why:   Route handlers signal failure by raising; the middleware turns every
       raised exception into exactly one well-formed envelope.
How:   Each exception carries a message and optional context dict. The
       middleware's classifier inspects the exception type (not the status
       code) to decide which ApiError to build.
Who:   Raised by route handlers and business logic; consumed by
       apienvelope.middleware.classifier.

Exception Hierarchy:
    ApiEnvelopeError (base)
    ├── ApiException                → declared status code (client-facing detail)
    ├── UnauthorizedAccessError     → 401, generic "Unauthorized Access"
    └── EnvelopeSerializationError  → envelope rendering produced no output

Anything outside this hierarchy is an unclassified fault: it becomes a 500
envelope whose error.details carries the traceback.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from apienvelope.schemas.envelope import can_carry_envelope

ValidationErrors = Dict[str, Union[str, List[str]]]


class ApiEnvelopeError(Exception):
    """
    Base exception for all API Envelope application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ApiException(ApiEnvelopeError):
    """
    Structured application fault raised intentionally by business logic.

    What:    Carries its own HTTP status and everything the client should see.
    HTTP:    status_code (default 500). Must allow a response body:
             200-599 except 204 and 304.
    Errors:  field → message, or field → list of messages.

    Example:
        raise ApiException(
            "Invalid name",
            status_code=422,
            errors={"name": "required"},
            reference_error_code="USR-001",
        )

    Produces:
        {
            "statusCode": 422,
            "message": "Exception",
            "data": null,
            "error": {
                "message": "Invalid name",
                "validationErrors": {"name": "required"},
                "referenceErrorCode": "USR-001",
                "referenceDocumentLink": null,
                "details": null
            }
        }
    """

    def __init__(
        self,
        message: str = "The request could not be processed",
        status_code: int = 500,
        errors: Optional[Mapping[str, Union[str, Sequence[str]]]] = None,
        reference_error_code: Optional[str] = None,
        reference_document_link: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        if status_code > 599 or not can_carry_envelope(status_code):
            raise ValueError(f"Invalid HTTP status code: {status_code}")
        super().__init__(message=message, context=context)
        self.status_code = status_code
        self.errors = _normalize_errors(errors)
        self.reference_error_code = reference_error_code
        self.reference_document_link = reference_document_link


class UnauthorizedAccessError(ApiEnvelopeError):
    """
    Raised when the caller is not allowed to perform the operation.

    HTTP:    401 Unauthorized

    The message is for server logs only. Clients always receive the generic
    "Unauthorized Access" text so the reason for the denial does not leak.
    """

    def __init__(
        self,
        message: str = "Unauthorized Access",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class EnvelopeSerializationError(ApiEnvelopeError):
    """Raised when an envelope serializes to nothing. The request cannot be completed."""

    def __init__(
        self,
        message: str = "Envelope serialization produced no output",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


def _normalize_errors(
    errors: Optional[Mapping[str, Union[str, Sequence[str]]]],
) -> Optional[ValidationErrors]:
    """
    Check the validation error map at raise time.

    Values are either one message or a list of messages. Anything else is a
    bug in the raising code and fails here, not while the envelope is built.
    """
    if errors is None:
        return None
    normalized: ValidationErrors = {}
    for field, messages in errors.items():
        if not isinstance(field, str):
            raise TypeError(f"Validation error key must be str, got {type(field).__name__}")
        if isinstance(messages, str):
            normalized[field] = messages
        elif isinstance(messages, (list, tuple)) and all(isinstance(m, str) for m in messages):
            normalized[field] = list(messages)
        else:
            raise TypeError(
                f"Validation errors for '{field}' must be a str or a list of str"
            )
    return normalized
