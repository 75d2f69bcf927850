"""
API Envelope — Wire Contract Schemas
======================================

What:  Pydantic models for the envelope every non-bypassed response is
       rewritten into, plus the response models of the sample routes.
Why:   One place defines the exact JSON shape clients parse. Field names are
       snake_case in Python and camelCase on the wire (alias generator).
How:   ApiResponse.model_dump_json(by_alias=True) produces the final body.

Wire shape:
    {
        "statusCode": 200,
        "message": "Success",
        "data": {"id": 1},
        "error": null
    }

Field order in the models is the field order on the wire.
"""

import uuid
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# HTTP forbids a body on 1xx, 204 and 304 responses
BODYLESS_STATUS_CODES = frozenset({204, 304})


def can_carry_envelope(status_code: int) -> bool:
    """True when a response with this status may have a body at all."""
    return status_code >= 200 and status_code not in BODYLESS_STATUS_CODES


class ResponseMessage(str, Enum):
    """
    Outcome categories. The value is the label written to envelope.message.

    UNAUTHORIZED keeps its historical "UnAuthorized" spelling; clients match on it.
    """
    SUCCESS = "Success"
    UNAUTHORIZED = "UnAuthorized"
    FAILURE = "Failure"
    EXCEPTION = "Exception"


class EnvelopeModel(BaseModel):
    """Base for wire models: camelCase aliases, construct by either name."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiError(EnvelopeModel):
    """
    What:  Error detail attached to non-success envelopes.
    When:  Only for Exception outcomes (raised faults). Never on Success.

    Fields:
        message: Human-readable description
        validation_errors: field → message (or list of messages) for input problems
        reference_error_code: Stable code clients can look up
        reference_document_link: URL explaining the error
        details: Traceback text (unclassified faults only)
    """
    message: str = Field(description="Human-readable error description")
    validation_errors: Optional[Dict[str, Union[str, List[str]]]] = Field(
        default=None, description="Field-level validation messages"
    )
    reference_error_code: Optional[str] = Field(default=None)
    reference_document_link: Optional[str] = Field(default=None)
    details: Optional[str] = Field(
        default=None, description="Diagnostic trace for unexpected errors"
    )


class ApiResponse(EnvelopeModel):
    """
    What:  The canonical envelope replacing every response body.
    Why:   Clients parse exactly one shape whatever the endpoint or outcome.
    """
    status_code: int = Field(description="HTTP status code of the response")
    message: ResponseMessage = Field(description="Outcome label")
    data: Any = Field(default=None, description="Original response payload")
    error: Optional[ApiError] = Field(default=None)


# ══════════════════════════════════════════════════════════════════════════
# Sample Route Models
# ══════════════════════════════════════════════════════════════════════════


class HealthResponse(BaseModel):
    """Returned by GET /health (inside the envelope's data field)."""
    status: str = Field(description="Overall service status")
    version: str = Field(description="Application version")
    uptime_seconds: float = Field(description="Seconds since service started")


class UserResponse(BaseModel):
    """Returned by GET /api/users/me."""
    id: uuid.UUID = Field(description="Caller identity taken from the UserId header")
