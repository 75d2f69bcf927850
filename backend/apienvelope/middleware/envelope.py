"""
API Envelope — Envelope Writer
================================

What:  Turns a Classification into the final JSON body and writes it over
       whatever the downstream handler produced.

Body → data mapping:
    StructuredBody(value) → value (nested JSON stays nested, not a string)
    RawBody(text)         → "text" (JSON string, always valid)
    EmptyBody / no body   → null
"""

from typing import Any, Optional

from apienvelope.exceptions import EnvelopeSerializationError
from apienvelope.middleware.capture import CapturedBody, RawBody, ResponseCapture, StructuredBody
from apienvelope.middleware.classifier import Classification
from apienvelope.schemas.envelope import ApiResponse

JSON_MEDIA_TYPE = "application/json"


def body_to_data(body: Optional[CapturedBody]) -> Any:
    if isinstance(body, StructuredBody):
        return body.value
    if isinstance(body, RawBody):
        return body.text
    return None


def build_envelope(classification: Classification) -> ApiResponse:
    return ApiResponse(
        status_code=int(classification.status_code),
        message=classification.outcome,
        data=body_to_data(classification.body),
        error=classification.error,
    )


def render_envelope(envelope: ApiResponse) -> bytes:
    """
    Serialize an envelope to its wire bytes.

    Raises:
        EnvelopeSerializationError: Serialization yielded nothing.
    """
    payload = envelope.model_dump_json(by_alias=True)
    if not payload:
        raise EnvelopeSerializationError(
            context={"status_code": envelope.status_code, "message": envelope.message.value}
        )
    return payload.encode("utf-8")


def write_envelope(capture: ResponseCapture, classification: Classification) -> ApiResponse:
    """Replace the captured body with the rendered envelope and return the envelope."""
    envelope = build_envelope(classification)
    capture.replace(render_envelope(envelope), envelope.status_code, JSON_MEDIA_TYPE)
    return envelope
