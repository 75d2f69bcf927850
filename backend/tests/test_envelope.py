"""
API Envelope — Envelope Writer Unit Tests
===========================================

What:  Tests for building, rendering and writing envelopes.
"""

import json
from unittest.mock import patch

import pytest

from apienvelope.exceptions import EnvelopeSerializationError
from apienvelope.middleware.capture import EmptyBody, RawBody, ResponseCapture, StructuredBody
from apienvelope.middleware.classifier import Classification
from apienvelope.middleware.envelope import (
    JSON_MEDIA_TYPE,
    body_to_data,
    build_envelope,
    render_envelope,
    write_envelope,
)
from apienvelope.schemas.envelope import ApiError, ApiResponse, ResponseMessage


class TestBodyToData:

    def test_structured_body_stays_structured(self):
        assert body_to_data(StructuredBody({"a": [1, 2]})) == {"a": [1, 2]}

    def test_raw_body_becomes_string(self):
        assert body_to_data(RawBody("plain <b>text</b>")) == "plain <b>text</b>"

    def test_empty_and_missing_bodies_are_null(self):
        assert body_to_data(EmptyBody()) is None
        assert body_to_data(None) is None

    def test_structured_scalars_are_kept(self):
        assert body_to_data(StructuredBody(0)) == 0
        assert body_to_data(StructuredBody(False)) is False


class TestRenderEnvelope:

    def test_success_wire_format(self):
        envelope = build_envelope(
            Classification(ResponseMessage.SUCCESS, 200, body=StructuredBody({"id": 1}))
        )
        assert render_envelope(envelope) == (
            b'{"statusCode":200,"message":"Success","data":{"id":1},"error":null}'
        )

    def test_error_uses_camel_case_keys(self):
        envelope = build_envelope(
            Classification(
                ResponseMessage.EXCEPTION,
                422,
                error=ApiError(message="Invalid name", validation_errors={"name": "required"}),
            )
        )
        rendered = json.loads(render_envelope(envelope))

        assert rendered["error"] == {
            "message": "Invalid name",
            "validationErrors": {"name": "required"},
            "referenceErrorCode": None,
            "referenceDocumentLink": None,
            "details": None,
        }

    def test_raw_text_with_quotes_is_escaped(self):
        envelope = build_envelope(
            Classification(ResponseMessage.FAILURE, 400, body=RawBody('bad "input"'))
        )
        rendered = render_envelope(envelope)

        assert json.loads(rendered)["data"] == 'bad "input"'
        assert b'"data":"bad \\"input\\""' in rendered

    def test_empty_serialization_is_fatal(self):
        envelope = ApiResponse(status_code=200, message=ResponseMessage.SUCCESS)
        with patch.object(ApiResponse, "model_dump_json", return_value=""):
            with pytest.raises(EnvelopeSerializationError):
                render_envelope(envelope)


class TestWriteEnvelope:

    def test_replaces_buffer_and_sets_status(self):
        with ResponseCapture() as capture:
            capture.replace(b"original downstream bytes", 200, "text/plain")

            envelope = write_envelope(
                capture,
                Classification(
                    ResponseMessage.EXCEPTION, 500, error=ApiError(message="boom")
                ),
            )

            assert envelope.status_code == 500
            assert capture.status_code == 500
            assert capture.media_type == JSON_MEDIA_TYPE
            written = json.loads(capture.read_bytes())
            assert written["message"] == "Exception"
            assert written["error"]["message"] == "boom"
            assert b"original" not in capture.read_bytes()
