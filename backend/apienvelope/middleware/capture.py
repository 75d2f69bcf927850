"""
API Envelope — Response Capture Buffer
========================================

What:  Buffers a downstream response in memory so it can be read back and
       rewritten before anything reaches the client.
Why:   The envelope replaces the body completely, so nothing may be sent
       until the downstream handler has finished.
How:   ResponseCapture drains the response's body_iterator into an
       io.BytesIO. The body is read once into a CapturedBody (empty, raw text
       or structured JSON). The envelope writer replaces the buffer content,
       and flush() turns whatever the buffer holds into the final Response.

Lifecycle (one per request):
    with ResponseCapture() as capture:
        await capture.drain(response)      # downstream output → buffer
        body = capture.read_body()         # rewind, decode, rewind
        capture.replace(payload, 200, ...) # truncate + write envelope
        return capture.flush()             # buffer → real response
    # buffer released here on every exit path
"""

import io
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from starlette.responses import Response

from apienvelope import codec
from apienvelope.schemas.envelope import can_carry_envelope

# Recomputed for the rewritten body; never copied from downstream
_REPLACED_HEADERS = {b"content-length", b"content-type"}


@dataclass(frozen=True)
class EmptyBody:
    """Downstream wrote nothing (or only whitespace)."""


@dataclass(frozen=True)
class StructuredBody:
    """Downstream wrote valid JSON; value is the parsed result."""
    value: Any


@dataclass(frozen=True)
class RawBody:
    """Downstream wrote text that is not JSON. Kept verbatim, no character substitution."""
    text: str


CapturedBody = Union[EmptyBody, StructuredBody, RawBody]


def parse_body(raw: bytes, charset: str = "utf-8") -> CapturedBody:
    """Decide once whether captured bytes are empty, JSON or plain text."""
    text = raw.decode(charset, errors="replace")
    if not text.strip():
        return EmptyBody()
    try:
        return StructuredBody(codec.deserialize(text))
    except ValueError:
        return RawBody(text)


class ResponseCapture:
    """
    In-memory stand-in for the real response stream.

    Status code and headers from the downstream response are remembered so
    flush() can rebuild a complete Response. When downstream raised before
    producing a response, status defaults to 500 and headers are empty.
    """

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self.status_code: int = 500
        self.media_type: Optional[str] = None
        self.charset: str = "utf-8"
        self._headers: List[Tuple[bytes, bytes]] = []

    def __enter__(self) -> "ResponseCapture":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._buffer.closed

    async def drain(self, response: Response) -> None:
        """Copy the downstream response body and metadata into the buffer."""
        self.status_code = response.status_code
        self.media_type = getattr(response, "media_type", None) or response.headers.get(
            "content-type"
        )
        self.charset = getattr(response, "charset", None) or "utf-8"
        self._headers = [
            (key, value)
            for key, value in response.raw_headers
            if key.lower() not in _REPLACED_HEADERS
        ]

        body = getattr(response, "body_iterator", None)
        if body is None:
            self._buffer.write(bytes(response.body))
            return
        async for chunk in body:
            if isinstance(chunk, str):
                chunk = chunk.encode(self.charset)
            self._buffer.write(chunk)

    def read_bytes(self) -> bytes:
        """Return the whole buffer, leaving the position at the start."""
        self._buffer.seek(0)
        data = self._buffer.read()
        self._buffer.seek(0)
        return data

    def read_body(self) -> CapturedBody:
        return parse_body(self.read_bytes(), self.charset)

    def replace(self, payload: bytes, status_code: int, media_type: str) -> None:
        """Truncate the buffer and make `payload` the complete new body."""
        self._buffer.seek(0)
        self._buffer.truncate(0)
        self._buffer.write(payload)
        self.status_code = status_code
        self.media_type = media_type

    def flush(self) -> Response:
        """
        Build the Response that is actually sent, from whatever the buffer holds now.

        Statuses that forbid a body (1xx, 204, 304) are sent with none.
        """
        content = self.read_bytes() if can_carry_envelope(self.status_code) else b""
        response = Response(
            content=content,
            status_code=self.status_code,
            media_type=self.media_type,
        )
        response.raw_headers.extend(self._headers)
        return response

    def close(self) -> None:
        self._buffer.close()
