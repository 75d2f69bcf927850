"""
API Envelope — Request Preprocessing
======================================

What:  Decides whether a request skips the envelope, and reads the caller
       identity for requests that don't.
When:  Before the response stream is captured. Bypassed requests must stream
       their own output untouched (downloads may be large and binary).

Bypass rules:
    path == docs prefix, or starts with docs prefix + "/"  → bypass (Swagger UI)
    "/Download" anywhere in the path (case-sensitive)       → bypass (file streams)
    method == OPTIONS                                       → bypass (CORS preflight)
"""

import uuid

from starlette.requests import Request

from apienvelope.config import Settings
from apienvelope.context import UserContext


def is_docs_path(path: str, prefix: str) -> bool:
    """Segment-aware prefix match: /swagger and /swagger/... match, /swaggerish does not."""
    if prefix == "/":
        return True
    return path == prefix or path.startswith(prefix + "/")


def is_download_path(path: str, marker: str) -> bool:
    return marker in path


def is_bypassed(request: Request, settings: Settings) -> bool:
    """True when the request must reach the client without envelope wrapping."""
    path = request.url.path
    return (
        is_docs_path(path, settings.docs_path_prefix)
        or is_download_path(path, settings.download_path_marker)
        or request.method == "OPTIONS"
    )


def read_caller_identity(request: Request, settings: Settings) -> UserContext:
    """
    Build this request's UserContext from the identity header.

    Raises:
        ValueError: The header is present but not a canonical UUID. Not caught
            here; the caller's fault handling decides what the client sees.
    """
    user = UserContext()
    raw = request.headers.get(settings.identity_header)
    if raw is not None:
        user.id = uuid.UUID(raw)
    request.state.user = user
    return user
