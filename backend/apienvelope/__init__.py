"""
API Envelope — Application Package Initializer
================================================

What: Marks the `apienvelope` directory as a Python package.
Why:  Enables module imports like `from apienvelope.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    Every non-bypassed response leaves the server wrapped in one envelope:

    ┌─────────────────────────────────────┐
    │        Routes (sample API)          │  ← write whatever they like
    ├─────────────────────────────────────┤
    │   ApiResponseMiddleware             │  ← capture, classify, rewrite
    │   preprocess → capture →            │
    │   classifier → envelope             │
    ├─────────────────────────────────────┤
    │   Schemas (ApiResponse, ApiError)   │  ← the wire contract
    └─────────────────────────────────────┘

    Routes never build envelopes themselves. They return plain payloads or
    raise ApiException / UnauthorizedAccessError and the middleware does the rest.
"""

__version__ = "1.0.0"
