# Middleware package init
"""
API Envelope — Middleware Package
===================================

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Logging] → [GZip] → [ApiResponse] → Route Handler

    Why this order:
    1. CORS outermost: answers preflight OPTIONS before anything else runs
    2. Request ID: correlation ID exists before any log line is written
    3. Logging: sees the final status after enveloping
    4. GZip: compresses the envelope, never the raw route output
    5. ApiResponse innermost: reads exactly what the route wrote

ApiResponse is split by responsibility:
    preprocess.py: bypass rules, caller identity
    capture.py   : in-memory response buffer
    classifier.py: outcome classification
    envelope.py  : envelope construction and writing
"""

from apienvelope.middleware.api_response import ApiResponseMiddleware

__all__ = ["ApiResponseMiddleware"]
