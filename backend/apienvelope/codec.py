"""
API Envelope — JSON Codec
===========================

What:  The three JSON operations the middleware needs: serialize, deserialize
       and is_valid_json.
Why:   Keeps the middleware independent of how JSON is produced. pydantic-core
       already ships a fast Rust parser/encoder, so no extra dependency.
"""

from typing import Any

import pydantic_core


def serialize(value: Any) -> bytes:
    """Encode a Python value as compact JSON bytes."""
    return pydantic_core.to_json(value)


def deserialize(text: str | bytes) -> Any:
    """
    Parse JSON text into plain Python values.

    NaN and Infinity are not JSON and are rejected like any other malformed
    input (ValueError).
    """
    return pydantic_core.from_json(text, allow_inf_nan=False)


def is_valid_json(text: str | bytes) -> bool:
    """True when `text` is one syntactically complete JSON value."""
    try:
        deserialize(text)
    except ValueError:
        return False
    return True
