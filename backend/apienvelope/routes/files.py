"""
API Envelope — File Download Route
====================================

What:  Streams a generated plain-text report.
Why:   Paths containing /Download bypass the envelope middleware, so this
       route's bytes go to the client unbuffered and unwrapped.
"""

import logging
from typing import AsyncIterator

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["Files"])

MAX_LINES = 100_000


async def _report_lines(name: str, lines: int) -> AsyncIterator[bytes]:
    for number in range(1, lines + 1):
        yield f"{name} line {number}\n".encode("utf-8")


@router.get("/Download/{name}", summary="Download a generated text report")
async def download_report(
    name: str,
    lines: int = Query(default=10, ge=1, le=MAX_LINES),
) -> StreamingResponse:
    if not name.isidentifier():
        # Bypassed path: FastAPI renders this error, not the envelope
        raise HTTPException(status_code=400, detail="Invalid report name")
    logger.debug("Streaming report %s (%d lines)", name, lines)
    return StreamingResponse(
        _report_lines(name, lines),
        media_type="text/plain",
        headers={"Content-Disposition": f'attachment; filename="{name}.txt"'},
    )
