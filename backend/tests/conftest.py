"""
API Envelope — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── test_settings: Settings isolated from any .env file
    ├── envelope_app: Minimal FastAPI app behind ApiResponseMiddleware with
    │                 one route per outcome the middleware must handle
    ├── client: HTTPX AsyncClient for envelope_app
    └── app_client: HTTPX AsyncClient for the real application (create_app)
"""

import asyncio
import os

# Override settings for testing BEFORE any app imports
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["EXPOSE_EXCEPTION_DETAILS"] = "true"

import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from httpx import ASGITransport, AsyncClient

from apienvelope.config import Settings
from apienvelope.context import UserContext, get_user_context
from apienvelope.exceptions import ApiException, UnauthorizedAccessError
from apienvelope.middleware.api_response import ApiResponseMiddleware

BINARY_PAYLOAD = b"\x00\x01\x02binary\xff\xfe"


def build_envelope_app(app_settings: Settings) -> FastAPI:
    """
    A bare app exercising every branch of the middleware.

    Routes:
        /ok                      200 {"id":1}
        /created                 201 {"id":2}
        /unauthorized            401, empty body
        /teapot                  418 {"detail":"short and stout"}
        /text                    200 plain text containing double quotes
        /quoted-json             200 JSON containing escaped double quotes
        /no-content              204, no body
        /not-modified            304, no body
        /structured-fault        raises ApiException(422)
        /multi-errors            raises ApiException(422) with a list of messages per field
        /denied                  raises UnauthorizedAccessError
        /boom                    raises RuntimeError chained from KeyError
        /whoami                  returns the request's UserContext id
        /swagger/index.html      documentation page (bypassed)
        /api/reports/Download/x  binary download (bypassed)
        OPTIONS /ok              preflight answer (bypassed)
    """
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    app.add_middleware(ApiResponseMiddleware, settings=app_settings)

    @app.get("/ok")
    async def ok():
        return JSONResponse({"id": 1})

    @app.options("/ok")
    async def ok_preflight():
        return PlainTextResponse("preflight-ok")

    @app.get("/created")
    async def created():
        return JSONResponse({"id": 2}, status_code=201)

    @app.get("/unauthorized")
    async def unauthorized():
        return Response(status_code=401)

    @app.get("/no-content")
    async def no_content():
        return Response(status_code=204)

    @app.get("/not-modified")
    async def not_modified():
        return Response(status_code=304, headers={"ETag": '"v1"'})

    @app.get("/teapot")
    async def teapot():
        return JSONResponse({"detail": "short and stout"}, status_code=418)

    @app.get("/text")
    async def text():
        return PlainTextResponse('say "hello"')

    @app.get("/quoted-json")
    async def quoted_json():
        return JSONResponse({"title": 'the "quoted" word'})

    @app.get("/structured-fault")
    async def structured_fault():
        raise ApiException(
            "Invalid name",
            status_code=422,
            errors={"name": "required"},
            reference_error_code="NAME-001",
            reference_document_link="https://docs.example.com/errors/NAME-001",
        )

    @app.get("/multi-errors")
    async def multi_errors():
        raise ApiException(
            "Invalid",
            status_code=422,
            errors={"name": ["required", "too short"], "email": "invalid"},
        )

    @app.get("/denied")
    async def denied():
        raise UnauthorizedAccessError("caller is not an admin")

    @app.get("/boom")
    async def boom():
        try:
            {}["missing"]
        except KeyError as exc:
            raise RuntimeError("lookup failed") from exc

    @app.get("/whoami")
    async def whoami(user: UserContext = Depends(get_user_context)):
        # Yield so concurrent requests interleave
        await asyncio.sleep(0.01)
        return {"id": str(user.id) if user.id else None}

    @app.get("/swagger/index.html")
    async def swagger_page():
        return HTMLResponse("<html>docs</html>")

    @app.get("/api/reports/Download/{name}")
    async def download(name: str):
        return Response(content=BINARY_PAYLOAD, media_type="application/octet-stream")

    return app


@pytest.fixture
def binary_payload():
    return BINARY_PAYLOAD


@pytest.fixture
def make_envelope_app():
    """Factory for envelope apps with non-default settings."""
    return build_envelope_app


@pytest.fixture
def test_settings():
    """Settings with defaults only; _env_file=None keeps a local .env out of tests."""
    return Settings(_env_file=None)


@pytest.fixture
def envelope_app(test_settings):
    return build_envelope_app(test_settings)


@pytest_asyncio.fixture
async def client(envelope_app):
    """
    HTTPX AsyncClient routed straight into envelope_app.

    Usage:
        async def test_ok(client):
            response = await client.get("/ok")
            assert response.json()["message"] == "Success"
    """
    transport = ASGITransport(app=envelope_app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def app_client(test_settings):
    """Client for the full application (middleware chain + sample routes)."""
    from apienvelope.main import create_app
    transport = ASGITransport(app=create_app(test_settings))
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
