"""
API Envelope — FastAPI Application Factory
============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn apienvelope.main:app) and by tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain (outermost → innermost):          │
    │  CORS → Request ID → Logging → GZip → ApiResponse   │
    │                                                     │
    │  Routes:                                            │
    │  GET /health   GET /api/users/me   POST /api/users  │
    │  GET /api/files/Download/{name}   (bypassed)        │
    │  /swagger, /swagger/v1/swagger.json (bypassed)      │
    └─────────────────────────────────────────────────────┘

No exception handlers are registered for application errors: ApiResponse
classifies them itself. A handler for ApiException would run inside the
middleware and hide the exception from it.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from apienvelope import __version__
from apienvelope.config import Settings, settings as default_settings
from apienvelope.middleware.api_response import ApiResponseMiddleware
from apienvelope.middleware.logging import RequestLoggingMiddleware
from apienvelope.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware
from apienvelope.routes import files, health, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """Configure root logging once at startup. stdout only; containers collect it."""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Overrides the settings singleton (tests use this to
            change bypass rules or detail exposure).
    """
    config = app_settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(config.log_level)
        logger.info("%s %s starting up", config.app_name, __version__)
        if config.expose_exception_details:
            logger.warning(
                "EXPOSE_EXCEPTION_DETAILS is on: unexpected errors return tracebacks to clients"
            )
        logger.info(
            "API docs: http://%s:%d%s", config.backend_host, config.backend_port,
            config.docs_path_prefix,
        )
        yield
        logger.info("Shutdown complete.")

    app = FastAPI(
        title=config.app_name,
        description=(
            "Every response that is not documentation, a download or a preflight "
            "is wrapped in {statusCode, message, data, error}."
        ),
        version=__version__,
        # Docs live under the bypass prefix so they are never enveloped
        docs_url=config.docs_path_prefix,
        redoc_url=None,
        openapi_url=f"{config.docs_path_prefix.rstrip('/')}/v1/swagger.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = outermost. ApiResponse goes first so it sees raw route output.
    app.add_middleware(ApiResponseMiddleware, settings=config)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER, "Content-Disposition"],
    )

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(files.router)

    return app


app = create_app()
