"""
API Envelope — Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Type-safe environment variable loading with validation on startup.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory, the middleware and the sample routes.
When:  Loaded once at module import time.

The envelope middleware receives its Settings instance explicitly (see
create_app), so tests can build apps with different bypass rules without
patching the module-level singleton.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Attributes are grouped by concern for readability.
    """

    # ── Application ───────────────────────────────────────────────────────
    app_name: str = Field(default="API Envelope")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (split by cors_origins_list)
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Envelope Bypass Rules ─────────────────────────────────────────────
    # What: Requests matching these rules reach the client untouched.
    # docs_path_prefix is matched per path segment (/swagger, /swagger/...).
    # download_path_marker is a case-sensitive substring anywhere in the path.
    docs_path_prefix: str = Field(default="/swagger")
    download_path_marker: str = Field(default="/Download")

    @field_validator("docs_path_prefix")
    @classmethod
    def validate_docs_path_prefix(cls, v: str) -> str:
        """Docs prefix must be an absolute path without a trailing slash."""
        if not v.startswith("/"):
            raise ValueError(f"docs_path_prefix '{v}' must start with '/'")
        return v.rstrip("/") or "/"

    # ── Caller Identity ───────────────────────────────────────────────────
    # Header carrying the caller's UUID. Parsed once per request.
    identity_header: str = Field(default="UserId")

    # ── Error Detail Exposure ─────────────────────────────────────────────
    # When True, unclassified faults return their full traceback in
    # error.details. Only safe for trusted/internal deployments.
    expose_exception_details: bool = Field(default=True)

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance, imported throughout the application
settings = Settings()
