"""Centralized, typed configuration using pydantic-settings.

Provides a single ``Settings`` class backed by ``.env`` file and environment
variables, a cached ``get_settings()`` accessor, and a ``validate_settings()``
startup gate that enforces a usable storage layout in production mode.

IMPORTANT: This module has ZERO imports from the ``tariff`` package to
prevent circular imports.  Only stdlib, pydantic, pydantic_settings, and
structlog are used.
"""

from __future__ import annotations

import sys
from functools import lru_cache
from pathlib import Path

import structlog
from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env`` file.

    ``SecretStr`` fields prevent accidental leaks in logs or error output.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- General ---------------------------------------------------------------
    production: bool = False
    http_port: int = 8000

    # -- Storage ---------------------------------------------------------------
    database_path: Path = Path("data/tariff.db")
    artifact_dir: Path = Path("data/artifacts")

    # -- Documents -------------------------------------------------------------
    issuer_name: str = "Interstate Compliance Solutions"
    issuer_website: str = "www.interstatecompliancesolutions.com"

    # -- Regeneration ----------------------------------------------------------
    max_pending_regenerations: int = Field(default=3, ge=1)
    expiration_sweep_interval_seconds: int = Field(default=86400, ge=1)

    # -- Observability ---------------------------------------------------------
    sentry_dsn: SecretStr = SecretStr("")


@lru_cache
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    The ``@lru_cache`` decorator ensures environment variables are parsed
    exactly once.  Call ``get_settings.cache_clear()`` in tests to reset.

    Returns:
        The application ``Settings``.
    """
    try:
        return Settings()
    except ValidationError as exc:
        # Log only the structured errors list -- never the full exception
        # which may contain raw SecretStr values.
        logger.error("settings_validation_failed", errors=exc.errors())
        sys.exit(1)


def validate_settings(settings: Settings) -> None:
    """Check the storage layout and observability settings at startup.

    In **production** mode (``settings.production is True``), the application
    exits with a clear error block if any problem is found.

    In **development** mode, each problem is logged as a warning but the
    application continues to start.

    Args:
        settings: The loaded application settings.
    """
    errors: list[str] = []

    if settings.artifact_dir.exists() and not settings.artifact_dir.is_dir():
        errors.append(f"Artifact directory is not a directory: {settings.artifact_dir}")

    db_parent = settings.database_path.parent
    if db_parent.exists() and not db_parent.is_dir():
        errors.append(f"Database parent path is not a directory: {db_parent}")

    if not settings.sentry_dsn.get_secret_value():
        errors.append("SENTRY_DSN is empty or not set")

    if not errors:
        logger.info("settings_validation_passed")
        return

    if settings.production:
        for err in errors:
            logger.error("settings_problem", detail=err)
        print("\n=== STARTUP FAILED ===", file=sys.stderr)
        print("Invalid configuration for production mode:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        print("======================\n", file=sys.stderr)
        sys.exit(1)
    else:
        for err in errors:
            logger.warning("settings_problem_dev", detail=err)
