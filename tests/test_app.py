"""Tests for application entry point: structlog config, service initialization, and app creation."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient
from structlog_sentry import SentryProcessor

from tariff.app import (
    configure_logging,
    create_app,
    expire_orders_periodically,
    initialize_services,
)
from tariff.audit.store import close_audit_db
from tariff.config import Settings
from tariff.service import TariffService


def _reset_structlog() -> None:
    """Reset structlog so cached loggers don't leak between tests."""
    structlog.reset_defaults()


def _base_settings(tmp_path: Path, **overrides) -> Settings:
    """Build a Settings instance pointing storage at tmp_path."""
    defaults = {
        "database_path": tmp_path / "tariff.db",
        "artifact_dir": tmp_path / "artifacts",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)  # type: ignore[call-arg]


class TestConfigureLogging:
    """Tests for structlog configuration in dev and production modes."""

    def test_development_mode_uses_console_renderer(self) -> None:
        _reset_structlog()
        configure_logging(production=False)
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, structlog.dev.ConsoleRenderer) for p in processors)

    def test_production_mode_uses_json_renderer(self) -> None:
        _reset_structlog()
        configure_logging(production=True)
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, structlog.processors.JSONRenderer) for p in processors)

    def test_default_is_development_mode(self) -> None:
        _reset_structlog()
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, structlog.dev.ConsoleRenderer) for p in processors)

    def test_sentry_processor_added_before_renderer(self) -> None:
        _reset_structlog()
        configure_logging(production=True, sentry_enabled=True)
        processors = structlog.get_config()["processors"]
        sentry_index = next(i for i, p in enumerate(processors) if isinstance(p, SentryProcessor))
        assert sentry_index == len(processors) - 2

    def test_sentry_processor_absent_by_default(self) -> None:
        _reset_structlog()
        configure_logging(production=True)
        processors = structlog.get_config()["processors"]
        assert not any(isinstance(p, SentryProcessor) for p in processors)


class TestInitializeServices:
    """Tests for service initialization against temporary storage."""

    def test_creates_database_and_artifact_dir(self, tmp_path: Path) -> None:
        _reset_structlog()
        settings = _base_settings(tmp_path)

        services = initialize_services(settings)

        assert (tmp_path / "tariff.db").exists()
        assert (tmp_path / "artifacts").is_dir()
        assert isinstance(services["tariff_service"], TariffService)
        assert services["store"] is not None
        assert services["audit_logger"] is not None

        close_audit_db(services["db_conn"])

    def test_nested_database_path_created(self, tmp_path: Path) -> None:
        _reset_structlog()
        custom_path = tmp_path / "custom" / "nested" / "tariff.db"
        settings = _base_settings(tmp_path, database_path=custom_path)

        services = initialize_services(settings)

        assert custom_path.exists()
        close_audit_db(services["db_conn"])

    def test_coordinator_uses_configured_queue_bound(self, tmp_path: Path) -> None:
        _reset_structlog()
        settings = _base_settings(tmp_path, max_pending_regenerations=1)

        services = initialize_services(settings)

        assert services["coordinator"]._max_pending == 1
        assert services["tariff_service"].coordinator is services["coordinator"]
        close_audit_db(services["db_conn"])

    def test_tables_created_on_shared_connection(self, tmp_path: Path) -> None:
        _reset_structlog()
        services = initialize_services(_base_settings(tmp_path))

        rows = services["db_conn"].execute(
            "SELECT name FROM sqlite_master WHERE type = 'table'"
        ).fetchall()
        tables = {row[0] for row in rows}
        assert {"audit_log", "carrier_profiles", "tariff_orders", "method_change_requests"} <= tables

        close_audit_db(services["db_conn"])


class TestCreateApp:
    """Tests for the FastAPI app factory."""

    def test_returns_fastapi_with_services(self, tmp_path: Path) -> None:
        _reset_structlog()
        services = initialize_services(_base_settings(tmp_path))

        app = create_app(services)

        assert isinstance(app, FastAPI)
        assert app.state.services is services
        assert app.state.settings is services["_settings"]

    def test_routes_registered(self, tmp_path: Path) -> None:
        _reset_structlog()
        app = create_app(initialize_services(_base_settings(tmp_path)))

        paths = {route.path for route in app.routes}
        assert "/health" in paths
        assert "/ready" in paths
        assert "/metrics" in paths
        assert "/tariffs" in paths
        assert "/tariffs/{order_id}/document" in paths
        assert "/method-change-requests/{request_id}/review" in paths

    def test_ready_and_request_id_through_app(self, tmp_path: Path) -> None:
        _reset_structlog()
        app = create_app(initialize_services(_base_settings(tmp_path)))

        with TestClient(app) as client:
            response = client.get("/ready", headers={"X-Request-ID": "probe-1"})

        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == "probe-1"


class TestExpirationSweep:
    """Tests for the periodic expiration loop."""

    @pytest.mark.anyio()
    async def test_sweep_survives_failures(self) -> None:
        service = MagicMock()
        service.expire_orders = AsyncMock(side_effect=_fail_once())
        task = asyncio.ensure_future(expire_orders_periodically({"tariff_service": service}, 0))

        while service.expire_orders.call_count < 3:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert service.expire_orders.call_count >= 3


def _fail_once():
    calls = {"n": 0}

    def _expire():
        calls["n"] += 1
        if calls["n"] == 1:
            raise RuntimeError("database is locked")
        return []

    return _expire
