"""Application entry point for the tariff document service.

Runs the FastAPI server and the periodic expiration sweep concurrently in a
single long-running process.

Configures:
- **structlog** with JSON rendering (production) or colored console (development)
- **Sentry** error forwarding through structlog when a DSN is configured
- **SQLite** for orders, carrier profiles, change requests and the audit trail
- **Prometheus** metrics and request-ID tracing on every HTTP request
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from tariff.api import register_error_handlers
from tariff.api import router as tariff_router
from tariff.audit.logger import AuditLogger
from tariff.audit.store import close_audit_db, init_audit_db
from tariff.config import Settings, get_settings, validate_settings
from tariff.health import register_health_routes
from tariff.observability.metrics import ACTIVE_TARIFFS, setup_metrics
from tariff.observability.middleware import SERVICE_NAME, RequestIdMiddleware
from tariff.observability.sentry import get_sentry_processor, init_sentry
from tariff.regeneration.coordinator import RegenerationCoordinator
from tariff.service import TariffService
from tariff.state.schema import init_tariff_tables
from tariff.state.store import TariffStore

logger = structlog.get_logger()


def configure_logging(production: bool = False, sentry_enabled: bool = False) -> None:
    """Configure structlog for production (JSON) or development (console).

    Production mode (*production=True*): JSON rendering at INFO level.
    Development mode: colored console rendering at DEBUG level.

    Args:
        production: Enable production mode if ``True``.
        sentry_enabled: Forward ERROR events to Sentry if ``True``.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if sentry_enabled:
        shared_processors.append(get_sentry_processor())

    if production:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        log_level = logging.INFO
    else:
        renderer = structlog.dev.ConsoleRenderer()
        log_level = logging.DEBUG

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service=SERVICE_NAME)


def initialize_services(settings: Settings | None = None) -> dict[str, Any]:
    """Set up all shared services for the application.

    Opens the SQLite database (audit log plus tariff tables on the same
    connection), creates the store, audit logger, regeneration coordinator
    and artifact directory, and wires them into a :class:`TariffService`.

    Args:
        settings: Application settings.  If ``None``, ``get_settings()`` is used.

    Returns:
        A dict of initialized service instances keyed by name.
    """
    if settings is None:
        settings = get_settings()

    services: dict[str, Any] = {"_settings": settings}

    # a. SQLite database shared by the audit trail and the tariff tables
    db_path = settings.database_path
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    db_conn = init_audit_db(db_path)
    init_tariff_tables(db_conn)
    services["db_conn"] = db_conn

    store = TariffStore(db_conn)
    services["store"] = store

    audit_logger = AuditLogger(db_conn)
    services["audit_logger"] = audit_logger

    # b. Artifact storage
    artifact_dir = settings.artifact_dir
    artifact_dir.mkdir(parents=True, exist_ok=True)
    services["artifact_dir"] = artifact_dir

    # c. Regeneration coordinator and service
    coordinator = RegenerationCoordinator(max_pending=settings.max_pending_regenerations)
    services["coordinator"] = coordinator

    services["tariff_service"] = TariffService(
        store=store,
        audit=audit_logger,
        artifact_dir=artifact_dir,
        coordinator=coordinator,
        issuer_name=settings.issuer_name,
        issuer_website=settings.issuer_website,
    )

    ACTIVE_TARIFFS.set(store.count_active())
    logger.info(
        "Services initialized",
        database=str(db_path),
        artifact_dir=str(artifact_dir),
        max_pending_regenerations=settings.max_pending_regenerations,
    )
    return services


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Lifespan context manager for FastAPI startup and shutdown.

    On shutdown: closes the database connection.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application.
    """
    services = app.state.services
    logger.info("FastAPI application starting")
    yield
    db_conn = services.get("db_conn")
    if db_conn is not None:
        close_audit_db(db_conn)
        logger.info("Database connection closed")


def create_app(services: dict[str, Any]) -> FastAPI:
    """Create the FastAPI app with routes, health probes, metrics and middleware.

    Args:
        services: The initialized services dict from ``initialize_services``.

    Returns:
        The configured FastAPI application.
    """
    fastapi_app = FastAPI(title="Tariff Document Service", lifespan=lifespan)
    fastapi_app.state.services = services
    fastapi_app.state.settings = services.get("_settings", get_settings())
    fastapi_app.add_middleware(RequestIdMiddleware)
    fastapi_app.include_router(tariff_router)
    register_error_handlers(fastapi_app)
    register_health_routes(fastapi_app)
    setup_metrics(fastapi_app)
    return fastapi_app


async def expire_orders_periodically(services: dict[str, Any], interval_seconds: int) -> None:
    """Expire lapsed tariff orders every *interval_seconds*.

    Args:
        services: The initialized services dict.
        interval_seconds: Delay between sweeps.
    """
    service: TariffService = services["tariff_service"]
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            expired = await service.expire_orders()
            logger.info("Expiration sweep finished", expired=len(expired))
        except Exception:
            logger.exception("Expiration sweep failed")


async def main() -> None:
    """Main entry point: run FastAPI and the expiration sweep concurrently.

    1. Configure logging and Sentry
    2. Validate settings
    3. Initialize services and expire anything that lapsed while stopped
    4. Run uvicorn + the expiration sweep with asyncio.gather
    5. Close the database on exit
    """
    settings = get_settings()
    sentry_dsn = settings.sentry_dsn.get_secret_value()
    init_sentry(sentry_dsn, environment="production" if settings.production else "development")
    configure_logging(production=settings.production, sentry_enabled=bool(sentry_dsn))
    logger.info("Application starting")

    validate_settings(settings)

    services = initialize_services(settings)
    await services["tariff_service"].expire_orders()

    fastapi_app = create_app(services)

    config = uvicorn.Config(
        fastapi_app,
        host="0.0.0.0",
        port=settings.http_port,
        log_level="info",
    )
    server = uvicorn.Server(config)

    try:
        await asyncio.gather(
            server.serve(),
            expire_orders_periodically(services, settings.expiration_sweep_interval_seconds),
        )
    finally:
        db_conn = services.get("db_conn")
        if db_conn is not None:
            close_audit_db(db_conn)
            logger.info("Database connection closed on shutdown")


if __name__ == "__main__":
    asyncio.run(main())
