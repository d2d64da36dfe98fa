"""Prometheus metrics instrumentation for the tariff service.

Provides:
- ``setup_metrics(app)``: Attach prometheus-fastapi-instrumentator to a FastAPI app,
  exposing ``/metrics`` with HTTP request duration/count plus custom business metrics.
- ``DOCUMENTS_GENERATED``: Counter of committed tariff documents.
- ``REGENERATION_FAILURES``: Counter of regenerations that failed to render or store.
- ``REGENERATIONS_SUPERSEDED``: Counter of regenerations discarded for a newer edit.
- ``ACTIVE_TARIFFS``: Gauge of non-expired tariff orders.

Business metrics are updated where the events happen (not by polling the database).
"""

from __future__ import annotations

from fastapi import FastAPI
from prometheus_client import Counter, Gauge
from prometheus_fastapi_instrumentator import Instrumentator

DOCUMENTS_GENERATED: Counter = Counter(
    "tariff_documents_generated_total",
    "Total number of tariff documents rendered and stored",
)

REGENERATION_FAILURES: Counter = Counter(
    "tariff_regeneration_failures_total",
    "Total number of document regenerations that failed",
)

REGENERATIONS_SUPERSEDED: Counter = Counter(
    "tariff_regenerations_superseded_total",
    "Total number of regenerations discarded because a newer edit arrived",
)

ACTIVE_TARIFFS: Gauge = Gauge(
    "tariff_active_total",
    "Number of currently active (non-expired) tariff orders",
)


def setup_metrics(app: FastAPI) -> None:
    """Instrument *app* with Prometheus HTTP metrics and expose ``/metrics``.

    Excludes health/ready/metrics endpoints from instrumentation to avoid
    noise in dashboards.

    Args:
        app: The FastAPI application to instrument.
    """
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/health", "/ready", "/metrics"],
    ).instrument(app).expose(app, include_in_schema=False, should_gzip=True)
