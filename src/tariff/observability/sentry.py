"""Sentry SDK initialization with structlog-sentry bridge.

Errors reach Sentry through structlog only: ``get_sentry_processor()`` is
placed in the structlog chain and forwards ERROR events (failed
regenerations, sweep crashes).  Domain errors that describe a bad request
rather than a fault in the service are dropped before sending.
"""

from __future__ import annotations

import logging
from typing import Any

import sentry_sdk
import structlog
from sentry_sdk.integrations.logging import LoggingIntegration
from structlog_sentry import SentryProcessor

from tariff.domain.errors import (
    ConcurrentEditConflict,
    InvalidRateSubmission,
    MethodChangeRequestError,
    OrderExpiredError,
    UnsupportedMethodTransition,
)

# Client-caused or retryable; the HTTP response already tells the caller.
IGNORED_ERRORS: tuple[type[Exception], ...] = (
    ConcurrentEditConflict,
    InvalidRateSubmission,
    MethodChangeRequestError,
    OrderExpiredError,
    UnsupportedMethodTransition,
)


def before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """Drop events raised by one of :data:`IGNORED_ERRORS`."""
    exc_info = hint.get("exc_info")
    if exc_info and isinstance(exc_info[1], IGNORED_ERRORS):
        return None
    return event


def init_sentry(dsn: str, environment: str = "development") -> None:
    """Initialize the Sentry SDK.  No-op when *dsn* is empty.

    Args:
        dsn: Sentry DSN string.
        environment: Reported as the Sentry environment tag.
    """
    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=0.1,
        send_default_pii=False,
        before_send=before_send,
        integrations=[LoggingIntegration(event_level=None, level=None)],
    )


def get_sentry_processor() -> structlog.types.Processor:
    """Return a structlog processor that forwards ERROR events to Sentry.

    Goes after ``add_log_level`` and before the renderer.
    """
    return SentryProcessor(event_level=logging.ERROR)
