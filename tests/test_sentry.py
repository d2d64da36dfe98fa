"""Tests for Sentry SDK initialization and structlog-sentry bridge."""

from __future__ import annotations

from unittest.mock import patch

from sentry_sdk.integrations.logging import LoggingIntegration
from structlog_sentry import SentryProcessor

from tariff.domain.errors import AssemblyFailure, ConcurrentEditConflict
from tariff.observability.sentry import before_send, get_sentry_processor, init_sentry


def test_init_sentry_noop_with_empty_dsn() -> None:
    """init_sentry('') does not raise and does not call sentry_sdk.init."""
    with patch("tariff.observability.sentry.sentry_sdk.init") as mock_init:
        init_sentry("")
        mock_init.assert_not_called()


def test_init_sentry_calls_sdk_with_dsn() -> None:
    """init_sentry with a DSN calls sentry_sdk.init with correct parameters."""
    test_dsn = "https://examplePublicKey@o0.ingest.sentry.io/0"
    with patch("tariff.observability.sentry.sentry_sdk.init") as mock_init:
        init_sentry(test_dsn)
        mock_init.assert_called_once()
        call_kwargs = mock_init.call_args
        assert call_kwargs.kwargs["dsn"] == test_dsn
        assert call_kwargs.kwargs["send_default_pii"] is False
        assert call_kwargs.kwargs["traces_sample_rate"] == 0.1


def test_init_sentry_disables_stdlib_logging_capture() -> None:
    """Errors reach Sentry through structlog only, not the logging integration."""
    with patch("tariff.observability.sentry.sentry_sdk.init") as mock_init:
        init_sentry("https://examplePublicKey@o0.ingest.sentry.io/0")
        integrations = mock_init.call_args.kwargs["integrations"]
        assert [type(i) for i in integrations] == [LoggingIntegration]


def test_get_sentry_processor_returns_error_level_processor() -> None:
    processor = get_sentry_processor()
    assert isinstance(processor, SentryProcessor)
    assert callable(processor)


def test_init_sentry_reports_environment() -> None:
    with patch("tariff.observability.sentry.sentry_sdk.init") as mock_init:
        init_sentry("https://examplePublicKey@o0.ingest.sentry.io/0", environment="production")
        assert mock_init.call_args.kwargs["environment"] == "production"
        assert mock_init.call_args.kwargs["before_send"] is before_send


def test_before_send_drops_retryable_conflicts() -> None:
    exc = ConcurrentEditConflict("TRF-1", 3)
    assert before_send({"event_id": "1"}, {"exc_info": (type(exc), exc, None)}) is None


def test_before_send_keeps_assembly_failures() -> None:
    exc = AssemblyFailure("TRF-1", "disk full")
    event = {"event_id": "1"}
    assert before_send(event, {"exc_info": (type(exc), exc, None)}) is event


def test_before_send_keeps_events_without_exception() -> None:
    event = {"message": "sweep failed"}
    assert before_send(event, {}) is event
