"""Tests for the CLI query interface for the audit trail."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from tariff.audit.cli import (
    build_parser,
    format_json,
    format_table,
    main,
    parse_last_duration,
)
from tariff.audit.logger import AuditLogger
from tariff.audit.store import close_audit_db, init_audit_db
from tariff.domain.models import TariffOrder


class TestBuildParser:
    """Tests for argument parser construction."""

    def test_accepts_all_arguments(self) -> None:
        parser = build_parser()
        args = parser.parse_args([
            "--order",
            "TRF-ABCD2345",
            "--carrier",
            "carrier-001",
            "--from-date",
            "2026-01-01",
            "--to-date",
            "2026-02-01",
            "--event-type",
            "rates_updated",
            "--last",
            "7d",
            "--format",
            "json",
            "--limit",
            "100",
            "--db",
            "/tmp/test.db",
        ])
        assert args.order == "TRF-ABCD2345"
        assert args.carrier == "carrier-001"
        assert args.from_date == "2026-01-01"
        assert args.to_date == "2026-02-01"
        assert args.event_type == "rates_updated"
        assert args.last == "7d"
        assert args.output_format == "json"
        assert args.limit == 100
        assert args.db == "/tmp/test.db"

    def test_default_values(self) -> None:
        args = build_parser().parse_args([])
        assert args.order is None
        assert args.carrier is None
        assert args.output_format == "table"
        assert args.limit == 50
        assert args.db == "data/tariff.db"

    def test_rejects_unknown_event_type(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--event-type", "email_sent"])


class TestParseLastDuration:
    """Tests for parse_last_duration conversion."""

    @pytest.mark.parametrize(
        ("last", "delta"),
        [("7d", timedelta(days=7)), ("24h", timedelta(hours=24)), ("30d", timedelta(days=30))],
        ids=["7d", "24h", "30d"],
    )
    def test_converts_to_correct_date(self, last: str, delta: timedelta) -> None:
        result = parse_last_duration(last)
        expected = datetime.now(tz=UTC) - delta
        result_dt = datetime.strptime(result, "%Y-%m-%dT%H:%M:%SZ").replace(tzinfo=UTC)
        assert abs((result_dt - expected).total_seconds()) < 2

    @pytest.mark.parametrize("last", ["7x", "", "d", "xd"], ids=["bad-unit", "empty", "no-number", "nan"])
    def test_raises_on_invalid_format(self, last: str) -> None:
        with pytest.raises(ValueError, match="Unrecognized duration format"):
            parse_last_duration(last)


class TestFormatTable:
    """Tests for table output formatting."""

    def test_produces_readable_output_with_header(self) -> None:
        results = [
            {
                "timestamp": "2026-03-01T10:00:00Z",
                "event_type": "document_generated",
                "order_id": "TRF-ABCD2345",
                "carrier_id": "carrier-001",
                "pricing_method": "weight",
                "order_status": "completed",
                "message": "Tariff document generated",
            },
        ]
        output = format_table(results)
        assert "Timestamp" in output
        assert "TRF-ABCD2345" in output
        assert "document_generated" in output
        lines = output.strip().split("\n")
        assert len(lines) == 3  # header + separator + 1 row

    def test_long_message_truncated(self) -> None:
        output = format_table([{"event_type": "rate_warning", "message": "x" * 80}])
        assert "x" * 27 + "..." in output
        assert "x" * 31 not in output

    def test_empty_results(self) -> None:
        assert format_table([]) == "No results found."


class TestFormatJson:
    def test_produces_valid_json(self) -> None:
        parsed = json.loads(format_json([{"event_type": "order_created", "order_id": "TRF-1"}]))
        assert parsed == [{"event_type": "order_created", "order_id": "TRF-1"}]


class TestMain:
    """Tests for the main() entry point."""

    def _seed(self, db_path: Path, order: TariffOrder) -> None:
        conn = init_audit_db(db_path)
        audit = AuditLogger(conn)
        audit.log_order_created(order)
        audit.log_order_created(order.model_copy(update={"order_id": "TRF-OTHER000"}))
        close_audit_db(conn)

    def test_filters_by_order_as_json(
        self, tmp_path: Path, sample_order: TariffOrder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        db_path = tmp_path / "tariff.db"
        self._seed(db_path, sample_order)

        main(["--order", "TRF-ABCD2345", "--format", "json", "--db", str(db_path)])

        parsed = json.loads(capsys.readouterr().out)
        assert [row["order_id"] for row in parsed] == ["TRF-ABCD2345"]
        assert parsed[0]["event_type"] == "order_created"

    def test_table_output(
        self, tmp_path: Path, sample_order: TariffOrder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        db_path = tmp_path / "tariff.db"
        self._seed(db_path, sample_order)

        main(["--last", "1h", "--db", str(db_path)])

        out = capsys.readouterr().out
        assert "TRF-ABCD2345" in out
        assert "TRF-OTHER000" in out

    def test_invalid_last_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            main(["--last", "soon", "--db", str(tmp_path / "tariff.db")])

    def test_creates_missing_db_directory(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        db_path = tmp_path / "nested" / "tariff.db"

        main(["--db", str(db_path)])

        assert db_path.exists()
        assert "No results found." in capsys.readouterr().out
