"""Command-line access to the tariff audit trail.

Answers questions such as "what happened to this order last week?" or
"which documents failed to render today?" straight from the service
database, without going through the HTTP API.

Usage::

    python -m tariff.audit.cli --order TRF-7KQ2M9XD --last 7d
    python -m tariff.audit.cli --event-type regeneration_failed --last 24h
    python -m tariff.audit.cli --carrier carrier-42 --format json
"""

from __future__ import annotations

import argparse
import json
import re
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from tariff.audit.models import EventType
from tariff.audit.store import close_audit_db, init_audit_db, query_audit_trail

DEFAULT_DB_PATH = "data/tariff.db"

_DURATION = re.compile(r"(\d+)([dh])")
_UNITS = {"d": "days", "h": "hours"}

# (header, row key, column width)
_COLUMNS: tuple[tuple[str, str, int], ...] = (
    ("Timestamp", "timestamp", 20),
    ("Event", "event_type", 24),
    ("Order", "order_id", 12),
    ("Carrier", "carrier_id", 15),
    ("Method", "pricing_method", 7),
    ("Status", "order_status", 9),
    ("Message", "message", 30),
)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for audit trail queries."""
    parser = argparse.ArgumentParser(
        prog="tariff-audit",
        description="Query the tariff audit trail",
    )

    filters = parser.add_argument_group("filters")
    filters.add_argument("--order", help="Tariff order ID, e.g. TRF-7KQ2M9XD")
    filters.add_argument("--carrier", help="Carrier ID")
    filters.add_argument(
        "--event-type",
        choices=[event.value for event in EventType],
        help="Only entries of this event type",
    )
    filters.add_argument("--from-date", help="Earliest timestamp (YYYY-MM-DD or ISO 8601)")
    filters.add_argument("--to-date", help="Latest timestamp (YYYY-MM-DD or ISO 8601)")
    filters.add_argument(
        "--last",
        help='Relative window ending now, e.g. "24h" or "7d"; overrides --from-date',
    )

    output = parser.add_argument_group("output")
    output.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        dest="output_format",
        help="Output format (default: table)",
    )
    output.add_argument("--limit", type=int, default=50, help="Maximum entries (default: 50)")

    parser.add_argument(
        "--db",
        default=DEFAULT_DB_PATH,
        help=f"Path to the service database (default: {DEFAULT_DB_PATH})",
    )
    return parser


def parse_last_duration(last: str) -> str:
    """Turn a ``--last`` window such as ``"7d"`` or ``"24h"`` into a start timestamp.

    Args:
        last: A whole number followed by ``d`` (days) or ``h`` (hours).

    Returns:
        The UTC timestamp that far in the past, formatted the way the audit
        store writes timestamps.

    Raises:
        ValueError: If *last* is not a recognized window.
    """
    match = _DURATION.fullmatch(last or "")
    if match is None:
        msg = f"Unrecognized duration format: {last!r}. Use e.g. '7d' or '24h'."
        raise ValueError(msg)

    amount, unit = match.groups()
    start = datetime.now(tz=UTC) - timedelta(**{_UNITS[unit]: int(amount)})
    return start.strftime("%Y-%m-%dT%H:%M:%SZ")


def _cell(value: Any, width: int) -> str:
    text = "" if value is None else str(value)
    if len(text) > width:
        text = text[: width - 3] + "..."
    return text.ljust(width)


def format_table(results: list[dict[str, Any]]) -> str:
    """Render audit entries as a fixed-width table, newest first."""
    if not results:
        return "No results found."

    header = "  ".join(_cell(title, width) for title, _, width in _COLUMNS)
    lines = [header, "-" * len(header)]
    for row in results:
        lines.append("  ".join(_cell(row.get(key), width) for _, key, width in _COLUMNS).rstrip())
    return "\n".join(lines)


def format_json(results: list[dict[str, Any]]) -> str:
    """Render audit entries as pretty-printed JSON."""
    return json.dumps(results, indent=2)


def main(argv: list[str] | None = None) -> None:
    """Entry point for ``tariff-audit`` and ``python -m tariff.audit.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    from_date = args.from_date
    if args.last:
        try:
            from_date = parse_last_duration(args.last)
        except ValueError as exc:
            parser.error(str(exc))

    db_path = Path(args.db)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = init_audit_db(db_path)
    try:
        results = query_audit_trail(
            conn,
            order_id=args.order,
            carrier_id=args.carrier,
            from_date=from_date,
            to_date=args.to_date,
            event_type=args.event_type,
            limit=args.limit,
        )
    finally:
        close_audit_db(conn)

    formatter = format_json if args.output_format == "json" else format_table
    print(formatter(results))


if __name__ == "__main__":
    main()
