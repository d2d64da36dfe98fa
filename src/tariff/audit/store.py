"""SQLite storage for the tariff audit trail.

The audit table lives in the same database file as the tariff tables; the
connection returned by :func:`init_audit_db` is the service's only
connection.  Every statement is parameterized.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from tariff.audit.models import AuditEntry

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_AUDIT_SCHEMA = """
CREATE TABLE IF NOT EXISTS audit_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL,
    event_type TEXT NOT NULL,
    order_id TEXT,
    carrier_id TEXT,
    pricing_method TEXT,
    order_status TEXT,
    document_id TEXT,
    rates_snapshot TEXT,
    message TEXT,
    metadata TEXT
);
CREATE INDEX IF NOT EXISTS idx_audit_order ON audit_log (order_id);
CREATE INDEX IF NOT EXISTS idx_audit_carrier ON audit_log (carrier_id);
CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_log (timestamp);
"""

# Entry fields stored as plain columns, in insert order.
_COLUMNS = (
    "order_id",
    "carrier_id",
    "pricing_method",
    "order_status",
    "document_id",
    "rates_snapshot",
    "message",
)

# query_audit_trail keyword -> WHERE fragment
_FILTERS = {
    "order_id": "order_id = ?",
    "carrier_id": "carrier_id = ?",
    "event_type": "event_type = ?",
    "from_date": "timestamp >= ?",
    "to_date": "timestamp <= ?",
}


def init_audit_db(db_path: Path) -> sqlite3.Connection:
    """Open the service database and make sure the audit table exists.

    The connection is handed to worker threads during regeneration, so
    ``check_same_thread`` is disabled.  WAL mode lets the CLI read while
    the service writes.

    Args:
        db_path: Path to the SQLite database file, or ``:memory:``.

    Returns:
        The open connection.
    """
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.executescript(_AUDIT_SCHEMA)
    conn.commit()
    return conn


def insert_audit_entry(conn: sqlite3.Connection, entry: AuditEntry) -> int:
    """Append *entry* to the audit trail, stamped with the current UTC time.

    Returns:
        The new row ID.
    """
    values = entry.model_dump(include=set(_COLUMNS))
    metadata = json.dumps(entry.metadata) if entry.metadata is not None else None
    cursor = conn.execute(
        f"INSERT INTO audit_log (timestamp, event_type, {', '.join(_COLUMNS)}, metadata) "
        f"VALUES ({', '.join('?' * (len(_COLUMNS) + 3))})",
        (
            datetime.now(tz=UTC).strftime(TIMESTAMP_FORMAT),
            entry.event_type.value,
            *(values[column] for column in _COLUMNS),
            metadata,
        ),
    )
    conn.commit()
    return cursor.lastrowid or 0


def _row_to_dict(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    result = {column[0]: value for column, value in zip(cursor.description, row, strict=True)}
    if result.get("metadata") is not None:
        result["metadata"] = json.loads(result["metadata"])
    return result


def query_audit_trail(
    conn: sqlite3.Connection,
    *,
    order_id: str | None = None,
    carrier_id: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    event_type: str | None = None,
    limit: int = 50,
) -> list[dict[str, Any]]:
    """Return audit entries matching every given filter, newest first.

    Date bounds are compared as strings against the stored
    ``YYYY-MM-DDTHH:MM:SSZ`` timestamps, so a bare ``YYYY-MM-DD`` works as a
    lower bound and excludes that day as an upper bound.

    Args:
        conn: An open database connection.
        order_id: Exact tariff order ID.
        carrier_id: Exact carrier ID.
        from_date: Earliest timestamp, inclusive.
        to_date: Latest timestamp, inclusive.
        event_type: Exact event type value.
        limit: Maximum number of entries.

    Returns:
        One dict per entry with ``metadata`` decoded back to a dict.
    """
    given = {
        "order_id": order_id,
        "carrier_id": carrier_id,
        "event_type": event_type,
        "from_date": from_date,
        "to_date": to_date,
    }
    active = {name: value for name, value in given.items() if value is not None}
    where = " AND ".join(_FILTERS[name] for name in active)

    query = "SELECT * FROM audit_log"
    if where:
        query += f" WHERE {where}"
    query += " ORDER BY timestamp DESC, id DESC LIMIT ?"

    cursor = conn.execute(query, (*active.values(), limit))
    return [_row_to_dict(cursor, row) for row in cursor.fetchall()]


def close_audit_db(conn: sqlite3.Connection) -> None:
    """Close the service database connection."""
    conn.close()
