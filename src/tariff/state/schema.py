"""SQLite schema for tariff persistence.

Provides the DDL function for carrier profiles, tariff orders and method
change requests, following the same pattern as ``init_audit_db()`` in
``tariff.audit.store``.
"""

from __future__ import annotations

import sqlite3


def init_tariff_tables(conn: sqlite3.Connection) -> None:
    """Create the carrier, order and change-request tables if missing.

    Orders store their full model as JSON alongside the columns used for
    filtering (carrier, status, expiry date).  Lifecycle history is kept in a
    separate column as ``[from, event, to]`` triples.

    Args:
        conn: An open sqlite3.Connection (WAL mode recommended).
    """
    conn.execute("""
        CREATE TABLE IF NOT EXISTS carrier_profiles (
            carrier_id TEXT PRIMARY KEY,
            profile_json TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
            updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS tariff_orders (
            order_id TEXT PRIMARY KEY,
            carrier_id TEXT NOT NULL,
            pricing_method TEXT NOT NULL,
            status TEXT NOT NULL,
            enrolled_date TEXT NOT NULL,
            expiry_date TEXT NOT NULL,
            order_json TEXT NOT NULL,
            history_json TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
            updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
        )
    """)

    conn.execute("""
        CREATE TABLE IF NOT EXISTS method_change_requests (
            request_id TEXT PRIMARY KEY,
            order_id TEXT NOT NULL,
            status TEXT NOT NULL,
            request_json TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
            updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
        )
    """)

    conn.execute("CREATE INDEX IF NOT EXISTS idx_orders_status ON tariff_orders (status)")
    conn.execute("CREATE INDEX IF NOT EXISTS idx_orders_carrier ON tariff_orders (carrier_id)")
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_change_requests_order "
        "ON method_change_requests (order_id, status)"
    )

    conn.commit()
