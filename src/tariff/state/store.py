"""SQLite-backed store for carrier profiles, tariff orders and change requests.

Mirrors the AuditLogger pattern: accepts a sqlite3.Connection, uses
parameterized queries exclusively, and commits synchronously after writes.
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, date, datetime

from tariff.domain.models import CarrierProfile, MethodChangeRequest, TariffOrder
from tariff.domain.types import ChangeRequestStatus, OrderStatus
from tariff.lifecycle.transitions import TERMINAL_STATES
from tariff.state.serializers import deserialize_order, serialize_order


def _now() -> str:
    return datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class TariffStore:
    """Persist and retrieve tariff domain records in SQLite.

    Every ``save_*`` uses ``INSERT OR REPLACE`` with a ``COALESCE`` subquery
    so the original ``created_at`` survives updates.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        """Initialize with an open database connection.

        Args:
            conn: An open sqlite3.Connection whose database already has the
                  tariff tables (see ``init_tariff_tables``).
        """
        self._conn = conn

    def _fetch(self, sql: str, params: tuple | list = ()) -> list[sqlite3.Row]:
        prev_factory = self._conn.row_factory
        self._conn.row_factory = sqlite3.Row
        try:
            return self._conn.execute(sql, params).fetchall()
        finally:
            self._conn.row_factory = prev_factory

    # ------------------------------------------------------------------
    # Carrier profiles
    # ------------------------------------------------------------------

    def save_profile(self, profile: CarrierProfile) -> None:
        """Insert or update a carrier profile."""
        now = _now()
        self._conn.execute(
            """
            INSERT OR REPLACE INTO carrier_profiles (
                carrier_id, profile_json, created_at, updated_at
            ) VALUES (
                ?, ?,
                COALESCE((SELECT created_at FROM carrier_profiles WHERE carrier_id = ?), ?),
                ?
            )
            """,
            (profile.carrier_id, profile.model_dump_json(), profile.carrier_id, now, now),
        )
        self._conn.commit()

    def get_profile(self, carrier_id: str) -> CarrierProfile | None:
        """Return the carrier profile, or None if unknown."""
        rows = self._fetch(
            "SELECT profile_json FROM carrier_profiles WHERE carrier_id = ?", (carrier_id,)
        )
        if not rows:
            return None
        return CarrierProfile.model_validate_json(rows[0]["profile_json"])

    # ------------------------------------------------------------------
    # Tariff orders
    # ------------------------------------------------------------------

    def save_order(self, order: TariffOrder) -> None:
        """Insert or update a tariff order snapshot."""
        now = _now()
        order_json, history_json = serialize_order(order)
        self._conn.execute(
            """
            INSERT OR REPLACE INTO tariff_orders (
                order_id, carrier_id, pricing_method, status,
                enrolled_date, expiry_date, order_json, history_json,
                created_at, updated_at
            ) VALUES (
                ?, ?, ?, ?, ?, ?, ?, ?,
                COALESCE((SELECT created_at FROM tariff_orders WHERE order_id = ?), ?),
                ?
            )
            """,
            (
                order.order_id,
                order.carrier_id,
                order.pricing_method.value,
                order.status.value,
                order.enrolled_date.isoformat(),
                order.expiry_date.isoformat(),
                order_json,
                history_json,
                order.order_id,  # for the COALESCE subquery
                now,
                now,
            ),
        )
        self._conn.commit()

    def get_order(self, order_id: str) -> TariffOrder | None:
        """Return the order, or None if unknown."""
        rows = self._fetch(
            "SELECT order_json, history_json FROM tariff_orders WHERE order_id = ?", (order_id,)
        )
        if not rows:
            return None
        return deserialize_order(rows[0]["order_json"], rows[0]["history_json"])

    def list_orders(
        self,
        carrier_id: str | None = None,
        status: OrderStatus | None = None,
    ) -> list[TariffOrder]:
        """Return orders, optionally filtered by carrier and status, oldest first."""
        clauses: list[str] = []
        params: list[str] = []
        if carrier_id is not None:
            clauses.append("carrier_id = ?")
            params.append(carrier_id)
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._fetch(
            f"SELECT order_json, history_json FROM tariff_orders{where} "
            "ORDER BY enrolled_date, order_id",
            params,
        )
        return [deserialize_order(row["order_json"], row["history_json"]) for row in rows]

    def load_expiring(self, today: date) -> list[TariffOrder]:
        """Return non-expired orders whose expiry date is before *today*."""
        terminal_values = [s.value for s in TERMINAL_STATES]
        placeholders = ", ".join("?" for _ in terminal_values)
        rows = self._fetch(
            f"SELECT order_json, history_json FROM tariff_orders "
            f"WHERE status NOT IN ({placeholders}) AND expiry_date < ? ORDER BY expiry_date",
            [*terminal_values, today.isoformat()],
        )
        return [deserialize_order(row["order_json"], row["history_json"]) for row in rows]

    def count_active(self) -> int:
        """Return the number of orders that are not expired."""
        terminal_values = [s.value for s in TERMINAL_STATES]
        placeholders = ", ".join("?" for _ in terminal_values)
        cursor = self._conn.execute(
            f"SELECT COUNT(*) FROM tariff_orders WHERE status NOT IN ({placeholders})",
            terminal_values,
        )
        return int(cursor.fetchone()[0])

    # ------------------------------------------------------------------
    # Method change requests
    # ------------------------------------------------------------------

    def save_change_request(self, request: MethodChangeRequest) -> None:
        """Insert or update a method change request."""
        now = _now()
        self._conn.execute(
            """
            INSERT OR REPLACE INTO method_change_requests (
                request_id, order_id, status, request_json, created_at, updated_at
            ) VALUES (
                ?, ?, ?, ?,
                COALESCE(
                    (SELECT created_at FROM method_change_requests WHERE request_id = ?), ?
                ),
                ?
            )
            """,
            (
                request.request_id,
                request.order_id,
                request.status.value,
                request.model_dump_json(),
                request.request_id,
                now,
                now,
            ),
        )
        self._conn.commit()

    def get_change_request(self, request_id: str) -> MethodChangeRequest | None:
        """Return the change request, or None if unknown."""
        rows = self._fetch(
            "SELECT request_json FROM method_change_requests WHERE request_id = ?", (request_id,)
        )
        if not rows:
            return None
        return MethodChangeRequest.model_validate_json(rows[0]["request_json"])

    def find_pending_change_request(self, order_id: str) -> MethodChangeRequest | None:
        """Return the order's pending change request, if one exists."""
        rows = self._fetch(
            "SELECT request_json FROM method_change_requests "
            "WHERE order_id = ? AND status = ? ORDER BY created_at LIMIT 1",
            (order_id, ChangeRequestStatus.PENDING.value),
        )
        if not rows:
            return None
        return MethodChangeRequest.model_validate_json(rows[0]["request_json"])
