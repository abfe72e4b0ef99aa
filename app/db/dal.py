"""Data Access Layer for the SQLite backing store.

Responsibilities
----------------
- Read trip headers, stops and category allocations; update stored budgets.
- Read currency reference data and user currency preferences.
- Return the raw rows of the four cost sources with their joins flattened
  into nested dicts (``accommodation``, ``activity``) or plain labels
  (``from_city``, ``to_city``, ``stop_city``).
- Manage shared read-only links.

All methods are synchronous and open one connection per call; the async
store adapters in ``app.db.stores`` run them in worker threads.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import sqlite3
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence
from datetime import date
import uuid

from app.models.constants import BudgetCategory

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"


def new_id() -> str:
    return uuid.uuid4().hex


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Trips
    def get_trip(self, trip_id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM trips WHERE id = ? AND deleted = 0", (trip_id,)
            )
            row = cur.fetchone()
            return dict(row) if row else None

    def get_category_budgets(self, trip_id: str) -> Dict[str, float]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT category, amount FROM trip_category_budgets WHERE trip_id = ?",
                (trip_id,),
            )
            return {r["category"]: float(r["amount"]) for r in cur.fetchall()}

    def list_trips(self, user_id: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT id, name, budget, total_estimated_cost, currency
                FROM trips
                WHERE user_id = ? AND deleted = 0
                ORDER BY created_at DESC, rowid DESC
                """,
                (user_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def create_trip(
        self,
        user_id: str,
        name: str,
        budget: Optional[float] = None,
        currency: str = "USD",
        total_estimated_cost: Optional[float] = None,
        trip_id: Optional[str] = None,
    ) -> str:
        trip_id = trip_id or new_id()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO trips (id, user_id, name, budget, currency, total_estimated_cost)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (trip_id, user_id, name, budget, currency.upper(), total_estimated_cost),
            )
        return trip_id

    def soft_delete_trip(self, trip_id: str) -> bool:
        with self._connect() as conn:
            cur = conn.execute(
                f"UPDATE trips SET deleted = 1, updated_at = ({UTC_NOW_SQL}) WHERE id = ? AND deleted = 0",
                (trip_id,),
            )
            return cur.rowcount > 0

    def set_trip_budget(
        self,
        trip_id: str,
        budget: Optional[float],
        category_budgets: Optional[Mapping[BudgetCategory, float]] = None,
    ) -> bool:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"UPDATE trips SET budget = ?, updated_at = ({UTC_NOW_SQL}) WHERE id = ? AND deleted = 0",
                (budget, trip_id),
            )
            if cur.rowcount == 0:
                return False
            if category_budgets is not None:
                cur.execute(
                    "DELETE FROM trip_category_budgets WHERE trip_id = ?", (trip_id,)
                )
                cur.executemany(
                    "INSERT INTO trip_category_budgets (trip_id, category, amount) VALUES (?, ?, ?)",
                    [
                        (trip_id, BudgetCategory(c).value, float(a))
                        for c, a in category_budgets.items()
                    ],
                )
            return True

    # ------------------------------------------------------------------
    # Stops
    def list_trip_stops(self, trip_id: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT s.id, s.trip_id, s.seq, s.start_date, s.end_date, c.name AS city
                FROM trip_stops s
                LEFT JOIN cities c ON c.id = s.city_id
                WHERE s.trip_id = ?
                ORDER BY s.start_date IS NULL, s.start_date, s.seq
                """,
                (trip_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def add_city(self, name: str, country: Optional[str] = None, city_id: Optional[str] = None) -> str:
        city_id = city_id or new_id()
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO cities (id, name, country) VALUES (?, ?, ?)",
                (city_id, name, country),
            )
        return city_id

    def add_trip_stop(
        self,
        trip_id: str,
        city_id: Optional[str],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        seq: int = 0,
    ) -> str:
        stop_id = new_id()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO trip_stops (id, trip_id, city_id, seq, start_date, end_date)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (stop_id, trip_id, city_id, seq, _iso(start_date), _iso(end_date)),
            )
        return stop_id

    # ------------------------------------------------------------------
    # Currencies & users
    def list_currencies(self) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM currencies ORDER BY code")
            return [dict(r) for r in cur.fetchall()]

    def get_currency(self, currency_id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM currencies WHERE id = ?", (currency_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def get_currency_by_code(self, code: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM currencies WHERE code = ?", (code.upper(),))
            row = cur.fetchone()
            return dict(row) if row else None

    def upsert_user(self, user_id: str, currency_id: Optional[str] = None, email: Optional[str] = None) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO users (id, email, currency_id) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET currency_id = excluded.currency_id,
                    email = COALESCE(excluded.email, users.email)
                """,
                (user_id, email, currency_id),
            )

    def get_user_currency_id(self, user_id: str) -> Optional[str]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT currency_id FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
            return row["currency_id"] if row else None

    # ------------------------------------------------------------------
    # Cost sources
    def list_trip_accommodations(self, trip_id: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT ta.id, ta.trip_id, ta.trip_stop_id, ta.check_in_date, ta.check_out_date,
                       a.id AS acc_id, a.name AS acc_name, a.provider AS acc_provider,
                       a.price_per_night AS acc_price, a.currency AS acc_currency,
                       a.currency_id AS acc_currency_id
                FROM trip_accommodations ta
                LEFT JOIN accommodations a ON a.id = ta.accommodation_id
                WHERE ta.trip_id = ?
                ORDER BY ta.check_in_date
                """,
                (trip_id,),
            )
            rows = []
            for r in cur.fetchall():
                row = dict(r)
                accommodation = None
                if row.pop("acc_id") is not None:
                    accommodation = {
                        "name": row["acc_name"],
                        "provider": row["acc_provider"],
                        "price_per_night": row["acc_price"],
                        "currency": row["acc_currency"],
                        "currency_id": row["acc_currency_id"],
                    }
                for key in ("acc_name", "acc_provider", "acc_price", "acc_currency", "acc_currency_id"):
                    row.pop(key, None)
                row["accommodation"] = accommodation
                rows.append(row)
            return rows

    def count_trip_accommodations(self, trip_id: str) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT COUNT(*) FROM trip_accommodations WHERE trip_id = ?", (trip_id,)
            )
            row = cur.fetchone()
            return int(row[0] if row and row[0] is not None else 0)

    def list_trip_transport(self, trip_id: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT t.id, t.trip_id, t.transport_mode, t.provider, t.departure_time,
                       t.cost, t.currency_id,
                       fc.name AS from_city, tc.name AS to_city
                FROM trip_transport t
                LEFT JOIN cities fc ON fc.id = t.from_city_id
                LEFT JOIN cities tc ON tc.id = t.to_city_id
                WHERE t.trip_id = ?
                ORDER BY t.departure_time
                """,
                (trip_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def list_stop_activities(self, stop_ids: Sequence[str]) -> List[Dict[str, Any]]:
        if not stop_ids:
            return []
        placeholders = ",".join("?" for _ in stop_ids)
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                SELECT ta.id, ta.trip_stop_id, ta.scheduled_date, ta.start_time,
                       a.id AS act_id, a.name AS act_name, a.cost AS act_cost,
                       a.currency_id AS act_currency_id
                FROM trip_activities ta
                LEFT JOIN activities a ON a.id = ta.activity_id
                WHERE ta.trip_stop_id IN ({placeholders})
                ORDER BY ta.scheduled_date, ta.start_time
                """,
                list(stop_ids),
            )
            rows = []
            for r in cur.fetchall():
                row = dict(r)
                activity = None
                if row.pop("act_id") is not None:
                    activity = {
                        "name": row["act_name"],
                        "cost": row["act_cost"],
                        "currency_id": row["act_currency_id"],
                    }
                for key in ("act_name", "act_cost", "act_currency_id"):
                    row.pop(key, None)
                row["activity"] = activity
                rows.append(row)
            return rows

    def list_cost_items(self, trip_id: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT ci.*, c.name AS stop_city
                FROM cost_items ci
                LEFT JOIN trip_stops s ON s.id = ci.trip_stop_id
                LEFT JOIN cities c ON c.id = s.city_id
                WHERE ci.trip_id = ?
                ORDER BY ci.created_at, ci.rowid
                """,
                (trip_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def insert_cost_item(
        self,
        trip_id: str,
        category: str,
        amount: float,
        currency_id: Optional[str] = None,
        trip_stop_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        item_id = new_id()
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO cost_items (id, trip_id, trip_stop_id, category, amount, currency_id)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (item_id, trip_id, trip_stop_id, category, amount, currency_id),
            )
            cur.execute("SELECT * FROM cost_items WHERE id = ?", (item_id,))
            return dict(cur.fetchone())

    def add_accommodation(
        self,
        name: str,
        price_per_night: float,
        currency: Optional[str] = None,
        currency_id: Optional[str] = None,
        city_id: Optional[str] = None,
        provider: Optional[str] = None,
    ) -> str:
        acc_id = new_id()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO accommodations (id, city_id, provider, name, price_per_night, currency, currency_id)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (acc_id, city_id, provider, name, price_per_night, currency, currency_id),
            )
        return acc_id

    def add_trip_accommodation(
        self,
        trip_id: str,
        accommodation_id: Optional[str],
        check_in_date: Optional[date] = None,
        check_out_date: Optional[date] = None,
        trip_stop_id: Optional[str] = None,
    ) -> str:
        booking_id = new_id()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO trip_accommodations
                    (id, trip_id, trip_stop_id, accommodation_id, check_in_date, check_out_date)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    booking_id,
                    trip_id,
                    trip_stop_id,
                    accommodation_id,
                    _iso(check_in_date),
                    _iso(check_out_date),
                ),
            )
        return booking_id

    def add_transport(
        self,
        trip_id: str,
        cost: float,
        currency_id: Optional[str],
        from_city_id: Optional[str] = None,
        to_city_id: Optional[str] = None,
        transport_mode: str = "flight",
        departure_time: Optional[str] = None,
    ) -> str:
        leg_id = new_id()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO trip_transport
                    (id, trip_id, from_city_id, to_city_id, transport_mode, departure_time, cost, currency_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (leg_id, trip_id, from_city_id, to_city_id, transport_mode, departure_time, cost, currency_id),
            )
        return leg_id

    def add_activity(
        self, name: str, cost: float, currency_id: Optional[str], city_id: Optional[str] = None
    ) -> str:
        activity_id = new_id()
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO activities (id, city_id, name, cost, currency_id) VALUES (?, ?, ?, ?, ?)",
                (activity_id, city_id, name, cost, currency_id),
            )
        return activity_id

    def schedule_activity(
        self, trip_stop_id: str, activity_id: Optional[str], scheduled_date: Optional[date] = None
    ) -> str:
        scheduled_id = new_id()
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO trip_activities (id, trip_stop_id, activity_id, scheduled_date) VALUES (?, ?, ?, ?)",
                (scheduled_id, trip_stop_id, activity_id, _iso(scheduled_date)),
            )
        return scheduled_id

    # ------------------------------------------------------------------
    # Shared links
    def create_shared_link(self, trip_id: str, token: str) -> Dict[str, Any]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "INSERT INTO shared_links (token, trip_id) VALUES (?, ?)", (token, trip_id)
            )
            cur.execute("SELECT * FROM shared_links WHERE token = ?", (token,))
            return dict(cur.fetchone())

    def get_shared_link(self, token: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM shared_links WHERE token = ?", (token,))
            row = cur.fetchone()
            return dict(row) if row else None

    def delete_shared_link(self, token: str) -> bool:
        with self._connect() as conn:
            cur = conn.execute("DELETE FROM shared_links WHERE token = ?", (token,))
            return cur.rowcount > 0
