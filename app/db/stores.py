"""Async store adapters over the SQLite ``Database``.

Each call runs the blocking DAL method in a worker thread so concurrent
fetches for one budget computation overlap. ``sqlite3.Error`` is wrapped in
``StoreError``; a missing or soft-deleted trip raises ``TripNotFoundError``.
"""

from __future__ import annotations

import asyncio
from datetime import date
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar
import sqlite3

from app.core.errors import StoreError, TripNotFoundError
from app.db.dal import Database
from app.models import CostItemIn, Currency, TripHeader, TripStop
from app.models.constants import BudgetCategory

logger = logging.getLogger("app.db")

T = TypeVar("T")


class _SqliteStore:
    def __init__(self, db: Database):
        self._db = db

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as exc:
            logger.error("sqlite call %s failed: %s", fn.__name__, exc)
            raise StoreError(f"{fn.__name__} failed: {exc}") from exc


def _to_currency(row: Optional[Dict[str, Any]]) -> Optional[Currency]:
    if row is None:
        return None
    return Currency(
        id=str(row["id"]),
        code=row["code"],
        name=row.get("name") or "",
        symbol=row.get("symbol") or "",
        exchange_rate_to_usd=row["exchange_rate_to_usd"],
    )


class SqliteTripStore(_SqliteStore):
    async def get_trip_header(self, trip_id: str) -> TripHeader:
        row = await self._run(self._db.get_trip, trip_id)
        if row is None:
            raise TripNotFoundError(trip_id)
        allocations = await self._run(self._db.get_category_budgets, trip_id)
        category_budgets: Dict[BudgetCategory, float] = {}
        for raw, amount in allocations.items():
            try:
                category_budgets[BudgetCategory(raw)] = amount
            except ValueError:
                logger.warning("ignoring unknown category allocation '%s'", raw, extra={"trip_id": trip_id})
        return TripHeader(
            id=str(row["id"]),
            name=row["name"],
            budget=row["budget"],
            currency=row["currency"],
            total_estimated_cost=row["total_estimated_cost"],
            category_budgets=category_budgets,
        )

    async def get_trip_stops(self, trip_id: str) -> List[TripStop]:
        rows = await self._run(self._db.list_trip_stops, trip_id)
        return [
            TripStop(
                id=str(r["id"]),
                trip_id=str(r["trip_id"]),
                start_date=date.fromisoformat(r["start_date"]) if r["start_date"] else None,
                end_date=date.fromisoformat(r["end_date"]) if r["end_date"] else None,
                city=r["city"],
            )
            for r in rows
        ]

    async def list_trips(self, user_id: str) -> List[Dict[str, Any]]:
        return await self._run(self._db.list_trips, user_id)

    async def update_trip_budget(
        self,
        trip_id: str,
        budget: Optional[float],
        category_budgets: Optional[Mapping[BudgetCategory, float]] = None,
    ) -> None:
        updated = await self._run(self._db.set_trip_budget, trip_id, budget, category_budgets)
        if not updated:
            raise TripNotFoundError(trip_id)


class SqliteCurrencyStore(_SqliteStore):
    async def get_all(self) -> List[Currency]:
        rows = await self._run(self._db.list_currencies)
        return [_to_currency(r) for r in rows]

    async def get_by_id(self, currency_id: str) -> Optional[Currency]:
        return _to_currency(await self._run(self._db.get_currency, currency_id))

    async def get_by_code(self, code: str) -> Optional[Currency]:
        return _to_currency(await self._run(self._db.get_currency_by_code, code))


class SqliteUserStore(_SqliteStore):
    async def get_preferred_currency_id(self, user_id: str) -> Optional[str]:
        return await self._run(self._db.get_user_currency_id, user_id)


class SqliteCostSourceStore(_SqliteStore):
    async def list_trip_accommodations(self, trip_id: str) -> List[Dict[str, Any]]:
        return await self._run(self._db.list_trip_accommodations, trip_id)

    async def list_trip_transport(self, trip_id: str) -> List[Dict[str, Any]]:
        return await self._run(self._db.list_trip_transport, trip_id)

    async def list_stop_activities(self, stop_ids: Sequence[str]) -> List[Dict[str, Any]]:
        return await self._run(self._db.list_stop_activities, list(stop_ids))

    async def list_cost_items(self, trip_id: str) -> List[Dict[str, Any]]:
        return await self._run(self._db.list_cost_items, trip_id)

    async def add_cost_item(self, trip_id: str, item: CostItemIn) -> Dict[str, Any]:
        return await self._run(
            self._db.insert_cost_item,
            trip_id,
            item.category,
            item.amount,
            item.currency_id,
            item.trip_stop_id,
        )

    async def count_trip_accommodations(self, trip_id: str) -> int:
        return await self._run(self._db.count_trip_accommodations, trip_id)


class SqliteSharedLinkStore(_SqliteStore):
    async def create_link(self, trip_id: str, token: str) -> Dict[str, Any]:
        return await self._run(self._db.create_shared_link, trip_id, token)

    async def get_link(self, token: str) -> Optional[Dict[str, Any]]:
        return await self._run(self._db.get_shared_link, token)

    async def delete_link(self, token: str) -> bool:
        return await self._run(self._db.delete_shared_link, token)


__all__ = [
    "SqliteTripStore",
    "SqliteCurrencyStore",
    "SqliteUserStore",
    "SqliteCostSourceStore",
    "SqliteSharedLinkStore",
]
