"""Store interfaces consumed by the budget services.

The budget engine never talks to a database directly; it depends on these
protocols so any relational store or API gateway can back it. The default
SQLite adapters live in ``app.db.stores``. Implementations raise
``TripNotFoundError`` for missing trips and wrap backend failures in
``StoreError``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from app.models import Currency, CostItemIn, TripHeader, TripStop
from app.models.constants import BudgetCategory


class TripStore(Protocol):
    async def get_trip_header(self, trip_id: str) -> TripHeader: ...

    async def get_trip_stops(self, trip_id: str) -> List[TripStop]: ...

    async def list_trips(self, user_id: str) -> List[Dict[str, Any]]: ...

    async def update_trip_budget(
        self,
        trip_id: str,
        budget: Optional[float],
        category_budgets: Optional[Mapping[BudgetCategory, float]] = None,
    ) -> None: ...


class CurrencyStore(Protocol):
    async def get_all(self) -> List[Currency]: ...

    async def get_by_id(self, currency_id: str) -> Optional[Currency]: ...

    async def get_by_code(self, code: str) -> Optional[Currency]: ...


class UserStore(Protocol):
    async def get_preferred_currency_id(self, user_id: str) -> Optional[str]: ...


class CostSourceStore(Protocol):
    """Raw row access for the four cost sources.

    Rows are plain dicts with nested joins flattened by the adapter; fetchers
    tolerate any joined field being missing.
    """

    async def list_trip_accommodations(self, trip_id: str) -> List[Dict[str, Any]]: ...

    async def list_trip_transport(self, trip_id: str) -> List[Dict[str, Any]]: ...

    async def list_stop_activities(
        self, stop_ids: Sequence[str]
    ) -> List[Dict[str, Any]]: ...

    async def list_cost_items(self, trip_id: str) -> List[Dict[str, Any]]: ...

    async def add_cost_item(self, trip_id: str, item: CostItemIn) -> Dict[str, Any]: ...

    async def count_trip_accommodations(self, trip_id: str) -> int: ...


class SharedLinkStore(Protocol):
    async def create_link(self, trip_id: str, token: str) -> Dict[str, Any]: ...

    async def get_link(self, token: str) -> Optional[Dict[str, Any]]: ...

    async def delete_link(self, token: str) -> bool: ...


__all__ = [
    "TripStore",
    "CurrencyStore",
    "UserStore",
    "CostSourceStore",
    "SharedLinkStore",
]
