"""In-memory store doubles with failure and latency injection."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Mapping, Optional, Sequence

from app.core.config import Settings
from app.core.errors import StoreError, TripNotFoundError
from app.models import CostItemIn, Currency, TripHeader, TripStop
from app.models.constants import BudgetCategory
from app.services.container import BudgetServices
from app.services.currency.cache import CurrencyCache

USD = Currency(id="cur_usd", code="USD", name="US Dollar", symbol="$", exchange_rate_to_usd=1.0)
EUR = Currency(id="cur_eur", code="EUR", name="Euro", symbol="€", exchange_rate_to_usd=0.92)
GBP = Currency(id="cur_gbp", code="GBP", name="British Pound", symbol="£", exchange_rate_to_usd=0.79)
JPY = Currency(id="cur_jpy", code="JPY", name="Japanese Yen", symbol="¥", exchange_rate_to_usd=147.5)

ALL_CURRENCIES = [USD, EUR, GBP, JPY]


class _Faulty:
    """Mixin: methods named in ``failing`` raise StoreError, ``delays`` sleep first."""

    def __init__(self) -> None:
        self.failing: set = set()
        self.delays: Dict[str, float] = {}
        self.calls: Dict[str, int] = {}

    async def _enter(self, name: str) -> None:
        self.calls[name] = self.calls.get(name, 0) + 1
        delay = self.delays.get(name)
        if delay:
            await asyncio.sleep(delay)
        if name in self.failing:
            raise StoreError(f"{name} unavailable")


class FakeTripStore(_Faulty):
    def __init__(self) -> None:
        super().__init__()
        self.headers: Dict[str, TripHeader] = {}
        self.stops: Dict[str, List[TripStop]] = {}
        self.owners: Dict[str, str] = {}

    def add_trip(self, header: TripHeader, user_id: str = "user-1") -> TripHeader:
        self.headers[header.id] = header
        self.owners[header.id] = user_id
        return header

    async def get_trip_header(self, trip_id: str) -> TripHeader:
        await self._enter("get_trip_header")
        if trip_id not in self.headers:
            raise TripNotFoundError(trip_id)
        return self.headers[trip_id]

    async def get_trip_stops(self, trip_id: str) -> List[TripStop]:
        await self._enter("get_trip_stops")
        return list(self.stops.get(trip_id, []))

    async def list_trips(self, user_id: str) -> List[Dict[str, Any]]:
        await self._enter("list_trips")
        return [
            {
                "id": h.id,
                "name": h.name,
                "budget": h.budget,
                "total_estimated_cost": h.total_estimated_cost,
                "currency": h.currency,
            }
            for h in reversed(list(self.headers.values()))
            if self.owners.get(h.id) == user_id
        ]

    async def update_trip_budget(
        self,
        trip_id: str,
        budget: Optional[float],
        category_budgets: Optional[Mapping[BudgetCategory, float]] = None,
    ) -> None:
        await self._enter("update_trip_budget")
        header = self.headers.get(trip_id)
        if header is None:
            raise TripNotFoundError(trip_id)
        update: Dict[str, Any] = {"budget": budget}
        if category_budgets is not None:
            update["category_budgets"] = dict(category_budgets)
        self.headers[trip_id] = header.model_copy(update=update)


class FakeCurrencyStore(_Faulty):
    def __init__(self, currencies: Sequence[Currency] = ALL_CURRENCIES) -> None:
        super().__init__()
        self.currencies = list(currencies)

    async def get_all(self) -> List[Currency]:
        await self._enter("get_all")
        return list(self.currencies)

    async def get_by_id(self, currency_id: str) -> Optional[Currency]:
        await self._enter("get_by_id")
        return next((c for c in self.currencies if c.id == currency_id), None)

    async def get_by_code(self, code: str) -> Optional[Currency]:
        await self._enter("get_by_code")
        return next((c for c in self.currencies if c.code == code), None)


class FakeUserStore(_Faulty):
    def __init__(self, preferences: Optional[Dict[str, str]] = None) -> None:
        super().__init__()
        self.preferences = dict(preferences or {})

    async def get_preferred_currency_id(self, user_id: str) -> Optional[str]:
        await self._enter("get_preferred_currency_id")
        return self.preferences.get(user_id)


class FakeCostSourceStore(_Faulty):
    def __init__(self) -> None:
        super().__init__()
        self.accommodations: Dict[str, List[Dict[str, Any]]] = {}
        self.transport: Dict[str, List[Dict[str, Any]]] = {}
        self.activities: List[Dict[str, Any]] = []
        self.cost_items: Dict[str, List[Dict[str, Any]]] = {}
        self.requested_stop_ids: List[List[str]] = []

    async def list_trip_accommodations(self, trip_id: str) -> List[Dict[str, Any]]:
        await self._enter("list_trip_accommodations")
        return list(self.accommodations.get(trip_id, []))

    async def list_trip_transport(self, trip_id: str) -> List[Dict[str, Any]]:
        await self._enter("list_trip_transport")
        return list(self.transport.get(trip_id, []))

    async def list_stop_activities(self, stop_ids: Sequence[str]) -> List[Dict[str, Any]]:
        await self._enter("list_stop_activities")
        self.requested_stop_ids.append(list(stop_ids))
        return [a for a in self.activities if a.get("trip_stop_id") in stop_ids]

    async def list_cost_items(self, trip_id: str) -> List[Dict[str, Any]]:
        await self._enter("list_cost_items")
        return list(self.cost_items.get(trip_id, []))

    async def add_cost_item(self, trip_id: str, item: CostItemIn) -> Dict[str, Any]:
        await self._enter("add_cost_item")
        row = {
            "id": f"ci-{len(self.cost_items.get(trip_id, [])) + 1}",
            "trip_id": trip_id,
            "created_at": "2025-05-01T10:00:00Z",
            **item.model_dump(),
        }
        self.cost_items.setdefault(trip_id, []).append(row)
        return row

    async def count_trip_accommodations(self, trip_id: str) -> int:
        await self._enter("count_trip_accommodations")
        return len(self.accommodations.get(trip_id, []))


class FakeSharedLinkStore(_Faulty):
    def __init__(self) -> None:
        super().__init__()
        self.links: Dict[str, Dict[str, Any]] = {}

    async def create_link(self, trip_id: str, token: str) -> Dict[str, Any]:
        await self._enter("create_link")
        row = {"token": token, "trip_id": trip_id, "created_at": "2025-05-01T10:00:00Z"}
        self.links[token] = row
        return row

    async def get_link(self, token: str) -> Optional[Dict[str, Any]]:
        await self._enter("get_link")
        return self.links.get(token)

    async def delete_link(self, token: str) -> bool:
        await self._enter("delete_link")
        return self.links.pop(token, None) is not None


def build_services(
    trips: Optional[FakeTripStore] = None,
    currencies: Optional[FakeCurrencyStore] = None,
    users: Optional[FakeUserStore] = None,
    costs: Optional[FakeCostSourceStore] = None,
    cache: Optional[CurrencyCache] = None,
    fetch_timeout_seconds: float = 1.0,
) -> BudgetServices:
    settings = Settings(db_path="unused.sqlite3", fetch_timeout_seconds=fetch_timeout_seconds)
    return BudgetServices(
        settings=settings,
        trips=trips or FakeTripStore(),
        currencies=currencies or FakeCurrencyStore(),
        users=users or FakeUserStore(),
        costs=costs or FakeCostSourceStore(),
        links=FakeSharedLinkStore(),
        cache=cache or CurrencyCache(),
    )
