"""Cost source fetchers.

One fetcher per source kind (accommodation bookings, transport legs,
scheduled activities, ad-hoc cost items). Each fetcher queries the store,
normalizes joined rows into ``CostRecord`` and never raises: any store
error or timeout is captured in the returned ``FetchResult`` and the
records are left empty, so one failing source cannot block the others.

``fetch_all_sources`` is a join-all fan-out; every branch is awaited even
when another finishes (or fails) early.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
import logging
from typing import Any, Dict, List, Optional, Sequence

from app.models import CostRecord
from app.models.constants import CostSourceKind
from app.services.stores import CostSourceStore, TripStore

logger = logging.getLogger("app.sources")

UNKNOWN = "Unknown"


@dataclass
class FetchResult:
    kind: CostSourceKind
    records: List[CostRecord] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _as_float(value: Any) -> float:
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        # Accept both YYYY-MM-DD and full ISO timestamps.
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _as_id(value: Any) -> Optional[str]:
    return str(value) if value not in (None, "") else None


class CostSourceFetcher(ABC):
    kind: CostSourceKind

    def __init__(self, store: CostSourceStore, timeout: Optional[float] = None):
        self._store = store
        self._timeout = timeout

    @abstractmethod
    async def _load(self, trip_id: str) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def _normalize(self, row: Dict[str, Any]) -> CostRecord:
        raise NotImplementedError

    async def fetch(self, trip_id: str) -> FetchResult:
        try:
            rows = await asyncio.wait_for(self._load(trip_id), timeout=self._timeout)
            records = [self._normalize(r) for r in rows]
        except asyncio.CancelledError:
            raise
        except asyncio.TimeoutError as exc:
            logger.warning(
                "cost source timed out after %ss",
                self._timeout,
                extra={"trip_id": trip_id, "source": self.kind.value},
            )
            return FetchResult(kind=self.kind, error=exc)
        except Exception as exc:
            logger.exception(
                "cost source fetch failed",
                extra={"trip_id": trip_id, "source": self.kind.value},
            )
            return FetchResult(kind=self.kind, error=exc)
        logger.debug(
            "fetched %d records",
            len(records),
            extra={"trip_id": trip_id, "source": self.kind.value},
        )
        return FetchResult(kind=self.kind, records=records)


class AccommodationFetcher(CostSourceFetcher):
    """Bookings priced as ``price_per_night`` x nights (minimum one night)."""

    kind = CostSourceKind.ACCOMMODATION

    async def _load(self, trip_id: str) -> List[Dict[str, Any]]:
        return await self._store.list_trip_accommodations(trip_id)

    @staticmethod
    def nights(check_in: Optional[date], check_out: Optional[date]) -> int:
        if check_in is None or check_out is None:
            return 1
        return max((check_out - check_in).days, 1)

    def _normalize(self, row: Dict[str, Any]) -> CostRecord:
        acc = row.get("accommodation") or {}
        nights = self.nights(_as_date(row.get("check_in_date")), _as_date(row.get("check_out_date")))
        return CostRecord(
            kind=self.kind,
            source_id=str(row["id"]),
            label=acc.get("name") or UNKNOWN,
            amount=_as_float(acc.get("price_per_night")) * nights,
            currency_id=_as_id(acc.get("currency_id")),
            currency_code=acc.get("currency") or None,
            trip_stop_id=_as_id(row.get("trip_stop_id")),
            scheduled_date=_as_date(row.get("check_in_date")),
        )


class TransportFetcher(CostSourceFetcher):
    kind = CostSourceKind.TRANSPORT

    async def _load(self, trip_id: str) -> List[Dict[str, Any]]:
        return await self._store.list_trip_transport(trip_id)

    def _normalize(self, row: Dict[str, Any]) -> CostRecord:
        origin = row.get("from_city") or UNKNOWN
        destination = row.get("to_city") or UNKNOWN
        return CostRecord(
            kind=self.kind,
            source_id=str(row["id"]),
            label=f"{origin} → {destination}",
            amount=_as_float(row.get("cost")),
            currency_id=_as_id(row.get("currency_id")),
            scheduled_date=_as_date(row.get("departure_time")),
        )


class ActivityFetcher(CostSourceFetcher):
    """Scheduled activities, reached through the trip's stops."""

    kind = CostSourceKind.ACTIVITY

    def __init__(
        self,
        store: CostSourceStore,
        trip_store: TripStore,
        timeout: Optional[float] = None,
    ):
        super().__init__(store, timeout)
        self._trips = trip_store

    async def _load(self, trip_id: str) -> List[Dict[str, Any]]:
        stops = await self._trips.get_trip_stops(trip_id)
        stop_ids: Sequence[str] = [s.id for s in stops]
        if not stop_ids:
            return []
        return await self._store.list_stop_activities(stop_ids)

    def _normalize(self, row: Dict[str, Any]) -> CostRecord:
        activity = row.get("activity") or {}
        return CostRecord(
            kind=self.kind,
            source_id=str(row["id"]),
            label=activity.get("name") or UNKNOWN,
            amount=_as_float(activity.get("cost")),
            currency_id=_as_id(activity.get("currency_id")),
            trip_stop_id=_as_id(row.get("trip_stop_id")),
            scheduled_date=_as_date(row.get("scheduled_date")),
        )


class AdhocCostFetcher(CostSourceFetcher):
    kind = CostSourceKind.ADHOC

    async def _load(self, trip_id: str) -> List[Dict[str, Any]]:
        return await self._store.list_cost_items(trip_id)

    def _normalize(self, row: Dict[str, Any]) -> CostRecord:
        category = row.get("category") or "other"
        return CostRecord(
            kind=self.kind,
            source_id=str(row["id"]),
            label=row.get("stop_city") or category.title(),
            amount=_as_float(row.get("amount")),
            currency_id=_as_id(row.get("currency_id")),
            trip_stop_id=_as_id(row.get("trip_stop_id")),
            scheduled_date=_as_date(row.get("created_at")),
            category=category,
        )


def default_fetchers(
    store: CostSourceStore, trip_store: TripStore, timeout: Optional[float] = None
) -> List[CostSourceFetcher]:
    return [
        AccommodationFetcher(store, timeout),
        TransportFetcher(store, timeout),
        ActivityFetcher(store, trip_store, timeout),
        AdhocCostFetcher(store, timeout),
    ]


async def fetch_all_sources(
    fetchers: Sequence[CostSourceFetcher], trip_id: str
) -> Dict[CostSourceKind, FetchResult]:
    results = await asyncio.gather(*(f.fetch(trip_id) for f in fetchers))
    return {r.kind: r for r in results}


__all__ = [
    "FetchResult",
    "CostSourceFetcher",
    "AccommodationFetcher",
    "TransportFetcher",
    "ActivityFetcher",
    "AdhocCostFetcher",
    "default_fetchers",
    "fetch_all_sources",
]
