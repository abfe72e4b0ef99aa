"""Trip budget aggregation.

Builds a ``BudgetSnapshot`` for one trip in the requesting user's currency:

    1. load the trip header (missing -> TripNotFoundError)
    2. resolve the target currency (user preference, else the default code)
    3. load the currency set
    4. fan out to the four cost sources (join-all)
    5. convert every record through the USD pivot
    6. sum per category, 7. total, 8. per-day buckets, 9. alerts

Only steps 1 and 2 can fail the request. Everything downstream degrades to
empty collections and zeros, with the failure logged.

Stored budget amounts (overall and per category) are in the trip currency and
are converted to the target currency before any comparison.
"""

from __future__ import annotations

from datetime import date
import logging
from typing import Dict, Iterable, List, Optional, Sequence

from app.core.errors import CurrencyResolutionError, StoreError
from app.models import (
    BudgetSnapshot,
    CategoryBreakdown,
    ConvertedCostRecord,
    CostRecord,
    Currency,
    DayBreakdown,
    TripHeader,
    TripStop,
)
from app.models.constants import BudgetCategory, CostSourceKind, category_for
from app.services.cost_sources import CostSourceFetcher, FetchResult, fetch_all_sources
from app.services.currency.converter import convert
from app.services.currency.directory import CurrencyDirectory
from app.services.money import format_percent, round2
from app.services.stores import TripStore

logger = logging.getLogger("app.budget")


def overage_percent(estimated: float, budgeted: float) -> float:
    return (estimated - budgeted) / budgeted * 100


def build_alerts(
    total_estimated: float,
    budget: Optional[float],
    categories: Dict[BudgetCategory, CategoryBreakdown],
) -> List[str]:
    """Top-level overage alert plus one alert per overspent tracked category.

    Categories with ``budgeted == 0`` are untracked and never alert.
    """
    alerts: List[str] = []
    if budget is not None and budget > 0 and total_estimated > budget:
        pct = format_percent(overage_percent(total_estimated, budget))
        alerts.append(f"Trip is {pct} over budget")
    for category, data in categories.items():
        if data.is_over:
            pct = format_percent(overage_percent(data.estimated, data.budgeted))
            alerts.append(f"{category.value} spending is {pct} over budget")
    return alerts


def build_per_day(
    stops: Sequence[TripStop],
    adhoc: Iterable[ConvertedCostRecord],
    budget: Optional[float],
) -> List[DayBreakdown]:
    if not stops:
        return []
    daily_share = round2((budget or 0.0) / len(stops))
    by_stop: Dict[str, float] = {}
    for rec in adhoc:
        if rec.trip_stop_id:
            by_stop[rec.trip_stop_id] = by_stop.get(rec.trip_stop_id, 0.0) + rec.converted_amount
    ordered = sorted(stops, key=lambda s: (s.start_date is None, s.start_date or date.min))
    return [
        DayBreakdown(
            day=index + 1,
            date=stop.start_date,
            city=stop.city or "Unknown City",
            budgeted=daily_share,
            estimated=round2(by_stop.get(stop.id, 0.0)),
        )
        for index, stop in enumerate(ordered)
    ]


class BudgetAggregator:
    def __init__(
        self,
        trip_store: TripStore,
        directory: CurrencyDirectory,
        fetchers: Sequence[CostSourceFetcher],
        default_currency: str = "USD",
    ):
        self._trips = trip_store
        self._directory = directory
        self._fetchers = list(fetchers)
        self._default_currency = default_currency

    async def resolve_target_currency(self, user_id: Optional[str]) -> Currency:
        currency = await self._directory.get_user_currency(user_id) if user_id else None
        if currency is None:
            currency = await self._directory.get_by_code(self._default_currency)
        if currency is None:
            raise CurrencyResolutionError(user_id or "-", self._default_currency)
        return currency

    async def _load_currencies(self, trip_id: str) -> Dict[str, Currency]:
        try:
            return await self._directory.get_all_by_id()
        except StoreError:
            logger.exception(
                "currency set unavailable, costs stay unconverted",
                extra={"trip_id": trip_id},
            )
            return {}

    async def _load_stops(self, trip_id: str) -> List[TripStop]:
        try:
            return await self._trips.get_trip_stops(trip_id)
        except StoreError:
            logger.exception("trip stops unavailable", extra={"trip_id": trip_id})
            return []

    @staticmethod
    def _resolve_origin(
        record: CostRecord,
        by_id: Dict[str, Currency],
        by_code: Dict[str, Currency],
    ) -> Optional[Currency]:
        if record.currency_id and record.currency_id in by_id:
            return by_id[record.currency_id]
        if record.currency_code:
            return by_code.get(record.currency_code.strip().upper())
        return None

    def _convert_records(
        self,
        records: Iterable[CostRecord],
        target: Currency,
        by_id: Dict[str, Currency],
        by_code: Dict[str, Currency],
    ) -> List[ConvertedCostRecord]:
        converted: List[ConvertedCostRecord] = []
        for rec in records:
            origin = self._resolve_origin(rec, by_id, by_code)
            converted.append(
                ConvertedCostRecord(
                    **rec.model_dump(),
                    converted_amount=convert(rec.amount, origin, target),
                    original_currency=origin,
                    converted=origin is not None,
                )
            )
        return converted

    async def compute_budget(
        self, trip_id: str, user_id: Optional[str], target: Optional[Currency] = None
    ) -> BudgetSnapshot:
        header: TripHeader = await self._trips.get_trip_header(trip_id)
        if target is None:
            target = await self.resolve_target_currency(user_id)
        by_id = await self._load_currencies(trip_id)
        by_code = {c.code: c for c in by_id.values()}
        trip_currency = by_code.get(header.currency)

        results: Dict[CostSourceKind, FetchResult] = await fetch_all_sources(
            self._fetchers, trip_id
        )
        stops = await self._load_stops(trip_id)

        records: Dict[CostSourceKind, List[ConvertedCostRecord]] = {k: [] for k in CostSourceKind}
        failed: List[CostSourceKind] = []
        for kind, result in results.items():
            if not result.ok:
                failed.append(kind)
                continue
            records[kind] = self._convert_records(result.records, target, by_id, by_code)

        categories = {c: CategoryBreakdown() for c in BudgetCategory}
        for allocation_category, amount in header.category_budgets.items():
            categories[allocation_category].budgeted = convert(amount, trip_currency, target)
        totals: Dict[BudgetCategory, float] = {c: 0.0 for c in BudgetCategory}
        for kind, recs in records.items():
            for rec in recs:
                totals[category_for(kind, rec.category)] += rec.converted_amount
        for category, total in totals.items():
            categories[category].estimated = round2(total)

        total_estimated = round2(sum(totals.values()))
        from_stored = False
        if total_estimated == 0 and header.total_estimated_cost:
            total_estimated = convert(header.total_estimated_cost, trip_currency, target)
            from_stored = True

        budget_in_target = (
            convert(header.budget, trip_currency, target) if header.budget is not None else None
        )
        if trip_currency is None and header.budget is not None:
            logger.warning(
                "trip currency unresolved, budget compared unconverted",
                extra={"trip_id": trip_id, "currency": header.currency},
            )

        snapshot = BudgetSnapshot(
            trip_id=trip_id,
            currency=target,
            total_budget=header.budget,
            trip_currency=header.currency,
            budget_in_target=budget_in_target,
            categories=categories,
            per_day=build_per_day(stops, records[CostSourceKind.ADHOC], budget_in_target),
            alerts=build_alerts(total_estimated, budget_in_target, categories),
            total_estimated_cost=total_estimated,
            estimated_from_stored=from_stored,
            records=records,
            failed_sources=sorted(failed, key=lambda k: k.value),
        )
        logger.info(
            "budget computed total=%s alerts=%d failed_sources=%d",
            total_estimated,
            len(snapshot.alerts),
            len(failed),
            extra={"trip_id": trip_id, "currency": target.code},
        )
        return snapshot


__all__ = ["BudgetAggregator", "build_alerts", "build_per_day", "overage_percent"]
