"""Budget status for the multi-trip summary list.

Classifies from each trip's stored budget and stored estimate as-is; no
recomputation or currency conversion happens here (see ``BudgetAggregator``
for the converted detail view).
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from app.models import TripBudgetSummary
from app.models.constants import BudgetStatus
from app.services.stores import TripStore


def classify(
    stored_budget: Optional[float], stored_estimated_cost: Optional[float]
) -> BudgetStatus:
    if stored_budget is None:
        return BudgetStatus.NO_BUDGET
    if stored_estimated_cost is not None and stored_estimated_cost > stored_budget:
        return BudgetStatus.OVER_BUDGET
    return BudgetStatus.WITHIN_BUDGET


def summarize_trip(row: Dict[str, Any]) -> TripBudgetSummary:
    budget = row.get("budget")
    estimated = row.get("total_estimated_cost")
    return TripBudgetSummary(
        trip_id=str(row["id"]),
        trip_name=row.get("name") or "",
        budget=budget,
        total_estimated_cost=estimated,
        currency=row.get("currency") or "USD",
        status=classify(budget, estimated),
    )


async def list_trip_budget_summaries(
    trip_store: TripStore, user_id: str
) -> List[TripBudgetSummary]:
    rows = await trip_store.list_trips(user_id)
    return [summarize_trip(r) for r in rows]


__all__ = ["classify", "summarize_trip", "list_trip_budget_summaries"]
