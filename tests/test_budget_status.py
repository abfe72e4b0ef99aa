import pytest

from app.models import TripHeader
from app.models.constants import BudgetStatus
from app.services.budget_status import classify, list_trip_budget_summaries, summarize_trip


@pytest.mark.parametrize(
    "budget, estimated, expected",
    [
        (None, 500.0, BudgetStatus.NO_BUDGET),
        (None, None, BudgetStatus.NO_BUDGET),
        (1000.0, 1000.0, BudgetStatus.WITHIN_BUDGET),
        (1000.0, 1000.01, BudgetStatus.OVER_BUDGET),
        (1000.0, None, BudgetStatus.WITHIN_BUDGET),
        (0.0, 0.0, BudgetStatus.WITHIN_BUDGET),
        (0.0, 5.0, BudgetStatus.OVER_BUDGET),
    ],
)
def test_classify(budget, estimated, expected):
    assert classify(budget, estimated) is expected


def test_summarize_trip_defaults():
    summary = summarize_trip({"id": 7, "name": None, "budget": None, "total_estimated_cost": None})
    assert summary.trip_id == "7"
    assert summary.trip_name == ""
    assert summary.currency == "USD"
    assert summary.status is BudgetStatus.NO_BUDGET


@pytest.mark.asyncio
async def test_summaries_only_for_owner(trips):
    trips.add_trip(TripHeader(id="a", name="Lisbon", budget=800.0, total_estimated_cost=900.0), "u1")
    trips.add_trip(TripHeader(id="b", name="Oslo"), "u1")
    trips.add_trip(TripHeader(id="c", name="Other", budget=1.0), "u2")

    summaries = await list_trip_budget_summaries(trips, "u1")

    assert [(s.trip_id, s.status) for s in summaries] == [
        ("b", BudgetStatus.NO_BUDGET),
        ("a", BudgetStatus.OVER_BUDGET),
    ]
