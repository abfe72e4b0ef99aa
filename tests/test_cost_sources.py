from datetime import date

import pytest

from app.core.errors import StoreError
from app.models import TripHeader, TripStop
from app.models.constants import CostSourceKind
from app.services.cost_sources import (
    AccommodationFetcher,
    ActivityFetcher,
    AdhocCostFetcher,
    TransportFetcher,
    default_fetchers,
    fetch_all_sources,
)


@pytest.fixture
def trip(trips):
    header = trips.add_trip(TripHeader(id="t1", name="Europe"))
    trips.stops["t1"] = [
        TripStop(id="s1", trip_id="t1", start_date=date(2025, 5, 12), city="Paris"),
        TripStop(id="s2", trip_id="t1", start_date=date(2025, 5, 15), city="Rome"),
    ]
    return header


def test_accommodation_nights():
    assert AccommodationFetcher.nights(date(2025, 5, 12), date(2025, 5, 15)) == 3
    assert AccommodationFetcher.nights(date(2025, 5, 12), date(2025, 5, 12)) == 1
    assert AccommodationFetcher.nights(None, date(2025, 5, 12)) == 1


@pytest.mark.asyncio
async def test_accommodation_normalization(costs, trip):
    costs.accommodations["t1"] = [
        {
            "id": "ta1",
            "trip_stop_id": "s1",
            "check_in_date": "2025-05-12",
            "check_out_date": "2025-05-15",
            "accommodation": {"name": "Hotel Lumière", "price_per_night": 250, "currency_id": "cur_eur"},
        },
        {"id": "ta2", "check_in_date": None, "check_out_date": None, "accommodation": None},
    ]
    result = await AccommodationFetcher(costs).fetch("t1")
    assert result.ok
    first, second = result.records
    assert first.amount == 750
    assert first.label == "Hotel Lumière"
    assert first.currency_id == "cur_eur"
    assert first.scheduled_date == date(2025, 5, 12)
    assert second.label == "Unknown"
    assert second.amount == 0
    assert second.currency_id is None


@pytest.mark.asyncio
async def test_transport_label_and_date(costs, trip):
    costs.transport["t1"] = [
        {
            "id": "tr1",
            "from_city": "Paris",
            "to_city": "Rome",
            "cost": "85.00",
            "currency_id": "cur_eur",
            "departure_time": "2025-05-15T08:30:00Z",
        },
        {"id": "tr2", "from_city": None, "to_city": "Rome", "cost": None},
    ]
    result = await TransportFetcher(costs).fetch("t1")
    first, second = result.records
    assert first.label == "Paris → Rome"
    assert first.amount == 85.0
    assert first.scheduled_date == date(2025, 5, 15)
    assert second.label == "Unknown → Rome"
    assert second.amount == 0.0


@pytest.mark.asyncio
async def test_activities_resolved_through_stops(costs, trips, trip):
    costs.activities = [
        {"id": "a1", "trip_stop_id": "s2", "scheduled_date": "2025-05-16",
         "activity": {"name": "Colosseum", "cost": 40, "currency_id": "cur_eur"}},
        {"id": "a2", "trip_stop_id": "other", "activity": {"name": "Elsewhere", "cost": 10}},
    ]
    result = await ActivityFetcher(costs, trips).fetch("t1")
    assert [r.label for r in result.records] == ["Colosseum"]
    assert costs.requested_stop_ids == [["s1", "s2"]]


@pytest.mark.asyncio
async def test_activities_without_stops_skip_the_store(costs, trips):
    trips.add_trip(TripHeader(id="empty"))
    result = await ActivityFetcher(costs, trips).fetch("empty")
    assert result.ok
    assert result.records == []
    assert "list_stop_activities" not in costs.calls


@pytest.mark.asyncio
async def test_adhoc_label_falls_back_to_category(costs, trip):
    costs.cost_items["t1"] = [
        {"id": "c1", "category": "meals", "amount": 30, "currency_id": "cur_usd",
         "trip_stop_id": "s1", "stop_city": "Paris", "created_at": "2025-05-12T19:00:00"},
        {"id": "c2", "category": "other", "amount": 12.5, "currency_id": None},
    ]
    result = await AdhocCostFetcher(costs).fetch("t1")
    first, second = result.records
    assert (first.label, first.category, first.trip_stop_id) == ("Paris", "meals", "s1")
    assert (second.label, second.category) == ("Other", "other")


@pytest.mark.asyncio
async def test_failure_is_captured_not_raised(costs, trip):
    costs.failing.add("list_trip_transport")
    result = await TransportFetcher(costs).fetch("t1")
    assert not result.ok
    assert isinstance(result.error, StoreError)
    assert result.records == []


@pytest.mark.asyncio
async def test_timeout_is_captured(costs, trip):
    costs.delays["list_cost_items"] = 1.0
    result = await AdhocCostFetcher(costs, timeout=0.05).fetch("t1")
    assert not result.ok
    assert result.kind is CostSourceKind.ADHOC


@pytest.mark.asyncio
async def test_fan_out_waits_for_every_branch(costs, trips, trip):
    costs.failing.add("list_trip_accommodations")
    costs.delays["list_trip_transport"] = 0.05
    costs.transport["t1"] = [{"id": "tr1", "from_city": "Paris", "to_city": "Rome", "cost": 650}]
    costs.cost_items["t1"] = [{"id": "c1", "category": "meals", "amount": 20}]

    results = await fetch_all_sources(default_fetchers(costs, trips, timeout=1.0), "t1")

    assert set(results) == set(CostSourceKind)
    assert not results[CostSourceKind.ACCOMMODATION].ok
    assert len(results[CostSourceKind.TRANSPORT].records) == 1
    assert results[CostSourceKind.ACTIVITY].records == []
    assert len(results[CostSourceKind.ADHOC].records) == 1
