import pytest

from tests.fakes import (
    FakeCostSourceStore,
    FakeCurrencyStore,
    FakeTripStore,
    FakeUserStore,
    build_services,
)


@pytest.fixture
def trips():
    return FakeTripStore()


@pytest.fixture
def currencies():
    return FakeCurrencyStore()


@pytest.fixture
def users():
    return FakeUserStore()


@pytest.fixture
def costs():
    return FakeCostSourceStore()


@pytest.fixture
def services(trips, currencies, users, costs):
    return build_services(trips=trips, currencies=currencies, users=users, costs=costs)
