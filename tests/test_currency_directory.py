import pytest

from app.core.errors import StoreError
from app.services.currency.cache import CurrencyCache
from app.services.currency.directory import CurrencyDirectory
from tests.fakes import EUR, USD


@pytest.fixture
def directory(currencies, users):
    return CurrencyDirectory(currencies, users, CurrencyCache())


@pytest.mark.asyncio
async def test_lookup_by_id_and_code(directory):
    assert await directory.get_by_id("cur_eur") == EUR
    assert await directory.get_by_code(" usd ") == USD
    assert await directory.get_by_id("cur_nope") is None
    assert await directory.get_by_code("XXX") is None


@pytest.mark.asyncio
async def test_lookup_failure_returns_none(directory, currencies):
    currencies.failing.update({"get_by_id", "get_by_code"})
    assert await directory.get_by_id("cur_eur") is None
    assert await directory.get_by_code("EUR") is None


@pytest.mark.asyncio
async def test_get_all_propagates_store_error(directory, currencies):
    currencies.failing.add("get_all")
    with pytest.raises(StoreError):
        await directory.get_all()


@pytest.mark.asyncio
async def test_user_currency_is_cached(directory, users):
    users.preferences["u1"] = "cur_eur"
    assert await directory.get_user_currency("u1") == EUR
    assert await directory.get_user_currency("u1") == EUR
    assert users.calls["get_preferred_currency_id"] == 1

    directory.clear_cache("u1")
    assert await directory.get_user_currency("u1") == EUR
    assert users.calls["get_preferred_currency_id"] == 2


@pytest.mark.asyncio
async def test_unresolved_preference_not_cached(directory, users):
    assert await directory.get_user_currency("nobody") is None
    assert await directory.get_user_currency("nobody") is None
    assert users.calls["get_preferred_currency_id"] == 2

    users.preferences["u2"] = "cur_missing"
    assert await directory.get_user_currency("u2") is None
    assert await directory.get_user_currency("u2") is None
    assert users.calls["get_preferred_currency_id"] == 4


@pytest.mark.asyncio
async def test_user_store_failure_resolves_to_none(directory, users):
    users.preferences["u1"] = "cur_eur"
    users.failing.add("get_preferred_currency_id")
    assert await directory.get_user_currency("u1") is None
    users.failing.clear()
    assert await directory.get_user_currency("u1") == EUR
