import itertools

import pytest

from app.services.currency.converter import convert, format_amount, is_convertible
from app.services.money import format_percent, round2
from tests.fakes import ALL_CURRENCIES, EUR, GBP, JPY, USD


@pytest.mark.parametrize("amount", [0.0, 0.1 + 0.2, 19.999, 1234.5678])
def test_same_currency_returns_amount_unchanged(amount):
    assert convert(amount, EUR, EUR) == amount


def test_missing_side_returns_amount_unchanged():
    assert convert(42.123, None, USD) == 42.123
    assert convert(42.123, EUR, None) == 42.123
    assert not is_convertible(EUR, None)
    assert is_convertible(EUR, USD)


def test_pivot_through_usd():
    # 750 EUR at 0.92 EUR per USD
    assert convert(750, EUR, USD) == 815.22
    assert convert(100, USD, EUR) == 92.0
    assert convert(100, USD, JPY) == 14750.0
    assert convert(85, EUR, USD) == 92.39


def test_round_trip_stays_within_a_cent():
    # Towards the currency with more units per USD the first rounding step is
    # the finer one, so the round trip error stays within one cent.
    amounts = [1.0, 10.5, 99.99, 1234.56]
    for a, b in itertools.permutations(ALL_CURRENCIES, 2):
        if a.exchange_rate_to_usd > b.exchange_rate_to_usd:
            continue
        for amount in amounts:
            back = convert(convert(amount, a, b), b, a)
            assert abs(back - amount) <= 0.0101, (a.code, b.code, amount, back)


def test_rounding_is_half_up():
    assert round2(2.675) == 2.68
    assert round2(1.005) == 1.01
    assert format_percent(0.05) == "0.1%"
    assert format_percent(3.8406) == "3.8%"
    assert format_percent(50) == "50.0%"


def test_format_amount():
    assert format_amount(1234.5, USD) == "$1,234.50"
    assert format_amount(99.9, EUR) == "€99.90"
    assert format_amount(10, GBP) == "£10.00"
    assert format_amount(14750.4, JPY) == "¥14,750"
    assert format_amount(5, None) == "$5.00"
