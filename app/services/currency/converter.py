"""Currency conversion through the USD pivot.

Convention (applied everywhere): ``exchange_rate_to_usd`` is units of the
currency per 1 USD, so ``amount / rate`` is the USD value and
``usd * rate`` leaves USD again.

Unresolved currencies never raise: the original amount is returned and the
caller labels the cost with its unconverted origin currency.
"""

from __future__ import annotations

from typing import Dict, Optional

from app.models import Currency
from app.services.money import round2

_ZERO_DECIMAL_CODES = {"JPY", "KRW"}

_SYMBOLS: Dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "C$",
    "AUD": "A$",
    "SGD": "S$",
    "HKD": "HK$",
    "INR": "₹",
    "KRW": "₩",
    "THB": "฿",
    "BRL": "R$",
    "PEN": "S/",
    "ZAR": "R",
}


def convert(
    amount: float,
    from_currency: Optional[Currency],
    to_currency: Optional[Currency],
) -> float:
    if from_currency is None or to_currency is None:
        return amount
    if from_currency.id == to_currency.id:
        return amount
    usd = amount / from_currency.exchange_rate_to_usd
    return round2(usd * to_currency.exchange_rate_to_usd)


def is_convertible(
    from_currency: Optional[Currency], to_currency: Optional[Currency]
) -> bool:
    return from_currency is not None and to_currency is not None


def format_amount(amount: float, currency: Optional[Currency]) -> str:
    if currency is None:
        return f"${amount:,.2f}"
    symbol = _SYMBOLS.get(currency.code) or currency.symbol or currency.code
    if currency.code in _ZERO_DECIMAL_CODES:
        return f"{symbol}{round(amount):,}"
    return f"{symbol}{amount:,.2f}"


__all__ = ["convert", "is_convertible", "format_amount"]
