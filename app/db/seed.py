"""Seeding helpers for currency reference data.

``seed_currencies`` ensures the baseline currency rows exist. Rates are
units of currency per 1 USD. Existing rows are left untouched (an external
admin process owns rate updates) so this can be safely re-run.
"""

from __future__ import annotations
from pathlib import Path
import sqlite3
from typing import Iterable, Tuple

from .migrate import apply_migrations

# (id, code, name, symbol, exchange_rate_to_usd)
DEFAULT_CURRENCIES: Tuple[Tuple[str, str, str, str, float], ...] = (
    ("cur_usd", "USD", "US Dollar", "$", 1.0),
    ("cur_eur", "EUR", "Euro", "€", 0.92),
    ("cur_gbp", "GBP", "British Pound", "£", 0.79),
    ("cur_jpy", "JPY", "Japanese Yen", "¥", 147.5),
    ("cur_cad", "CAD", "Canadian Dollar", "C$", 1.34),
    ("cur_aud", "AUD", "Australian Dollar", "A$", 1.52),
    ("cur_chf", "CHF", "Swiss Franc", "CHF", 0.88),
    ("cur_inr", "INR", "Indian Rupee", "₹", 83.2),
    ("cur_sgd", "SGD", "Singapore Dollar", "S$", 1.35),
    ("cur_thb", "THB", "Thai Baht", "฿", 35.6),
)


def seed_currencies(
    db_path: Path,
    currencies: Iterable[Tuple[str, str, str, str, float]] = DEFAULT_CURRENCIES,
) -> None:
    apply_migrations(db_path)  # ensure tables exist
    with sqlite3.connect(db_path) as conn:
        cur = conn.cursor()
        for currency_id, code, name, symbol, rate in currencies:
            # Insert row if not present; never overwrite externally managed rates
            cur.execute(
                "INSERT OR IGNORE INTO currencies (id, code, name, symbol, exchange_rate_to_usd) "
                "VALUES (?, ?, ?, ?, ?)",
                (currency_id, code, name, symbol, float(rate)),
            )
        conn.commit()
