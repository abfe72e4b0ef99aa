"""Money / rounding helpers.

Centralized so conversion, aggregation and alert text use identical
half-up rounding semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP

_CENT = Decimal("0.01")
_TENTH = Decimal("0.1")


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP))


def format_percent(value: float) -> str:
    """Render a percentage with exactly one decimal place (half-up)."""
    quantized = Decimal(str(value)).quantize(_TENTH, rounding=ROUND_HALF_UP)
    return f"{quantized}%"
