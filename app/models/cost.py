from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import COST_ITEM_CATEGORIES, CostSourceKind
from .currency import Currency


class CostRecord(BaseModel):
    """One normalized cost row produced by a cost source fetcher."""

    kind: CostSourceKind
    source_id: str
    label: str = "Unknown"
    amount: float = 0.0
    currency_id: Optional[str] = None
    # Fallback reference when only a code is stored (e.g. accommodation listings).
    currency_code: Optional[str] = None
    trip_stop_id: Optional[str] = None
    scheduled_date: Optional[date] = None
    category: Optional[str] = None


class ConvertedCostRecord(CostRecord):
    converted_amount: float
    original_currency: Optional[Currency] = None
    converted: bool = True

    @property
    def display_currency(self) -> str:
        """Original currency label, starred when the amount was not converted."""
        code = (
            self.original_currency.code
            if self.original_currency
            else (self.currency_code or self.currency_id or "?")
        )
        return code if self.converted else f"{code}*"


class CostItemIn(BaseModel):
    category: str
    amount: float = Field(..., gt=0)
    currency_id: Optional[str] = None
    trip_stop_id: Optional[str] = None

    @field_validator("category")
    @classmethod
    def valid_category(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in COST_ITEM_CATEGORIES:
            raise ValueError("unsupported category")
        return v


class CostItemOut(CostItemIn):
    model_config = ConfigDict(from_attributes=True)

    id: str
    trip_id: str
    created_at: datetime
