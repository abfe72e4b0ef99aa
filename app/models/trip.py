from __future__ import annotations

from datetime import date
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import BudgetCategory


class TripHeader(BaseModel):
    """Stored trip fields the budget engine reads."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str = ""
    budget: Optional[float] = None
    currency: str = "USD"
    total_estimated_cost: Optional[float] = None
    # Per-category allocations in the trip currency; absent categories are untracked.
    category_budgets: Dict[BudgetCategory, float] = Field(default_factory=dict)

    @field_validator("currency", mode="before")
    @classmethod
    def _default_currency(cls, value: Optional[str]) -> str:
        if not value or not str(value).strip():
            return "USD"
        return str(value).strip().upper()


class TripStop(BaseModel):
    id: str
    trip_id: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    city: Optional[str] = None


class TripBudgetUpdate(BaseModel):
    budget: Optional[float] = Field(None, ge=0)
    category_budgets: Optional[Dict[BudgetCategory, float]] = None

    @field_validator("category_budgets")
    @classmethod
    def _non_negative(
        cls, value: Optional[Dict[BudgetCategory, float]]
    ) -> Optional[Dict[BudgetCategory, float]]:
        if value is not None and any(v < 0 for v in value.values()):
            raise ValueError("category budgets cannot be negative")
        return value
