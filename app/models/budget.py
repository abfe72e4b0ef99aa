from __future__ import annotations

import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .constants import BudgetCategory, BudgetStatus, CostSourceKind
from .cost import ConvertedCostRecord
from .currency import Currency


class CategoryBreakdown(BaseModel):
    budgeted: float = 0.0
    estimated: float = 0.0

    @property
    def is_over(self) -> bool:
        return self.budgeted > 0 and self.estimated > self.budgeted


class DayBreakdown(BaseModel):
    day: int
    date: Optional[dt.date] = None
    city: str = "Unknown City"
    budgeted: float = 0.0
    estimated: float = 0.0


def _empty_categories() -> Dict[BudgetCategory, CategoryBreakdown]:
    return {c: CategoryBreakdown() for c in BudgetCategory}


def _empty_records() -> Dict[CostSourceKind, List[ConvertedCostRecord]]:
    return {k: [] for k in CostSourceKind}


class BudgetSnapshot(BaseModel):
    trip_id: str
    currency: Currency
    total_budget: Optional[float] = None
    trip_currency: str = "USD"
    budget_in_target: Optional[float] = None
    categories: Dict[BudgetCategory, CategoryBreakdown] = Field(
        default_factory=_empty_categories
    )
    per_day: List[DayBreakdown] = Field(default_factory=list)
    alerts: List[str] = Field(default_factory=list)
    total_estimated_cost: float = 0.0
    estimated_from_stored: bool = False
    records: Dict[CostSourceKind, List[ConvertedCostRecord]] = Field(
        default_factory=_empty_records
    )
    failed_sources: List[CostSourceKind] = Field(default_factory=list)


class TripBudgetSummary(BaseModel):
    trip_id: str
    trip_name: str
    budget: Optional[float] = None
    total_estimated_cost: Optional[float] = None
    currency: str = "USD"
    status: BudgetStatus
