"""Domain enumerations shared by the budget engine and the API layer."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional


class CostSourceKind(str, Enum):
    ACCOMMODATION = "accommodation"
    TRANSPORT = "transport"
    ACTIVITY = "activity"
    ADHOC = "adhoc"


class BudgetCategory(str, Enum):
    TRANSPORT = "Transport"
    ACCOMMODATION = "Accommodation"
    ACTIVITIES = "Activities"
    FOOD_AND_DINING = "Food & Dining"
    OTHER = "Other"


class BudgetStatus(str, Enum):
    OVER_BUDGET = "over_budget"
    WITHIN_BUDGET = "within_budget"
    NO_BUDGET = "no_budget"


# Raw cost item categories as stored -> display category.
RAW_CATEGORY_MAP: Dict[str, BudgetCategory] = {
    "transport": BudgetCategory.TRANSPORT,
    "accommodation": BudgetCategory.ACCOMMODATION,
    "activities": BudgetCategory.ACTIVITIES,
    "meals": BudgetCategory.FOOD_AND_DINING,
    "food": BudgetCategory.FOOD_AND_DINING,
    "other": BudgetCategory.OTHER,
}

SOURCE_CATEGORY: Dict[CostSourceKind, BudgetCategory] = {
    CostSourceKind.ACCOMMODATION: BudgetCategory.ACCOMMODATION,
    CostSourceKind.TRANSPORT: BudgetCategory.TRANSPORT,
    CostSourceKind.ACTIVITY: BudgetCategory.ACTIVITIES,
}

COST_ITEM_CATEGORIES = ("transport", "accommodation", "activities", "meals", "other")


def map_category(raw: Optional[str]) -> BudgetCategory:
    if not raw:
        return BudgetCategory.OTHER
    return RAW_CATEGORY_MAP.get(raw.strip().lower(), BudgetCategory.OTHER)


def category_for(kind: CostSourceKind, raw_category: Optional[str] = None) -> BudgetCategory:
    if kind is CostSourceKind.ADHOC:
        return map_category(raw_category)
    return SOURCE_CATEGORY[kind]
