"""Pydantic domain models for the trip budget service."""

from .constants import (
    BudgetCategory,
    BudgetStatus,
    CostSourceKind,
    map_category,
)  # re-export
from .currency import Currency, ConversionRequest, ConversionResult
from .cost import CostRecord, ConvertedCostRecord, CostItemIn, CostItemOut
from .trip import TripHeader, TripStop, TripBudgetUpdate
from .budget import BudgetSnapshot, CategoryBreakdown, DayBreakdown, TripBudgetSummary
from .share import SharedLinkOut, SharedTripView

__all__ = [
    "BudgetCategory",
    "BudgetStatus",
    "CostSourceKind",
    "map_category",
    "Currency",
    "ConversionRequest",
    "ConversionResult",
    "CostRecord",
    "ConvertedCostRecord",
    "CostItemIn",
    "CostItemOut",
    "TripHeader",
    "TripStop",
    "TripBudgetUpdate",
    "BudgetSnapshot",
    "CategoryBreakdown",
    "DayBreakdown",
    "TripBudgetSummary",
    "SharedLinkOut",
    "SharedTripView",
]
