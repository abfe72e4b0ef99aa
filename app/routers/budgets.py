import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Path, status

from app.core.errors import StoreError
from app.models import (
    BudgetSnapshot,
    CostItemIn,
    CostItemOut,
    TripBudgetSummary,
    TripBudgetUpdate,
)
from app.services.budget_status import list_trip_budget_summaries
from app.services.container import BudgetServices, get_services

router = APIRouter(tags=["budgets"])
logger = logging.getLogger("app.budget")


@router.get(
    "/trips/{trip_id}/budget",
    response_model=BudgetSnapshot,
    summary="Budget breakdown for a trip in the caller's currency",
)
async def get_trip_budget(
    trip_id: str = Path(..., description="Trip identifier"),
    x_user_id: Optional[str] = Header(None, description="Authenticated user id"),
    services: BudgetServices = Depends(get_services),
):
    return await services.aggregator.compute_budget(trip_id, x_user_id)


@router.get(
    "/budgets/summary",
    response_model=List[TripBudgetSummary],
    summary="Budget status of every trip owned by the caller",
)
async def get_budget_summaries(
    x_user_id: str = Header(..., description="Authenticated user id"),
    services: BudgetServices = Depends(get_services),
):
    return await list_trip_budget_summaries(services.trips, x_user_id)


@router.put(
    "/trips/{trip_id}/budget",
    response_model=BudgetSnapshot,
    summary="Set the stored budget (and optional category allocations)",
)
async def update_trip_budget(
    payload: TripBudgetUpdate,
    trip_id: str = Path(..., description="Trip identifier"),
    x_user_id: Optional[str] = Header(None, description="Authenticated user id"),
    services: BudgetServices = Depends(get_services),
):
    budget = payload.budget
    if "budget" not in payload.model_fields_set:
        # Allocation-only update keeps the stored overall budget.
        budget = (await services.trips.get_trip_header(trip_id)).budget
    await services.trips.update_trip_budget(trip_id, budget, payload.category_budgets)
    return await services.aggregator.compute_budget(trip_id, x_user_id)


@router.post(
    "/trips/{trip_id}/cost-items",
    response_model=CostItemOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add an ad-hoc cost item",
)
async def add_cost_item(
    payload: CostItemIn,
    trip_id: str = Path(..., description="Trip identifier"),
    services: BudgetServices = Depends(get_services),
):
    # Fails with TripNotFoundError (404) for unknown or deleted trips.
    await services.trips.get_trip_header(trip_id)
    row = await services.costs.add_cost_item(trip_id, payload)
    return CostItemOut(**row)


@router.get(
    "/trips/{trip_id}/accommodations/count",
    summary="Number of accommodation bookings (0 when unavailable)",
)
async def count_accommodations(
    trip_id: str = Path(..., description="Trip identifier"),
    services: BudgetServices = Depends(get_services),
):
    try:
        count = await services.costs.count_trip_accommodations(trip_id)
    except StoreError:
        logger.exception("accommodation count unavailable", extra={"trip_id": trip_id})
        count = 0
    return {"trip_id": trip_id, "count": count}
