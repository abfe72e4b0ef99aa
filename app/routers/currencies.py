from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from starlette import status

from app.models import ConversionRequest, ConversionResult, Currency
from app.services.container import BudgetServices, get_services
from app.services.currency.converter import convert, format_amount, is_convertible

router = APIRouter(prefix="/currencies", tags=["currencies"])


@router.get("/", response_model=List[Currency], summary="List currencies")
async def list_currencies(services: BudgetServices = Depends(get_services)):
    return await services.directory.get_all()


@router.get(
    "/me",
    response_model=Currency,
    summary="Caller's preferred currency (default currency when unset)",
)
async def my_currency(
    x_user_id: Optional[str] = Header(None, description="Authenticated user id"),
    services: BudgetServices = Depends(get_services),
):
    return await services.aggregator.resolve_target_currency(x_user_id)


@router.delete(
    "/cache",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Clear cached user currencies (one user or all)",
)
async def clear_currency_cache(
    user_id: Optional[str] = Query(None, description="Clear only this user's entry"),
    services: BudgetServices = Depends(get_services),
):
    services.directory.clear_cache(user_id)


@router.post(
    "/convert",
    response_model=ConversionResult,
    summary="Convert an amount between two currency codes",
)
async def convert_amount(
    payload: ConversionRequest, services: BudgetServices = Depends(get_services)
):
    source = await services.directory.get_by_code(payload.from_code)
    target = await services.directory.get_by_code(payload.to_code)
    converted_amount = convert(payload.amount, source, target)
    converted = is_convertible(source, target)
    return ConversionResult(
        amount=payload.amount,
        from_code=payload.from_code,
        to_code=payload.to_code,
        converted_amount=converted_amount,
        converted=converted,
        formatted=format_amount(converted_amount, target if converted else source),
    )


@router.get("/{code}", response_model=Currency, summary="Get currency by ISO code")
async def get_currency(code: str, services: BudgetServices = Depends(get_services)):
    currency = await services.directory.get_by_code(code)
    if currency is None:
        raise HTTPException(status_code=404, detail="currency not found")
    return currency
