import secrets

from fastapi import APIRouter, Depends, HTTPException, Path
from starlette import status

from app.models import SharedLinkOut, SharedTripView
from app.services.container import BudgetServices, get_services

router = APIRouter(tags=["sharing"])


@router.post(
    "/trips/{trip_id}/share",
    response_model=SharedLinkOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a read-only share link for a trip",
)
async def create_share_link(
    trip_id: str = Path(..., description="Trip identifier"),
    services: BudgetServices = Depends(get_services),
):
    await services.trips.get_trip_header(trip_id)
    token = secrets.token_urlsafe(services.settings.share_token_bytes)
    row = await services.links.create_link(trip_id, token)
    return SharedLinkOut(**row)


@router.get(
    "/shared/{token}",
    response_model=SharedTripView,
    summary="Read-only trip budget addressed by share token",
)
async def view_shared_trip(token: str, services: BudgetServices = Depends(get_services)):
    link = await services.links.get_link(token)
    if link is None:
        raise HTTPException(status_code=404, detail="share link not found")
    trip_id = str(link["trip_id"])
    header = await services.trips.get_trip_header(trip_id)
    # Viewers are anonymous: show the trip in its own currency.
    target = await services.directory.get_by_code(header.currency)
    budget = await services.aggregator.compute_budget(trip_id, None, target=target)
    return SharedTripView(token=token, trip_id=trip_id, trip_name=header.name, budget=budget)


@router.delete(
    "/shared/{token}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke a share link",
)
async def revoke_share_link(token: str, services: BudgetServices = Depends(get_services)):
    if not await services.links.delete_link(token):
        raise HTTPException(status_code=404, detail="share link not found")
