from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from .budget import BudgetSnapshot


class SharedLinkOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    token: str
    trip_id: str
    created_at: datetime


class SharedTripView(BaseModel):
    """Read-only public view of a trip addressed by share token."""

    token: str
    trip_id: str
    trip_name: str
    budget: BudgetSnapshot
