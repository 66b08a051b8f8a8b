"""Customer-facing API schemas."""

from __future__ import annotations

from pydantic import BaseModel


class NearbyCustomerModel(BaseModel):
    customer_name: str
    city: str | None = None
    address: str | None = None
    lat: float
    lng: float
    distance_km: float
