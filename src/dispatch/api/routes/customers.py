"""Customer lookup endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, status

from ...config import settings
from ...persistence.database import fetch_customers
from ...schemas.customers import NearbyCustomerModel
from ...services.geospatial import nearest_customers

router = APIRouter(prefix="/customers", tags=["customers"])


@router.get("/nearest", response_model=List[NearbyCustomerModel], status_code=status.HTTP_200_OK)
def get_nearest_customers(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    limit: int | None = Query(default=None, ge=1, le=50),
) -> List[NearbyCustomerModel]:
    records = [record for group in fetch_customers().values() for record in group]
    ranked = nearest_customers(lat, lng, records, limit=limit or settings.nearest_customers_limit)
    return [
        NearbyCustomerModel(
            customer_name=record.customer_name,
            city=record.city,
            address=record.address,
            lat=record.lat,
            lng=record.lng,
            distance_km=round(distance, 2),
        )
        for record, distance in ranked
    ]
