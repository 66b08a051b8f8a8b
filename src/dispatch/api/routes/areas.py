"""City to area lookup endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Path, Request, status

from ...data.area_cache import AreaLookupCache
from ...persistence.database import fetch_city_area
from ...schemas.schedules import AreaLookupResponse

router = APIRouter(prefix="/areas", tags=["areas"])


def _cache(request: Request) -> AreaLookupCache:
    return request.app.state.area_cache


@router.get("/{city}", response_model=AreaLookupResponse, status_code=status.HTTP_200_OK)
def get_city_area(request: Request, city: str = Path(..., min_length=1)) -> AreaLookupResponse:
    cache = _cache(request)
    area = cache.resolve_area(city, fetch_city_area)
    return AreaLookupResponse(city=city, area=area, cached_entries=len(cache))


@router.delete("/cache", status_code=status.HTTP_200_OK)
def clear_area_cache(request: Request) -> dict:
    cache = _cache(request)
    cleared = len(cache)
    cache.invalidate()
    return {"cleared": cleared}
