"""Pydantic response models for schedule endpoints."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class ScheduleItemModel(BaseModel):
    kind: Literal["order", "return"]
    item_id: int
    customer_name: str
    city: str
    address: str
    customer_number: Optional[str] = None
    contact_info: Optional[str] = None
    total: float
    primary_schedule_id: Optional[int] = None
    schedule_ids: List[int]
    replaced: bool = False
    modified: bool = False
    transferred: bool = False


class ScheduleItemsResponse(BaseModel):
    schedule_id: int
    orders: List[ScheduleItemModel]
    returns: List[ScheduleItemModel]
    malformed_overlay_entries: int = 0


class UnassignedItemsResponse(BaseModel):
    orders: List[ScheduleItemModel]
    returns: List[ScheduleItemModel]


class ScheduleCustomerModel(BaseModel):
    customer_name: str
    city: str
    orders: int
    returns: int
    all_transferred: bool


class RouteStopModel(BaseModel):
    position: int
    customer_name: str
    city: Optional[str] = None
    address: Optional[str] = None
    lat: float
    lng: float


class ReturnToDistributionRequest(BaseModel):
    reason: str = Field(..., min_length=1, description="Why the item is sent back to distribution.")


class ReturnToDistributionResponse(BaseModel):
    kind: Literal["order", "return"]
    item_id: int
    schedule_history: List[int]
    return_reason: List[dict]


class AreaLookupResponse(BaseModel):
    city: str
    area: Optional[str] = None
    cached_entries: int
