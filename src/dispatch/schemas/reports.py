"""Pydantic models for zone report endpoints."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel


class ZoneReportLineModel(BaseModel):
    type: Literal["order", "return", "returns-header"]
    index: Optional[int] = None
    item_id: Optional[int] = None
    customer_name: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    customer_number: Optional[str] = None
    contact_info: Optional[str] = None
    total: Optional[float] = None
    remark: Optional[str] = None
    replaced: bool = False
    modified: bool = False
    transferred: bool = False


class CustomerRefModel(BaseModel):
    customer_name: str
    city: str


class ZoneReportTotalsModel(BaseModel):
    total_orders_amount: float
    total_returns_amount: float
    net_total: float


class ZoneReportResponse(BaseModel):
    schedule_id: int
    zone_number: Optional[int] = None
    group_name: str
    driver_name: str
    distribution_date: Optional[str] = None
    lines: List[ZoneReportLineModel]
    fully_transferred_customers: List[CustomerRefModel]
    totals: ZoneReportTotalsModel
