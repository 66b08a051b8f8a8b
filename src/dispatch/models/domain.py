"""Domain models for orders, returns, customers and schedules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

ItemKind = Literal["order", "return"]


def coerce_int(value: Any) -> Optional[int]:
    """Integer value of ints, integral floats and digit strings; ``None`` otherwise."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return int(text)
    return None


def _coerce_float(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(slots=True)
class DeliveryItem:
    """An order or a return as stored in ``mainorder`` / ``mainreturns``."""

    kind: ItemKind
    item_id: int
    customer_name: str
    city: str
    address: str
    total: float = 0.0
    primary_schedule_id: Optional[int] = None
    reassigned_schedule_ref: Any = None
    customer_number: Optional[str] = None
    agent_number: Optional[str] = None
    remark: Optional[str] = None
    raw: dict = field(default_factory=dict)

    @property
    def key(self) -> str:
        return f"{self.kind}-{self.item_id}"

    @classmethod
    def from_order_row(cls, row: dict) -> "DeliveryItem":
        return cls._from_row("order", row, id_field="ordernumber", total_field="totalorder")

    @classmethod
    def from_return_row(cls, row: dict) -> "DeliveryItem":
        return cls._from_row("return", row, id_field="returnnumber", total_field="totalreturn")

    @classmethod
    def _from_row(cls, kind: ItemKind, row: dict, *, id_field: str, total_field: str) -> "DeliveryItem":
        item_id = coerce_int(row.get(id_field))
        if item_id is None:
            raise ValueError(f"{kind} row is missing a valid '{id_field}': {row!r}")
        return cls(
            kind=kind,
            item_id=item_id,
            customer_name=(row.get("customername") or "").strip(),
            city=(row.get("city") or "").strip(),
            address=(row.get("address") or "").strip(),
            total=_coerce_float(row.get(total_field)),
            primary_schedule_id=coerce_int(row.get("schedule_id")),
            reassigned_schedule_ref=row.get("schedule_id_if_changed"),
            customer_number=_clean(row.get("customernumber")),
            agent_number=_clean(row.get("agentnumber")),
            remark=_clean(row.get("remark")),
            raw=dict(row),
        )


@dataclass(slots=True)
class CustomerRecord:
    """A row of the customer list."""

    customer_name: str
    city: Optional[str] = None
    address: Optional[str] = None
    customer_number: Optional[str] = None
    phone: Optional[str] = None
    mobile: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    @property
    def contact_info(self) -> Optional[str]:
        parts = [value for value in (self.phone, self.mobile) if value]
        return " / ".join(parts) if parts else None

    @classmethod
    def from_row(cls, row: dict) -> "CustomerRecord":
        lat = row.get("lat")
        lng = row.get("lng")
        return cls(
            customer_name=(row.get("customername") or "").strip(),
            city=_clean(row.get("city")),
            address=_clean(row.get("address")),
            customer_number=_clean(row.get("customernumber")),
            phone=_clean(row.get("phone")),
            mobile=_clean(row.get("mobile")),
            lat=float(lat) if lat is not None else None,
            lng=float(lng) if lng is not None else None,
        )


@dataclass(slots=True)
class CustomerReplacement:
    """Correction recorded by staff: the item belongs to a different customer."""

    correct_customer_name: str
    correct_city: Optional[str] = None
    exists_in_system: bool = False
    resolved_customer: Optional[CustomerRecord] = None


@dataclass(slots=True)
class DisplayIdentity:
    """Customer identity shown for an item after applying replacements."""

    customer_name: str
    address: str
    city: str
    customer_number: Optional[str] = None
    contact_info: Optional[str] = None


@dataclass(slots=True)
class Schedule:
    """A delivery run from ``distribution_schedule``."""

    schedule_id: int
    groups_id: Optional[int] = None
    driver_id: Optional[int] = None
    distribution_date: Optional[str] = None
    dis_number: Optional[int] = None
    is_pinned: bool = False
    done: bool = False

    @classmethod
    def from_row(cls, row: dict) -> "Schedule":
        schedule_id = coerce_int(row.get("schedule_id"))
        if schedule_id is None:
            raise ValueError(f"schedule row is missing a valid 'schedule_id': {row!r}")
        return cls(
            schedule_id=schedule_id,
            groups_id=coerce_int(row.get("groups_id")),
            driver_id=coerce_int(row.get("driver_id")),
            distribution_date=_clean(row.get("distribution_date")),
            dis_number=coerce_int(row.get("dis_number")),
            is_pinned=bool(row.get("isPinned")),
            done=row.get("done_schedule") is not None,
        )
