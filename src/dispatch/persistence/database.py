"""Supabase access for orders, returns, schedules, messages and customers."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import CustomerRecord, DeliveryItem, ItemKind, Schedule
from ..services.scheduling.identity import merge_customer_lists
from ..services.scheduling.membership import return_to_distribution

logger = logging.getLogger(__name__)

PAGE_SIZE = 1000

ORDER_COLUMNS = (
    "ordernumber, customername, address, city, totalorder, schedule_id, schedule_id_if_changed, "
    "customernumber, agentnumber, orderdate, remark, return_reason"
)
RETURN_COLUMNS = (
    "returnnumber, customername, address, city, totalreturn, schedule_id, schedule_id_if_changed, "
    "customernumber, agentnumber, returndate, remark, return_reason"
)
CUSTOMER_COLUMNS = "customername, customernumber, city, address, phone, mobile, lat, lng"

_ITEM_TABLES: dict[str, tuple[str, str]] = {
    "order": ("mainorder", "ordernumber"),
    "return": ("mainreturns", "returnnumber"),
}


def _fetch_all(build_query: Callable[[], Any]) -> list[dict]:
    """Page through a query; PostgREST caps a single response at 1000 rows."""

    rows: list[dict] = []
    start = 0
    while True:
        response = build_query().range(start, start + PAGE_SIZE - 1).execute()
        batch = response.data or []
        rows.extend(batch)
        if len(batch) < PAGE_SIZE:
            return rows
        start += PAGE_SIZE


def _to_items(rows: list[dict], factory: Callable[[dict], DeliveryItem]) -> list[DeliveryItem]:
    items: list[DeliveryItem] = []
    for row in rows:
        try:
            items.append(factory(row))
        except ValueError as e:
            logger.warning(f"Skipping unreadable row: {e}")
    return items


def fetch_active_orders() -> list[DeliveryItem]:
    """Orders that are neither delivered nor cancelled."""

    supabase = get_supabase_client()
    if not supabase:
        return []
    try:
        rows = _fetch_all(
            lambda: supabase.table("mainorder")
            .select(ORDER_COLUMNS)
            .is_("done_mainorder", "null")
            .is_("ordercancel", "null")
            .order("ordernumber", desc=True)
        )
    except Exception as e:
        logger.error(f"Failed to load orders from database: {e}")
        return []
    return _to_items(rows, DeliveryItem.from_order_row)


def fetch_active_returns() -> list[DeliveryItem]:
    """Returns that are neither collected nor cancelled."""

    supabase = get_supabase_client()
    if not supabase:
        return []
    try:
        rows = _fetch_all(
            lambda: supabase.table("mainreturns")
            .select(RETURN_COLUMNS)
            .is_("done_return", "null")
            .is_("returncancel", "null")
            .order("returnnumber", desc=True)
        )
    except Exception as e:
        logger.error(f"Failed to load returns from database: {e}")
        return []
    return _to_items(rows, DeliveryItem.from_return_row)


def fetch_schedule(schedule_id: int) -> Optional[Schedule]:
    supabase = get_supabase_client()
    if not supabase:
        return None
    try:
        response = (
            supabase.table("distribution_schedule").select("*").eq("schedule_id", schedule_id).limit(1).execute()
        )
    except Exception as e:
        logger.error(f"Failed to load schedule {schedule_id}: {e}")
        return None
    rows = response.data or []
    return Schedule.from_row(rows[0]) if rows else None


def fetch_group_name(groups_id: Optional[int]) -> str:
    """Area label of a distribution group (``distribution_groups.separation``)."""

    supabase = get_supabase_client()
    if not supabase or groups_id is None:
        return ""
    try:
        response = (
            supabase.table("distribution_groups").select("separation").eq("groups_id", groups_id).limit(1).execute()
        )
    except Exception as e:
        logger.warning(f"Failed to load distribution group {groups_id}: {e}")
        return ""
    rows = response.data or []
    return (rows[0].get("separation") or "") if rows else ""


def fetch_driver_name(driver_id: Optional[int]) -> str:
    supabase = get_supabase_client()
    if not supabase or driver_id is None:
        return ""
    try:
        response = supabase.table("nahagim").select("nahag").eq("id", driver_id).limit(1).execute()
    except Exception as e:
        logger.warning(f"Failed to load driver {driver_id}: {e}")
        return ""
    rows = response.data or []
    return (rows[0].get("nahag") or "") if rows else ""


def fetch_replacement_messages(subject: Optional[str] = None) -> list[dict]:
    """Staff messages flagging an order/return as filed under the wrong customer."""

    supabase = get_supabase_client()
    if not supabase:
        return []
    subject = subject or settings.replacement_subject
    try:
        return _fetch_all(
            lambda: supabase.table("messages")
            .select("messages_id, subject, ordernumber, returnnumber, correctcustomer, city, created_at")
            .eq("subject", subject)
            .not_.is_("correctcustomer", "null")
            .order("messages_id")
        )
    except Exception as e:
        logger.error(f"Failed to load replacement messages: {e}")
        return []


def fetch_customers() -> dict[str, list[CustomerRecord]]:
    """Customer lookup built from ``customerlist`` over ``candycustomerlist``."""

    supabase = get_supabase_client()
    if not supabase:
        return {}

    def _load(table: str) -> list[CustomerRecord]:
        try:
            rows = _fetch_all(lambda: supabase.table(table).select(CUSTOMER_COLUMNS).order("customernumber"))
        except Exception as e:
            logger.error(f"Error fetching customers from {table}: {e}")
            return []
        return [CustomerRecord.from_row(row) for row in rows]

    main_customers = _load("customerlist")
    candy_customers = _load("candycustomerlist")
    logger.info(
        f"Loaded {len(main_customers)} customers from customerlist and {len(candy_customers)} from candycustomerlist"
    )
    return merge_customer_lists(main_customers, candy_customers)


def fetch_city_area(city: str) -> Optional[str]:
    supabase = get_supabase_client()
    if not supabase:
        return None
    try:
        response = supabase.table("cities").select("area").eq("city", city).limit(1).execute()
    except Exception as e:
        logger.warning(f"Failed to look up area for city '{city}': {e}")
        return None
    rows = response.data or []
    return (rows[0].get("area") or None) if rows else None


def apply_return_to_distribution(kind: ItemKind, item_id: int, reason: str) -> dict:
    """Move an archived order/return back to the unassigned pool.

    Raises:
        RuntimeError: Supabase is not configured.
        LookupError: no such order/return.
    """

    supabase = get_supabase_client()
    if not supabase:
        raise RuntimeError("Supabase not configured")

    table, id_field = _ITEM_TABLES[kind]
    response = (
        supabase.table(table)
        .select(f"{id_field}, customername, city, address, schedule_id, schedule_id_if_changed, return_reason")
        .eq(id_field, item_id)
        .limit(1)
        .execute()
    )
    rows = response.data or []
    if not rows:
        raise LookupError(f"{kind} {item_id} not found")

    row = rows[0]
    item = DeliveryItem.from_order_row(row) if kind == "order" else DeliveryItem.from_return_row(row)
    update = return_to_distribution(item, reason, responsible=settings.return_responsible)
    supabase.table(table).update(update).eq(id_field, item_id).execute()
    logger.info(
        f"Returned {kind} {item_id} to distribution (schedule history: {update['schedule_id_if_changed']})"
    )
    return update
