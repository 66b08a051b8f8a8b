"""Zone report assembly: ordered, numbered item lists per distribution schedule."""

from __future__ import annotations

from io import BytesIO
from typing import Any, Iterable, Mapping, Optional, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font

from ...models.domain import CustomerReplacement, DeliveryItem, Schedule
from ..scheduling.identity import resolve_display_identity
from ..scheduling.membership import (
    all_items_transferred_for_customer,
    is_modified,
    is_transferred_into,
    items_for_schedule,
)


def sort_by_location_and_customer(items: Iterable[DeliveryItem]) -> list[DeliveryItem]:
    return sorted(items, key=lambda item: (item.city.casefold(), item.customer_name.casefold()))


def number_orders(sorted_orders: Sequence[DeliveryItem]) -> list[tuple[DeliveryItem, Optional[int]]]:
    """Give the first order of each (customer, city) a running display index."""

    seen: set[tuple[str, str]] = set()
    numbered: list[tuple[DeliveryItem, Optional[int]]] = []
    counter = 0
    for order in sorted_orders:
        key = (order.customer_name, order.city)
        if key in seen:
            numbered.append((order, None))
            continue
        seen.add(key)
        counter += 1
        numbered.append((order, counter))
    return numbered


def combined_items(
    numbered_orders: Sequence[tuple[DeliveryItem, Optional[int]]],
    sorted_returns: Sequence[DeliveryItem],
) -> list[dict[str, Any]]:
    """Orders first, then a returns header and the returns numbered from 1."""

    combined: list[dict[str, Any]] = [
        {"type": "order", "item": order, "index": index} for order, index in numbered_orders
    ]
    if sorted_returns:
        combined.append({"type": "returns-header", "item": None, "index": None})
        combined.extend(
            {"type": "return", "item": item, "index": position}
            for position, item in enumerate(sorted_returns, start=1)
        )
    return combined


def calculate_totals(orders: Iterable[DeliveryItem], returns: Iterable[DeliveryItem]) -> dict[str, float]:
    total_orders = sum(order.total for order in orders)
    total_returns = sum(item.total for item in returns)
    return {
        "total_orders_amount": total_orders,
        "total_returns_amount": total_returns,
        "net_total": total_orders - total_returns,
    }


def _line(
    entry: dict[str, Any],
    schedule_id: int,
    replacement_map: Mapping[str, CustomerReplacement],
) -> dict[str, Any]:
    item: Optional[DeliveryItem] = entry["item"]
    if item is None:
        return {"type": entry["type"], "index": None}
    identity = resolve_display_identity(item, replacement_map)
    return {
        "type": entry["type"],
        "index": entry["index"],
        "item_id": item.item_id,
        "customer_name": identity.customer_name,
        "city": identity.city,
        "address": identity.address,
        "customer_number": identity.customer_number,
        "contact_info": identity.contact_info,
        "total": item.total,
        "remark": item.remark,
        "replaced": item.key in replacement_map,
        "modified": is_modified(item),
        "transferred": is_transferred_into(item, schedule_id),
    }


def build_zone_report(
    schedule: Schedule,
    orders: Iterable[DeliveryItem],
    returns: Iterable[DeliveryItem],
    replacement_map: Mapping[str, CustomerReplacement] | None = None,
    *,
    group_name: str = "",
    driver_name: str = "",
    zone_number: Optional[int] = None,
) -> dict[str, Any]:
    """Assemble the printable report for one schedule.

    Items are selected by schedule membership, so orders and returns moved
    onto the schedule are listed alongside the ones filed there originally.
    """

    replacement_map = replacement_map or {}
    schedule_id = schedule.schedule_id
    all_orders = list(orders)
    all_returns = list(returns)
    schedule_orders = sort_by_location_and_customer(items_for_schedule(all_orders, schedule_id))
    schedule_returns = sort_by_location_and_customer(items_for_schedule(all_returns, schedule_id))

    entries = combined_items(number_orders(schedule_orders), schedule_returns)
    lines = [_line(entry, schedule_id, replacement_map) for entry in entries]

    customers = sorted({(item.customer_name, item.city) for item in (*schedule_orders, *schedule_returns)})
    fully_transferred = [
        {"customer_name": name, "city": city}
        for name, city in customers
        if all_items_transferred_for_customer(name, city, all_orders, all_returns, schedule_id)
    ]

    return {
        "schedule_id": schedule_id,
        "zone_number": zone_number if zone_number is not None else schedule.groups_id,
        "group_name": group_name,
        "driver_name": driver_name,
        "distribution_date": schedule.distribution_date,
        "lines": lines,
        "fully_transferred_customers": fully_transferred,
        "totals": calculate_totals(schedule_orders, schedule_returns),
    }


def export_zone_report_xlsx(report: Mapping[str, Any]) -> bytes:
    """Render a zone report produced by :func:`build_zone_report` as an XLSX workbook."""

    workbook = Workbook()
    sheet = workbook.active
    sheet.title = f"Schedule {report['schedule_id']}"
    sheet.sheet_view.rightToLeft = True

    sheet.append(["Zone", report.get("zone_number"), "Group", report.get("group_name"), "Driver", report.get("driver_name")])
    sheet.append([])
    header = ["#", "Type", "Number", "Customer", "City", "Address", "Total", "Transferred", "Remark"]
    sheet.append(header)
    for cell in sheet[sheet.max_row]:
        cell.font = Font(bold=True)

    for line in report["lines"]:
        if line["type"] == "returns-header":
            sheet.append([])
            sheet.append(["Returns"])
            sheet.cell(row=sheet.max_row, column=1).font = Font(bold=True)
            continue
        sheet.append(
            [
                line.get("index"),
                line["type"],
                line.get("item_id"),
                line.get("customer_name"),
                line.get("city"),
                line.get("address"),
                line.get("total"),
                "yes" if line.get("transferred") else "",
                line.get("remark") or "",
            ]
        )

    totals = report["totals"]
    sheet.append([])
    sheet.append(["Orders total", totals["total_orders_amount"]])
    sheet.append(["Returns total", totals["total_returns_amount"]])
    sheet.append(["Net total", totals["net_total"]])

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
