from io import BytesIO

from openpyxl import load_workbook

from src.dispatch.models.domain import CustomerReplacement, DeliveryItem, Schedule
from src.dispatch.services.reports.zone_report import (
    build_zone_report,
    calculate_totals,
    combined_items,
    export_zone_report_xlsx,
    number_orders,
    sort_by_location_and_customer,
)


def _item(item_id: int, customer: str, city: str, total: float, primary=None, overlay=None, kind="order") -> DeliveryItem:
    return DeliveryItem(
        kind=kind,
        item_id=item_id,
        customer_name=customer,
        city=city,
        address=f"{customer} street",
        total=total,
        primary_schedule_id=primary,
        reassigned_schedule_ref=overlay,
    )


def test_sort_by_city_then_customer():
    items = [
        _item(1, "Levi", "Haifa", 10),
        _item(2, "Cohen", "Haifa", 10),
        _item(3, "Abu", "Tel Aviv", 10),
        _item(4, "Bar", "Akko", 10),
    ]
    assert [item.item_id for item in sort_by_location_and_customer(items)] == [4, 2, 1, 3]


def test_number_orders_counts_each_customer_once():
    orders = [
        _item(1, "Cohen", "Haifa", 10),
        _item(2, "Cohen", "Haifa", 20),
        _item(3, "Levi", "Haifa", 30),
        _item(4, "Cohen", "Akko", 30),
    ]
    assert [index for _, index in number_orders(orders)] == [1, None, 2, 3]


def test_combined_items_adds_returns_header_only_when_needed():
    numbered = number_orders([_item(1, "Cohen", "Haifa", 10)])
    assert [entry["type"] for entry in combined_items(numbered, [])] == ["order"]

    returns = [_item(5, "Levi", "Haifa", 4, kind="return"), _item(6, "Mor", "Haifa", 4, kind="return")]
    entries = combined_items(numbered, returns)
    assert [entry["type"] for entry in entries] == ["order", "returns-header", "return", "return"]
    assert [entry["index"] for entry in entries[2:]] == [1, 2]


def test_calculate_totals():
    orders = [_item(1, "Cohen", "Haifa", 100), _item(2, "Levi", "Haifa", 50.5)]
    returns = [_item(3, "Cohen", "Haifa", 20, kind="return")]
    assert calculate_totals(orders, returns) == {
        "total_orders_amount": 150.5,
        "total_returns_amount": 20,
        "net_total": 130.5,
    }


def test_build_zone_report_uses_membership_and_replacements():
    schedule = Schedule(schedule_id=10, groups_id=4, distribution_date="2024-05-01")
    orders = [
        _item(1, "Cohen", "Haifa", 100, primary=10),
        _item(2, "Cohen", "Haifa", 40, primary=3, overlay=10),
        _item(3, "Levi", "Akko", 60, primary=3, overlay=[10]),
        _item(4, "Elsewhere", "Haifa", 999, primary=7),
        _item(5, "Wrong Name", "Haifa", 30, primary=10),
    ]
    returns = [_item(8, "Levi", "Akko", 15, primary=3, overlay=10, kind="return")]
    replacements = {"order-5": CustomerReplacement(correct_customer_name="Right Name", correct_city="Haifa")}

    report = build_zone_report(schedule, orders, returns, replacements, group_name="Haifa 1", driver_name="Moshe")

    assert report["zone_number"] == 4
    order_lines = [line for line in report["lines"] if line["type"] == "order"]
    assert [line["item_id"] for line in order_lines] == [3, 1, 2, 5]
    assert [line["index"] for line in order_lines] == [1, 2, None, 3]

    replaced = next(line for line in order_lines if line["item_id"] == 5)
    assert replaced["customer_name"] == "Right Name"
    assert replaced["address"] == ""
    assert replaced["replaced"] is True

    transferred = next(line for line in order_lines if line["item_id"] == 2)
    assert transferred["modified"] is True
    assert transferred["transferred"] is True

    assert report["fully_transferred_customers"] == [{"customer_name": "Levi", "city": "Akko"}]
    assert report["totals"]["total_orders_amount"] == 230
    assert report["totals"]["net_total"] == 215


def test_export_zone_report_xlsx_roundtrips_through_openpyxl():
    schedule = Schedule(schedule_id=10, groups_id=2)
    report = build_zone_report(
        schedule,
        [_item(1, "Cohen", "Haifa", 100, primary=10)],
        [_item(2, "Levi", "Haifa", 25, primary=10, kind="return")],
        group_name="North",
        driver_name="Dana",
    )

    workbook = load_workbook(BytesIO(export_zone_report_xlsx(report)))
    sheet = workbook.active
    values = [cell for row in sheet.iter_rows(values_only=True) for cell in row if cell is not None]

    assert sheet.title == "Schedule 10"
    assert "Cohen" in values
    assert "Returns" in values
    assert 75 in values
