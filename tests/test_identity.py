from src.dispatch.models.domain import CustomerRecord, DeliveryItem, DisplayIdentity
from src.dispatch.services.scheduling.identity import (
    build_replacement_map,
    find_customer,
    merge_customer_lists,
    resolve_display_identity,
)

SUBJECT = "wrong customer"


def _item(item_id: int, kind: str = "order") -> DeliveryItem:
    return DeliveryItem(
        kind=kind,
        item_id=item_id,
        customer_name="Cohen",
        city="Haifa",
        address="Herzl 1",
        total=250.0,
        primary_schedule_id=10,
        customer_number="C-100",
    )


def _customer(name: str, city: str, address: str = "Main 5", number: str = "C-200") -> CustomerRecord:
    return CustomerRecord(
        customer_name=name,
        city=city,
        address=address,
        customer_number=number,
        phone="04-1234567",
        mobile="050-7654321",
        lat=32.8,
        lng=35.0,
    )


def _message(message_id: int, correct: str, city: str | None = None, **refs) -> dict:
    return {
        "messages_id": message_id,
        "subject": SUBJECT,
        "correctcustomer": correct,
        "city": city,
        "created_at": f"2024-01-0{message_id}T10:00:00+00:00",
        **refs,
    }


def test_unmapped_item_keeps_its_own_identity():
    item = _item(1)
    identity = resolve_display_identity(item, {})

    assert identity == DisplayIdentity(
        customer_name="Cohen",
        address="Herzl 1",
        city="Haifa",
        customer_number="C-100",
        contact_info=None,
    )


def test_replacement_with_known_customer_uses_current_record():
    customers = [_customer("Levi Market", "Haifa", address="Hanamal 3", number="C-555")]
    replacements = build_replacement_map([_message(1, "Levi Market", "Haifa", ordernumber=1)], customers, subject=SUBJECT)

    identity = resolve_display_identity(_item(1), replacements)

    assert replacements["order-1"].exists_in_system is True
    assert identity.customer_name == "Levi Market"
    assert identity.address == "Hanamal 3"
    assert identity.customer_number == "C-555"
    assert identity.contact_info == "04-1234567 / 050-7654321"


def test_replacement_with_unknown_customer_hides_original_details():
    replacements = build_replacement_map([_message(1, "New Kiosk", "Akko", ordernumber=1)], [], subject=SUBJECT)

    identity = resolve_display_identity(_item(1), replacements)

    assert replacements["order-1"].exists_in_system is False
    assert identity.customer_name == "New Kiosk"
    assert identity.city == "Akko"
    assert identity.address == ""
    assert identity.customer_number is None
    assert identity.contact_info is None


def test_unknown_replacement_without_city_falls_back_to_item_city():
    replacements = build_replacement_map([_message(1, "New Kiosk", ordernumber=1)], [], subject=SUBJECT)
    assert resolve_display_identity(_item(1), replacements).city == "Haifa"


def test_replacements_are_keyed_by_kind():
    messages = [_message(1, "Levi Market", returnnumber=7)]
    replacements = build_replacement_map(messages, [], subject=SUBJECT)

    assert set(replacements) == {"return-7"}
    assert resolve_display_identity(_item(7, kind="order"), replacements).customer_name == "Cohen"
    assert resolve_display_identity(_item(7, kind="return"), replacements).customer_name == "Levi Market"


def test_other_subjects_and_empty_corrections_are_ignored():
    messages = [
        {**_message(1, "Levi Market", ordernumber=1), "subject": "delivery note"},
        _message(2, "   ", ordernumber=2),
        _message(3, None, ordernumber=3),
    ]
    assert build_replacement_map(messages, [], subject=SUBJECT) == {}


def test_newest_message_wins():
    messages = [
        _message(2, "Second Choice", ordernumber=1),
        _message(1, "First Choice", ordernumber=1),
    ]
    replacements = build_replacement_map(messages, [], subject=SUBJECT)
    assert replacements["order-1"].correct_customer_name == "Second Choice"


def test_unreadable_message_ids_do_not_break_ordering():
    first = {**_message(1, "Old Shop", ordernumber=1), "created_at": None, "messages_id": "abc"}
    second = {**_message(2, "New Shop", ordernumber=1), "created_at": None, "messages_id": "5"}

    replacements = build_replacement_map([second, first], [], subject=SUBJECT)

    assert replacements["order-1"].correct_customer_name == "New Shop"


def test_customer_match_is_case_and_whitespace_insensitive_and_prefers_city():
    customers = [
        _customer("Levi Market", "Haifa", address="Haifa st"),
        _customer("Levi Market", "Akko", address="Akko st"),
    ]
    lookup = merge_customer_lists(customers)

    assert find_customer(lookup, "  levi market ", "Akko").address == "Akko st"
    assert find_customer(lookup, "LEVI MARKET", None).address == "Haifa st"
    assert find_customer(lookup, "Nobody", "Haifa") is None


def test_primary_customer_list_overrides_secondary():
    main = [_customer("Levi Market", "Haifa", address="from main")]
    candy = [
        _customer("Levi Market", "Haifa", address="from candy"),
        _customer("Sweet Spot", "Akko", address="candy only"),
    ]
    lookup = merge_customer_lists(main, candy)

    assert find_customer(lookup, "Levi Market", "Haifa").address == "from main"
    assert find_customer(lookup, "Sweet Spot", "Akko").address == "candy only"
