"""Customer replacement handling for orders and returns filed under the wrong customer."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Optional

from ...config import settings
from ...models.domain import CustomerRecord, CustomerReplacement, DeliveryItem, DisplayIdentity, coerce_int

logger = logging.getLogger(__name__)


def _name_key(name: Optional[str]) -> str:
    return (name or "").strip().casefold()


def merge_customer_lists(
    primary: Iterable[CustomerRecord], secondary: Iterable[CustomerRecord] = ()
) -> dict[str, list[CustomerRecord]]:
    """Index customers by normalised name.

    Records of ``primary`` replace same-name, same-city records of ``secondary``.
    """

    merged: dict[str, dict[str, CustomerRecord]] = {}
    for source in (secondary, primary):
        for record in source:
            key = _name_key(record.customer_name)
            if not key:
                continue
            merged.setdefault(key, {})[_name_key(record.city)] = record
    return {key: list(by_city.values()) for key, by_city in merged.items()}


def find_customer(
    lookup: Mapping[str, list[CustomerRecord]], name: str, city: Optional[str]
) -> Optional[CustomerRecord]:
    candidates = lookup.get(_name_key(name)) or []
    if not candidates:
        return None
    if city:
        for record in candidates:
            if _name_key(record.city) == _name_key(city):
                return record
    return candidates[0]


def _message_order(message: dict) -> tuple[str, int]:
    return (str(message.get("created_at") or ""), coerce_int(message.get("messages_id")) or 0)


def build_replacement_map(
    messages: Iterable[dict],
    customers: Mapping[str, list[CustomerRecord]] | Iterable[CustomerRecord],
    subject: Optional[str] = None,
) -> dict[str, CustomerReplacement]:
    """Build ``{"order-<id>" | "return-<id>": CustomerReplacement}`` from staff messages.

    Only messages with the replacement subject and a non-empty
    ``correctcustomer`` are used. The newest message wins when several target
    the same item.
    """

    subject = subject if subject is not None else settings.replacement_subject
    lookup = customers if isinstance(customers, Mapping) else merge_customer_lists(customers)

    replacements: dict[str, CustomerReplacement] = {}
    relevant = [
        message
        for message in messages
        if message.get("subject") == subject and (message.get("correctcustomer") or "").strip()
    ]
    for message in sorted(relevant, key=_message_order):
        name = message["correctcustomer"].strip()
        city = (message.get("city") or "").strip() or None
        record = find_customer(lookup, name, city)
        replacement = CustomerReplacement(
            correct_customer_name=name,
            correct_city=city,
            exists_in_system=record is not None,
            resolved_customer=record,
        )
        keys = []
        if message.get("ordernumber") is not None:
            keys.append(f"order-{message['ordernumber']}")
        if message.get("returnnumber") is not None:
            keys.append(f"return-{message['returnnumber']}")
        if not keys:
            logger.debug(f"Replacement message {message.get('messages_id')} references no order or return")
        for key in keys:
            replacements[key] = replacement
    return replacements


def resolve_display_identity(
    item: DeliveryItem, replacement_map: Mapping[str, CustomerReplacement]
) -> DisplayIdentity:
    """Identity to display for ``item`` after applying a customer replacement.

    A replacement that matches a known customer shows that customer's current
    record. One that does not match shows only the corrected name and city;
    the original row's address and contact details are never carried over.
    """

    replacement = replacement_map.get(item.key)
    if replacement is None:
        return DisplayIdentity(
            customer_name=item.customer_name,
            address=item.address,
            city=item.city,
            customer_number=item.customer_number,
            contact_info=None,
        )

    record = replacement.resolved_customer
    if replacement.exists_in_system and record is not None:
        return DisplayIdentity(
            customer_name=record.customer_name or replacement.correct_customer_name,
            address=record.address or "",
            city=record.city or replacement.correct_city or item.city,
            customer_number=record.customer_number,
            contact_info=record.contact_info,
        )

    return DisplayIdentity(
        customer_name=replacement.correct_customer_name,
        address="",
        city=replacement.correct_city or item.city,
    )
