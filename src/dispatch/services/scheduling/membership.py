"""Schedule membership resolution for orders and returns.

An item is filed under a primary schedule (``schedule_id``) and may carry an
overlay (``schedule_id_if_changed``) recording the schedules staff moved it to.
The overlay column has been written in several shapes over time: a bare
number, an object with a ``schedule_id`` key, or a list of either. It is
normalised once into a :class:`ScheduleOverlay` and everything downstream
works on plain sets of schedule ids.

None of the functions here raise on malformed data. Unusable overlay
entries are skipped and, when a :class:`OverlayDiagnostics` instance is
passed in, counted.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Union

from ...models.domain import DeliveryItem, coerce_int

logger = logging.getLogger(__name__)

_OBJECT_KEYS = ("schedule_id", "scheduleId")


@dataclass(slots=True)
class OverlayDiagnostics:
    """Counts overlay entries that were skipped because of their shape."""

    malformed_entries: int = 0
    samples: list[Any] = field(default_factory=list)
    max_samples: int = 10

    def record(self, value: Any) -> None:
        self.malformed_entries += 1
        if len(self.samples) < self.max_samples:
            self.samples.append(value)

    def reset(self) -> None:
        self.malformed_entries = 0
        self.samples.clear()


@dataclass(frozen=True, slots=True)
class NoOverlay:
    pass


@dataclass(frozen=True, slots=True)
class SingleOverlay:
    schedule_id: int


@dataclass(frozen=True, slots=True)
class ManyOverlay:
    schedule_ids: tuple[int, ...]


ScheduleOverlay = Union[NoOverlay, SingleOverlay, ManyOverlay]


def _element_schedule_id(value: Any) -> Optional[int]:
    if isinstance(value, dict):
        for key in _OBJECT_KEYS:
            if key in value:
                return coerce_int(value[key])
        return None
    return coerce_int(value)


def _skip(value: Any, diagnostics: Optional[OverlayDiagnostics]) -> None:
    logger.debug(f"Skipping malformed schedule overlay entry: {value!r}")
    if diagnostics is not None:
        diagnostics.record(value)


def normalize_overlay(ref: Any, diagnostics: Optional[OverlayDiagnostics] = None) -> ScheduleOverlay:
    """Convert a raw ``schedule_id_if_changed`` value into a :data:`ScheduleOverlay`."""

    if ref is None:
        return NoOverlay()

    if isinstance(ref, (list, tuple)):
        ids: list[int] = []
        for element in ref:
            schedule_id = _element_schedule_id(element)
            if schedule_id is None:
                _skip(element, diagnostics)
                continue
            if schedule_id not in ids:
                ids.append(schedule_id)
        return ManyOverlay(tuple(ids)) if ids else NoOverlay()

    schedule_id = _element_schedule_id(ref)
    if schedule_id is None:
        _skip(ref, diagnostics)
        return NoOverlay()
    return SingleOverlay(schedule_id)


def overlay_ids_in_order(ref: Any, diagnostics: Optional[OverlayDiagnostics] = None) -> list[int]:
    overlay = normalize_overlay(ref, diagnostics)
    if isinstance(overlay, SingleOverlay):
        return [overlay.schedule_id]
    if isinstance(overlay, ManyOverlay):
        return list(overlay.schedule_ids)
    return []


def overlay_schedule_ids(ref: Any, diagnostics: Optional[OverlayDiagnostics] = None) -> frozenset[int]:
    return frozenset(overlay_ids_in_order(ref, diagnostics))


def resolve_schedule_ids(
    item: DeliveryItem, diagnostics: Optional[OverlayDiagnostics] = None
) -> frozenset[int]:
    """Every schedule the item should appear under: primary id plus overlay ids."""

    ids = set(overlay_schedule_ids(item.reassigned_schedule_ref, diagnostics))
    primary = coerce_int(item.primary_schedule_id)
    if primary is not None:
        ids.add(primary)
    return frozenset(ids)


def item_belongs_to_schedule(item: DeliveryItem, schedule_id: int) -> bool:
    return schedule_id in resolve_schedule_ids(item)


def is_modified(item: DeliveryItem) -> bool:
    """True when the item carries an overlay, whether or not it parses."""

    return item.reassigned_schedule_ref is not None


def is_transferred_into(item: DeliveryItem, current_schedule_id: int) -> bool:
    """True when a modified item was originally filed under another schedule.

    Items without a primary schedule are never reported as transferred, even
    when their overlay points at ``current_schedule_id``.
    """

    if not is_modified(item):
        return False
    primary = coerce_int(item.primary_schedule_id)
    return primary is not None and primary != current_schedule_id


def all_items_transferred_for_customer(
    customer_name: str,
    city: str,
    orders: Iterable[DeliveryItem],
    returns: Iterable[DeliveryItem],
    current_schedule_id: int,
) -> bool:
    """True when every item of the customer shown under the schedule was transferred in.

    Returns False when the customer has nothing under ``current_schedule_id``.
    """

    relevant = [
        item
        for item in (*orders, *returns)
        if item.customer_name == customer_name
        and item.city == city
        and item_belongs_to_schedule(item, current_schedule_id)
    ]
    if not relevant:
        return False
    return all(is_transferred_into(item, current_schedule_id) for item in relevant)


def effective_schedule_id(item: DeliveryItem) -> Optional[int]:
    """Schedule the item currently lives on: the latest overlay id, else the primary id."""

    overlay_ids = overlay_ids_in_order(item.reassigned_schedule_ref)
    if overlay_ids:
        return overlay_ids[-1]
    return coerce_int(item.primary_schedule_id)


def items_for_schedule(items: Iterable[DeliveryItem], schedule_id: int) -> list[DeliveryItem]:
    return [item for item in items if item_belongs_to_schedule(item, schedule_id)]


def unassigned_items(items: Iterable[DeliveryItem]) -> list[DeliveryItem]:
    """Items waiting for distribution: those without a primary schedule.

    The overlay only records where the item has been, so an item returned to
    distribution shows up here while its history still points at old schedules.
    """

    return [item for item in items if coerce_int(item.primary_schedule_id) is None]


def unique_customers_for_schedule(
    orders: Iterable[DeliveryItem], returns: Iterable[DeliveryItem], schedule_id: int
) -> set[str]:
    return {
        item.customer_name
        for item in (*items_for_schedule(orders, schedule_id), *items_for_schedule(returns, schedule_id))
    }


def group_by_schedule(items: Iterable[DeliveryItem]) -> dict[int, list[DeliveryItem]]:
    """Bucket items by schedule; an item lands in every schedule it belongs to."""

    groups: dict[int, list[DeliveryItem]] = defaultdict(list)
    for item in items:
        for schedule_id in sorted(resolve_schedule_ids(item)):
            groups[schedule_id].append(item)
    return dict(groups)


def parse_return_reason_history(data: Any) -> list[dict]:
    """Normalise the ``return_reason`` column into ``[{type, responsible, timestamp}]``."""

    unknown = "לא צוין"
    if not data:
        return []

    if isinstance(data, list):
        entries: list[dict] = []
        for item in data:
            if isinstance(item, dict):
                if "type" in item:
                    entries.append(
                        {
                            "type": str(item.get("type") or ""),
                            "responsible": str(item.get("responsible") or unknown),
                            "timestamp": str(item.get("timestamp") or ""),
                        }
                    )
                elif "reason" in item:
                    entries.append(
                        {
                            "type": str(item.get("reason") or ""),
                            "responsible": unknown,
                            "timestamp": str(item.get("timestamp") or ""),
                        }
                    )
                continue
            if item is not None:
                entries.append({"type": str(item), "responsible": unknown, "timestamp": ""})
        return entries

    if isinstance(data, dict):
        if "type" in data:
            return [
                {
                    "type": str(data.get("type") or ""),
                    "responsible": str(data.get("responsible") or ""),
                    "timestamp": str(data.get("timestamp") or ""),
                }
            ]
        if "reason" in data:
            # legacy format
            return [{"type": str(data.get("reason") or ""), "responsible": unknown, "timestamp": str(data.get("timestamp") or "")}]
        return []

    if isinstance(data, str):
        return [{"type": data, "responsible": unknown, "timestamp": ""}]

    return []


def build_schedule_history(ref: Any) -> list[int]:
    """Overlay ids as a list in order of first appearance."""

    return overlay_ids_in_order(ref)


def return_to_distribution(
    item: DeliveryItem,
    reason: str,
    responsible: str = "משרד",
    now: Optional[datetime] = None,
) -> dict:
    """Column update that sends an archived item back to the unassigned pool.

    The old primary schedule moves into the overlay history and the primary
    id is cleared. The reason is appended to the item's return reason history.
    """

    history = build_schedule_history(item.reassigned_schedule_ref)
    primary = coerce_int(item.primary_schedule_id)
    if primary is not None and primary not in history:
        history.append(primary)

    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    reasons = parse_return_reason_history(item.raw.get("return_reason"))
    reasons.append({"type": reason, "responsible": responsible, "timestamp": timestamp})

    return {
        "schedule_id": None,
        "schedule_id_if_changed": history,
        "return_reason": reasons,
    }
