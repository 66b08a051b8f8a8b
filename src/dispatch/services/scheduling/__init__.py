"""Schedule membership and customer identity helpers."""

from .identity import build_replacement_map, find_customer, merge_customer_lists, resolve_display_identity
from .membership import (
    ManyOverlay,
    NoOverlay,
    OverlayDiagnostics,
    SingleOverlay,
    all_items_transferred_for_customer,
    effective_schedule_id,
    group_by_schedule,
    is_modified,
    is_transferred_into,
    item_belongs_to_schedule,
    items_for_schedule,
    normalize_overlay,
    resolve_schedule_ids,
    return_to_distribution,
    unassigned_items,
    unique_customers_for_schedule,
)

__all__ = [
    "ManyOverlay",
    "NoOverlay",
    "OverlayDiagnostics",
    "SingleOverlay",
    "all_items_transferred_for_customer",
    "build_replacement_map",
    "effective_schedule_id",
    "find_customer",
    "group_by_schedule",
    "is_modified",
    "is_transferred_into",
    "item_belongs_to_schedule",
    "items_for_schedule",
    "merge_customer_lists",
    "normalize_overlay",
    "resolve_display_identity",
    "resolve_schedule_ids",
    "return_to_distribution",
    "unassigned_items",
    "unique_customers_for_schedule",
]
