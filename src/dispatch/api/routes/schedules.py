"""Schedule membership endpoints."""

from __future__ import annotations

from collections import Counter
from typing import List, Mapping, Optional

from fastapi import APIRouter, HTTPException, Path, Query, status

from ...models.domain import CustomerReplacement, DeliveryItem
from ...persistence.database import (
    apply_return_to_distribution,
    fetch_active_orders,
    fetch_active_returns,
    fetch_customers,
    fetch_replacement_messages,
)
from ...schemas.schedules import (
    ReturnToDistributionRequest,
    ReturnToDistributionResponse,
    RouteStopModel,
    ScheduleCustomerModel,
    ScheduleItemModel,
    ScheduleItemsResponse,
    UnassignedItemsResponse,
)
from ...services.geospatial import order_route_nearest_neighbor
from ...services.scheduling import (
    OverlayDiagnostics,
    all_items_transferred_for_customer,
    build_replacement_map,
    find_customer,
    is_modified,
    is_transferred_into,
    items_for_schedule,
    resolve_display_identity,
    resolve_schedule_ids,
    unassigned_items,
)

router = APIRouter(tags=["schedules"])


def _load_replacements() -> dict[str, CustomerReplacement]:
    return build_replacement_map(fetch_replacement_messages(), fetch_customers())


def _item_model(
    item: DeliveryItem,
    replacement_map: Mapping[str, CustomerReplacement],
    schedule_id: Optional[int] = None,
    diagnostics: Optional[OverlayDiagnostics] = None,
) -> ScheduleItemModel:
    identity = resolve_display_identity(item, replacement_map)
    return ScheduleItemModel(
        kind=item.kind,
        item_id=item.item_id,
        customer_name=identity.customer_name,
        city=identity.city,
        address=identity.address,
        customer_number=identity.customer_number,
        contact_info=identity.contact_info,
        total=item.total,
        primary_schedule_id=item.primary_schedule_id,
        schedule_ids=sorted(resolve_schedule_ids(item, diagnostics)),
        replaced=item.key in replacement_map,
        modified=is_modified(item),
        transferred=schedule_id is not None and is_transferred_into(item, schedule_id),
    )


@router.get("/schedules/unassigned", response_model=UnassignedItemsResponse, status_code=status.HTTP_200_OK)
def get_unassigned_items() -> UnassignedItemsResponse:
    replacement_map = _load_replacements()
    return UnassignedItemsResponse(
        orders=[_item_model(item, replacement_map) for item in unassigned_items(fetch_active_orders())],
        returns=[_item_model(item, replacement_map) for item in unassigned_items(fetch_active_returns())],
    )


@router.get(
    "/schedules/{schedule_id}/items",
    response_model=ScheduleItemsResponse,
    status_code=status.HTTP_200_OK,
)
def get_schedule_items(schedule_id: int = Path(..., ge=1)) -> ScheduleItemsResponse:
    diagnostics = OverlayDiagnostics()
    replacement_map = _load_replacements()
    orders = items_for_schedule(fetch_active_orders(), schedule_id)
    returns = items_for_schedule(fetch_active_returns(), schedule_id)
    return ScheduleItemsResponse(
        schedule_id=schedule_id,
        orders=[_item_model(item, replacement_map, schedule_id, diagnostics) for item in orders],
        returns=[_item_model(item, replacement_map, schedule_id, diagnostics) for item in returns],
        malformed_overlay_entries=diagnostics.malformed_entries,
    )


@router.get(
    "/schedules/{schedule_id}/customers",
    response_model=List[ScheduleCustomerModel],
    status_code=status.HTTP_200_OK,
)
def get_schedule_customers(schedule_id: int = Path(..., ge=1)) -> List[ScheduleCustomerModel]:
    all_orders = fetch_active_orders()
    all_returns = fetch_active_returns()
    order_counts = Counter((item.customer_name, item.city) for item in items_for_schedule(all_orders, schedule_id))
    return_counts = Counter((item.customer_name, item.city) for item in items_for_schedule(all_returns, schedule_id))

    customers = sorted(set(order_counts) | set(return_counts), key=lambda pair: (pair[1], pair[0]))
    return [
        ScheduleCustomerModel(
            customer_name=name,
            city=city,
            orders=order_counts.get((name, city), 0),
            returns=return_counts.get((name, city), 0),
            all_transferred=all_items_transferred_for_customer(name, city, all_orders, all_returns, schedule_id),
        )
        for name, city in customers
    ]


@router.get(
    "/schedules/{schedule_id}/route",
    response_model=List[RouteStopModel],
    status_code=status.HTTP_200_OK,
)
def get_schedule_route(
    schedule_id: int = Path(..., ge=1),
    start_lat: float = Query(..., ge=-90, le=90, description="Latitude of the departure point"),
    start_lng: float = Query(..., ge=-180, le=180, description="Longitude of the departure point"),
) -> List[RouteStopModel]:
    """Customers of the schedule in greedy nearest-neighbour driving order."""

    customers = fetch_customers()
    replacement_map = build_replacement_map(fetch_replacement_messages(), customers)
    items = items_for_schedule([*fetch_active_orders(), *fetch_active_returns()], schedule_id)

    stops = []
    seen: set[tuple[str, str]] = set()
    for item in items:
        identity = resolve_display_identity(item, replacement_map)
        key = (identity.customer_name, identity.city)
        if key in seen:
            continue
        seen.add(key)
        record = find_customer(customers, identity.customer_name, identity.city)
        if record is None or record.lat is None or record.lng is None:
            continue
        stops.append(((identity, record), record.lat, record.lng))

    ordered = order_route_nearest_neighbor((start_lat, start_lng), stops)
    return [
        RouteStopModel(
            position=position,
            customer_name=identity.customer_name,
            city=identity.city or record.city,
            address=identity.address or record.address,
            lat=record.lat,
            lng=record.lng,
        )
        for position, (identity, record) in enumerate(ordered, start=1)
    ]


@router.post(
    "/items/{kind}/{item_id}/return-to-distribution",
    response_model=ReturnToDistributionResponse,
    status_code=status.HTTP_200_OK,
)
def post_return_to_distribution(
    payload: ReturnToDistributionRequest,
    kind: str = Path(..., pattern="^(order|return)$"),
    item_id: int = Path(..., ge=1),
) -> ReturnToDistributionResponse:
    try:
        update = apply_return_to_distribution(kind, item_id, payload.reason)  # type: ignore[arg-type]
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return ReturnToDistributionResponse(
        kind=kind,  # type: ignore[arg-type]
        item_id=item_id,
        schedule_history=update["schedule_id_if_changed"],
        return_reason=update["return_reason"],
    )
