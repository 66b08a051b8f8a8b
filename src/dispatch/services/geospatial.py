"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Sequence, TypeVar

from ..models.domain import CustomerRecord

EARTH_RADIUS_KM = 6371.0

T = TypeVar("T")


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def nearest_customers(
    origin_lat: float,
    origin_lng: float,
    customers: Sequence[CustomerRecord],
    limit: int = 3,
) -> list[tuple[CustomerRecord, float]]:
    """Closest customers to a point as ``(customer, distance_km)`` pairs.

    Customers without coordinates and customers sitting exactly on the origin
    are left out.
    """

    ranked: list[tuple[CustomerRecord, float]] = []
    for customer in customers:
        if customer.lat is None or customer.lng is None:
            continue
        if customer.lat == origin_lat and customer.lng == origin_lng:
            continue
        ranked.append((customer, haversine_km(origin_lat, origin_lng, customer.lat, customer.lng)))
    ranked.sort(key=lambda pair: pair[1])
    return ranked[: max(limit, 0)]


def order_route_nearest_neighbor(
    start: tuple[float, float],
    stops: Sequence[tuple[T, float, float]],
) -> list[T]:
    """Greedy visiting order: always drive to the closest remaining stop.

    ``stops`` holds ``(payload, lat, lng)`` triples; payloads come back in
    visiting order. Ties keep input order.
    """

    remaining = list(stops)
    current_lat, current_lng = start
    ordered: list[T] = []
    while remaining:
        best_index = min(
            range(len(remaining)),
            key=lambda idx: haversine_km(current_lat, current_lng, remaining[idx][1], remaining[idx][2]),
        )
        payload, current_lat, current_lng = remaining.pop(best_index)
        ordered.append(payload)
    return ordered
