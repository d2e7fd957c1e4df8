"""Deterministic distance estimation and visit ordering."""

from __future__ import annotations

import math
from typing import Callable, TypeVar

from tripvoice.domain.models import Activity, MapLocation

T = TypeVar("T")


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres."""
    radius_km = 6371.0
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(dlon / 2) ** 2
    )
    a = min(1.0, a)  # 对跖点附近的浮点误差
    return radius_km * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def location_distance_km(a: MapLocation, b: MapLocation) -> float:
    return haversine(a.lat, a.lng, b.lat, b.lng)


def _nearest_neighbour(items: list[T], locate: Callable[[T], MapLocation]) -> list[T]:
    if len(items) <= 2:
        return list(items)

    ordered = [items[0]]
    remaining = list(items[1:])
    while remaining:
        last = locate(ordered[-1])
        closest = min(range(len(remaining)), key=lambda i: location_distance_km(last, locate(remaining[i])))
        ordered.append(remaining.pop(closest))
    return ordered


def optimize_visit_order(locations: list[MapLocation]) -> list[MapLocation]:
    """Nearest-neighbour ordering starting from the first stop."""
    return _nearest_neighbour(locations, lambda loc: loc)


def order_activities(activities: list[Activity]) -> list[Activity]:
    """Reorder activities that have coordinates; the rest keep their order at the end."""
    located = [a for a in activities if a.location is not None]
    unlocated = [a for a in activities if a.location is None]
    return _nearest_neighbour(located, lambda a: a.location) + unlocated


def total_route_km(locations: list[MapLocation]) -> float:
    return sum(location_distance_km(a, b) for a, b in zip(locations, locations[1:]))
