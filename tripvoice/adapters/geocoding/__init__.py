"""Geocoding adapters (AMap web service)."""

from tripvoice.adapters.geocoding.amap import (
    batch_geocode,
    calculate_route,
    geocode,
    geocode_activities,
    reverse_geocode,
    search_places,
)

__all__ = [
    "batch_geocode",
    "calculate_route",
    "geocode",
    "geocode_activities",
    "reverse_geocode",
    "search_places",
]
