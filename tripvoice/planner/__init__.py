"""Route ordering helpers."""

from tripvoice.planner.distance import haversine, optimize_visit_order, order_activities, total_route_km

__all__ = ["haversine", "optimize_visit_order", "order_activities", "total_route_km"]
