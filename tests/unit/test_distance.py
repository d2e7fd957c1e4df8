"""距离估算与最近邻排序测试"""

import math

import pytest

from tripvoice.domain.models import Activity, MapLocation
from tripvoice.planner.distance import haversine, optimize_visit_order, order_activities, total_route_km


def _loc(name: str, lat: float, lng: float) -> MapLocation:
    return MapLocation(lat=lat, lng=lng, name=name)


def test_haversine_known_distance():
    # 北京 → 上海 约 1068 km
    assert haversine(39.9042, 116.4074, 31.2304, 121.4737) == pytest.approx(1068, rel=0.01)


def test_haversine_same_point():
    assert haversine(30.0, 120.0, 30.0, 120.0) == 0


def test_haversine_antipodal_points():
    half_circumference = math.pi * 6371.0
    assert haversine(0.0, 0.0, 0.0, 180.0) == pytest.approx(half_circumference)
    assert haversine(30.0, 120.0, -30.0, -60.0) == pytest.approx(half_circumference)


def test_nearest_neighbour_order():
    start = _loc("start", 0.0, 0.0)
    far = _loc("far", 0.0, 3.0)
    near = _loc("near", 0.0, 1.0)
    mid = _loc("mid", 0.0, 2.0)
    ordered = optimize_visit_order([start, far, near, mid])
    assert [loc.name for loc in ordered] == ["start", "near", "mid", "far"]
    assert total_route_km(ordered) < total_route_km([start, far, near, mid])


def test_short_lists_unchanged():
    a, b = _loc("a", 0, 0), _loc("b", 1, 1)
    assert optimize_visit_order([a, b]) == [a, b]
    assert optimize_visit_order([]) == []


def test_order_activities_keeps_unlocated_at_end():
    activities = [
        Activity(name="起点", location=_loc("s", 0.0, 0.0)),
        Activity(name="无坐标"),
        Activity(name="远", location=_loc("f", 0.0, 3.0)),
        Activity(name="近", location=_loc("n", 0.0, 1.0)),
    ]
    assert [a.name for a in order_activities(activities)] == ["起点", "近", "远", "无坐标"]
