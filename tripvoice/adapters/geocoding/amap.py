"""高德地图 Web 服务适配器：地理编码 / 逆地理编码 / 地点搜索 / 路径规划

环境变量: AMAP_API_KEY（必填）、AMAP_SECRET（可选，启用数字签名）
高德 API 文档: https://lbs.amap.com/api/webservice/summary
"""

from __future__ import annotations

from tripvoice.domain.enums import RouteMode
from tripvoice.domain.models import Activity, MapLocation, RouteSummary
from tripvoice.infrastructure.cache import geocode_cache, make_cache_key, place_cache, route_cache
from tripvoice.infrastructure.logging import get_logger
from tripvoice.security.amap_signer import sign_amap_params
from tripvoice.security.http_client import SecureHttpClient
from tripvoice.security.key_manager import AMAP_KEY_NAME, get_key_manager
from tripvoice.shared.exceptions import ToolError

_BASE_URL = "https://restapi.amap.com/v3"

_http = SecureHttpClient(tool_name="amap", timeout=8.0)


def _safe_str(val: object, default: str = "") -> str:
    """高德部分字段在无数据时返回 [] 而非空字符串，统一转为 str。"""
    if isinstance(val, str):
        return val
    if val is None or (isinstance(val, list) and len(val) == 0):
        return default
    return str(val)


def _parse_location(location: str) -> tuple[float, float] | None:
    """'116.397428,39.90923'（lng,lat）→ (lat, lng)"""
    parts = location.split(",")
    if len(parts) != 2:
        return None
    try:
        return float(parts[1]), float(parts[0])
    except ValueError:
        return None


def _request(endpoint: str, params: dict[str, str]) -> dict:
    get_logger().tool_call("amap", endpoint=endpoint)
    data = _http.get(f"{_BASE_URL}{endpoint}", params=sign_amap_params(params))
    if data.get("status") != "1":
        info = data.get("info", "未知错误")
        raise ToolError("amap", f"高德 API 返回错误: {info} (code={data.get('infocode', '')})")
    return data


def _geocode_uncached(address: str, city: str | None) -> MapLocation | None:
    params = {"address": address}
    if city:
        params["city"] = city
    data = _request("/geocode/geo", params)
    for raw in data.get("geocodes") or []:
        coords = _parse_location(_safe_str(raw.get("location")))
        if coords:
            return MapLocation(
                lat=coords[0],
                lng=coords[1],
                name=address,
                address=_safe_str(raw.get("formatted_address")) or None,
            )
    return None


def geocode(address: str, city: str | None = None) -> MapLocation | None:
    """地址 → 坐标；查不到返回 None。"""
    address = (address or "").strip()
    if not address:
        return None
    key = make_cache_key("geocode", address, city)
    return geocode_cache.get_or_compute(key, lambda: _geocode_uncached(address, city))


def reverse_geocode(lat: float, lng: float) -> str | None:
    """坐标 → 格式化地址"""
    data = _request("/geocode/regeo", {"location": f"{lng},{lat}", "extensions": "base"})
    regeo = data.get("regeocode")
    if not isinstance(regeo, dict):
        return None
    return _safe_str(regeo.get("formatted_address")) or None


def _search_uncached(keyword: str, city: str | None) -> list[MapLocation]:
    params = {"keywords": keyword, "offset": "20", "page": "1"}
    if city:
        params["city"] = city
    data = _request("/place/text", params)
    results: list[MapLocation] = []
    for raw in data.get("pois") or []:
        coords = _parse_location(_safe_str(raw.get("location")))
        if coords is None:
            continue
        results.append(
            MapLocation(
                lat=coords[0],
                lng=coords[1],
                name=_safe_str(raw.get("name"), keyword),
                address=_safe_str(raw.get("address")) or None,
            )
        )
    return results


def search_places(keyword: str, city: str | None = None) -> list[MapLocation]:
    keyword = (keyword or "").strip()
    if not keyword:
        return []
    key = make_cache_key("place", keyword, city)
    return place_cache.get_or_compute(key, lambda: _search_uncached(keyword, city)) or []


def calculate_route(
    origin: MapLocation,
    destination: MapLocation,
    mode: RouteMode = RouteMode.DRIVING,
    city: str | None = None,
) -> RouteSummary | None:
    """两点路径规划；公交模式需要城市参数。"""
    params = {
        "origin": f"{origin.lng},{origin.lat}",
        "destination": f"{destination.lng},{destination.lat}",
    }
    if mode == RouteMode.TRANSIT:
        if not city:
            raise ToolError("amap", "公交路径规划需要指定城市")
        params["city"] = city
        endpoint = "/direction/transit/integrated"
    else:
        endpoint = f"/direction/{mode.value}"

    def _compute() -> RouteSummary | None:
        route = _request(endpoint, params).get("route") or {}
        legs = route.get("transits") if mode == RouteMode.TRANSIT else route.get("paths")
        if not legs:
            return None
        first = legs[0]
        return RouteSummary(
            distance_m=float(_safe_str(first.get("distance"), "0") or 0),
            duration_s=float(_safe_str(first.get("duration"), "0") or 0),
            polyline=_safe_str(first.get("polyline")),
        )

    return route_cache.get_or_compute(make_cache_key("route", endpoint, params), _compute)


def _amap_configured() -> bool:
    """未配置 Key 时批量补全整体跳过，记一条 warning。"""
    if get_key_manager().has_key(AMAP_KEY_NAME):
        return True
    get_logger().warning("amap", f"{AMAP_KEY_NAME} 未配置，跳过地理编码")
    return False


def batch_geocode(addresses: list[str], city: str | None = None) -> list[MapLocation]:
    """逐个地理编码（顺序调用），失败或查不到的地址跳过。"""
    logger = get_logger()
    if not _amap_configured():
        return []
    locations: list[MapLocation] = []
    for address in addresses:
        try:
            location = geocode(address, city)
        except ToolError as exc:
            logger.warning("amap", f"geocode failed for {address!r}: {exc}")
            continue
        if location is not None:
            locations.append(location)
    return locations


def _has_coordinates(activity: Activity) -> bool:
    loc = activity.location
    return loc is not None and not (loc.lat == 0 and loc.lng == 0)


def geocode_activities(activities: list[Activity], city: str | None = None) -> list[Activity]:
    """为缺少坐标的活动补全位置：先按地点名查，再按活动名查。"""
    logger = get_logger()
    if not _amap_configured():
        return list(activities)
    resolved: list[Activity] = []
    for activity in activities:
        if _has_coordinates(activity):
            resolved.append(activity)
            continue

        candidates = [activity.location.name] if activity.location else []
        candidates.append(activity.name)
        location = None
        for name in dict.fromkeys(c for c in candidates if c):
            try:
                location = geocode(name, city)
            except ToolError as exc:
                logger.warning("amap", f"geocode failed for activity {name!r}: {exc}")
                continue
            if location is not None:
                break

        resolved.append(activity.model_copy(update={"location": location}) if location else activity)
    return resolved


__all__ = [
    "batch_geocode",
    "calculate_route",
    "geocode",
    "geocode_activities",
    "reverse_geocode",
    "search_places",
]
