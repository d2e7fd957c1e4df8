"""API 集成测试：解析、行程/计划/费用 CRUD、预算、地理编码"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from tripvoice.adapters.geocoding import amap
from tripvoice.api import main
from tripvoice.api.main import app
from tripvoice.security.key_manager import get_key_manager

client = TestClient(app)


@pytest.fixture(autouse=True)
def fresh_repository():
    """每个测试使用 conftest 指定的临时数据库"""
    main.reset_repo()
    yield
    main.reset_repo()


def _create_trip(**overrides) -> dict:
    payload = {"user_id": "u1", "title": "上海周末", "destination": "上海", "duration": 2, "budget": 1000}
    payload.update(overrides)
    r = client.post("/trips", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def test_health_and_security_headers():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"


def test_diagnostics():
    data = client.get("/diagnostics").json()
    assert data["providers"]["llm_provider"] == "heuristic"
    assert data["providers"]["map_provider"] == "disabled"
    assert data["persistence"]["backend"] == "sqlite"
    assert "geocode" in data["cache"]


@pytest.mark.parametrize(
    "text,amount,category",
    [("打车花了50元", "50", "TRANSPORT"), ("买了80元纪念品", "80", "SHOPPING")],
)
def test_parse_expense(text, amount, category):
    r = client.post("/parse/expense", json={"text": text})
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "ok"
    assert Decimal(str(data["draft"]["amount"])) == Decimal(amount)
    assert data["draft"]["category"] == category
    assert data["draft"]["source"] == "heuristic"


def test_parse_expense_no_match():
    data = client.post("/parse/expense", json={"text": "随便说点什么"}).json()
    assert data["status"] == "no_match"
    assert data["draft"] is None
    assert "手动输入" in data["message"]


def test_parse_rejects_empty_text():
    assert client.post("/parse/expense", json={"text": ""}).status_code == 422


def test_parse_expense_uses_user_llm_key(monkeypatch):
    seen = {}

    def _fake_parse(text, *, api_key=None):
        seen["api_key"] = api_key
        return None

    monkeypatch.setattr(main, "parse_expense", _fake_parse)
    client.put("/users/u9/settings", json={"llm_api_key": "user-llm-key-123456"})
    client.post("/parse/expense", json={"text": "午餐30元", "user_id": "u9"})
    assert seen["api_key"] == "user-llm-key-123456"
    assert "user-llm-key-123456" not in get_key_manager().scrub_text("leak user-llm-key-123456")


def test_parse_trip():
    r = client.post("/parse/trip", json={"text": "我和女朋友想去上海玩2天，预算3000，喜欢美食"})
    data = r.json()
    assert r.status_code == 200
    assert data["draft"]["destination"] == "上海"
    assert data["draft"]["duration_days"] == 2
    assert data["draft"]["traveler_count"] == 2
    assert data["draft"]["travel_style"] == "food"
    assert data["missing_fields"] == []


def test_trip_crud():
    trip = _create_trip(preferences=["美食"], start_date="2026-05-01", end_date="2026-05-02")
    trip_id = trip["id"]

    assert client.get(f"/trips/{trip_id}").json()["title"] == "上海周末"
    assert [t["id"] for t in client.get("/trips", params={"user_id": "u1"}).json()["items"]] == [trip_id]

    r = client.patch(f"/trips/{trip_id}", json={"title": "上海三日", "duration": 3})
    assert r.status_code == 200
    assert r.json()["title"] == "上海三日"
    assert r.json()["preferences"] == ["美食"]
    assert client.get(f"/trips/{trip_id}").json()["duration"] == 3

    assert client.delete(f"/trips/{trip_id}").status_code == 204
    assert client.get(f"/trips/{trip_id}").status_code == 404
    assert client.delete(f"/trips/{trip_id}").status_code == 404


def test_trip_dates_validated():
    r = client.post(
        "/trips",
        json={"user_id": "u1", "title": "t", "destination": "上海", "duration": 2,
              "start_date": "2026-05-03", "end_date": "2026-05-01"},
    )
    assert r.status_code == 422
    assert "before" in r.json()["detail"]


def test_missing_trip_is_404():
    r = client.get("/trips/does-not-exist")
    assert r.status_code == 404
    assert "does-not-exist" in r.json()["detail"]


def test_daily_plans_with_order_optimization():
    trip_id = _create_trip()["id"]
    activities = [
        {"name": "起点", "location": {"lat": 0.0, "lng": 0.0, "name": "s"}},
        {"name": "远", "location": {"lat": 0.0, "lng": 3.0, "name": "f"}},
        {"name": "近", "location": {"lat": 0.0, "lng": 1.0, "name": "n"}},
    ]
    r = client.post(
        f"/trips/{trip_id}/daily-plans",
        json={"day_number": 1, "theme": "外滩", "activities": activities, "optimize_order": True},
    )
    assert r.status_code == 201
    assert [a["name"] for a in r.json()["activities"]] == ["起点", "近", "远"]

    plans = client.get(f"/trips/{trip_id}/daily-plans").json()["items"]
    assert len(plans) == 1
    assert plans[0]["theme"] == "外滩"


def test_daily_plan_geocoding_uses_trip_destination(monkeypatch):
    cities = []

    def _fake_geocode_activities(activities, city=None):
        cities.append(city)
        return activities

    monkeypatch.setattr(amap, "geocode_activities", _fake_geocode_activities)
    trip_id = _create_trip()["id"]
    r = client.post(f"/trips/{trip_id}/daily-plans", json={"day_number": 1, "activities": [{"name": "外滩"}], "geocode": True})
    assert r.status_code == 201
    assert cities == ["上海"]


def test_expenses_and_budget():
    trip_id = _create_trip(budget=1000)["id"]
    for amount, category in [(500, "ACCOMMODATION"), (350, "FOOD")]:
        r = client.post(f"/trips/{trip_id}/expenses", json={"amount": amount, "category": category})
        assert r.status_code == 201

    items = client.get(f"/trips/{trip_id}/expenses").json()["items"]
    assert len(items) == 2

    budget = client.get(f"/trips/{trip_id}/budget").json()
    assert Decimal(str(budget["summary"]["total_spent"])) == Decimal("850")
    assert Decimal(str(budget["summary"]["remaining_budget"])) == Decimal("150")
    levels = [a["level"] for a in budget["alerts"]]
    # 使用率 85%，住宿 500 和餐饮 350 均超过总预算 30%
    assert levels == ["warning", "warning", "warning"]
    stats = {s["category"]: s for s in budget["category_stats"]}
    assert stats["FOOD"]["percentage"] == 100.0
    assert len(budget["daily_spending"]) == 1


def test_expense_update_and_delete():
    trip_id = _create_trip()["id"]
    expense = client.post(f"/trips/{trip_id}/expenses", json={"amount": 20, "description": "奶茶"}).json()
    assert expense["category"] == "OTHER"

    r = client.patch(f"/expenses/{expense['id']}", json={"category": "FOOD"})
    assert r.status_code == 200
    assert r.json()["category"] == "FOOD"
    assert r.json()["description"] == "奶茶"

    assert client.delete(f"/expenses/{expense['id']}").status_code == 204
    assert client.patch(f"/expenses/{expense['id']}", json={"category": "FOOD"}).status_code == 404


def test_expense_requires_positive_amount():
    trip_id = _create_trip()["id"]
    assert client.post(f"/trips/{trip_id}/expenses", json={"amount": 0}).status_code == 422


def test_expense_for_missing_trip():
    assert client.post("/trips/nope/expenses", json={"amount": 10}).status_code == 404


def test_user_settings_masked_and_account_deletion():
    r = client.put("/users/u1/settings", json={"llm_api_key": "abcd1234efgh5678"})
    assert r.status_code == 200
    assert r.json()["llm_api_key"] == "abcd****5678"
    trip_id = _create_trip()["id"]

    assert client.delete("/users/u1").status_code == 204
    assert client.get(f"/trips/{trip_id}").status_code == 404
    assert client.get("/users/u1/settings").status_code == 404


def test_geocode_without_key_is_503():
    r = client.post("/geocode", json={"address": "外滩"})
    assert r.status_code == 503
    assert "AMAP_API_KEY" in r.json()["detail"]


def test_geocode_with_fake_amap(monkeypatch):
    class _FakeHttp:
        def get(self, url, *, params=None, headers=None):
            return {"status": "1", "geocodes": [{"location": "121.49,31.24", "formatted_address": "上海市黄浦区"}]}

    monkeypatch.setenv("AMAP_API_KEY", "k")
    get_key_manager().reload("AMAP_API_KEY")
    monkeypatch.setattr(amap, "_http", _FakeHttp())
    data = client.post("/geocode", json={"address": "外滩", "city": "上海"}).json()
    assert data["location"]["lat"] == pytest.approx(31.24)
    assert data["location"]["address"] == "上海市黄浦区"


def test_geocode_tool_error_is_502_and_scrubbed(monkeypatch):
    class _FailingHttp:
        def get(self, url, *, params=None, headers=None):
            return {"status": "0", "info": "key=secret-amap-key invalid"}

    monkeypatch.setenv("AMAP_API_KEY", "secret-amap-key")
    get_key_manager().reload("AMAP_API_KEY")
    monkeypatch.setattr(amap, "_http", _FailingHttp())
    r = client.post("/geocode", json={"address": "外滩"})
    assert r.status_code == 502
    assert "secret-amap-key" not in r.json()["detail"]


def test_daily_plan_geocoding_without_amap_key_keeps_activities():
    trip_id = _create_trip()["id"]
    r = client.post(f"/trips/{trip_id}/daily-plans", json={"day_number": 2, "activities": [{"name": "外滩"}], "geocode": True})
    assert r.status_code == 201
    assert r.json()["activities"][0]["name"] == "外滩"
    assert r.json()["activities"][0]["location"] is None
