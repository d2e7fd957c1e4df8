"""SQLite 仓储测试"""

from __future__ import annotations

from decimal import Decimal

from tripvoice.domain.enums import ExpenseCategory
from tripvoice.domain.models import Activity, MapLocation
from tripvoice.persistence.models import (
    DailyPlanRecord,
    ExpenseRecord,
    TripRecord,
    UserRecord,
    UserSettingsRecord,
)
from tripvoice.persistence.repository import NoopTravelRepository, get_repository
from tripvoice.persistence.sqlite_repository import SQLiteTravelRepository


def _repo(tmp_path) -> SQLiteTravelRepository:
    return SQLiteTravelRepository(tmp_path / "db" / "tripvoice.sqlite3")


def _trip(user_id: str = "u1", **kwargs) -> TripRecord:
    data = {"user_id": user_id, "title": "杭州周末", "destination": "杭州", "duration": 2, "budget": Decimal("2000")}
    data.update(kwargs)
    return TripRecord(**data)


def test_trip_roundtrip_and_upsert(tmp_path):
    repo = _repo(tmp_path)
    trip = _trip(preferences=["美食", "文化"], start_date="2026-05-01", end_date="2026-05-02")
    repo.save_trip(trip)

    loaded = repo.get_trip(trip.id)
    assert loaded == trip
    assert loaded.budget == Decimal("2000")

    repo.save_trip(trip.model_copy(update={"title": "杭州三日", "duration": 3}))
    loaded = repo.get_trip(trip.id)
    assert loaded.title == "杭州三日"
    assert loaded.duration == 3
    assert loaded.created_at == trip.created_at


def test_list_user_trips_newest_first(tmp_path):
    repo = _repo(tmp_path)
    older = _trip(created_at="2026-01-01T00:00:00+00:00")
    newer = _trip(created_at="2026-02-01T00:00:00+00:00")
    other = _trip(user_id="u2")
    for trip in (older, newer, other):
        repo.save_trip(trip)

    assert [t.id for t in repo.list_user_trips("u1")] == [newer.id, older.id]
    assert len(repo.list_user_trips("u1", limit=1)) == 1
    assert repo.list_user_trips("nobody") == []


def test_daily_plans_ordered_by_day(tmp_path):
    repo = _repo(tmp_path)
    trip = _trip()
    repo.save_trip(trip)
    activity = Activity(
        time="09:00",
        name="西湖",
        location=MapLocation(lat=30.25, lng=120.15, name="西湖"),
        cost=0,
    )
    repo.save_daily_plan(DailyPlanRecord(trip_id=trip.id, day_number=2, theme="灵隐"))
    repo.save_daily_plan(DailyPlanRecord(trip_id=trip.id, day_number=1, theme="西湖", activities=[activity]))

    plans = repo.list_daily_plans(trip.id)
    assert [p.day_number for p in plans] == [1, 2]
    assert plans[0].activities == [activity]


def test_expense_crud(tmp_path):
    repo = _repo(tmp_path)
    trip = _trip()
    repo.save_trip(trip)
    expense = ExpenseRecord(trip_id=trip.id, amount=Decimal("35.50"), category=ExpenseCategory.FOOD, description="午餐")
    repo.save_expense(expense)

    loaded = repo.get_expense(expense.id)
    assert loaded.amount == Decimal("35.50")
    assert loaded.category == ExpenseCategory.FOOD

    repo.save_expense(expense.model_copy(update={"amount": Decimal("40")}))
    assert repo.list_trip_expenses(trip.id)[0].amount == Decimal("40")

    assert repo.delete_expense(expense.id) is True
    assert repo.delete_expense(expense.id) is False
    assert repo.get_expense(expense.id) is None


def test_deleting_trip_cascades(tmp_path):
    repo = _repo(tmp_path)
    trip = _trip()
    repo.save_trip(trip)
    repo.save_daily_plan(DailyPlanRecord(trip_id=trip.id, day_number=1))
    repo.save_expense(ExpenseRecord(trip_id=trip.id, amount=Decimal("10")))

    assert repo.delete_trip(trip.id) is True
    assert repo.get_trip(trip.id) is None
    assert repo.list_daily_plans(trip.id) == []
    assert repo.list_trip_expenses(trip.id) == []


def test_delete_user_account_removes_everything(tmp_path):
    repo = _repo(tmp_path)
    repo.save_user(UserRecord(id="u1", email="a@example.com", name="A"))
    repo.save_user_settings(UserSettingsRecord(user_id="u1", llm_api_key="user-key"))
    trip = _trip()
    repo.save_trip(trip)
    repo.save_expense(ExpenseRecord(trip_id=trip.id, amount=Decimal("10")))
    kept = _trip(user_id="u2")
    repo.save_trip(kept)

    assert repo.delete_user_account("u1") is True
    assert repo.get_user("u1") is None
    assert repo.get_user_settings("u1") is None
    assert repo.list_user_trips("u1") == []
    assert repo.list_trip_expenses(trip.id) == []
    assert repo.get_trip(kept.id) is not None


def test_user_settings_upsert(tmp_path):
    repo = _repo(tmp_path)
    repo.save_user_settings(UserSettingsRecord(user_id="u1", llm_api_key="k1"))
    repo.save_user_settings(UserSettingsRecord(user_id="u1", llm_api_key="k2", map_api_key="m"))
    settings = repo.get_user_settings("u1")
    assert settings.llm_api_key == "k2"
    assert settings.map_api_key == "m"


def test_get_repository_respects_flag(monkeypatch, tmp_path):
    monkeypatch.setenv("TRAVEL_PERSISTENCE_DB", str(tmp_path / "x.sqlite3"))
    assert isinstance(get_repository(), SQLiteTravelRepository)
    assert (tmp_path / "x.sqlite3").exists()

    monkeypatch.setenv("TRAVEL_PERSISTENCE_ENABLED", "false")
    repo = get_repository()
    assert isinstance(repo, NoopTravelRepository)
    repo.save_trip(_trip())
    assert repo.list_user_trips("u1") == []
