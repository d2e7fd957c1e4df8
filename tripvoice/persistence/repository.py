"""Persistence repository interface and factory."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Protocol

from tripvoice.persistence.models import (
    DailyPlanRecord,
    ExpenseRecord,
    TripRecord,
    UserRecord,
    UserSettingsRecord,
)
from tripvoice.persistence.sqlite_repository import SQLiteTravelRepository

_TRUTHY = {"1", "true", "yes", "on"}
_DEFAULT_DB_PATH = Path("data") / "tripvoice.sqlite3"


class TravelRepository(Protocol):
    backend: str

    def save_user(self, record: UserRecord) -> None: ...

    def get_user(self, user_id: str) -> UserRecord | None: ...

    def delete_user_account(self, user_id: str) -> bool: ...

    def save_trip(self, record: TripRecord) -> None: ...

    def get_trip(self, trip_id: str) -> TripRecord | None: ...

    def list_user_trips(self, user_id: str, limit: int = 50) -> list[TripRecord]: ...

    def delete_trip(self, trip_id: str) -> bool: ...

    def save_daily_plan(self, record: DailyPlanRecord) -> None: ...

    def list_daily_plans(self, trip_id: str) -> list[DailyPlanRecord]: ...

    def save_expense(self, record: ExpenseRecord) -> None: ...

    def get_expense(self, expense_id: str) -> ExpenseRecord | None: ...

    def list_trip_expenses(self, trip_id: str) -> list[ExpenseRecord]: ...

    def delete_expense(self, expense_id: str) -> bool: ...

    def save_user_settings(self, record: UserSettingsRecord) -> None: ...

    def get_user_settings(self, user_id: str) -> UserSettingsRecord | None: ...


class NoopTravelRepository:
    """持久化关闭时使用：写入丢弃，读取为空。"""

    backend = "noop"

    def save_user(self, record: UserRecord) -> None:
        _ = record

    def get_user(self, user_id: str) -> UserRecord | None:
        return None

    def delete_user_account(self, user_id: str) -> bool:
        return False

    def save_trip(self, record: TripRecord) -> None:
        _ = record

    def get_trip(self, trip_id: str) -> TripRecord | None:
        return None

    def list_user_trips(self, user_id: str, limit: int = 50) -> list[TripRecord]:
        _ = (user_id, limit)
        return []

    def delete_trip(self, trip_id: str) -> bool:
        return False

    def save_daily_plan(self, record: DailyPlanRecord) -> None:
        _ = record

    def list_daily_plans(self, trip_id: str) -> list[DailyPlanRecord]:
        return []

    def save_expense(self, record: ExpenseRecord) -> None:
        _ = record

    def get_expense(self, expense_id: str) -> ExpenseRecord | None:
        return None

    def list_trip_expenses(self, trip_id: str) -> list[ExpenseRecord]:
        return []

    def delete_expense(self, expense_id: str) -> bool:
        return False

    def save_user_settings(self, record: UserSettingsRecord) -> None:
        _ = record

    def get_user_settings(self, user_id: str) -> UserSettingsRecord | None:
        return None


def _enabled() -> bool:
    raw = os.getenv("TRAVEL_PERSISTENCE_ENABLED", "true").strip().lower()
    return raw in _TRUTHY


def _db_path() -> Path:
    raw = os.getenv("TRAVEL_PERSISTENCE_DB", "").strip()
    return Path(raw) if raw else _DEFAULT_DB_PATH


def get_repository() -> TravelRepository:
    if not _enabled():
        return NoopTravelRepository()
    return SQLiteTravelRepository(_db_path())


__all__ = [
    "NoopTravelRepository",
    "TravelRepository",
    "get_repository",
]
