"""SQLite implementation of the travel CRUD tables."""

from __future__ import annotations

import json
import sqlite3
import threading
from decimal import Decimal
from pathlib import Path
from typing import Any

from tripvoice.domain.enums import ExpenseCategory
from tripvoice.domain.models import Activity
from tripvoice.persistence.models import (
    DailyPlanRecord,
    ExpenseRecord,
    TripRecord,
    UserRecord,
    UserSettingsRecord,
)


def _to_json(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)


def _from_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return default


def _trip_from_row(row: sqlite3.Row) -> TripRecord:
    return TripRecord(
        id=row["id"],
        user_id=row["user_id"],
        title=row["title"],
        destination=row["destination"],
        duration=row["duration"],
        budget=Decimal(row["budget"]),
        preferences=_from_json(row["preferences_json"], []),
        start_date=row["start_date"],
        end_date=row["end_date"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _expense_from_row(row: sqlite3.Row) -> ExpenseRecord:
    return ExpenseRecord(
        id=row["id"],
        trip_id=row["trip_id"],
        amount=Decimal(row["amount"]),
        category=ExpenseCategory(row["category"]),
        description=row["description"],
        created_at=row["created_at"],
    )


class SQLiteTravelRepository:
    backend = "sqlite"

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, timeout=5.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA foreign_keys=ON;")
        return conn

    def _init_schema(self) -> None:
        with self._lock, self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS trips (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    destination TEXT NOT NULL,
                    duration INTEGER NOT NULL,
                    budget TEXT NOT NULL,
                    preferences_json TEXT NOT NULL,
                    start_date TEXT,
                    end_date TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS daily_plans (
                    id TEXT PRIMARY KEY,
                    trip_id TEXT NOT NULL,
                    day_number INTEGER NOT NULL,
                    theme TEXT NOT NULL,
                    activities_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY(trip_id) REFERENCES trips(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS expenses (
                    id TEXT PRIMARY KEY,
                    trip_id TEXT NOT NULL,
                    amount TEXT NOT NULL,
                    category TEXT NOT NULL,
                    description TEXT,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY(trip_id) REFERENCES trips(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS user_settings (
                    user_id TEXT PRIMARY KEY,
                    llm_api_key TEXT,
                    voice_api_key TEXT,
                    map_api_key TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_trips_user_id ON trips(user_id);
                CREATE INDEX IF NOT EXISTS idx_daily_plans_trip_id ON daily_plans(trip_id);
                CREATE INDEX IF NOT EXISTS idx_expenses_trip_id ON expenses(trip_id);
                """
            )

    # ── users ──────────────────────────────────────────

    def save_user(self, record: UserRecord) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO users (id, email, name, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    name=excluded.name,
                    updated_at=excluded.updated_at
                """,
                (record.id, record.email, record.name, record.created_at, record.updated_at),
            )

    def get_user(self, user_id: str) -> UserRecord | None:
        with self._lock, self._connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return UserRecord(**dict(row)) if row else None

    def delete_user_account(self, user_id: str) -> bool:
        """删除用户及其全部行程、每日计划、费用和设置。"""
        with self._lock, self._connect() as conn:
            # daily_plans / expenses 通过 ON DELETE CASCADE 随 trips 一起删除
            conn.execute("DELETE FROM trips WHERE user_id = ?", (user_id,))
            conn.execute("DELETE FROM user_settings WHERE user_id = ?", (user_id,))
            cur = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
        return cur.rowcount > 0

    # ── trips ──────────────────────────────────────────

    def save_trip(self, record: TripRecord) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO trips (
                    id, user_id, title, destination, duration, budget,
                    preferences_json, start_date, end_date, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    destination=excluded.destination,
                    duration=excluded.duration,
                    budget=excluded.budget,
                    preferences_json=excluded.preferences_json,
                    start_date=excluded.start_date,
                    end_date=excluded.end_date,
                    updated_at=excluded.updated_at
                """,
                (
                    record.id,
                    record.user_id,
                    record.title,
                    record.destination,
                    record.duration,
                    str(record.budget),
                    _to_json(record.preferences),
                    record.start_date,
                    record.end_date,
                    record.created_at,
                    record.updated_at,
                ),
            )

    def get_trip(self, trip_id: str) -> TripRecord | None:
        with self._lock, self._connect() as conn:
            row = conn.execute("SELECT * FROM trips WHERE id = ?", (trip_id,)).fetchone()
        return _trip_from_row(row) if row else None

    def list_user_trips(self, user_id: str, limit: int = 50) -> list[TripRecord]:
        safe_limit = max(1, min(limit, 200))
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM trips
                WHERE user_id = ?
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (user_id, safe_limit),
            ).fetchall()
        return [_trip_from_row(row) for row in rows]

    def delete_trip(self, trip_id: str) -> bool:
        with self._lock, self._connect() as conn:
            cur = conn.execute("DELETE FROM trips WHERE id = ?", (trip_id,))
        return cur.rowcount > 0

    # ── daily plans ────────────────────────────────────

    def save_daily_plan(self, record: DailyPlanRecord) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO daily_plans (
                    id, trip_id, day_number, theme, activities_json, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.trip_id,
                    record.day_number,
                    record.theme,
                    _to_json([a.model_dump(mode="json") for a in record.activities]),
                    record.created_at,
                    record.updated_at,
                ),
            )

    def list_daily_plans(self, trip_id: str) -> list[DailyPlanRecord]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM daily_plans WHERE trip_id = ? ORDER BY day_number ASC",
                (trip_id,),
            ).fetchall()
        return [
            DailyPlanRecord(
                id=row["id"],
                trip_id=row["trip_id"],
                day_number=row["day_number"],
                theme=row["theme"],
                activities=[Activity(**item) for item in _from_json(row["activities_json"], [])],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for row in rows
        ]

    # ── expenses ───────────────────────────────────────

    def save_expense(self, record: ExpenseRecord) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO expenses (id, trip_id, amount, category, description, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    amount=excluded.amount,
                    category=excluded.category,
                    description=excluded.description
                """,
                (
                    record.id,
                    record.trip_id,
                    str(record.amount),
                    record.category.value,
                    record.description,
                    record.created_at,
                ),
            )

    def get_expense(self, expense_id: str) -> ExpenseRecord | None:
        with self._lock, self._connect() as conn:
            row = conn.execute("SELECT * FROM expenses WHERE id = ?", (expense_id,)).fetchone()
        return _expense_from_row(row) if row else None

    def list_trip_expenses(self, trip_id: str) -> list[ExpenseRecord]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM expenses WHERE trip_id = ? ORDER BY created_at ASC, rowid ASC",
                (trip_id,),
            ).fetchall()
        return [_expense_from_row(row) for row in rows]

    def delete_expense(self, expense_id: str) -> bool:
        with self._lock, self._connect() as conn:
            cur = conn.execute("DELETE FROM expenses WHERE id = ?", (expense_id,))
        return cur.rowcount > 0

    # ── user settings ──────────────────────────────────

    def save_user_settings(self, record: UserSettingsRecord) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO user_settings (
                    user_id, llm_api_key, voice_api_key, map_api_key, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    llm_api_key=excluded.llm_api_key,
                    voice_api_key=excluded.voice_api_key,
                    map_api_key=excluded.map_api_key,
                    updated_at=excluded.updated_at
                """,
                (
                    record.user_id,
                    record.llm_api_key,
                    record.voice_api_key,
                    record.map_api_key,
                    record.created_at,
                    record.updated_at,
                ),
            )

    def get_user_settings(self, user_id: str) -> UserSettingsRecord | None:
        with self._lock, self._connect() as conn:
            row = conn.execute("SELECT * FROM user_settings WHERE user_id = ?", (user_id,)).fetchone()
        return UserSettingsRecord(**dict(row)) if row else None


__all__ = ["SQLiteTravelRepository"]
