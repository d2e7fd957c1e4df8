"""Persistence-layer record schemas."""

from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from tripvoice.domain.enums import ExpenseCategory
from tripvoice.domain.models import Activity


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat(timespec="seconds")


class UserRecord(BaseModel):
    id: str = Field(default_factory=new_id)
    email: str
    name: str = ""
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


class TripRecord(BaseModel):
    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    destination: str
    duration: int
    budget: Decimal = Decimal("0")
    preferences: list[str] = Field(default_factory=list)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


class DailyPlanRecord(BaseModel):
    id: str = Field(default_factory=new_id)
    trip_id: str
    day_number: int
    theme: str = ""
    activities: list[Activity] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


class ExpenseRecord(BaseModel):
    id: str = Field(default_factory=new_id)
    trip_id: str
    amount: Decimal
    category: ExpenseCategory = ExpenseCategory.OTHER
    description: Optional[str] = None
    created_at: str = Field(default_factory=utc_now)


class UserSettingsRecord(BaseModel):
    user_id: str
    llm_api_key: Optional[str] = None
    voice_api_key: Optional[str] = None
    map_api_key: Optional[str] = None
    created_at: str = Field(default_factory=utc_now)
    updated_at: str = Field(default_factory=utc_now)


__all__ = [
    "DailyPlanRecord",
    "ExpenseRecord",
    "TripRecord",
    "UserRecord",
    "UserSettingsRecord",
    "new_id",
    "utc_now",
]
