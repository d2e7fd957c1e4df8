"""Pydantic domain models."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from tripvoice.domain.enums import DraftSource, ExpenseCategory, TravelStyle

# 类别中文名（提示信息 / CLI 展示）
CATEGORY_LABELS: dict[ExpenseCategory, str] = {
    ExpenseCategory.TRANSPORT: "交通",
    ExpenseCategory.ACCOMMODATION: "住宿",
    ExpenseCategory.FOOD: "餐饮",
    ExpenseCategory.SIGHTSEEING: "景点",
    ExpenseCategory.SHOPPING: "购物",
    ExpenseCategory.OTHER: "其他",
}


class ExpenseDraft(BaseModel):
    """一句话解析出的费用草稿，用户确认前不落库。"""

    amount: Decimal
    category: ExpenseCategory = ExpenseCategory.OTHER
    description: Optional[str] = None
    source: DraftSource = DraftSource.HEURISTIC

    @field_validator("amount")
    @classmethod
    def _positive_amount(cls, value: Decimal) -> Decimal:
        if not value.is_finite() or value <= 0:
            raise ValueError("amount must be a positive decimal")
        return value


class TripRequestDraft(BaseModel):
    destination: Optional[str] = None
    duration_days: Optional[int] = None
    budget_amount: Optional[Decimal] = None
    travel_style: Optional[TravelStyle] = None
    traveler_count: Optional[int] = None
    preferences: set[str] = Field(default_factory=set)
    special_requirements: Optional[str] = None
    source: DraftSource = DraftSource.HEURISTIC

    def missing_fields(self) -> list[str]:
        """规划前必须补齐的字段"""
        missing = []
        if not self.destination:
            missing.append("destination")
        if not self.duration_days:
            missing.append("duration_days")
        return missing


class MapLocation(BaseModel):
    lat: float
    lng: float
    name: str
    address: Optional[str] = None


class RouteSummary(BaseModel):
    distance_m: float
    duration_s: float
    polyline: str = ""


class Activity(BaseModel):
    time: str = "00:00"
    name: str = "活动"
    description: str = ""
    location: Optional[MapLocation] = None
    type: ExpenseCategory = ExpenseCategory.OTHER
    cost: float = 0.0
    notes: str = ""
