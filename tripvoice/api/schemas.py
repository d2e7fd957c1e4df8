"""API request/response models."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from tripvoice.domain.enums import ExpenseCategory, RouteMode
from tripvoice.domain.models import Activity, ExpenseDraft, MapLocation, TripRequestDraft
from tripvoice.persistence.models import DailyPlanRecord, ExpenseRecord, TripRecord
from tripvoice.services.budget_service import BudgetAlert, BudgetSummary, CategoryStat, DailySpending

_ID_PATTERN = r"^[A-Za-z0-9_-]+$"
_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class ParseRequest(BaseModel):
    text: str = Field(
        min_length=1,
        max_length=2000,
        description="语音转写文本或手动输入的一句话",
    )
    user_id: Optional[str] = Field(
        default=None,
        max_length=64,
        pattern=_ID_PATTERN,
        description="可选；用于读取用户设置中的 LLM Key",
    )


class ExpenseParseResponse(BaseModel):
    status: str = Field(description="ok / no_match")
    message: str = Field(default="")
    draft: Optional[ExpenseDraft] = None


class TripParseResponse(BaseModel):
    draft: TripRequestDraft
    missing_fields: list[str] = Field(default_factory=list)


class TripCreateRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=64, pattern=_ID_PATTERN)
    title: str = Field(min_length=1, max_length=200)
    destination: str = Field(min_length=1, max_length=100)
    duration: int = Field(ge=1, le=60)
    budget: Decimal = Field(default=Decimal("0"), ge=0)
    preferences: list[str] = Field(default_factory=list)
    start_date: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)
    end_date: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)


class TripUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    destination: Optional[str] = Field(default=None, min_length=1, max_length=100)
    duration: Optional[int] = Field(default=None, ge=1, le=60)
    budget: Optional[Decimal] = Field(default=None, ge=0)
    preferences: Optional[list[str]] = None
    start_date: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)
    end_date: Optional[str] = Field(default=None, pattern=_DATE_PATTERN)


class TripListResponse(BaseModel):
    items: list[TripRecord] = Field(default_factory=list)


class DailyPlanCreateRequest(BaseModel):
    day_number: int = Field(ge=1, le=60)
    theme: str = Field(default="", max_length=200)
    activities: list[Activity] = Field(default_factory=list)
    city: Optional[str] = Field(default=None, max_length=50, description="补全活动坐标时使用的城市")
    geocode: bool = Field(default=False, description="是否为缺坐标的活动调用地理编码")
    optimize_order: bool = Field(default=False, description="按最近邻重排有坐标的活动")


class DailyPlanListResponse(BaseModel):
    items: list[DailyPlanRecord] = Field(default_factory=list)


class ExpenseCreateRequest(BaseModel):
    amount: Decimal = Field(gt=0)
    category: ExpenseCategory = ExpenseCategory.OTHER
    description: Optional[str] = Field(default=None, max_length=500)


class ExpenseUpdateRequest(BaseModel):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    category: Optional[ExpenseCategory] = None
    description: Optional[str] = Field(default=None, max_length=500)


class ExpenseListResponse(BaseModel):
    items: list[ExpenseRecord] = Field(default_factory=list)


class BudgetResponse(BaseModel):
    summary: BudgetSummary
    alerts: list[BudgetAlert] = Field(default_factory=list)
    category_stats: list[CategoryStat] = Field(default_factory=list)
    daily_spending: list[DailySpending] = Field(default_factory=list)


class GeocodeRequest(BaseModel):
    address: str = Field(min_length=1, max_length=200)
    city: Optional[str] = Field(default=None, max_length=50)


class GeocodeResponse(BaseModel):
    location: Optional[MapLocation] = None


class RouteRequest(BaseModel):
    origin: MapLocation
    destination: MapLocation
    mode: RouteMode = RouteMode.DRIVING
    city: Optional[str] = Field(default=None, max_length=50)


class HealthResponse(BaseModel):
    status: str = "ok"


class UserSettingsRequest(BaseModel):
    llm_api_key: Optional[str] = Field(default=None, max_length=200)
    voice_api_key: Optional[str] = Field(default=None, max_length=200)
    map_api_key: Optional[str] = Field(default=None, max_length=200)


class UserSettingsResponse(BaseModel):
    """Key 只回显掩码"""

    user_id: str
    llm_api_key: Optional[str] = None
    voice_api_key: Optional[str] = None
    map_api_key: Optional[str] = None
    updated_at: str = ""
