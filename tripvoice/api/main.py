"""FastAPI 主应用：记账/出行需求解析 + 行程、每日计划、费用 CRUD + 预算统计"""

from __future__ import annotations

import datetime as dt
import logging
import os
import time
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from tripvoice import __version__
from tripvoice.adapters.geocoding import amap
from tripvoice.api.schemas import (
    BudgetResponse,
    DailyPlanCreateRequest,
    DailyPlanListResponse,
    ExpenseCreateRequest,
    ExpenseListResponse,
    ExpenseParseResponse,
    ExpenseUpdateRequest,
    GeocodeRequest,
    GeocodeResponse,
    HealthResponse,
    ParseRequest,
    RouteRequest,
    TripCreateRequest,
    TripListResponse,
    TripParseResponse,
    TripUpdateRequest,
    UserSettingsRequest,
    UserSettingsResponse,
)
from tripvoice.application.expense_intake import parse_expense
from tripvoice.application.trip_intake import parse_trip_request
from tripvoice.domain.exceptions import InvalidDraft, RecordNotFound
from tripvoice.domain.models import RouteSummary
from tripvoice.persistence.models import (
    DailyPlanRecord,
    ExpenseRecord,
    TripRecord,
    UserSettingsRecord,
    utc_now,
)
from tripvoice.persistence.repository import TravelRepository, get_repository
from tripvoice.planner.distance import order_activities
from tripvoice.security.key_manager import get_key_manager
from tripvoice.security.redact import mask_key
from tripvoice.services.budget_service import (
    budget_alerts,
    category_stats,
    daily_spending,
    summarize_budget,
)
from tripvoice.shared.dates import calculate_duration, is_valid_date
from tripvoice.shared.exceptions import KeyMissingError, ToolError

_api_logger = logging.getLogger("tripvoice.api")

load_dotenv()  # 自动加载 .env 文件

_NO_MATCH_HINT = "未能识别金额，请手动输入"

app = FastAPI(
    title="tripvoice",
    version=__version__,
    docs_url="/docs" if os.getenv("ENABLE_DOCS", "false").lower() == "true" else None,
    redoc_url=None,
)


# ── 安全中间件 ────────────────────────────────────────

class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """注入安全响应头"""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """按客户端 IP 的 POST 频率限制（单进程内存版）"""

    def __init__(self, app, max_requests: int = 60, window_seconds: int = 60):
        super().__init__(app)
        self._max = max_requests
        self._window = window_seconds
        self._counters: dict[str, list[float]] = {}

    async def dispatch(self, request: Request, call_next):
        if request.method != "POST":
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.time()
        hits = [t for t in self._counters.get(client_ip, []) if now - t < self._window]
        if len(hits) >= self._max:
            return JSONResponse(
                status_code=429,
                content={"detail": "请求过于频繁，请稍后再试"},
            )
        hits.append(now)
        self._counters[client_ip] = hits
        return await call_next(request)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    RateLimitMiddleware,
    max_requests=int(os.getenv("RATE_LIMIT_MAX", "60")),
    window_seconds=int(os.getenv("RATE_LIMIT_WINDOW", "60")),
)

# CORS：生产环境应限制 origins
_cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
    allow_headers=["*"],
)


# ── 仓储（首次使用时按环境变量创建） ──────────────────
_repository: Optional[TravelRepository] = None


def get_repo() -> TravelRepository:
    global _repository
    if _repository is None:
        _repository = get_repository()
    return _repository


def reset_repo() -> None:
    """重置仓储单例（测试用）"""
    global _repository
    _repository = None


def _safe_log_exception(context: str, exc: Exception) -> str:
    """脱敏后记录异常日志，返回脱敏后的消息"""
    safe_msg = get_key_manager().scrub_text(str(exc))
    _api_logger.error(f"{context}: {safe_msg}")
    return safe_msg


# ── 异常映射 ──────────────────────────────────────────

@app.exception_handler(RecordNotFound)
async def _record_not_found(request: Request, exc: RecordNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidDraft)
async def _invalid_draft(request: Request, exc: InvalidDraft):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ToolError)
async def _tool_error(request: Request, exc: ToolError):
    safe_msg = _safe_log_exception(f"{request.url.path} tool error", exc)
    return JSONResponse(status_code=502, content={"detail": safe_msg})


@app.exception_handler(KeyMissingError)
async def _key_missing(request: Request, exc: KeyMissingError):
    _safe_log_exception(f"{request.url.path} key missing", exc)
    return JSONResponse(status_code=503, content={"detail": f"服务未配置: {exc.key_name}"})


def _require_trip(trip_id: str) -> TripRecord:
    trip = get_repo().get_trip(trip_id)
    if trip is None:
        raise RecordNotFound("trips", trip_id)
    return trip


def _check_trip_dates(start_date: str | None, end_date: str | None) -> None:
    for value in (start_date, end_date):
        if value is not None and not is_valid_date(value):
            raise InvalidDraft(f"invalid date: {value}")
    if start_date and end_date:
        if calculate_duration(dt.date.fromisoformat(start_date), dt.date.fromisoformat(end_date)) < 0:
            raise InvalidDraft("end_date is before start_date")


def _require_expense(expense_id: str) -> ExpenseRecord:
    expense = get_repo().get_expense(expense_id)
    if expense is None:
        raise RecordNotFound("expenses", expense_id)
    return expense


def _user_llm_key(user_id: str | None) -> str | None:
    """用户在设置中保存的 LLM Key；登记到 KeyManager 以便日志脱敏。"""
    if not user_id:
        return None
    settings = get_repo().get_user_settings(user_id)
    if settings is None or not settings.llm_api_key:
        return None
    get_key_manager().register(f"USER_LLM_KEY:{user_id}", settings.llm_api_key)
    return settings.llm_api_key


# ── 基础 ──────────────────────────────────────────────

@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


@app.get("/diagnostics")
def diagnostics():
    """内部诊断接口：Provider 状态、缓存命中率、持久化后端（生产环境应加鉴权）"""
    from tripvoice.config.settings import resolve_provider_snapshot
    from tripvoice.infrastructure.cache import ALL_CACHES
    from tripvoice.security.amap_signer import is_signing_enabled

    return {
        "providers": resolve_provider_snapshot().model_dump(),
        "signing_enabled": is_signing_enabled(),
        "cache": {cache.name: cache.stats for cache in ALL_CACHES},
        "persistence": {"backend": getattr(get_repo(), "backend", "unknown")},
    }


# ── 解析 ──────────────────────────────────────────────

@app.post("/parse/expense", response_model=ExpenseParseResponse)
def parse_expense_endpoint(req: ParseRequest):
    """一句话记账：返回草稿，由前端确认后再调用 POST /trips/{id}/expenses 保存"""
    draft = parse_expense(req.text, api_key=_user_llm_key(req.user_id))
    if draft is None:
        return ExpenseParseResponse(status="no_match", message=_NO_MATCH_HINT)
    return ExpenseParseResponse(status="ok", draft=draft)


@app.post("/parse/trip", response_model=TripParseResponse)
def parse_trip_endpoint(req: ParseRequest):
    draft = parse_trip_request(req.text, api_key=_user_llm_key(req.user_id))
    return TripParseResponse(draft=draft, missing_fields=draft.missing_fields())


# ── 行程 ──────────────────────────────────────────────

@app.post("/trips", response_model=TripRecord, status_code=201)
def create_trip(req: TripCreateRequest):
    _check_trip_dates(req.start_date, req.end_date)
    record = TripRecord(**req.model_dump())
    get_repo().save_trip(record)
    return record


@app.get("/trips", response_model=TripListResponse)
def list_trips(user_id: str = Query(min_length=1, max_length=64), limit: int = Query(default=50, ge=1, le=200)):
    return TripListResponse(items=get_repo().list_user_trips(user_id, limit=limit))


@app.get("/trips/{trip_id}", response_model=TripRecord)
def get_trip(trip_id: str):
    return _require_trip(trip_id)


@app.patch("/trips/{trip_id}", response_model=TripRecord)
def update_trip(trip_id: str, req: TripUpdateRequest):
    trip = _require_trip(trip_id)
    changes = req.model_dump(exclude_unset=True, exclude_none=True)
    updated = trip.model_copy(update={**changes, "updated_at": utc_now()})
    _check_trip_dates(updated.start_date, updated.end_date)
    get_repo().save_trip(updated)
    return updated


@app.delete("/trips/{trip_id}", status_code=204)
def delete_trip(trip_id: str):
    if not get_repo().delete_trip(trip_id):
        raise RecordNotFound("trips", trip_id)


# ── 每日计划 ──────────────────────────────────────────

@app.post("/trips/{trip_id}/daily-plans", response_model=DailyPlanRecord, status_code=201)
def create_daily_plan(trip_id: str, req: DailyPlanCreateRequest):
    trip = _require_trip(trip_id)
    activities = req.activities
    if req.geocode:
        activities = amap.geocode_activities(activities, req.city or trip.destination)
    if req.optimize_order:
        activities = order_activities(activities)

    record = DailyPlanRecord(trip_id=trip_id, day_number=req.day_number, theme=req.theme, activities=activities)
    get_repo().save_daily_plan(record)
    return record


@app.get("/trips/{trip_id}/daily-plans", response_model=DailyPlanListResponse)
def list_daily_plans(trip_id: str):
    _require_trip(trip_id)
    return DailyPlanListResponse(items=get_repo().list_daily_plans(trip_id))


# ── 费用 ──────────────────────────────────────────────

@app.post("/trips/{trip_id}/expenses", response_model=ExpenseRecord, status_code=201)
def create_expense(trip_id: str, req: ExpenseCreateRequest):
    _require_trip(trip_id)
    if not req.amount.is_finite():
        raise InvalidDraft(f"invalid amount: {req.amount}")
    record = ExpenseRecord(trip_id=trip_id, **req.model_dump())
    get_repo().save_expense(record)
    return record


@app.get("/trips/{trip_id}/expenses", response_model=ExpenseListResponse)
def list_expenses(trip_id: str):
    _require_trip(trip_id)
    return ExpenseListResponse(items=get_repo().list_trip_expenses(trip_id))


@app.patch("/expenses/{expense_id}", response_model=ExpenseRecord)
def update_expense(expense_id: str, req: ExpenseUpdateRequest):
    expense = _require_expense(expense_id)
    updated = expense.model_copy(update=req.model_dump(exclude_unset=True, exclude_none=True))
    get_repo().save_expense(updated)
    return updated


@app.delete("/expenses/{expense_id}", status_code=204)
def delete_expense(expense_id: str):
    if not get_repo().delete_expense(expense_id):
        raise RecordNotFound("expenses", expense_id)


@app.get("/trips/{trip_id}/budget", response_model=BudgetResponse)
def trip_budget(trip_id: str):
    trip = _require_trip(trip_id)
    expenses = get_repo().list_trip_expenses(trip_id)
    summary = summarize_budget(trip.budget, expenses)
    return BudgetResponse(
        summary=summary,
        alerts=budget_alerts(summary),
        category_stats=category_stats(summary),
        daily_spending=daily_spending(expenses),
    )


# ── 用户 ──────────────────────────────────────────────

def _settings_response(record: UserSettingsRecord) -> UserSettingsResponse:
    return UserSettingsResponse(
        user_id=record.user_id,
        llm_api_key=mask_key(record.llm_api_key) if record.llm_api_key else None,
        voice_api_key=mask_key(record.voice_api_key) if record.voice_api_key else None,
        map_api_key=mask_key(record.map_api_key) if record.map_api_key else None,
        updated_at=record.updated_at,
    )


@app.put("/users/{user_id}/settings", response_model=UserSettingsResponse)
def save_user_settings(user_id: str, req: UserSettingsRequest):
    existing = get_repo().get_user_settings(user_id)
    record = UserSettingsRecord(user_id=user_id, **req.model_dump())
    if existing is not None:
        record = record.model_copy(update={"created_at": existing.created_at})
    get_repo().save_user_settings(record)
    return _settings_response(record)


@app.get("/users/{user_id}/settings", response_model=UserSettingsResponse)
def get_user_settings(user_id: str):
    record = get_repo().get_user_settings(user_id)
    if record is None:
        raise RecordNotFound("user_settings", user_id)
    return _settings_response(record)


@app.delete("/users/{user_id}", status_code=204)
def delete_user_account(user_id: str):
    """注销账号：删除用户及其行程、每日计划、费用和设置"""
    get_repo().delete_user_account(user_id)


# ── 地图 ──────────────────────────────────────────────

@app.post("/geocode", response_model=GeocodeResponse)
def geocode(req: GeocodeRequest):
    return GeocodeResponse(location=amap.geocode(req.address, req.city))


@app.post("/route", response_model=Optional[RouteSummary])
def route(req: RouteRequest):
    return amap.calculate_route(req.origin, req.destination, req.mode, req.city)
