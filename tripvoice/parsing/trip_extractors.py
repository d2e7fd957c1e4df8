"""出行需求解析：从一句话中提取目的地 / 天数 / 预算 / 人数 / 偏好

供 trip_intake 的本地降级路径与“文本证据兜底”共用。
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any

from tripvoice.domain.enums import DraftSource, TravelStyle
from tripvoice.domain.models import TripRequestDraft

# ── 城市名识别 ────────────────────────────

KNOWN_CITIES = [
    "北京", "上海", "广州", "深圳", "成都", "杭州", "西安", "南京", "重庆", "武汉",
    "长沙", "厦门", "青岛", "大理", "丽江", "三亚", "苏州", "大连", "天津", "郑州",
    "沈阳", "昆明", "哈尔滨", "桂林", "拉萨",
]

# 偏好标签 → 触发关键词
PREFERENCE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "美食": ("美食", "吃", "餐厅", "小吃"),
    "打卡标志地点": ("打卡", "标志", "地标", "景点", "观光"),
    "购物": ("购物", "买", "逛街"),
    "文化": ("文化", "历史", "博物馆", "古迹"),
    "自然风光": ("自然", "风景", "公园", "爬山"),
    "夜景": ("夜景", "夜游"),
    "亲子": ("亲子", "带孩子", "带娃"),
}

# 旅行风格按优先级判断，都不命中时为 sightseeing
STYLE_RULES: list[tuple[TravelStyle, tuple[str, ...]]] = [
    (TravelStyle.BUSINESS, ("出差", "商务")),
    (TravelStyle.FOOD, ("美食",)),
    (TravelStyle.SHOPPING, ("购物",)),
    (TravelStyle.CULTURAL, ("文化", "历史")),
    (TravelStyle.NATURE, ("自然", "风景")),
    (TravelStyle.ADVENTURE, ("探险", "冒险", "徒步", "户外")),
    (TravelStyle.RELAXATION, ("休闲", "度假", "放松", "轻松")),
]

TRAVELER_KEYWORDS: list[tuple[int, tuple[str, ...]]] = [
    (3, ("一家三口",)),
    (2, ("女朋友", "男朋友", "夫妻", "情侣", "老婆", "老公", "两个人", "我们俩", "我们")),
    (1, ("一个人", "独自", "自己")),
]

FOOD_KEYWORDS = ["素食", "清真", "无辣", "不吃辣", "海鲜过敏", "无麸质"]

_UNIT_MULTIPLIER = {"万": 10000, "w": 10000, "千": 1000, "k": 1000}


def extract_destination(text: str) -> str | None:
    """从文本中提取目的地城市。"""
    for city in KNOWN_CITIES:
        if city in text:
            return city
    m = re.search(r"去(\S{2,4}?)(?:玩|旅|游|逛|走走|看看|行|$)", text)
    return m.group(1) if m else None


def extract_days(text: str) -> int | None:
    """从文本中提取天数（跳过“10月1日”这类日期）。"""
    m = re.search(r"(\d+)\s*天", text) or re.search(r"(?<![月\d])(\d+)\s*日", text)
    if not m:
        return None
    value = int(m.group(1))
    return value if 1 <= value <= 60 else None


def _amount(raw: str, unit: str | None) -> Decimal:
    value = Decimal(raw)
    if unit:
        value *= _UNIT_MULTIPLIER[unit.lower()]
    return value


def extract_budget(text: str) -> tuple[Decimal, bool] | None:
    """返回 (金额, 是否按天)；没有预算信息时返回 None。"""
    per_day = re.search(r"每天[^\d]{0,4}(\d+(?:\.\d+)?)\s*([万千kKwW])?", text)
    if per_day:
        return _amount(per_day.group(1), per_day.group(2)), True
    patterns = [
        r"(?:总预算|预算(?:总共|共计|约|大概|是|为)?)[^\d]{0,6}(\d+(?:\.\d+)?)\s*([万千kKwW])?",
        r"(\d+(?:\.\d+)?)\s*([万千])?\s*(?:元|块)",
    ]
    for pattern in patterns:
        m = re.search(pattern, text)
        if m:
            return _amount(m.group(1), m.group(2)), False
    return None


def extract_traveler_count(text: str) -> int | None:
    """Extract traveler count from digits first, then companion keywords."""
    for pattern in (r"(\d+)\s*位", r"(\d+)\s*个?人", r"(\d+)\s*大人"):
        m = re.search(pattern, text)
        if m:
            value = int(m.group(1))
            if 1 <= value <= 20:
                return value
    for count, keywords in TRAVELER_KEYWORDS:
        if any(kw in text for kw in keywords):
            return count
    return None


def extract_preferences(text: str) -> set[str]:
    return {label for label, keywords in PREFERENCE_KEYWORDS.items() if any(kw in text for kw in keywords)}


def infer_travel_style(text: str) -> TravelStyle:
    for style, keywords in STYLE_RULES:
        if any(kw in text for kw in keywords):
            return style
    return TravelStyle.SIGHTSEEING


def extract_must_visit(text: str) -> list[str]:
    match = re.search(r"(?:必须去|必去|一定要去)([^。；\n]+)", text)
    if not match:
        return []

    segment = re.split(r"(请|并|然后|希望|给我|安排)", match.group(1))[0]
    cleaned: list[str] = []
    for part in re.split(r"[、,，和及]\s*", segment):
        token = part.strip("：: 。；;，,")
        if token and len(token) <= 16:
            cleaned.append(token)
    return cleaned[:6]


def extract_special_requirements(text: str) -> str | None:
    notes: list[str] = [kw for kw in FOOD_KEYWORDS if kw in text]
    if any(kw in text for kw in ("只去免费", "免费景点", "不买门票", "免门票")):
        notes.append("只去免费景点")
    must_visit = extract_must_visit(text)
    if must_visit:
        notes.append("必去：" + "、".join(must_visit))
    return "；".join(notes) or None


def regex_extract(text: str, fields: dict[str, Any]) -> None:
    """用正则从 text 中提取信息，就地更新 fields。"""
    destination = extract_destination(text)
    if destination:
        fields["destination"] = destination

    days = extract_days(text)
    if days:
        fields["duration_days"] = days

    budget = extract_budget(text)
    if budget:
        amount, per_day = budget
        if per_day:
            fields["budget_per_day"] = amount
        else:
            fields["budget_amount"] = amount

    travelers = extract_traveler_count(text)
    if travelers:
        fields["traveler_count"] = travelers

    preferences = set(fields.get("preferences") or ())
    preferences |= extract_preferences(text)
    fields["preferences"] = preferences

    if not fields.get("travel_style"):
        fields["travel_style"] = infer_travel_style(text)

    special = extract_special_requirements(text)
    if special:
        fields["special_requirements"] = special


def apply_text_evidence(text: str, fields: dict[str, Any]) -> None:
    """Apply values explicitly present in the user text on top of an LLM result.

    Keeps model drift (e.g. a different city or day count) from overriding what
    the user actually said.
    """
    from_text: dict[str, Any] = {}
    regex_extract(text, from_text)

    for key in ("destination", "duration_days", "budget_amount", "budget_per_day", "traveler_count"):
        if key in from_text:
            fields[key] = from_text[key]
    # 文本里的总预算与每日预算互斥，只保留文本给出的那一种
    if "budget_per_day" in from_text:
        fields.pop("budget_amount", None)
    elif "budget_amount" in from_text:
        fields.pop("budget_per_day", None)

    fields["preferences"] = set(fields.get("preferences") or ()) | from_text.get("preferences", set())


def _positive_int(value: Any) -> int | None:
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if number > 0 else None


def _positive_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value))
    except ArithmeticError:
        return None
    return number if number.is_finite() and number > 0 else None


def apply_llm_result(result: dict[str, Any], fields: dict[str, Any]) -> None:
    """将 LLM 提取结果合并到 fields，就地更新；不合法的值直接忽略。"""
    if result.get("destination"):
        fields["destination"] = str(result["destination"]).strip()
    duration = _positive_int(result.get("duration"))
    if duration:
        fields["duration_days"] = duration
    budget = _positive_decimal(result.get("budgetAmount"))
    if budget:
        fields["budget_amount"] = budget
    travelers = _positive_int(result.get("travelers"))
    if travelers:
        fields["traveler_count"] = travelers
    style = str(result.get("travelStyle") or "").strip().lower()
    if style in {s.value for s in TravelStyle}:
        fields["travel_style"] = TravelStyle(style)
    if isinstance(result.get("preferences"), list):
        preferences = set(fields.get("preferences") or ())
        preferences |= {str(item).strip() for item in result["preferences"] if str(item).strip()}
        fields["preferences"] = preferences
    if result.get("specialRequirements"):
        fields["special_requirements"] = str(result["specialRequirements"]).strip()


def build_draft(fields: dict[str, Any], source: DraftSource) -> TripRequestDraft:
    budget = fields.get("budget_amount")
    per_day = fields.get("budget_per_day")
    if budget is None and per_day is not None:
        days = fields.get("duration_days")
        budget = per_day * days if days else per_day
    return TripRequestDraft(
        destination=fields.get("destination"),
        duration_days=fields.get("duration_days"),
        budget_amount=budget,
        travel_style=fields.get("travel_style"),
        traveler_count=fields.get("traveler_count"),
        preferences=set(fields.get("preferences") or ()),
        special_requirements=fields.get("special_requirements"),
        source=source,
    )


def parse_trip_locally(text: str) -> TripRequestDraft:
    fields: dict[str, Any] = {}
    regex_extract(text or "", fields)
    return build_draft(fields, DraftSource.HEURISTIC)


__all__ = [
    "KNOWN_CITIES",
    "PREFERENCE_KEYWORDS",
    "apply_llm_result",
    "apply_text_evidence",
    "build_draft",
    "extract_budget",
    "extract_days",
    "extract_destination",
    "extract_preferences",
    "extract_special_requirements",
    "extract_traveler_count",
    "infer_travel_style",
    "parse_trip_locally",
    "regex_extract",
]
