"""日期工具函数"""

from __future__ import annotations

import datetime as dt
import math
import re

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def format_date(value: dt.date) -> str:
    """格式化为 YYYY-MM-DD"""
    return value.strftime("%Y-%m-%d")


def calculate_duration(start: dt.datetime | dt.date, end: dt.datetime | dt.date) -> int:
    """两个日期之间的天数差（向上取整）"""
    if isinstance(start, dt.datetime) or isinstance(end, dt.datetime):
        start_dt = start if isinstance(start, dt.datetime) else dt.datetime.combine(start, dt.time())
        end_dt = end if isinstance(end, dt.datetime) else dt.datetime.combine(end, dt.time())
        return math.ceil((end_dt - start_dt).total_seconds() / 86400)
    return (end - start).days


def is_date_in_range(value: dt.date, start: dt.date, end: dt.date) -> bool:
    return start <= value <= end


def date_range(start: dt.date, end: dt.date) -> list[dt.date]:
    """闭区间内的所有日期；start > end 时返回空列表"""
    days: list[dt.date] = []
    current = start
    while current <= end:
        days.append(current)
        current += dt.timedelta(days=1)
    return days


def is_valid_date(raw: str) -> bool:
    if not _ISO_DATE_RE.match(raw or ""):
        return False
    try:
        dt.date.fromisoformat(raw)
    except ValueError:
        return False
    return True


__all__ = [
    "calculate_duration",
    "date_range",
    "format_date",
    "is_date_in_range",
    "is_valid_date",
]
