"""语音记账解析：从一句话中提取金额与描述

按顺序尝试带短语锚点的正则（花了/支出/消费/付了/买了 X 元、spent X on Y、
paid X for Y、裸的 X 元），取第一个金额为正的匹配；都不命中时退化为
“句中第一个数字 + 整句作为描述”。句中没有数字时返回 None（no match）。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from tripvoice.domain.enums import DraftSource
from tripvoice.domain.models import ExpenseDraft
from tripvoice.parsing.categorizer import categorize_expense

# 先试千分位写法（1,200），再试普通数字
_DIGITS = r"(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?"
_NUM = rf"(?P<amount>{_DIGITS})"
_CNY = r"\s*(?:元|块钱|块|rmb|yuan)?"
_TAIL = r"(?:\s*(?:在|的|for|on)?\s*(?P<desc>[^，。！？,.!?]+))?"

EXPENSE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"(?:花了|花费|支出|消费|付了|付款|支付)\s*{_NUM}{_CNY}{_TAIL}", re.IGNORECASE),
    re.compile(rf"买了\s*{_NUM}{_CNY}{_TAIL}", re.IGNORECASE),
    re.compile(rf"\bspent\s*(?:¥|\$)?{_NUM}{_CNY}{_TAIL}", re.IGNORECASE),
    re.compile(rf"\bpaid\s*(?:¥|\$)?{_NUM}{_CNY}{_TAIL}", re.IGNORECASE),
    re.compile(rf"{_NUM}\s*(?:元|块钱|块|rmb|yuan){_TAIL}", re.IGNORECASE),
    re.compile(rf"¥\s*{_NUM}{_TAIL}"),
)

_BARE_NUMBER = re.compile(_DIGITS)
_LEADING_NOISE = re.compile(r"^(?:我|今天|刚才|刚刚|在|去|了|又|和|跟)+")
_FRAGMENT_STRIP = " ：:，,。.！!？?;；"


@dataclass(frozen=True)
class AmountMatch:
    amount: Decimal
    description: Optional[str] = None


def _to_decimal(raw: str) -> Decimal | None:
    try:
        value = Decimal(raw.replace(",", ""))
    except InvalidOperation:
        return None
    return value if value > 0 else None


def _clean_fragment(fragment: str | None) -> str | None:
    if not fragment:
        return None
    cleaned = fragment.strip(_FRAGMENT_STRIP)
    cleaned = _LEADING_NOISE.sub("", cleaned).strip(_FRAGMENT_STRIP)
    return cleaned or None


def extract_amount(text: str) -> AmountMatch | None:
    """提取 {amount, description?}；句中无正数金额时返回 None。"""
    if not text:
        return None
    for pattern in EXPENSE_PATTERNS:
        for match in pattern.finditer(text):
            amount = _to_decimal(match.group("amount"))
            if amount is None:
                continue
            # 尾部描述优先，其次取动词/金额之前的片段（如“打车花了50元”中的“打车”）
            description = _clean_fragment(match.group("desc")) or _clean_fragment(
                text[: match.start()]
            )
            return AmountMatch(amount=amount, description=description)

    for raw in _BARE_NUMBER.findall(text):
        amount = _to_decimal(raw)
        if amount is not None:
            return AmountMatch(amount=amount, description=text.strip() or None)
    return None


def parse_expense_locally(text: str) -> ExpenseDraft | None:
    """本地启发式：金额/描述 + 关键词打分得到类别。"""
    match = extract_amount(text)
    if match is None:
        return None
    return ExpenseDraft(
        amount=match.amount,
        category=categorize_expense(text),
        description=match.description,
        source=DraftSource.HEURISTIC,
    )


__all__ = [
    "AmountMatch",
    "EXPENSE_PATTERNS",
    "extract_amount",
    "parse_expense_locally",
]
