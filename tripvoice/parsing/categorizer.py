"""费用类别打分：关键词计数 + 完全匹配加权

对整句话按类别关键词表计分，取最高分类别；全部为 0 时归为 OTHER。
纯函数，无 I/O。
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from tripvoice.domain.enums import ExpenseCategory

# 顺序即平局时的优先级：购物/其他放在最后，避免“买了”之类的动词抢走具体类别
CATEGORY_KEYWORDS: dict[ExpenseCategory, tuple[str, ...]] = {
    ExpenseCategory.TRANSPORT: (
        "打车", "交通", "地铁", "公交", "出租车", "网约车", "机票", "火车", "高铁",
        "动车", "大巴", "加油", "停车", "taxi", "uber", "metro", "subway", "bus",
        "train", "flight",
    ),
    ExpenseCategory.ACCOMMODATION: (
        "住宿", "酒店", "旅馆", "民宿", "宾馆", "客栈", "房费", "hotel", "hostel", "airbnb",
    ),
    ExpenseCategory.FOOD: (
        "吃饭", "餐饮", "餐厅", "美食", "早餐", "午餐", "晚餐", "夜宵", "小吃", "饮料",
        "奶茶", "咖啡", "饭", "breakfast", "lunch", "dinner", "meal", "coffee",
    ),
    ExpenseCategory.SIGHTSEEING: (
        "门票", "景点", "景区", "游览", "观光", "博物馆", "公园", "索道", "导游",
        "ticket", "museum", "tour",
    ),
    ExpenseCategory.SHOPPING: (
        "购物", "买", "购买", "商品", "纪念品", "特产", "衣服", "souvenir", "shopping",
    ),
    ExpenseCategory.OTHER: ("其他", "杂项", "misc"),
}

# 整句恰好等于某个关键词时的额外加分
EXACT_MATCH_BONUS = 2.0


def _count_occurrences(lowered: str, keyword: str) -> int:
    kw = keyword.lower()
    if kw.isascii():
        # 英文关键词按单词边界计数，避免 "business" 命中 "bus"
        return len(re.findall(rf"\b{re.escape(kw)}\b", lowered))
    return lowered.count(kw)


def score_categories(
    text: str,
    table: Mapping[ExpenseCategory, Sequence[str]] = CATEGORY_KEYWORDS,
) -> dict[ExpenseCategory, float]:
    """返回每个类别的得分（关键词出现次数 + 完全匹配加分）。"""
    lowered = (text or "").strip().lower()
    scores: dict[ExpenseCategory, float] = {}
    for category, keywords in table.items():
        score = 0.0
        for keyword in keywords:
            score += _count_occurrences(lowered, keyword)
            if lowered and lowered == keyword.lower():
                score += EXACT_MATCH_BONUS
        scores[category] = score
    return scores


def categorize_expense(
    text: str,
    table: Mapping[ExpenseCategory, Sequence[str]] = CATEGORY_KEYWORDS,
) -> ExpenseCategory:
    """取最高分类别；平局按表顺序，全零归为 OTHER。"""
    best = ExpenseCategory.OTHER
    best_score = 0.0
    for category, score in score_categories(text, table).items():
        if score > best_score:
            best, best_score = category, score
    return best


__all__ = [
    "CATEGORY_KEYWORDS",
    "EXACT_MATCH_BONUS",
    "categorize_expense",
    "score_categories",
]
