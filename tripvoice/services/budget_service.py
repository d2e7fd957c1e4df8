"""预算统计：总览、超支提醒、分类占比、每日花费"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel, Field

from tripvoice.domain.enums import AlertLevel, ExpenseCategory
from tripvoice.domain.models import CATEGORY_LABELS
from tripvoice.persistence.models import ExpenseRecord

# 各类别占总预算的默认比例
CATEGORY_BUDGET_RATIOS: dict[ExpenseCategory, Decimal] = {
    ExpenseCategory.TRANSPORT: Decimal("0.20"),
    ExpenseCategory.ACCOMMODATION: Decimal("0.30"),
    ExpenseCategory.FOOD: Decimal("0.25"),
    ExpenseCategory.SIGHTSEEING: Decimal("0.15"),
    ExpenseCategory.SHOPPING: Decimal("0.05"),
    ExpenseCategory.OTHER: Decimal("0.05"),
}

USAGE_WARNING_PERCENT = Decimal("80")
CATEGORY_WARNING_SHARE = Decimal("0.30")


class BudgetSummary(BaseModel):
    total_budget: Decimal = Decimal("0")
    total_spent: Decimal = Decimal("0")
    remaining_budget: Decimal = Decimal("0")
    category_breakdown: dict[ExpenseCategory, Decimal] = Field(default_factory=dict)


class BudgetAlert(BaseModel):
    level: AlertLevel
    message: str
    category: ExpenseCategory | None = None


class CategoryStat(BaseModel):
    category: ExpenseCategory
    label: str
    spent: Decimal
    budget: Decimal
    percentage: float


class DailySpending(BaseModel):
    date: str
    amount: Decimal


def summarize_budget(total_budget: Decimal, expenses: Iterable[ExpenseRecord]) -> BudgetSummary:
    breakdown: dict[ExpenseCategory, Decimal] = defaultdict(Decimal)
    for expense in expenses:
        breakdown[expense.category] += expense.amount
    total_spent = sum(breakdown.values(), Decimal("0"))
    return BudgetSummary(
        total_budget=total_budget,
        total_spent=total_spent,
        remaining_budget=total_budget - total_spent,
        category_breakdown=dict(breakdown),
    )


def budget_alerts(summary: BudgetSummary) -> list[BudgetAlert]:
    alerts: list[BudgetAlert] = []
    if summary.remaining_budget < 0:
        alerts.append(
            BudgetAlert(level=AlertLevel.DANGER, message=f"预算超支 ¥{abs(summary.remaining_budget):,.2f}")
        )

    if summary.total_budget <= 0:
        return alerts

    usage = summary.total_spent / summary.total_budget * 100
    if usage > USAGE_WARNING_PERCENT:
        alerts.append(BudgetAlert(level=AlertLevel.WARNING, message=f"预算使用率已达 {usage:.0f}%"))

    threshold = summary.total_budget * CATEGORY_WARNING_SHARE
    for category, spent in summary.category_breakdown.items():
        if spent > threshold:
            alerts.append(
                BudgetAlert(
                    level=AlertLevel.WARNING,
                    message=f"{CATEGORY_LABELS[category]}支出较高: ¥{spent:,.2f}",
                    category=category,
                )
            )
    return alerts


def category_stats(summary: BudgetSummary) -> list[CategoryStat]:
    stats: list[CategoryStat] = []
    for category, spent in summary.category_breakdown.items():
        budget = summary.total_budget * CATEGORY_BUDGET_RATIOS[category]
        percentage = float(min(spent / budget * 100, Decimal("100"))) if budget > 0 else 0.0
        stats.append(
            CategoryStat(
                category=category,
                label=CATEGORY_LABELS[category],
                spent=spent,
                budget=budget,
                percentage=round(percentage, 1),
            )
        )
    return stats


def daily_spending(expenses: Iterable[ExpenseRecord]) -> list[DailySpending]:
    per_day: dict[str, Decimal] = defaultdict(Decimal)
    for expense in expenses:
        per_day[expense.created_at[:10]] += expense.amount
    return [DailySpending(date=day, amount=amount) for day, amount in sorted(per_day.items())]


__all__ = [
    "BudgetAlert",
    "BudgetSummary",
    "CATEGORY_BUDGET_RATIOS",
    "CategoryStat",
    "DailySpending",
    "budget_alerts",
    "category_stats",
    "daily_spending",
    "summarize_budget",
]
