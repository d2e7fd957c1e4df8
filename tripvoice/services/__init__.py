from tripvoice.services.budget_service import (
    CATEGORY_BUDGET_RATIOS,
    BudgetAlert,
    BudgetSummary,
    CategoryStat,
    DailySpending,
    budget_alerts,
    category_stats,
    daily_spending,
    summarize_budget,
)

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
