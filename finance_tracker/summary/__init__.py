"""Summary derivation package."""

from finance_tracker.summary.calculator import (
    budget_overview,
    budget_percentage,
    build_financial_summary,
    calculate_budget_status,
    calculate_summary,
    classify_budget,
    format_currency,
    get_category_totals,
    get_current_month_transactions,
    get_top_expense_categories,
    get_transactions_by_category,
    get_transactions_by_date_range,
    get_transactions_by_period,
    group_transactions_by_date,
    month_bounds,
    over_budget_amount,
    period_start,
)

__all__ = [
    "budget_overview",
    "budget_percentage",
    "build_financial_summary",
    "calculate_budget_status",
    "calculate_summary",
    "classify_budget",
    "format_currency",
    "get_category_totals",
    "get_current_month_transactions",
    "get_top_expense_categories",
    "get_transactions_by_category",
    "get_transactions_by_date_range",
    "get_transactions_by_period",
    "group_transactions_by_date",
    "month_bounds",
    "over_budget_amount",
    "period_start",
]
