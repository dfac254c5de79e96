"""
Summary Derivation Engine

DESIGN DECISION: Every figure shown to the user is DERIVED, never stored.
The functions here are pure: they take a snapshot of transactions and
budgets and return new values. No I/O, no clock reads except where `today`
is left to default.

Money is summed as Decimal so that
    total_income - total_expenses == balance
holds exactly. Rounding to two places happens only in `format_currency`.
"""

import calendar
from collections import defaultdict
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence, Union

from finance_tracker.models.finance import (
    Budget,
    BudgetHealth,
    BudgetOverview,
    BudgetStatus,
    CategoryTotal,
    FinancialSummary,
    ReportingPeriod,
    Transaction,
    TransactionType,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "INR": "₹",
    "JPY": "¥",
}


def _sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


# =============================================================================
# TOTALS
# =============================================================================

def calculate_summary(transactions: Iterable[Transaction]) -> FinancialSummary:
    """
    Income, expense and balance totals over all transactions.

    The returned summary has no budget status; see `build_financial_summary`.
    """
    total_income = ZERO
    total_expenses = ZERO
    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            total_income += transaction.amount
        else:
            total_expenses += transaction.amount

    return FinancialSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
    )


# =============================================================================
# FILTERS AND GROUPINGS
# =============================================================================

def get_transactions_by_date_range(
    transactions: Iterable[Transaction],
    start: date,
    end: date,
) -> list[Transaction]:
    """Transactions dated within [start, end], inclusive, in original order."""
    return [t for t in transactions if start <= t.date <= end]


def month_bounds(today: date) -> tuple[date, date]:
    """First and last day of the month containing `today`."""
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1), today.replace(day=last_day)


def get_current_month_transactions(
    transactions: Iterable[Transaction],
    today: Optional[date] = None,
) -> list[Transaction]:
    """Transactions dated in the calendar month containing `today`."""
    start, end = month_bounds(today or date.today())
    return get_transactions_by_date_range(transactions, start, end)


def get_transactions_by_category(
    transactions: Iterable[Transaction],
) -> dict[str, list[Transaction]]:
    """
    Group transactions by category name.

    Groups appear in first-seen order and keep the original relative order
    of their members.
    """
    groups: dict[str, list[Transaction]] = {}
    for transaction in transactions:
        groups.setdefault(transaction.category, []).append(transaction)
    return groups


def period_start(period: Union[ReportingPeriod, str], today: date) -> date:
    """Earliest date included in a look-back period."""
    period = ReportingPeriod(period)
    if period == ReportingPeriod.WEEK:
        return today - timedelta(days=7)
    if period == ReportingPeriod.MONTH:
        return today.replace(day=1)
    return today.replace(month=1, day=1)


def get_transactions_by_period(
    transactions: Iterable[Transaction],
    period: Union[ReportingPeriod, str],
    today: Optional[date] = None,
) -> list[Transaction]:
    """
    Transactions dated on or after the start of a period.

    week: the last seven days; month: since the 1st; year: since January 1st.
    """
    start = period_start(period, today or date.today())
    return [t for t in transactions if t.date >= start]


def get_category_totals(
    transactions: Iterable[Transaction],
    transaction_type: Union[TransactionType, str],
    period: Union[ReportingPeriod, str] = ReportingPeriod.MONTH,
    today: Optional[date] = None,
) -> list[CategoryTotal]:
    """Per-category totals of one type within a period, largest first."""
    transaction_type = TransactionType(transaction_type)
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for transaction in get_transactions_by_period(transactions, period, today):
        if transaction.type == transaction_type:
            totals[transaction.category] += transaction.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [CategoryTotal(category=name, amount=amount) for name, amount in ranked]


def get_top_expense_categories(
    transactions: Sequence[Transaction],
    limit: int = 3,
) -> list[CategoryTotal]:
    """
    Largest expense categories over all transactions.

    Each entry carries its share of total expenses.
    """
    expenses = [t for t in transactions if t.type == TransactionType.EXPENSE]
    total_expenses = _sum_amounts(expenses)

    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    for transaction in expenses:
        totals[transaction.category] += transaction.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)[:limit]
    return [
        CategoryTotal(
            category=name,
            amount=amount,
            percentage=(amount / total_expenses * HUNDRED) if total_expenses > 0 else ZERO,
        )
        for name, amount in ranked
    ]


def group_transactions_by_date(
    transactions: Iterable[Transaction],
) -> list[tuple[date, list[Transaction]]]:
    """Transactions grouped per day, newest day first."""
    groups: dict[date, list[Transaction]] = {}
    for transaction in transactions:
        groups.setdefault(transaction.date, []).append(transaction)
    return sorted(groups.items(), key=lambda item: item[0], reverse=True)


# =============================================================================
# BUDGETS
# =============================================================================

def budget_percentage(spent: Decimal, limit: Decimal) -> Decimal:
    """
    Utilization as a display percentage.

    Zero for a non-positive limit; capped at 100.
    """
    if limit <= 0:
        return ZERO
    return min(spent / limit * HUNDRED, HUNDRED)


def calculate_budget_status(
    transactions: Iterable[Transaction],
    budgets: Iterable[Budget],
    today: Optional[date] = None,
) -> list[BudgetStatus]:
    """
    Spending against each budget for the current month.

    Only expense transactions dated in the current calendar month count.
    Statuses are returned in budget order.
    """
    current_month = get_current_month_transactions(transactions, today)
    expenses_by_category = get_transactions_by_category(
        t for t in current_month if t.type == TransactionType.EXPENSE
    )

    statuses = []
    for budget in budgets:
        spent = _sum_amounts(expenses_by_category.get(budget.category, []))
        statuses.append(BudgetStatus(
            category=budget.category,
            spent=spent,
            limit=budget.limit,
            percentage=budget_percentage(spent, budget.limit),
        ))
    return statuses


def build_financial_summary(
    transactions: Sequence[Transaction],
    budgets: Sequence[Budget],
    today: Optional[date] = None,
) -> FinancialSummary:
    """Totals over all transactions plus this month's budget status."""
    totals = calculate_summary(transactions)
    return totals.model_copy(update={
        "budget_status": calculate_budget_status(transactions, budgets, today),
    })


def over_budget_amount(status: BudgetStatus) -> Decimal:
    """How far spending exceeds the limit (0 when within budget)."""
    return status.over_budget_amount


def classify_budget(
    status: BudgetStatus,
    on_track_percent: float = 50.0,
    warning_percent: float = 80.0,
) -> BudgetHealth:
    """
    Band a budget by its unclamped utilization.

    on_track: <= on_track_percent
    caution: up to warning_percent
    almost_at_limit: up to 100
    over_budget: above 100
    """
    percentage = status.true_percentage
    if percentage > HUNDRED:
        return BudgetHealth.OVER_BUDGET
    if percentage > Decimal(str(warning_percent)):
        return BudgetHealth.ALMOST_AT_LIMIT
    if percentage > Decimal(str(on_track_percent)):
        return BudgetHealth.CAUTION
    return BudgetHealth.ON_TRACK


def budget_overview(statuses: Iterable[BudgetStatus]) -> BudgetOverview:
    """All budgets combined: total limit, total spent, share used."""
    statuses = list(statuses)
    total_budget = sum((s.limit for s in statuses), ZERO)
    total_spent = sum((s.spent for s in statuses), ZERO)
    percentage_used = (
        total_spent / total_budget * HUNDRED if total_budget > 0 else ZERO
    )
    return BudgetOverview(
        total_budget=total_budget,
        total_spent=total_spent,
        percentage_used=percentage_used,
    )


# =============================================================================
# DISPLAY
# =============================================================================

def format_currency(amount: Union[Decimal, int, float, str], currency: str = "USD") -> str:
    """
    Render an amount for display, rounded half-up to two places.

    >>> format_currency(Decimal("1234.5"))
    '$1,234.50'
    """
    value = Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
    code = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
