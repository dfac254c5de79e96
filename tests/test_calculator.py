"""Tests for the summary derivation engine."""

import pytest
from datetime import date
from decimal import Decimal

from finance_tracker.models import (
    Budget,
    BudgetHealth,
    BudgetStatus,
    Transaction,
    TransactionType,
)
from finance_tracker.summary import (
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
)


TODAY = date(2024, 6, 15)


def txn(type_, amount, category, when=TODAY, description="test"):
    return Transaction(
        type=type_,
        amount=Decimal(str(amount)),
        category=category,
        description=description,
        date=when,
    )


def budget(category, limit):
    return Budget(category=category, limit=Decimal(str(limit)))


def status(spent, limit, percentage):
    return BudgetStatus(
        category="Food & Dining",
        spent=Decimal(str(spent)),
        limit=Decimal(str(limit)),
        percentage=Decimal(str(percentage)),
    )


class TestCalculateSummary:
    """Tests for income/expense totals."""

    def test_reference_scenario(self):
        """Test salary and dining totals, balance and budget status."""
        transactions = [
            txn("income", 5000, "Salary"),
            txn("expense", 1200, "Food & Dining"),
        ]
        budgets = [budget("Food & Dining", 1500)]

        summary = build_financial_summary(transactions, budgets, today=TODAY)

        assert summary.total_income == Decimal("5000")
        assert summary.total_expenses == Decimal("1200")
        assert summary.balance == Decimal("3800")
        assert len(summary.budget_status) == 1
        food = summary.budget_status[0]
        assert food.category == "Food & Dining"
        assert food.spent == Decimal("1200")
        assert food.limit == Decimal("1500")
        assert food.percentage == Decimal("80")

    def test_over_budget_scenario(self):
        """Test a second dining expense clamps percentage but keeps overage."""
        transactions = [
            txn("expense", 500, "Food & Dining"),
            txn("income", 5000, "Salary"),
            txn("expense", 1200, "Food & Dining"),
        ]
        summary = build_financial_summary(
            transactions, [budget("Food & Dining", 1500)], today=TODAY
        )
        food = summary.budget_status[0]
        assert food.spent == Decimal("1700")
        assert food.percentage == Decimal("100")
        assert over_budget_amount(food) == Decimal("200")
        assert food.spent - food.limit == Decimal("200")

    def test_balance_is_exact_with_cents(self):
        """Test Decimal sums do not drift (0.1 + 0.2 style)."""
        transactions = [
            txn("income", "0.10", "Gift"),
            txn("income", "0.20", "Gift"),
            txn("expense", "0.30", "Other"),
        ]
        summary = calculate_summary(transactions)
        assert summary.total_income == Decimal("0.30")
        assert summary.balance == Decimal("0")
        assert summary.total_income - summary.total_expenses == summary.balance

    def test_empty_log(self):
        """Test no transactions gives zero totals."""
        summary = calculate_summary([])
        assert summary.total_income == 0
        assert summary.total_expenses == 0
        assert summary.balance == 0
        assert summary.budget_status == []

    def test_negative_balance(self):
        """Test spending more than earned gives a negative balance."""
        summary = calculate_summary([
            txn("income", 100, "Gift"),
            txn("expense", 250, "Shopping"),
        ])
        assert summary.balance == Decimal("-150")


class TestDateFilters:
    """Tests for date range and current-month filters."""

    def test_month_bounds(self):
        """Test first and last day, including leap February."""
        assert month_bounds(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds(date(2023, 12, 31)) == (date(2023, 12, 1), date(2023, 12, 31))

    def test_current_month_is_inclusive(self):
        """Test first and last day of the month are included."""
        transactions = [
            txn("expense", 1, "Other", date(2024, 5, 31)),
            txn("expense", 2, "Other", date(2024, 6, 1)),
            txn("expense", 3, "Other", date(2024, 6, 30)),
            txn("expense", 4, "Other", date(2024, 7, 1)),
        ]
        result = get_current_month_transactions(transactions, today=TODAY)
        assert [t.amount for t in result] == [Decimal("2"), Decimal("3")]

    def test_date_range_keeps_order(self):
        """Test range filtering preserves original order."""
        transactions = [
            txn("expense", 1, "Other", date(2024, 6, 10)),
            txn("expense", 2, "Other", date(2024, 6, 2)),
            txn("expense", 3, "Other", date(2024, 6, 20)),
        ]
        result = get_transactions_by_date_range(
            transactions, date(2024, 6, 1), date(2024, 6, 15)
        )
        assert [t.amount for t in result] == [Decimal("1"), Decimal("2")]

    def test_period_filters(self):
        """Test week, month and year look-back windows."""
        transactions = [
            txn("expense", 1, "Other", date(2024, 6, 14)),
            txn("expense", 2, "Other", date(2024, 6, 8)),
            txn("expense", 3, "Other", date(2024, 6, 3)),
            txn("expense", 4, "Other", date(2024, 2, 1)),
            txn("expense", 5, "Other", date(2023, 12, 31)),
        ]
        week = get_transactions_by_period(transactions, "week", today=TODAY)
        month = get_transactions_by_period(transactions, "month", today=TODAY)
        year = get_transactions_by_period(transactions, "year", today=TODAY)
        assert len(week) == 2
        assert len(month) == 3
        assert len(year) == 4

    def test_unknown_period_rejected(self):
        """Test a bad period name raises."""
        with pytest.raises(ValueError):
            get_transactions_by_period([], "decade", today=TODAY)


class TestGrouping:
    """Tests for category and date grouping."""

    def test_group_by_category_preserves_order(self):
        """Test three categories group into three ordered lists."""
        a1 = txn("expense", 1, "Shopping")
        b1 = txn("expense", 2, "Transportation")
        a2 = txn("expense", 3, "Shopping")
        c1 = txn("income", 4, "Salary")
        b2 = txn("expense", 5, "Transportation")

        groups = get_transactions_by_category([a1, b1, a2, c1, b2])

        assert list(groups) == ["Shopping", "Transportation", "Salary"]
        assert groups["Shopping"] == [a1, a2]
        assert groups["Transportation"] == [b1, b2]
        assert groups["Salary"] == [c1]

    def test_group_by_date_newest_first(self):
        """Test days are ordered newest first, entries keep order."""
        first = txn("expense", 1, "Other", date(2024, 6, 1))
        second = txn("expense", 2, "Other", date(2024, 6, 3))
        third = txn("expense", 3, "Other", date(2024, 6, 1))

        groups = group_transactions_by_date([first, second, third])

        assert [day for day, _ in groups] == [date(2024, 6, 3), date(2024, 6, 1)]
        assert groups[1][1] == [first, third]


class TestBudgetStatus:
    """Tests for budget status derivation."""

    def test_zero_limit_gives_zero_percentage(self):
        """Test percentage is 0 rather than dividing by zero."""
        assert budget_percentage(Decimal("50"), Decimal("0")) == 0
        assert budget_percentage(Decimal("50"), Decimal("-1")) == 0

    def test_only_current_month_expenses_count(self):
        """Test last month's and income transactions are ignored."""
        transactions = [
            txn("expense", 100, "Food & Dining", date(2024, 6, 2)),
            txn("expense", 900, "Food & Dining", date(2024, 5, 30)),
            txn("income", 50, "Food & Dining", date(2024, 6, 3)),
            txn("expense", 40, "Shopping", date(2024, 6, 3)),
        ]
        statuses = calculate_budget_status(
            transactions, [budget("Food & Dining", 200)], today=TODAY
        )
        assert statuses[0].spent == Decimal("100")
        assert statuses[0].percentage == Decimal("50")

    def test_budget_without_spending(self):
        """Test a budget with no matching expenses is at 0%."""
        statuses = calculate_budget_status([], [budget("Education", 300)], today=TODAY)
        assert statuses[0].spent == 0
        assert statuses[0].percentage == 0

    def test_status_follows_budget_order(self):
        """Test statuses come back in budget order."""
        budgets = [budget("Shopping", 10), budget("Entertainment", 10), budget("Healthcare", 10)]
        statuses = calculate_budget_status([], budgets, today=TODAY)
        assert [s.category for s in statuses] == ["Shopping", "Entertainment", "Healthcare"]


class TestBudgetHealth:
    """Tests for budget health bands."""

    @pytest.mark.parametrize(
        "spent, expected",
        [
            (0, BudgetHealth.ON_TRACK),
            (50, BudgetHealth.ON_TRACK),
            (51, BudgetHealth.CAUTION),
            (80, BudgetHealth.CAUTION),
            (81, BudgetHealth.ALMOST_AT_LIMIT),
            (100, BudgetHealth.ALMOST_AT_LIMIT),
            (101, BudgetHealth.OVER_BUDGET),
        ],
    )
    def test_bands(self, spent, expected):
        """Test band boundaries on a limit of 100."""
        pct = min(spent, 100)
        assert classify_budget(status(spent, 100, pct)) == expected

    def test_custom_thresholds(self):
        """Test thresholds can be configured."""
        assert classify_budget(
            status(60, 100, 60), on_track_percent=70, warning_percent=90
        ) == BudgetHealth.ON_TRACK


class TestAggregates:
    """Tests for totals across categories and budgets."""

    def test_category_totals_sorted_desc(self):
        """Test totals for one type are summed and ranked."""
        transactions = [
            txn("expense", 10, "Shopping"),
            txn("expense", 30, "Transportation"),
            txn("expense", 25, "Shopping"),
            txn("income", 999, "Salary"),
        ]
        totals = get_category_totals(transactions, TransactionType.EXPENSE, "month", today=TODAY)
        assert [(t.category, t.amount) for t in totals] == [
            ("Shopping", Decimal("35")),
            ("Transportation", Decimal("30")),
        ]

    def test_top_expense_categories_share(self):
        """Test top categories carry their share of total expenses."""
        transactions = [
            txn("expense", 50, "Shopping"),
            txn("expense", 30, "Transportation"),
            txn("expense", 15, "Entertainment"),
            txn("expense", 5, "Other"),
        ]
        top = get_top_expense_categories(transactions)
        assert [t.category for t in top] == ["Shopping", "Transportation", "Entertainment"]
        assert top[0].percentage == Decimal("50")

    def test_top_expense_categories_without_expenses(self):
        """Test no expenses gives an empty list."""
        assert get_top_expense_categories([txn("income", 5, "Gift")]) == []

    def test_budget_overview(self):
        """Test combined budget totals."""
        overview = budget_overview([
            status(1200, 1500, 80),
            status(300, 500, 60),
        ])
        assert overview.total_budget == Decimal("2000")
        assert overview.total_spent == Decimal("1500")
        assert overview.percentage_used == Decimal("75")

    def test_budget_overview_empty(self):
        """Test no budgets gives a zero percentage."""
        overview = budget_overview([])
        assert overview.percentage_used == 0


class TestFormatCurrency:
    """Tests for display formatting."""

    def test_usd(self):
        assert format_currency(Decimal("1234.5")) == "$1,234.50"

    def test_rounds_half_up(self):
        assert format_currency(Decimal("0.005")) == "$0.01"

    def test_negative(self):
        assert format_currency(Decimal("-200")) == "-$200.00"

    def test_other_currency(self):
        assert format_currency(10, "eur") == "€10.00"
        assert format_currency(10, "CHF") == "CHF 10.00"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
