"""
Tests for Finance Tracker

Test strategy:
1. Unit tests for individual components (models, validators, calculator)
2. Integration tests for flows (with in-memory storage)
3. No real home directory in tests (file stores use tmp_path)
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from pydantic import ValidationError

from finance_tracker.models import (
    DEFAULT_CATEGORIES,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Budget,
    BudgetPeriod,
    BudgetStatus,
    CategoryCatalog,
    FinancialSummary,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)


class TestTransactionModel:
    """Tests for the Transaction model."""

    def test_transaction_creation(self):
        """Test Transaction gets an id and timestamp."""
        txn = Transaction(
            type=TransactionType.EXPENSE,
            amount=Decimal("42.50"),
            category="Shopping",
            description="Shoes",
            date=date(2024, 6, 1),
        )
        assert txn.id
        assert txn.created_at.tzinfo is not None
        assert txn.is_expense
        assert not txn.is_income

    def test_transaction_ids_are_unique(self):
        """Test two transactions never share an id."""
        kwargs = dict(type="income", amount=Decimal("1"), category="Gift", date=date(2024, 1, 1))
        assert Transaction(**kwargs).id != Transaction(**kwargs).id

    def test_transaction_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in (Decimal("0"), Decimal("-5")):
            with pytest.raises(ValidationError):
                Transaction(type="expense", amount=amount, category="Other", date=date(2024, 1, 1))

    def test_transaction_is_immutable(self):
        """Test transactions cannot be mutated after creation."""
        txn = Transaction(type="expense", amount=Decimal("1"), category="Other", date=date(2024, 1, 1))
        with pytest.raises(ValidationError):
            txn.amount = Decimal("2")

    def test_transaction_storage_dict_uses_camel_case(self):
        """Test on-disk keys match the durable layout."""
        txn = Transaction(
            id="abc",
            type="income",
            amount=Decimal("5000"),
            category="Salary",
            description="Monthly Salary",
            date=date(2024, 6, 1),
            created_at=datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc),
        )
        data = txn.to_storage_dict()
        assert set(data) == {"id", "type", "amount", "category", "description", "date", "createdAt"}
        assert data["amount"] == "5000"
        assert data["date"] == "2024-06-01"
        assert data["type"] == "income"

    def test_transaction_loads_legacy_record(self):
        """Test a record written by an older client (numeric amount) loads."""
        txn = Transaction.model_validate({
            "id": "1718000000000abc123xyz",
            "type": "expense",
            "amount": 1200,
            "category": "Food & Dining",
            "description": "Groceries and restaurants",
            "date": "2024-06-10",
            "createdAt": "2024-06-10T08:30:00.000Z",
        })
        assert txn.id == "1718000000000abc123xyz"
        assert txn.amount == Decimal("1200")
        assert txn.date == date(2024, 6, 10)


class TestBudgetModel:
    """Tests for the Budget model."""

    def test_budget_defaults(self):
        """Test Budget defaults to a monthly period."""
        budget = Budget(category="Food & Dining", limit=Decimal("1500"))
        assert budget.period == BudgetPeriod.MONTHLY
        assert budget.id

    def test_budget_rejects_zero_limit(self):
        """Test a stored budget must have a positive limit."""
        with pytest.raises(ValidationError):
            Budget(category="Food & Dining", limit=Decimal("0"))

    def test_budget_rejects_unknown_period(self):
        """Test period is restricted to weekly, monthly, yearly."""
        with pytest.raises(ValidationError):
            Budget(category="Food & Dining", limit=Decimal("10"), period="daily")


class TestBudgetStatus:
    """Tests for the clamped and true budget figures."""

    def test_over_budget_amount_uses_true_values(self):
        """Test overage is spent - limit even though percentage is capped."""
        status = BudgetStatus(
            category="Food & Dining",
            spent=Decimal("1700"),
            limit=Decimal("1500"),
            percentage=Decimal("100"),
        )
        assert status.percentage == Decimal("100")
        assert status.over_budget_amount == Decimal("200")
        assert status.is_over_budget is True
        assert status.remaining == Decimal("-200")
        assert status.true_percentage > Decimal("113")

    def test_within_budget_has_no_overage(self):
        """Test a budget under its limit reports zero overage."""
        status = BudgetStatus(
            category="Transportation",
            spent=Decimal("800"),
            limit=Decimal("1000"),
            percentage=Decimal("80"),
        )
        assert status.over_budget_amount == Decimal("0")
        assert status.remaining == Decimal("200")

    def test_percentage_cannot_exceed_100(self):
        """Test the display percentage is bounded."""
        with pytest.raises(ValidationError):
            BudgetStatus(
                category="Other",
                spent=Decimal("2"),
                limit=Decimal("1"),
                percentage=Decimal("200"),
            )

    def test_summary_status_lookup(self):
        """Test FinancialSummary.status_for finds a category."""
        status = BudgetStatus(
            category="Shopping", spent=Decimal("1"), limit=Decimal("2"), percentage=Decimal("50")
        )
        summary = FinancialSummary(budget_status=[status])
        assert summary.status_for("Shopping") is status
        assert summary.status_for("Education") is None

    def test_empty_summary(self):
        """Test the pre-load summary is all zeros."""
        summary = FinancialSummary.empty()
        assert summary.total_income == 0
        assert summary.total_expenses == 0
        assert summary.balance == 0
        assert summary.budget_status == []


class TestCategoryCatalog:
    """Tests for the category catalog."""

    def test_default_catalog_size(self):
        """Test the built-in catalog has 8 expense and 5 income categories."""
        catalog = CategoryCatalog(DEFAULT_CATEGORIES)
        assert len(catalog) == 13
        assert len(catalog.for_type(TransactionType.EXPENSE)) == 8
        assert len(catalog.for_type(TransactionType.INCOME)) == 5

    def test_lookup_by_name(self):
        """Test categories are looked up by exact name."""
        catalog = CategoryCatalog()
        assert catalog.is_known("Food & Dining")
        assert "Salary" in catalog
        assert not catalog.is_known("food & dining")
        assert catalog.get("Salary").type == TransactionType.INCOME

    def test_color_and_icon_fallbacks(self):
        """Test unknown categories fall back to defaults."""
        catalog = CategoryCatalog()
        assert catalog.color_for("Food & Dining") == "#FF6B6B"
        assert catalog.color_for("Nope", default="#000000") == "#000000"
        assert catalog.icon_for("Nope") == "💰"

    def test_names_in_catalog_order(self):
        """Test names keep catalog order."""
        catalog = CategoryCatalog()
        assert catalog.names(TransactionType.INCOME) == [
            "Salary", "Freelance", "Investment", "Gift", "Other Income",
        ]


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Test transaction added",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.transaction_added(
            transaction_id="t1",
            transaction_type="expense",
            amount=Decimal("12.50"),
            category="Shopping",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "transaction_added"
        assert log_dict["entity_id"] == "t1"
        assert log_dict["details"]["amount"] == "12.50"

    def test_storage_write_failure_is_error(self):
        """Test write failures are logged at error severity."""
        event = AuditEventBuilder.storage_write_failed("budgets", "disk full")
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"
        assert event.entity_id == "budgets"


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            entity_type="transaction",
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount is required",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.is_valid is False
        assert result.error_count == 1
        assert result.messages == ["Amount is required"]

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            entity_type="budget",
            issues=[
                ValidationIssue(
                    field="limit",
                    issue_type="suspicious_value",
                    message="Limit seems high",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.is_valid is True
        assert result.error_count == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
