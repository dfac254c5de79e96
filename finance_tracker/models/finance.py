"""
Core Data Models for Finance Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Keep money as Decimal end to end (no float drift)
3. Be serializable for storage and logging
4. Stay immutable once created

DESIGN DECISION: Stored JSON uses camelCase keys (createdAt); Python code
uses snake_case. Both spellings are accepted on input.

Money is written as a JSON decimal string ("limit": "1500") so no precision
is lost on disk. Records holding JSON numbers (as earlier clients wrote
them) still load, but are rewritten with string amounts on the next save.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def generate_id() -> str:
    """Create a new record identifier."""
    return uuid4().hex


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a money movement."""
    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    """
    Period a budget is declared for.

    NOTE: Budget status is always computed against the current calendar
    month; the period is carried for display.
    """
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ReportingPeriod(str, Enum):
    """Look-back windows used by the period helpers."""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class BudgetHealth(str, Enum):
    """Utilization band of a budget, from its unclamped percentage."""
    ON_TRACK = "on_track"
    CAUTION = "caution"
    ALMOST_AT_LIMIT = "almost_at_limit"
    OVER_BUDGET = "over_budget"


_RECORD_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    str_strip_whitespace=True,
    frozen=True,
)


# =============================================================================
# REFERENCE DATA
# =============================================================================

class Category(BaseModel):
    """
    A predefined category.

    Read-only reference data: never persisted per user.
    """
    model_config = _RECORD_CONFIG

    id: str
    name: str = Field(..., min_length=1)
    icon: str
    color: str
    type: TransactionType


# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single dated income or expense.

    Identity is assigned at creation and the record is never mutated.
    """
    model_config = _RECORD_CONFIG

    id: str = Field(
        default_factory=generate_id,
        min_length=1,
        description="Unique transaction ID"
    )
    type: TransactionType
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive amount; the type carries the sign"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Name of a catalog category"
    )
    description: str = Field(
        default="",
        max_length=500,
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the movement"
    )
    created_at: dt.datetime = Field(
        default_factory=utc_now,
        description="When the record was created"
    )

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE

    def to_storage_dict(self) -> dict:
        """Serialize with the on-disk key names."""
        return self.model_dump(mode="json", by_alias=True)


class Budget(BaseModel):
    """
    A per-category spending ceiling.

    At most one budget exists per category. That rule is enforced by the
    validator before persistence, not by storage.
    """
    model_config = _RECORD_CONFIG

    id: str = Field(
        default_factory=generate_id,
        min_length=1,
        description="Unique budget ID"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Name of an expense category"
    )
    limit: Decimal = Field(
        ...,
        gt=0,
        description="Spending ceiling"
    )
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    color: str = Field(
        default="#6366f1",
        description="Display colour"
    )
    created_at: dt.datetime = Field(
        default_factory=utc_now,
    )

    def to_storage_dict(self) -> dict:
        """Serialize with the on-disk key names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# INPUT DRAFTS
# =============================================================================

AmountInput = Union[Decimal, int, float, str]


class TransactionDraft(BaseModel):
    """
    User-submitted transaction before validation.

    Deliberately lax: the validator turns bad input into readable messages.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    type: Optional[str] = None
    amount: Optional[AmountInput] = None
    category: Optional[str] = None
    description: Optional[str] = None
    date: Optional[dt.date] = Field(
        default=None,
        description="Defaults to today when omitted"
    )


class BudgetDraft(BaseModel):
    """User-submitted budget before validation."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    category: Optional[str] = None
    limit: Optional[AmountInput] = None
    period: Optional[str] = BudgetPeriod.MONTHLY.value
    color: Optional[str] = Field(
        default=None,
        description="Defaults to the category's catalog colour"
    )


# =============================================================================
# DERIVED VALUES (never stored)
# =============================================================================

class BudgetStatus(BaseModel):
    """
    Utilization of one budget in the current month.

    `percentage` is clamped to 100 for progress bars. Anything that reports
    an overage must use `spent` and `limit`, which are never clamped.
    """
    model_config = ConfigDict(frozen=True)

    category: str
    spent: Decimal
    limit: Decimal
    percentage: Decimal = Field(
        ...,
        ge=0,
        le=100,
        description="Display percentage, capped at 100"
    )

    @property
    def true_percentage(self) -> Decimal:
        if self.limit <= 0:
            return Decimal("0")
        return self.spent / self.limit * 100

    @property
    def over_budget_amount(self) -> Decimal:
        return max(self.spent - self.limit, Decimal("0"))

    @property
    def is_over_budget(self) -> bool:
        return self.spent > self.limit

    @property
    def remaining(self) -> Decimal:
        return self.limit - self.spent


class FinancialSummary(BaseModel):
    """Totals, balance and budget utilization derived from the log."""
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    budget_status: list[BudgetStatus] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "FinancialSummary":
        return cls()

    def status_for(self, category: str) -> Optional[BudgetStatus]:
        """Find the budget status for a category, if it has a budget."""
        for status in self.budget_status:
            if status.category == category:
                return status
        return None


class CategoryTotal(BaseModel):
    """Sum of one category's transactions."""
    model_config = ConfigDict(frozen=True)

    category: str
    amount: Decimal
    percentage: Optional[Decimal] = Field(
        default=None,
        description="Share of the overall total, when requested"
    )


class BudgetOverview(BaseModel):
    """Aggregate of all budgets together."""
    model_config = ConfigDict(frozen=True)

    total_budget: Decimal
    total_spent: Decimal
    percentage_used: Decimal


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'duplicate')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Outcome of validating one draft."""

    entity_type: str = Field(
        ...,
        description="What was validated ('transaction' or 'budget')"
    )
    validated_at: dt.datetime = Field(
        default_factory=utc_now
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues if issue.severity == "error"]
