"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.finance import (
    Budget,
    BudgetDraft,
    BudgetHealth,
    BudgetOverview,
    BudgetPeriod,
    BudgetStatus,
    Category,
    CategoryTotal,
    FinancialSummary,
    ReportingPeriod,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    generate_id,
)
from finance_tracker.models.categories import (
    DEFAULT_CATEGORIES,
    CategoryCatalog,
    get_default_catalog,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "Budget",
    "BudgetDraft",
    "BudgetHealth",
    "BudgetOverview",
    "BudgetPeriod",
    "BudgetStatus",
    "Category",
    "CategoryTotal",
    "FinancialSummary",
    "ReportingPeriod",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "generate_id",
    # Categories
    "DEFAULT_CATEGORIES",
    "CategoryCatalog",
    "get_default_catalog",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
