"""
Audit Models for Finance Tracker

Every change to the ledger is recorded as an audit event.
This provides:
1. Traceability of what was added or removed, and when
2. Debugging information when storage misbehaves
3. A record of persistence failures that never reach the user

DESIGN DECISION: Audit events describe what happened; they never carry
the full record. Amounts are rendered as strings so no float enters a log.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    BUDGET_ADDED = "budget_added"
    BUDGET_DELETED = "budget_deleted"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Lifecycle
    SAMPLE_DATA_SEEDED = "sample_data_seeded"
    STORE_READY = "store_ready"
    STORE_DISPOSED = "store_disposed"

    # Storage
    STORAGE_READ_FAILED = "storage_read_failed"
    STORAGE_WRITE_FAILED = "storage_write_failed"

    # System events
    SUBSCRIBER_FAILED = "subscriber_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'budget')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(txn_id, "expense", amount, "Shopping")
        event = AuditEventBuilder.storage_write_failed("budgets", error)
    """

    @staticmethod
    def transaction_added(
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"{transaction_type.capitalize()} of {amount} added to {category}",
            details={
                "type": transaction_type,
                "amount": str(amount),
                "category": category,
            },
        )

    @staticmethod
    def transaction_deleted(transaction_id: str, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=(
                "Transaction deleted" if found
                else "Delete requested for unknown transaction"
            ),
            details={"found": found},
        )

    @staticmethod
    def budget_added(
        budget_id: str,
        category: str,
        limit: Decimal,
        period: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_ADDED,
            entity_type="budget",
            entity_id=budget_id,
            description=f"{period.capitalize()} budget of {limit} set for {category}",
            details={
                "category": category,
                "limit": str(limit),
                "period": period,
            },
        )

    @staticmethod
    def budget_deleted(budget_id: str, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_DELETED,
            entity_type="budget",
            entity_id=budget_id,
            description=(
                "Budget deleted" if found
                else "Delete requested for unknown budget"
            ),
            details={"found": found},
        )

    @staticmethod
    def validation_failed(entity_type: str, issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            description=f"{entity_type.capitalize()} rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def sample_data_seeded(transactions: int, budgets: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAMPLE_DATA_SEEDED,
            description=(
                f"Seeded {transactions} sample transactions and {budgets} sample budgets"
            ),
            details={
                "transactions": transactions,
                "budgets": budgets,
            },
        )

    @staticmethod
    def store_ready(transactions: int, budgets: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_READY,
            description="Finance data loaded",
            details={
                "transactions": transactions,
                "budgets": budgets,
            },
        )

    @staticmethod
    def store_disposed() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_DISPOSED,
            description="Finance store disposed",
        )

    @staticmethod
    def storage_read_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_READ_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="collection",
            entity_id=key,
            description=f"Could not read '{key}', treating it as empty",
            error_message=error_message,
        )

    @staticmethod
    def storage_write_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_WRITE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="collection",
            entity_id=key,
            description=f"Could not write '{key}'",
            error_message=error_message,
        )

    @staticmethod
    def subscriber_failed(subscriber: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIBER_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Summary subscriber {subscriber} raised",
            error_message=error_message,
        )
