"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged.
This provides:
1. Traceability of additions and deletions
2. Visibility into storage failures that are otherwise soft
3. Debugging capability

The audit logger:
- Writes structured events through structlog
- Never raises (a logging failure must not break a mutation)
"""

from decimal import Decimal
from typing import Optional

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Events are emitted as structured log lines under the "finance_tracker.audit"
    logger. Callers get a typed helper per event kind.
    """

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self._logger = logger or structlog.get_logger("finance_tracker.audit")
        self._events: list[AuditEvent] = []
        self._keep_history = False

    def keep_history(self, enabled: bool = True) -> None:
        """Retain emitted events in memory (used by tests and diagnostics)."""
        self._keep_history = enabled

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event locally."""
        if self._keep_history:
            self._events.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Logging must never take down a mutation
            structlog.get_logger(__name__).error(
                "audit_log_failed",
                error=str(e),
                event_type=event.event_type.value,
            )

    def log_transaction_added(
        self,
        transaction_id: str,
        transaction_type: str,
        amount: Decimal,
        category: str,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            amount=amount,
            category=category,
        ))

    def log_transaction_deleted(self, transaction_id: str, found: bool) -> None:
        self.log(AuditEventBuilder.transaction_deleted(transaction_id, found))

    def log_budget_added(
        self,
        budget_id: str,
        category: str,
        limit: Decimal,
        period: str,
    ) -> None:
        self.log(AuditEventBuilder.budget_added(
            budget_id=budget_id,
            category=category,
            limit=limit,
            period=period,
        ))

    def log_budget_deleted(self, budget_id: str, found: bool) -> None:
        self.log(AuditEventBuilder.budget_deleted(budget_id, found))

    def log_validation_failed(self, entity_type: str, issues: list[dict]) -> None:
        self.log(AuditEventBuilder.validation_failed(entity_type, issues))

    def log_sample_data_seeded(self, transactions: int, budgets: int) -> None:
        self.log(AuditEventBuilder.sample_data_seeded(transactions, budgets))

    def log_store_ready(self, transactions: int, budgets: int) -> None:
        self.log(AuditEventBuilder.store_ready(transactions, budgets))

    def log_store_disposed(self) -> None:
        self.log(AuditEventBuilder.store_disposed())

    def log_storage_read_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_read_failed(key, error_message))

    def log_storage_write_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_write_failed(key, error_message))

    def log_subscriber_failed(self, subscriber: str, error_message: str) -> None:
        self.log(AuditEventBuilder.subscriber_failed(subscriber, error_message))
