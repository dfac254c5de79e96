"""
Finance Store: the state coordinator

This module owns the session's in-memory ledger and defines the flows for:
1. Startup (seed if first run → load both collections → publish summary)
2. Mutations (validate → persist → update memory → recompute → publish)

DESIGN DECISION: The store is an explicit object with a lifecycle
(uninitialized → loading → ready → disposed) that is handed to consumers.
There is no module-level ledger state.

DESIGN DECISION: Persist first, then change memory. If a write raises,
the in-memory collections still match what is on disk.
Mutations run one at a time under the store's lock, so checks made against
memory (such as one budget per category) still hold when the write lands.

Every mutation recomputes the full FinancialSummary. At personal scale
a full recompute is cheap and cannot drift the way running totals can.
"""

import asyncio
from datetime import date
from enum import Enum
from typing import Callable, Optional, Union

import structlog
from pydantic import ValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.config import Settings, get_settings
from finance_tracker.models.categories import CategoryCatalog, get_default_catalog
from finance_tracker.models.finance import (
    Budget,
    BudgetDraft,
    BudgetHealth,
    BudgetOverview,
    BudgetPeriod,
    CategoryTotal,
    FinancialSummary,
    ReportingPeriod,
    Transaction,
    TransactionDraft,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from finance_tracker.seeding import SampleDataSeeder
from finance_tracker.services.storage import (
    FinanceStorageInterface,
    JsonFileKeyValueStore,
    KeyValueFinanceStorage,
    KeyValueStore,
    StorageError,
)
from finance_tracker.summary import (
    budget_overview,
    build_financial_summary,
    classify_budget,
    get_category_totals,
    get_top_expense_categories,
    get_transactions_by_period,
)
from finance_tracker.validation import (
    FinanceValidationError,
    FinanceValidator,
    parse_amount,
)


logger = structlog.get_logger(__name__)

SummaryListener = Callable[[FinancialSummary], None]


class StoreState(str, Enum):
    """Lifecycle of a FinanceStore."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    DISPOSED = "disposed"


class StoreNotReadyError(RuntimeError):
    """A mutation was attempted before the store finished loading, or after disposal."""

    def __init__(self, state: StoreState):
        self.state = state
        super().__init__(
            f"Finance store is {state.value}; wait until it is ready"
        )


class FinanceStore:
    """
    Authoritative in-memory ledger for one session.

    Consumers:
    - await `initialize()` (or `wait_until_ready()`) once
    - call the mutation methods
    - read `summary` or `subscribe()` to be told when it changes
    """

    def __init__(
        self,
        storage: FinanceStorageInterface,
        validator: Optional[FinanceValidator] = None,
        seeder: Optional[SampleDataSeeder] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], date] = date.today,
        on_track_percent: float = 50.0,
        warning_percent: float = 80.0,
    ):
        self._storage = storage
        self._validator = validator or FinanceValidator()
        self._seeder = seeder
        self._audit_logger = audit_logger
        self._clock = clock
        self._on_track_percent = on_track_percent
        self._warning_percent = warning_percent

        self._transactions: list[Transaction] = []
        self._budgets: list[Budget] = []
        self._summary = FinancialSummary.empty()
        self._subscribers: list[SummaryListener] = []

        self._state = StoreState.UNINITIALIZED
        self._ready = asyncio.Event()
        self._load_task: Optional[asyncio.Task] = None
        self._mutation_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state == StoreState.READY

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Snapshot of transactions, most recently added first."""
        return tuple(self._transactions)

    @property
    def budgets(self) -> tuple[Budget, ...]:
        """Snapshot of budgets in insertion order."""
        return tuple(self._budgets)

    @property
    def summary(self) -> FinancialSummary:
        return self._summary

    @property
    def catalog(self) -> CategoryCatalog:
        return self._validator.catalog

    def get_transactions_by_period(
        self,
        period: Union[ReportingPeriod, str],
    ) -> list[Transaction]:
        return get_transactions_by_period(self._transactions, period, today=self._clock())

    def get_category_totals(
        self,
        transaction_type: Union[TransactionType, str],
        period: Union[ReportingPeriod, str] = ReportingPeriod.MONTH,
    ) -> list[CategoryTotal]:
        return get_category_totals(
            self._transactions,
            transaction_type,
            period,
            today=self._clock(),
        )

    def get_top_expense_categories(self, limit: int = 3) -> list[CategoryTotal]:
        return get_top_expense_categories(self._transactions, limit)

    def get_budget_overview(self) -> BudgetOverview:
        return budget_overview(self._summary.budget_status)

    def get_budget_health(self) -> dict[str, BudgetHealth]:
        """Health band of every budget, keyed by category."""
        return {
            status.category: classify_budget(
                status,
                on_track_percent=self._on_track_percent,
                warning_percent=self._warning_percent,
            )
            for status in self._summary.budget_status
        }

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def initialize(self) -> None:
        """
        Seed (first run only), load both collections and become ready.

        Concurrent callers share one load. Calling again once ready is a no-op.
        """
        if self._state == StoreState.DISPOSED:
            raise StoreNotReadyError(self._state)
        if self._state == StoreState.READY:
            return
        if self._load_task is None:
            self._load_task = asyncio.ensure_future(self._load())
        await self._load_task
        if self._state != StoreState.READY:
            raise StoreNotReadyError(self._state)

    async def wait_until_ready(self) -> None:
        """
        Wait for the first load to finish.

        Raises:
            StoreNotReadyError: If the store is disposed before it becomes ready
        """
        if self._state == StoreState.DISPOSED:
            raise StoreNotReadyError(self._state)
        await self._ready.wait()
        if self._state != StoreState.READY:
            raise StoreNotReadyError(self._state)

    async def _load(self) -> None:
        if self._state == StoreState.DISPOSED:
            return
        self._state = StoreState.LOADING
        logger.info("finance_store_loading")
        try:
            if self._seeder is not None:
                try:
                    await self._seeder.seed()
                except StorageError as e:
                    # Seeding is a convenience; a failure must not block startup
                    logger.error("sample_data_seed_failed", error=str(e))

            transactions, budgets = await self._storage.load_all()
        except BaseException:
            if self._state != StoreState.DISPOSED:
                self._state = StoreState.UNINITIALIZED
                self._load_task = None
            raise

        if self._state == StoreState.DISPOSED:
            return

        self._transactions = list(transactions)
        self._budgets = list(budgets)
        self._state = StoreState.READY
        self._recompute()
        self._ready.set()

        logger.info(
            "finance_store_ready",
            transactions=len(self._transactions),
            budgets=len(self._budgets),
        )
        if self._audit_logger:
            self._audit_logger.log_store_ready(len(self._transactions), len(self._budgets))

    async def refresh(self) -> None:
        """Reload both collections from storage and republish."""
        self._require_ready()
        async with self._mutation_lock:
            transactions, budgets = await self._storage.load_all()
            self._transactions = list(transactions)
            self._budgets = list(budgets)
            self._recompute()

    def dispose(self) -> None:
        """Drop subscribers and refuse further mutations."""
        if self._state == StoreState.DISPOSED:
            return
        self._state = StoreState.DISPOSED
        self._subscribers.clear()
        # Wake anyone still waiting on the first load
        self._ready.set()
        if self._audit_logger:
            self._audit_logger.log_store_disposed()

    async def __aenter__(self) -> "FinanceStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def _require_ready(self) -> None:
        if self._state != StoreState.READY:
            raise StoreNotReadyError(self._state)

    # -------------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------------

    def subscribe(self, listener: SummaryListener) -> Callable[[], None]:
        """
        Register a listener for summary updates.

        If the store is already ready the listener is called at once with the
        current summary. Returns a function that unsubscribes it.
        """
        self._subscribers.append(listener)
        if self._state == StoreState.READY:
            self._notify_one(listener, self._summary)

        def unsubscribe() -> None:
            if listener in self._subscribers:
                self._subscribers.remove(listener)

        return unsubscribe

    def _notify_one(self, listener: SummaryListener, summary: FinancialSummary) -> None:
        try:
            listener(summary)
        except Exception as e:
            name = getattr(listener, "__qualname__", repr(listener))
            logger.exception("summary_subscriber_failed", subscriber=name)
            if self._audit_logger:
                self._audit_logger.log_subscriber_failed(name, str(e))

    def _recompute(self) -> None:
        self._summary = build_financial_summary(
            self._transactions,
            self._budgets,
            today=self._clock(),
        )
        for listener in list(self._subscribers):
            self._notify_one(listener, self._summary)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _reject(self, result: ValidationResult) -> FinanceValidationError:
        issues = [
            {"field": i.field, "type": i.issue_type, "message": i.message}
            for i in result.issues
        ]
        logger.info("draft_rejected", entity_type=result.entity_type, issues=issues)
        if self._audit_logger:
            self._audit_logger.log_validation_failed(result.entity_type, issues)
        return FinanceValidationError(result)

    def _coerce_draft(self, draft, model, entity_type: str):
        """Build a draft model from a plain dict, rejecting malformed fields."""
        if not isinstance(draft, dict):
            return draft
        try:
            return model.model_validate(draft)
        except ValidationError as e:
            issues: list[ValidationIssue] = []
            seen: set[str] = set()
            for error in e.errors():
                # Union members report one error each under the same field
                field = str(error["loc"][0]) if error["loc"] else entity_type
                if field in seen:
                    continue
                seen.add(field)
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="invalid_format",
                    message=f"Please enter a valid {field}",
                ))
            raise self._reject(
                ValidationResult(entity_type=entity_type, issues=issues)
            ) from e

    async def add_transaction(
        self,
        draft: Union[TransactionDraft, dict],
    ) -> Transaction:
        """
        Validate, persist and prepend a new transaction.

        Raises:
            StoreNotReadyError: If the store is not ready
            FinanceValidationError: If the draft is invalid (nothing is written)
            StorageWriteError: If the write failed with strict writes enabled
        """
        self._require_ready()
        draft = self._coerce_draft(draft, TransactionDraft, "transaction")

        async with self._mutation_lock:
            self._require_ready()
            result = self._validator.validate_transaction(draft)
            if not result.is_valid:
                raise self._reject(result)

            transaction = Transaction(
                type=TransactionType(draft.type),
                amount=parse_amount(draft.amount),
                category=draft.category,
                description=draft.description,
                date=draft.date or self._clock(),
            )

            await self._storage.add_transaction(transaction)
            self._transactions.insert(0, transaction)

            if self._audit_logger:
                self._audit_logger.log_transaction_added(
                    transaction_id=transaction.id,
                    transaction_type=transaction.type.value,
                    amount=transaction.amount,
                    category=transaction.category,
                )
            self._recompute()
        return transaction

    async def delete_transaction(self, transaction_id: str) -> bool:
        """
        Remove a transaction by ID. Unknown IDs are a no-op.

        Returns:
            True if a stored transaction was removed
        """
        self._require_ready()
        async with self._mutation_lock:
            self._require_ready()
            found = await self._storage.delete_transaction(transaction_id)
            self._transactions = [t for t in self._transactions if t.id != transaction_id]

            if self._audit_logger:
                self._audit_logger.log_transaction_deleted(transaction_id, found)
            self._recompute()
        return found

    async def add_budget(self, draft: Union[BudgetDraft, dict]) -> Budget:
        """
        Validate, persist and append a new budget.

        The duplicate-category check and the write run under the store's
        mutation lock, so two concurrent drafts for one category cannot
        both land.

        Raises:
            StoreNotReadyError: If the store is not ready
            FinanceValidationError: If the draft is invalid or the category
                already has a budget (nothing is written)
            StorageWriteError: If the write failed with strict writes enabled
        """
        self._require_ready()
        draft = self._coerce_draft(draft, BudgetDraft, "budget")

        async with self._mutation_lock:
            self._require_ready()
            result = self._validator.validate_budget(draft, self._budgets)
            if not result.is_valid:
                raise self._reject(result)

            budget = Budget(
                category=draft.category,
                limit=parse_amount(draft.limit),
                period=BudgetPeriod(draft.period),
                color=draft.color or self.catalog.color_for(draft.category),
            )

            await self._storage.add_budget(budget)
            self._budgets.append(budget)

            if self._audit_logger:
                self._audit_logger.log_budget_added(
                    budget_id=budget.id,
                    category=budget.category,
                    limit=budget.limit,
                    period=budget.period.value,
                )
            self._recompute()
        return budget

    async def delete_budget(self, budget_id: str) -> bool:
        """
        Remove a budget by ID. Unknown IDs are a no-op.

        Returns:
            True if a stored budget was removed
        """
        self._require_ready()
        async with self._mutation_lock:
            self._require_ready()
            found = await self._storage.delete_budget(budget_id)
            self._budgets = [b for b in self._budgets if b.id != budget_id]

            if self._audit_logger:
                self._audit_logger.log_budget_deleted(budget_id, found)
            self._recompute()
        return found


def create_finance_store(
    settings: Optional[Settings] = None,
    kv_store: Optional[KeyValueStore] = None,
    catalog: Optional[CategoryCatalog] = None,
) -> FinanceStore:
    """
    Factory function to wire a FinanceStore from configuration.

    Args:
        settings: Application settings (defaults to the cached settings)
        kv_store: Storage backend. Defaults to the JSON file store in
                  the configured data directory.
        catalog: Category catalog (defaults to the built-in catalog)

    Returns:
        An uninitialized FinanceStore; await `initialize()` before use
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    app_settings = settings.app

    audit_logger = AuditLogger()
    catalog = catalog or get_default_catalog()

    if kv_store is None:
        kv_store = JsonFileKeyValueStore(
            storage_settings.data_dir,
            retry_attempts=storage_settings.write_retry_attempts,
            retry_max_wait=storage_settings.write_retry_max_wait_seconds,
        )

    storage = KeyValueFinanceStorage(
        kv_store,
        strict_writes=storage_settings.strict_writes,
        audit_logger=audit_logger,
    )

    seeder = None
    if app_settings.seed_sample_data:
        seeder = SampleDataSeeder(
            storage,
            kv_store,
            catalog=catalog,
            audit_logger=audit_logger,
        )

    return FinanceStore(
        storage,
        validator=FinanceValidator(catalog),
        seeder=seeder,
        audit_logger=audit_logger,
        on_track_percent=app_settings.budget_on_track_percent,
        warning_percent=app_settings.budget_warning_percent,
    )
