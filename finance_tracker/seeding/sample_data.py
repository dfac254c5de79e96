"""
Sample Data Seeder

Gives a brand-new install something to look at: six transactions spread
over the last few days and three monthly budgets.

DESIGN DECISION: Seeding is governed by an explicit first-run flag, not by
emptiness alone. The flag lives under its own key and records, per
collection, that the seeding decision has been made. A collection is
seeded only if its flag is unset AND it is empty. Once the flag is set the
collection is never seeded again, so a user who deletes every record does
not get the samples back on the next start.
"""

import json
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional

import structlog

from finance_tracker.audit import AuditLogger
from finance_tracker.models.categories import CategoryCatalog, get_default_catalog
from finance_tracker.models.finance import (
    Budget,
    BudgetPeriod,
    Transaction,
    TransactionType,
)
from finance_tracker.services.storage.interface import (
    BUDGETS_KEY,
    TRANSACTIONS_KEY,
    FinanceStorageInterface,
    KeyValueStore,
    StorageError,
)


logger = structlog.get_logger(__name__)

SEED_FLAG_KEY = "sample_data_seeded"


# (type, amount, category, description, days before today)
SAMPLE_TRANSACTIONS: tuple[tuple[TransactionType, str, str, str, int], ...] = (
    (TransactionType.INCOME, "5000", "Salary", "Monthly Salary", 0),
    (TransactionType.EXPENSE, "1200", "Food & Dining", "Groceries and restaurants", 1),
    (TransactionType.EXPENSE, "800", "Transportation", "Gas and car maintenance", 2),
    (TransactionType.EXPENSE, "500", "Shopping", "Clothes and accessories", 3),
    (TransactionType.INCOME, "800", "Freelance", "Web development project", 4),
    (TransactionType.EXPENSE, "300", "Entertainment", "Movies and games", 5),
)

# (category, limit, period)
SAMPLE_BUDGETS: tuple[tuple[str, str, BudgetPeriod], ...] = (
    ("Food & Dining", "1500", BudgetPeriod.MONTHLY),
    ("Transportation", "1000", BudgetPeriod.MONTHLY),
    ("Entertainment", "400", BudgetPeriod.MONTHLY),
)


@dataclass(frozen=True)
class SeedResult:
    """How many records a seeding run added."""

    transactions_seeded: int = 0
    budgets_seeded: int = 0

    @property
    def seeded_anything(self) -> bool:
        return bool(self.transactions_seeded or self.budgets_seeded)


def build_sample_transactions(today: date) -> list[Transaction]:
    """Fresh sample transactions dated relative to `today`."""
    return [
        Transaction(
            type=transaction_type,
            amount=Decimal(amount),
            category=category,
            description=description,
            date=today - timedelta(days=days_ago),
        )
        for transaction_type, amount, category, description, days_ago in SAMPLE_TRANSACTIONS
    ]


def build_sample_budgets(catalog: CategoryCatalog) -> list[Budget]:
    """Fresh sample budgets in their categories' colours."""
    return [
        Budget(
            category=category,
            limit=Decimal(limit),
            period=period,
            color=catalog.color_for(category),
        )
        for category, limit, period in SAMPLE_BUDGETS
    ]


class SampleDataSeeder:
    """
    One-time bootstrap of example data.

    Safe to call on every start: after the first run it only reads the flag.
    """

    def __init__(
        self,
        storage: FinanceStorageInterface,
        kv_store: KeyValueStore,
        catalog: Optional[CategoryCatalog] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], date] = date.today,
    ):
        self._storage = storage
        self._kv = kv_store
        self._catalog = catalog or get_default_catalog()
        self._audit_logger = audit_logger
        self._clock = clock

    async def _read_flags(self) -> dict[str, bool]:
        try:
            raw = await self._kv.get(SEED_FLAG_KEY)
        except StorageError as e:
            logger.warning("seed_flag_read_failed", error=str(e))
            return {}
        if raw is None:
            return {}
        try:
            flags = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("seed_flag_corrupt", raw=raw[:100])
            return {}
        if not isinstance(flags, dict):
            return {}
        return {key: bool(value) for key, value in flags.items()}

    async def _write_flags(self, flags: dict[str, bool]) -> None:
        await self._kv.set(SEED_FLAG_KEY, json.dumps(flags, sort_keys=True))

    async def seed(self) -> SeedResult:
        """
        Seed each collection that has never been seeded and is empty.

        Returns:
            Counts of records added (zero when nothing was seeded)
        """
        flags = await self._read_flags()
        if flags.get(TRANSACTIONS_KEY) and flags.get(BUDGETS_KEY):
            return SeedResult()

        transactions_seeded = 0
        budgets_seeded = 0

        if not flags.get(TRANSACTIONS_KEY):
            existing = await self._storage.get_transactions()
            if not existing:
                logger.info("seeding_sample_transactions")
                for transaction in build_sample_transactions(self._clock()):
                    await self._storage.add_transaction(transaction)
                    transactions_seeded += 1
            flags[TRANSACTIONS_KEY] = True

        if not flags.get(BUDGETS_KEY):
            existing = await self._storage.get_budgets()
            if not existing:
                logger.info("seeding_sample_budgets")
                for budget in build_sample_budgets(self._catalog):
                    await self._storage.add_budget(budget)
                    budgets_seeded += 1
            flags[BUDGETS_KEY] = True

        await self._write_flags(flags)

        result = SeedResult(
            transactions_seeded=transactions_seeded,
            budgets_seeded=budgets_seeded,
        )
        if result.seeded_anything and self._audit_logger:
            self._audit_logger.log_sample_data_seeded(transactions_seeded, budgets_seeded)
        return result
