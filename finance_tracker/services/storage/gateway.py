"""
Key-Value Backed Ledger Storage

Each collection is one JSON array stored under one key:
- "transactions": most recently added first
- "budgets": insertion order

DESIGN DECISION: Reads fail soft. A missing, unreadable or corrupt
collection is logged and treated as empty so the app always starts.
A single malformed record is skipped rather than discarding its neighbours.

DESIGN DECISION: Every read-modify-write on a collection holds that
collection's lock. Two concurrent adds therefore both land instead of the
second overwriting the first.

Write failures are logged and audited. With strict writes (the default) they
are raised so the caller can keep memory and disk consistent; with strict
writes off they are swallowed, as older clients did.
"""

import asyncio
import json
from typing import Optional, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.models.finance import Budget, Transaction
from finance_tracker.services.storage.interface import (
    BUDGETS_KEY,
    TRANSACTIONS_KEY,
    FinanceStorageInterface,
    KeyValueStore,
    StorageError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", Transaction, Budget)


class KeyValueFinanceStorage(FinanceStorageInterface):
    """
    Ledger storage on top of any KeyValueStore.

    The gateway is the only component that reads or writes the store.
    """

    def __init__(
        self,
        kv_store: KeyValueStore,
        strict_writes: bool = True,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._kv = kv_store
        self._strict_writes = strict_writes
        self._audit_logger = audit_logger
        self._locks = {
            TRANSACTIONS_KEY: asyncio.Lock(),
            BUDGETS_KEY: asyncio.Lock(),
        }

    @property
    def kv_store(self) -> KeyValueStore:
        return self._kv

    # -------------------------------------------------------------------------
    # Serialization helpers
    # -------------------------------------------------------------------------

    def _read_failed(self, key: str, error: str) -> None:
        logger.warning("collection_read_failed", key=key, error=error)
        if self._audit_logger:
            self._audit_logger.log_storage_read_failed(key, error)

    async def _read_collection(
        self,
        key: str,
        model: type[RecordT],
    ) -> list[RecordT]:
        try:
            raw = await self._kv.get(key)
        except StorageError as e:
            self._read_failed(key, str(e))
            return []

        if raw is None:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            self._read_failed(key, f"Invalid JSON: {e}")
            return []

        if not isinstance(data, list):
            self._read_failed(key, f"Expected a JSON array, found {type(data).__name__}")
            return []

        records: list[RecordT] = []
        for index, item in enumerate(data):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(
                    "collection_record_skipped",
                    key=key,
                    index=index,
                    error_count=e.error_count(),
                    error=str(e),
                )
        return records

    async def _write_collection(self, key: str, records: list[BaseModel]) -> None:
        payload = json.dumps(
            [record.to_storage_dict() for record in records],
            ensure_ascii=False,
        )
        try:
            await self._kv.set(key, payload)
        except StorageError as e:
            logger.error("collection_write_failed", key=key, error=str(e))
            if self._audit_logger:
                self._audit_logger.log_storage_write_failed(key, str(e))
            if self._strict_writes:
                if isinstance(e, StorageWriteError):
                    raise
                raise StorageWriteError(key, str(e)) from e
            return

        logger.debug("collection_written", key=key, count=len(records))

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def get_transactions(self) -> list[Transaction]:
        transactions = await self._read_collection(TRANSACTIONS_KEY, Transaction)
        logger.debug("transactions_loaded", count=len(transactions))
        return transactions

    async def save_transactions(self, transactions: list[Transaction]) -> None:
        async with self._locks[TRANSACTIONS_KEY]:
            await self._write_collection(TRANSACTIONS_KEY, list(transactions))

    async def add_transaction(self, transaction: Transaction) -> None:
        async with self._locks[TRANSACTIONS_KEY]:
            transactions = await self._read_collection(TRANSACTIONS_KEY, Transaction)
            transactions.insert(0, transaction)
            await self._write_collection(TRANSACTIONS_KEY, transactions)

    async def delete_transaction(self, transaction_id: str) -> bool:
        async with self._locks[TRANSACTIONS_KEY]:
            transactions = await self._read_collection(TRANSACTIONS_KEY, Transaction)
            remaining = [t for t in transactions if t.id != transaction_id]
            if len(remaining) == len(transactions):
                return False
            await self._write_collection(TRANSACTIONS_KEY, remaining)
            return True

    # -------------------------------------------------------------------------
    # Budgets
    # -------------------------------------------------------------------------

    async def get_budgets(self) -> list[Budget]:
        budgets = await self._read_collection(BUDGETS_KEY, Budget)
        logger.debug("budgets_loaded", count=len(budgets))
        return budgets

    async def save_budgets(self, budgets: list[Budget]) -> None:
        async with self._locks[BUDGETS_KEY]:
            await self._write_collection(BUDGETS_KEY, list(budgets))

    async def add_budget(self, budget: Budget) -> None:
        async with self._locks[BUDGETS_KEY]:
            budgets = await self._read_collection(BUDGETS_KEY, Budget)
            budgets.append(budget)
            await self._write_collection(BUDGETS_KEY, budgets)

    async def delete_budget(self, budget_id: str) -> bool:
        async with self._locks[BUDGETS_KEY]:
            budgets = await self._read_collection(BUDGETS_KEY, Budget)
            remaining = [b for b in budgets if b.id != budget_id]
            if len(remaining) == len(budgets):
                return False
            await self._write_collection(BUDGETS_KEY, remaining)
            return True

    # -------------------------------------------------------------------------
    # Bootstrap
    # -------------------------------------------------------------------------

    async def load_all(self) -> tuple[list[Transaction], list[Budget]]:
        transactions, budgets = await asyncio.gather(
            self.get_transactions(),
            self.get_budgets(),
        )
        return transactions, budgets
