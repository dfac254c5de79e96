"""Services package."""

from finance_tracker.services.storage import (
    BUDGETS_KEY,
    TRANSACTIONS_KEY,
    FinanceStorageInterface,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueFinanceStorage,
    KeyValueStore,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    "BUDGETS_KEY",
    "TRANSACTIONS_KEY",
    "FinanceStorageInterface",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueFinanceStorage",
    "KeyValueStore",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
