"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Ledger data lives in a local key-value store; the backend is swappable.
"""

from finance_tracker.services.storage.interface import (
    BUDGETS_KEY,
    TRANSACTIONS_KEY,
    FinanceStorageInterface,
    KeyValueStore,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from finance_tracker.services.storage.kv_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)
from finance_tracker.services.storage.gateway import KeyValueFinanceStorage

__all__ = [
    # Keys
    "BUDGETS_KEY",
    "TRANSACTIONS_KEY",
    # Interfaces
    "FinanceStorageInterface",
    "KeyValueStore",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueFinanceStorage",
]
