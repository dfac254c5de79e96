"""
Abstract Storage Interfaces

DESIGN DECISION: Two layers of abstraction.

1. KeyValueStore: the host platform's durable `get(key)` / `set(key, value)`
   pair. Values are opaque strings.
2. FinanceStorageInterface: the ledger's view of storage. Two ordered
   collections ("transactions", "budgets"), each one JSON array under
   one key.

This allows us to:
1. Use in-memory storage for testing
2. Swap the file store for another local backend
3. Keep business logic decoupled from storage implementation
"""

from abc import ABC, abstractmethod
from typing import Optional

from finance_tracker.models.finance import Budget, Transaction


TRANSACTIONS_KEY = "transactions"
BUDGETS_KEY = "budgets"


class KeyValueStore(ABC):
    """
    Abstract durable key-value store.

    Implementations must make `set` replace the whole value in one step:
    a reader sees either the old value or the new one.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageReadError: If the backend could not be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        Raises:
            StorageWriteError: If the value could not be written
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error."""
        pass


class FinanceStorageInterface(ABC):
    """
    Abstract interface for ledger persistence.

    Reads fail soft: they return an empty list instead of raising.
    Writes replace a whole collection.
    """

    # Transactions

    @abstractmethod
    async def get_transactions(self) -> list[Transaction]:
        """
        Load all transactions, most recently added first.

        Returns:
            The stored transactions, or an empty list if the collection is
            absent, unreadable or corrupt
        """
        pass

    @abstractmethod
    async def save_transactions(self, transactions: list[Transaction]) -> None:
        """Overwrite the full transaction collection."""
        pass

    @abstractmethod
    async def add_transaction(self, transaction: Transaction) -> None:
        """Insert a transaction at the head of the collection."""
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> bool:
        """
        Remove a transaction by ID.

        Returns:
            True if a transaction was removed, False if the ID was unknown
        """
        pass

    # Budgets

    @abstractmethod
    async def get_budgets(self) -> list[Budget]:
        """Load all budgets in insertion order."""
        pass

    @abstractmethod
    async def save_budgets(self, budgets: list[Budget]) -> None:
        """Overwrite the full budget collection."""
        pass

    @abstractmethod
    async def add_budget(self, budget: Budget) -> None:
        """Append a budget at the tail of the collection."""
        pass

    @abstractmethod
    async def delete_budget(self, budget_id: str) -> bool:
        """
        Remove a budget by ID.

        Returns:
            True if a budget was removed, False if the ID was unknown
        """
        pass

    # Bootstrap

    @abstractmethod
    async def load_all(self) -> tuple[list[Transaction], list[Budget]]:
        """Load both collections."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """The backend could not be read."""
    pass


class StorageWriteError(StorageError):
    """The backend could not be written."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)
