"""
Storage Services Package

Provides abstract interfaces and concrete implementations for local storage.
Currently implements a JSON file as the backend, but designed to be swappable.
"""

from wealthwise.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStorageInterface,
    PersistenceError,
    StorageError,
)
from wealthwise.services.storage.local import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueAuditStorage,
    create_storage,
)
from wealthwise.services.storage.persistence import (
    BUDGETS_KEY,
    CATEGORY_ICONS_KEY,
    TRANSACTIONS_KEY,
    LedgerPersistence,
    deserialize_budgets,
    deserialize_transactions,
    serialize_budgets,
    serialize_transactions,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStorageInterface",
    # Exceptions
    "PersistenceError",
    "StorageError",
    # Local implementations
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueAuditStorage",
    "create_storage",
    # Ledger adapter
    "BUDGETS_KEY",
    "CATEGORY_ICONS_KEY",
    "TRANSACTIONS_KEY",
    "LedgerPersistence",
    "deserialize_budgets",
    "deserialize_transactions",
    "serialize_budgets",
    "serialize_transactions",
]
