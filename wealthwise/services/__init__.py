"""Services package."""

from wealthwise.services.storage import (
    AuditStorageInterface,
    InMemoryStorage,
    JsonFileStorage,
    KeyValueAuditStorage,
    KeyValueStorageInterface,
    LedgerPersistence,
    PersistenceError,
    StorageError,
    create_storage,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueAuditStorage",
    "KeyValueStorageInterface",
    "LedgerPersistence",
    "PersistenceError",
    "StorageError",
    "create_storage",
]
