"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger on a local JSON file today
2. Use in-memory storage for testing
3. Swap in another local store later without touching the ledger

The interface mirrors a browser-style key-value store: string keys, string
values. Encoding ledger data into those strings is the job of the
persistence adapter, not the backend.
"""

from abc import ABC, abstractmethod
from typing import Optional

from wealthwise.models.audit import AuditEvent


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for local key-value storage.

    Any backend (JSON file, memory, ...) must implement these methods.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read a stored value.

        Returns:
            The stored string, or None if the key is absent

        Raises:
            PersistenceError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Delete a key. Removing an absent key is a no-op.

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """All stored keys."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[dict]:
        """
        Get the most recent audit events.

        Returns:
            List of event dicts (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """Could not read from or write to the local store."""

    def __init__(self, key: str, operation: str, message: str):
        self.key = key
        self.operation = operation
        super().__init__(f"Failed to {operation} '{key}': {message}")
