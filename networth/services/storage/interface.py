"""
Abstract Storage Interface

DESIGN DECISION: The tracker persists into a plain string key-value store,
the same shape as browser local storage. This allows us to:
1. Keep records in a local JSON file by default
2. Use in-memory storage for testing
3. Swap in Google Sheets without touching business logic

The interface is intentionally tiny - load, save, delete.
Serialization of records is the repository's job, not the store's.
"""

from abc import ABC, abstractmethod
from typing import Optional

from networth.models.audit import AuditEvent


class KeyValueStore(ABC):
    """
    Abstract string key-value store.

    Any storage implementation (memory, file, Google Sheets, ...)
    must implement these methods. All calls are blocking.
    """

    # Longest value the backend accepts, or None when unbounded
    max_value_length: Optional[int] = None

    @abstractmethod
    def load(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            PersistenceError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def save(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            PersistenceError: If the write fails (unavailable, quota exceeded)
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is a no-op.

        Raises:
            PersistenceError: If the backend cannot be written
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never modify them. Implementations
    may drop the oldest events to respect a size cap.
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
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceError(StorageError):
    """The backend could not be read or written."""
    pass


class ConnectionError(PersistenceError):
    """Could not connect to storage backend."""
    pass
