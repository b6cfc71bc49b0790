"""
Storage Services Package

Provides the abstract key-value interface and concrete implementations.
The local JSON file is the default backend; Google Sheets is optional.
"""

from networth.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    KeyValueStore,
    PersistenceError,
    StorageError,
)
from networth.services.storage.memory import InMemoryKeyValueStore
from networth.services.storage.local_file import JsonFileKeyValueStore
from networth.services.storage.audit_trail import KeyValueAuditStorage
from networth.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStore",
    # Exceptions
    "ConnectionError",
    "PersistenceError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueAuditStorage",
]
