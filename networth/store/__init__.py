"""Record store package."""

from networth.store.record_store import RecordStore
from networth.store.repository import RecordRepository

__all__ = ["RecordRepository", "RecordStore"]
