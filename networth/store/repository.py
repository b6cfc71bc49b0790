"""
Record Repository

Bridges the in-memory RecordStore and a KeyValueStore. Each collection
is serialized to a JSON array and saved under its own key; at startup
the three keys are read back. An absent key is an empty collection.
"""

from typing import Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from networth.config import StorageSettings, get_settings
from networth.models.records import Asset, Liability, Snapshot
from networth.services.storage import KeyValueStore, PersistenceError
from networth.store.record_store import RecordStore


logger = structlog.get_logger(__name__)

_ASSETS = TypeAdapter(list[Asset])
_LIABILITIES = TypeAdapter(list[Liability])
_SNAPSHOTS = TypeAdapter(list[Snapshot])


class RecordRepository:
    """Loads and saves a RecordStore through the persistence port."""

    def __init__(
        self,
        kv_store: KeyValueStore,
        settings: Optional[StorageSettings] = None,
    ):
        self._kv = kv_store
        settings = settings or get_settings().storage
        self.assets_key = settings.assets_key
        self.liabilities_key = settings.liabilities_key
        self.snapshots_key = settings.snapshots_key

    def _load_collection(self, key: str, adapter: TypeAdapter) -> list:
        try:
            raw = self._kv.load(key)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to load {key}: {e}") from e

        if not raw:
            return []
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            # Refuse to start on top of unreadable data rather than
            # overwriting it with an empty collection on the next save
            raise PersistenceError(f"Stored data under {key} is unreadable: {e}") from e

    def load(self) -> RecordStore:
        """Read all three collections into a fresh RecordStore."""
        store = RecordStore(
            assets=self._load_collection(self.assets_key, _ASSETS),
            liabilities=self._load_collection(self.liabilities_key, _LIABILITIES),
            snapshots=self._load_collection(self.snapshots_key, _SNAPSHOTS),
        )
        logger.info(
            "records_loaded",
            assets=len(store.assets),
            liabilities=len(store.liabilities),
            snapshots=len(store.snapshots),
        )
        return store

    def save(self, store: RecordStore) -> None:
        """
        Write all three collections.

        Raises:
            PersistenceError: If any write fails. Collections written
                before the failure stay written.
        """
        payload = {
            self.assets_key: _ASSETS.dump_json(store.assets),
            self.liabilities_key: _LIABILITIES.dump_json(store.liabilities),
            self.snapshots_key: _SNAPSHOTS.dump_json(store.snapshots),
        }
        for key, value in payload.items():
            try:
                self._kv.save(key, value.decode("utf-8"))
            except PersistenceError:
                raise
            except Exception as e:
                raise PersistenceError(f"Failed to save {key}: {e}") from e
