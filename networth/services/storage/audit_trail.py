"""
Audit trail persisted through the key-value store.

Events are kept as one JSON array under a single key, oldest first,
capped at `max_events` (older events fall off the front). When the
backend limits value length (a Google Sheets cell holds 50,000
characters), the oldest events are also dropped until the array fits.
"""

from typing import Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from networth.models.audit import AuditEvent
from networth.services.storage.interface import AuditStorageInterface, KeyValueStore


logger = structlog.get_logger(__name__)

_EVENTS = TypeAdapter(list[AuditEvent])
_EVENT = TypeAdapter(AuditEvent)


class KeyValueAuditStorage(AuditStorageInterface):
    """Append-only audit log stored under one key of a KeyValueStore."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str = "networth_audit",
        max_events: int = 500,
        max_chars: Optional[int] = None,
    ):
        """
        Args:
            store: Backend holding the trail
            key: Storage key of the trail
            max_events: Events kept (0 disables the trail)
            max_chars: Longest serialized trail; defaults to the
                backend's own value limit
        """
        self._store = store
        self._key = key
        self._max_events = max_events
        self._max_chars = max_chars if max_chars is not None else store.max_value_length

    def _load_events(self) -> list[AuditEvent]:
        raw = self._store.load(self._key)
        if not raw:
            return []
        try:
            return _EVENTS.validate_json(raw)
        except ValidationError as e:
            # A corrupt trail must not block the tracker; start a fresh one
            logger.warning("audit_trail_unreadable", key=self._key, error=str(e))
            return []

    def _fit(self, events: list[AuditEvent]) -> list[AuditEvent]:
        """Drop the oldest events until the JSON array fits in max_chars."""
        if self._max_chars is None:
            return events
        sizes = [len(_EVENT.dump_json(e).decode("utf-8")) for e in events]
        # "[" + events joined by "," + "]"
        total = 2 + sum(sizes) + max(len(sizes) - 1, 0)
        start = 0
        while start < len(events) and total > self._max_chars:
            total -= sizes[start] + (1 if len(events) - start > 1 else 0)
            start += 1
        if start:
            logger.info("audit_trail_trimmed", key=self._key, dropped=start)
        return events[start:]

    def append_event(self, event: AuditEvent) -> bool:
        if self._max_events == 0:
            return True
        events = self._load_events()
        events.append(event)
        events = self._fit(events[-self._max_events:])
        self._store.save(self._key, _EVENTS.dump_json(events).decode("utf-8"))
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        return [
            e for e in self._load_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._load_events()
        events.reverse()
        return events[:limit]
