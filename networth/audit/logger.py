"""
Audit Logger

DESIGN DECISION: Every mutation of the user's records is logged.
This provides:
1. Traceability of adds, edits and deletes
2. Debugging capability when a save to storage fails
3. A record of imports and bulk deletes

The audit logger:
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
- Works without a storage backend (local structured log only)
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from networth.models.audit import AuditEvent, AuditEventBuilder
from networth.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit trail storage, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value == "error":
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent persisted events, newest first. Empty without storage."""
        if not self._storage:
            return []
        try:
            return self._storage.get_recent_events(limit)
        except Exception as e:
            self._logger.error("audit_storage_read_failed", error=str(e))
            return []

    def log_record_saved(
        self,
        entity_type: str,
        entity_id: str,
        name: str,
        created: bool,
    ) -> None:
        """Log an asset or liability add/edit."""
        self.log(AuditEventBuilder.record_saved(
            entity_type=entity_type,
            entity_id=entity_id,
            name=name,
            created=created,
        ))

    def log_record_deleted(
        self,
        entity_type: str,
        entity_id: str,
        name: str,
    ) -> None:
        self.log(AuditEventBuilder.record_deleted(
            entity_type=entity_type,
            entity_id=entity_id,
            name=name,
        ))

    def log_validation_failed(
        self,
        record_type: str,
        issues: list[dict],
    ) -> None:
        self.log(AuditEventBuilder.validation_failed(
            record_type=record_type,
            issues=issues,
        ))

    def log_snapshot_taken(
        self,
        snapshot_id: str,
        net_worth: str,
    ) -> None:
        self.log(AuditEventBuilder.snapshot_taken(
            snapshot_id=snapshot_id,
            net_worth=net_worth,
        ))

    def log_csv_imported(
        self,
        assets_added: int,
        liabilities_added: int,
        rows_skipped: int,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.csv_imported(
            assets_added=assets_added,
            liabilities_added=liabilities_added,
            rows_skipped=rows_skipped,
            correlation_id=correlation_id,
        ))

    def log_csv_import_failed(
        self,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.csv_import_failed(
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_csv_exported(
        self,
        asset_count: int,
        liability_count: int,
    ) -> None:
        self.log(AuditEventBuilder.csv_exported(
            asset_count=asset_count,
            liability_count=liability_count,
        ))

    def log_all_data_deleted(
        self,
        asset_count: int,
        liability_count: int,
        snapshot_count: int,
    ) -> None:
        self.log(AuditEventBuilder.all_data_deleted(
            asset_count=asset_count,
            liability_count=liability_count,
            snapshot_count=snapshot_count,
        ))

    def log_user_declined(self, action: str) -> None:
        self.log(AuditEventBuilder.user_declined(action=action))

    def log_persistence_failed(
        self,
        operation: str,
        error_message: str,
    ) -> None:
        """Log a failed write to the key-value store."""
        self.log(AuditEventBuilder.persistence_failed(
            operation=operation,
            error_message=error_message,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step user action (e.g., a CSV import).
    """
    return uuid4()
