"""
Audit Models for the Net Worth Tracker

Every mutation of the user's records is logged for audit purposes.
This provides:
1. A history of what was added, changed and deleted
2. Debugging information when persistence goes wrong
3. A trace of imports (how many rows landed, how many were skipped)

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from networth.models.records import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Assets
    ASSET_CREATED = "asset_created"
    ASSET_UPDATED = "asset_updated"
    ASSET_DELETED = "asset_deleted"

    # Liabilities
    LIABILITY_CREATED = "liability_created"
    LIABILITY_UPDATED = "liability_updated"
    LIABILITY_DELETED = "liability_deleted"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Snapshots
    SNAPSHOT_TAKEN = "snapshot_taken"

    # Import / export
    CSV_IMPORTED = "csv_imported"
    CSV_IMPORT_FAILED = "csv_import_failed"
    CSV_EXPORTED = "csv_exported"

    # Destructive
    ALL_DATA_DELETED = "all_data_deleted"
    USER_DECLINED = "user_declined"

    # System events
    PERSISTENCE_FAILED = "persistence_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'asset', 'liability', 'snapshot')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one import)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_saved("asset", asset.id, asset.name, created=True)
        event = AuditEventBuilder.snapshot_taken(snapshot.id, str(snapshot.net_worth))
    """

    @staticmethod
    def record_saved(
        entity_type: str,
        entity_id: str,
        name: str,
        created: bool,
    ) -> AuditEvent:
        if entity_type == "asset":
            event_type = (
                AuditEventType.ASSET_CREATED if created
                else AuditEventType.ASSET_UPDATED
            )
        else:
            event_type = (
                AuditEventType.LIABILITY_CREATED if created
                else AuditEventType.LIABILITY_UPDATED
            )
        verb = "added" if created else "updated"
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {verb}: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(
        entity_type: str,
        entity_id: str,
        name: str,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.ASSET_DELETED if entity_type == "asset"
            else AuditEventType.LIABILITY_DELETED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        record_type: str,
        issues: list[dict],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=record_type,
            description=f"{record_type.capitalize()} form rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def snapshot_taken(
        snapshot_id: str,
        net_worth: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_TAKEN,
            entity_type="snapshot",
            entity_id=snapshot_id,
            description=f"Snapshot taken: net worth {net_worth}",
            details={"net_worth": net_worth},
            is_user_action=True,
        )

    @staticmethod
    def csv_imported(
        assets_added: int,
        liabilities_added: int,
        rows_skipped: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_IMPORTED,
            correlation_id=correlation_id,
            description=(
                f"CSV imported: {assets_added} assets, "
                f"{liabilities_added} liabilities"
            ),
            details={
                "assets_added": assets_added,
                "liabilities_added": liabilities_added,
                "rows_skipped": rows_skipped,
            },
            is_user_action=True,
        )

    @staticmethod
    def csv_import_failed(
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="CSV import aborted",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def csv_exported(
        asset_count: int,
        liability_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_EXPORTED,
            description=f"Exported {asset_count} assets and {liability_count} liabilities",
            details={
                "asset_count": asset_count,
                "liability_count": liability_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def all_data_deleted(
        asset_count: int,
        liability_count: int,
        snapshot_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ALL_DATA_DELETED,
            severity=AuditSeverity.WARNING,
            description="All data deleted",
            details={
                "asset_count": asset_count,
                "liability_count": liability_count,
                "snapshot_count": snapshot_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def user_declined(action: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_DECLINED,
            description=f"User declined: {action}",
            details={"action": action},
            is_user_action=True,
        )

    @staticmethod
    def persistence_failed(
        operation: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSISTENCE_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Failed to persist after: {operation}",
            error_message=error_message,
            details={"operation": operation},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
