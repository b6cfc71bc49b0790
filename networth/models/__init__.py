"""
Data Models Package

This package contains all Pydantic models used in the Net Worth Tracker.
All data flowing through the system must conform to these schemas.
"""

from networth.models.records import (
    ASSET_CATEGORY_ICONS,
    ASSET_LIABILITY_LINKS,
    LIABILITY_ASSET_LINKS,
    LIABILITY_CATEGORY_ICONS,
    Asset,
    AssetCategory,
    AssetGain,
    CategoryTotal,
    ImportResult,
    Liability,
    LiabilityCategory,
    NetWorthChange,
    NetWorthSummary,
    Snapshot,
    ValidationIssue,
    ValidationResult,
    linkable_asset_category,
    linkable_liability_category,
    new_record_id,
    utc_now,
)
from networth.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "ASSET_CATEGORY_ICONS",
    "ASSET_LIABILITY_LINKS",
    "LIABILITY_ASSET_LINKS",
    "LIABILITY_CATEGORY_ICONS",
    "Asset",
    "AssetCategory",
    "AssetGain",
    "CategoryTotal",
    "ImportResult",
    "Liability",
    "LiabilityCategory",
    "NetWorthChange",
    "NetWorthSummary",
    "Snapshot",
    "ValidationIssue",
    "ValidationResult",
    "linkable_asset_category",
    "linkable_liability_category",
    "new_record_id",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
