"""Snapshot package."""

from networth.snapshots.engine import (
    DEFAULT_DISPLAY_LIMIT,
    latest_snapshot,
    recent_snapshots,
    take_snapshot,
)

__all__ = [
    "DEFAULT_DISPLAY_LIMIT",
    "latest_snapshot",
    "recent_snapshots",
    "take_snapshot",
]
