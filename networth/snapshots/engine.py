"""
Snapshot Engine

A snapshot freezes the current totals as a historical fact. Once taken,
a snapshot is never recomputed: later edits to assets or liabilities do
not change it. History is append-only; the overview only shows the most
recent few, but every snapshot is kept.
"""

from typing import Optional

from networth.calculations.derived import total_assets, total_liabilities
from networth.models.records import Snapshot
from networth.store.record_store import RecordStore


DEFAULT_DISPLAY_LIMIT = 5


def take_snapshot(store: RecordStore, notes: Optional[str] = None) -> Snapshot:
    """Capture current totals and append them to the store's history."""
    assets_total = total_assets(store)
    liabilities_total = total_liabilities(store)

    snapshot = Snapshot(
        total_assets=assets_total,
        total_liabilities=liabilities_total,
        net_worth=assets_total - liabilities_total,
        notes=notes.strip() if notes and notes.strip() else None,
    )
    return store.append_snapshot(snapshot)


def latest_snapshot(store: RecordStore) -> Optional[Snapshot]:
    snapshots = store.snapshots
    return snapshots[-1] if snapshots else None


def recent_snapshots(
    store: RecordStore,
    limit: int = DEFAULT_DISPLAY_LIMIT,
) -> list[Snapshot]:
    """The last `limit` snapshots, newest first."""
    if limit <= 0:
        return []
    return list(reversed(store.snapshots[-limit:]))
