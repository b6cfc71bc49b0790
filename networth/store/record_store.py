"""
In-Memory Record Store

DESIGN DECISION: The store is an explicit object owning three ordered
collections. It is passed to every operation that needs it instead of
living in module-level globals, so tests build a fresh one per case.

The store knows nothing about persistence or validation. Records reach
it as already-validated pydantic models; persisting is the repository's
job, orchestrated by the tracker.

Ordering: insertion order, most recent last. Replacing a record keeps
its position.
"""

from typing import Iterable, Optional

from networth.models.records import Asset, Liability, Snapshot, utc_now


class RecordStore:
    """
    Owns the Asset, Liability and Snapshot collections.

    Read accessors return copies of the lists; the records themselves
    are pydantic models and are replaced, never mutated in place.
    """

    def __init__(
        self,
        assets: Optional[Iterable[Asset]] = None,
        liabilities: Optional[Iterable[Liability]] = None,
        snapshots: Optional[Iterable[Snapshot]] = None,
    ):
        self._assets: list[Asset] = list(assets or [])
        self._liabilities: list[Liability] = list(liabilities or [])
        self._snapshots: list[Snapshot] = list(snapshots or [])

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    @property
    def assets(self) -> list[Asset]:
        return list(self._assets)

    @property
    def liabilities(self) -> list[Liability]:
        return list(self._liabilities)

    @property
    def snapshots(self) -> list[Snapshot]:
        return list(self._snapshots)

    @property
    def is_empty(self) -> bool:
        return not (self._assets or self._liabilities or self._snapshots)

    def get_asset(self, asset_id: Optional[str]) -> Optional[Asset]:
        """Resolve an asset id, or None if absent (including dangling links)."""
        if not asset_id:
            return None
        return next((a for a in self._assets if a.id == asset_id), None)

    def get_liability(self, liability_id: Optional[str]) -> Optional[Liability]:
        """Resolve a liability id, or None if absent (including dangling links)."""
        if not liability_id:
            return None
        return next((l for l in self._liabilities if l.id == liability_id), None)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def upsert_asset(self, asset: Asset) -> tuple[Asset, bool]:
        """
        Insert a new asset or replace the one with the same id.

        A replacement keeps the original position and created_at, and
        gets a fresh updated_at.

        Returns:
            (stored_asset, created)
        """
        for idx, existing in enumerate(self._assets):
            if existing.id == asset.id:
                stored = asset.model_copy(update={
                    "created_at": existing.created_at,
                    "updated_at": utc_now(),
                })
                self._assets[idx] = stored
                return stored, False

        self._assets.append(asset)
        return asset, True

    def upsert_liability(self, liability: Liability) -> tuple[Liability, bool]:
        """Insert or replace a liability. Same rules as upsert_asset."""
        for idx, existing in enumerate(self._liabilities):
            if existing.id == liability.id:
                stored = liability.model_copy(update={
                    "created_at": existing.created_at,
                    "updated_at": utc_now(),
                })
                self._liabilities[idx] = stored
                return stored, False

        self._liabilities.append(liability)
        return liability, True

    def delete_asset(self, asset_id: str) -> Optional[Asset]:
        """
        Remove an asset by id.

        Liabilities pointing at it are left alone; their link dangles.

        Returns:
            The removed asset, or None if no asset had that id
        """
        for idx, existing in enumerate(self._assets):
            if existing.id == asset_id:
                return self._assets.pop(idx)
        return None

    def delete_liability(self, liability_id: str) -> Optional[Liability]:
        """Remove a liability by id. Assets pointing at it keep a dangling link."""
        for idx, existing in enumerate(self._liabilities):
            if existing.id == liability_id:
                return self._liabilities.pop(idx)
        return None

    def append_snapshot(self, snapshot: Snapshot) -> Snapshot:
        """Snapshots are append-only."""
        self._snapshots.append(snapshot)
        return snapshot

    def extend(
        self,
        assets: Iterable[Asset] = (),
        liabilities: Iterable[Liability] = (),
    ) -> None:
        """Add a batch of records (used by CSV import)."""
        for asset in assets:
            self.upsert_asset(asset)
        for liability in liabilities:
            self.upsert_liability(liability)

    def clear(self) -> None:
        """Drop every record, including snapshot history."""
        self._assets.clear()
        self._liabilities.clear()
        self._snapshots.clear()
