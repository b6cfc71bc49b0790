"""
Link target selection.

Only three asset/liability category pairs may be linked (see
ASSET_LIABILITY_LINKS). These helpers list the existing records a user
may pick from, which is exactly what the edit forms offer.
"""

from typing import Union

from networth.models.records import (
    Asset,
    AssetCategory,
    Liability,
    LiabilityCategory,
    linkable_asset_category,
    linkable_liability_category,
)
from networth.store.record_store import RecordStore


def linkable_liabilities(
    store: RecordStore,
    asset_category: Union[AssetCategory, str],
) -> list[Liability]:
    """Liabilities an asset of this category may be linked to."""
    target = linkable_liability_category(AssetCategory(asset_category))
    if target is None:
        return []
    return [l for l in store.liabilities if l.category == target]


def linkable_assets(
    store: RecordStore,
    liability_category: Union[LiabilityCategory, str],
) -> list[Asset]:
    """Assets a liability of this category may be linked to."""
    target = linkable_asset_category(LiabilityCategory(liability_category))
    if target is None:
        return []
    return [a for a in store.assets if a.category == target]
