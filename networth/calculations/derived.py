"""
Derived Calculations

DESIGN DECISION: Every figure on screen is computed here, from the
store's current state, on demand. Nothing is cached and nothing here
mutates the store, so a re-render after any mutation is always correct.

All arithmetic is Decimal. Division-by-zero cases have explicit,
documented results instead of propagating an exception into the UI:
- payoff percentage of a zero original amount is 0
- gain percentage of a zero purchase price is 0
- change percentage against a zero net-worth baseline is 0
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Iterable, Optional, TypeVar, Union

from networth.models.records import (
    Asset,
    AssetCategory,
    AssetGain,
    CategoryTotal,
    Liability,
    NetWorthChange,
    NetWorthSummary,
    Snapshot,
)
from networth.store.record_store import RecordStore


ZERO = Decimal("0")
HUNDRED = Decimal("100")

R = TypeVar("R", Asset, Liability)


def total_assets(store: RecordStore) -> Decimal:
    """Sum of current values over all assets (0 for none)."""
    return sum((a.current_value for a in store.assets), ZERO)


def total_liabilities(store: RecordStore) -> Decimal:
    """Sum of current balances over all liabilities (0 for none)."""
    return sum((l.current_balance for l in store.liabilities), ZERO)


def net_worth(store: RecordStore) -> Decimal:
    return total_assets(store) - total_liabilities(store)


def asset_equity(store: RecordStore, asset: Asset) -> Decimal:
    """
    Current value minus the balance of the linked liability.

    A missing or dangling link counts as no link. May be negative
    (an underwater asset).
    """
    debt = store.get_liability(asset.associated_debt_id)
    if debt is None:
        return asset.current_value
    return asset.current_value - debt.current_balance


def category_equity(
    store: RecordStore,
    category: Union[AssetCategory, str],
) -> Decimal:
    """Summed equity of every asset in one category."""
    category = AssetCategory(category)
    return sum(
        (asset_equity(store, a) for a in store.assets if a.category == category),
        ZERO,
    )


def real_estate_equity(store: RecordStore) -> Decimal:
    return category_equity(store, AssetCategory.REAL_ESTATE)


def vehicle_equity(store: RecordStore) -> Decimal:
    return category_equity(store, AssetCategory.VEHICLE)


def payoff_percentage(liability: Liability) -> Decimal:
    """
    Share of the original principal already paid off, in percent.

    Returns 0 when the original amount is 0. Negative when the balance
    has grown past the original amount.
    """
    if liability.original_amount == 0:
        return ZERO
    paid = liability.original_amount - liability.current_balance
    return paid / liability.original_amount * HUNDRED


def asset_gain(asset: Asset) -> AssetGain:
    """Current value against purchase price."""
    gain = asset.current_value - asset.purchase_price
    if asset.purchase_price == 0:
        percentage = ZERO
    else:
        percentage = gain / asset.purchase_price * HUNDRED
    return AssetGain(absolute=gain, percentage=percentage)


def net_worth_change(
    current_net_worth: Decimal,
    previous_snapshot: Optional[Snapshot],
) -> Optional[NetWorthChange]:
    """
    Change against a previous snapshot.

    The percentage is relative to the magnitude of the previous net
    worth, so moving from -100 to -50 reads as +50%.

    Returns:
        None when there is no previous snapshot
    """
    if previous_snapshot is None:
        return None

    change = current_net_worth - previous_snapshot.net_worth
    baseline = abs(previous_snapshot.net_worth)
    percentage = ZERO if baseline == 0 else change / baseline * HUNDRED
    return NetWorthChange(absolute=change, percentage=percentage)


def group_by_category(
    records: Iterable[R],
    value_selector: Callable[[R], Decimal],
) -> dict[str, CategoryTotal]:
    """
    Count and total records per category.

    Returns:
        Mapping of category label to CategoryTotal, ordered by total,
        largest first. Ties keep first-seen order.
    """
    grouped: dict[str, CategoryTotal] = {}
    for record in records:
        bucket = grouped.setdefault(record.category.value, CategoryTotal())
        bucket.count += 1
        bucket.total += value_selector(record)

    return dict(
        sorted(grouped.items(), key=lambda item: item[1].total, reverse=True)
    )


def asset_breakdown(store: RecordStore) -> dict[str, CategoryTotal]:
    return group_by_category(store.assets, lambda a: a.current_value)


def liability_breakdown(store: RecordStore) -> dict[str, CategoryTotal]:
    return group_by_category(store.liabilities, lambda l: l.current_balance)


def summarize(store: RecordStore) -> NetWorthSummary:
    """Compute every overview figure from the store's current state."""
    assets_total = total_assets(store)
    liabilities_total = total_liabilities(store)
    worth = assets_total - liabilities_total
    snapshots = store.snapshots

    return NetWorthSummary(
        total_assets=assets_total,
        total_liabilities=liabilities_total,
        net_worth=worth,
        real_estate_equity=real_estate_equity(store),
        vehicle_equity=vehicle_equity(store),
        change=net_worth_change(worth, snapshots[-1] if snapshots else None),
        asset_count=len(store.assets),
        liability_count=len(store.liabilities),
        snapshot_count=len(snapshots),
    )


def format_currency(amount: Decimal, currency_code: str = "USD") -> str:
    """
    Whole-unit currency string for display, e.g. "$1,234" or "-$50".

    Only USD gets a symbol; other codes are suffixed.
    """
    rounded = abs(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 and rounded != 0 else ""
    if currency_code == "USD":
        return f"{sign}${rounded:,}"
    return f"{sign}{rounded:,} {currency_code}"
