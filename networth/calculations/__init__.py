"""Derived calculations over the record store."""

from networth.calculations.derived import (
    asset_breakdown,
    asset_equity,
    asset_gain,
    category_equity,
    format_currency,
    group_by_category,
    liability_breakdown,
    net_worth,
    net_worth_change,
    payoff_percentage,
    real_estate_equity,
    summarize,
    total_assets,
    total_liabilities,
    vehicle_equity,
)
from networth.calculations.linkage import linkable_assets, linkable_liabilities

__all__ = [
    "asset_breakdown",
    "asset_equity",
    "asset_gain",
    "category_equity",
    "format_currency",
    "group_by_category",
    "liability_breakdown",
    "linkable_assets",
    "linkable_liabilities",
    "net_worth",
    "net_worth_change",
    "payoff_percentage",
    "real_estate_equity",
    "summarize",
    "total_assets",
    "total_liabilities",
    "vehicle_equity",
]
