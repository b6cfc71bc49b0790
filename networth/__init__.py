"""
Net Worth Tracker - Source Package

A personal net-worth tracker: record assets and liabilities, see
aggregate net worth and category breakdowns, take snapshots, and
move data in and out as CSV.

DESIGN PRINCIPLES:
1. Records are validated at the input boundary, never at render time
2. Snapshots are historical facts - never recomputed
3. Destructive actions require explicit confirmation
4. Every mutation is persisted and audited
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Net Worth Tracker Team"
