"""
WealthWise - Source Package

A personal budget-tracking core: it records income, expense and saving
entries, keeps them in a local key-value store, and derives balances,
category breakdowns and budget warnings for display.

DESIGN PRINCIPLES:
1. The ledger store is the single source of truth
2. Aggregates are recomputed from snapshots, never stored
3. Affordability is checked before anything is committed
4. Storage and AI failures degrade gracefully
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "WealthWise Team"
