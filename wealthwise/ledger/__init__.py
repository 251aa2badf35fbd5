"""Ledger core: store, aggregation, budgets and the funds guard."""

from wealthwise.ledger.errors import (
    InsufficientFundsError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from wealthwise.ledger.store import LedgerStore

__all__ = [
    "InsufficientFundsError",
    "LedgerError",
    "LedgerStore",
    "NotFoundError",
    "ValidationError",
]
