"""
Ledger Exceptions

All core errors are synchronous and local. A mutation that raises one of
these has left the ledger untouched.
"""

from decimal import Decimal
from typing import Optional


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class ValidationError(LedgerError):
    """
    Malformed entry: non-positive amount, unknown category or type.

    `errors` holds one human-readable message per offending field.
    """

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        self.errors = errors or [message]
        super().__init__(message)

    @classmethod
    def from_pydantic(cls, exc) -> "ValidationError":
        """Wrap a pydantic ValidationError, keeping field-level messages."""
        errors = []
        for err in exc.errors():
            field = ".".join(str(part) for part in err.get("loc", ())) or "entry"
            errors.append(f"{field}: {err.get('msg', 'invalid value')}")
        return cls("Invalid transaction: " + "; ".join(errors), errors)


class NotFoundError(LedgerError):
    """No transaction with the given id."""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")


class InsufficientFundsError(LedgerError):
    """
    An expense or saving exceeds the available balance.

    Carries the effective balance so the UI can tell the user how much
    is actually available.
    """

    def __init__(self, requested: Decimal, available: Decimal):
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient funds! Your available balance is {available:.2f}"
        )
