"""
Insufficient-funds Guard

An expense or saving may not exceed what is available. When the entry is an
edit, the original entry's effect is reversed first: editing a 30 expense
to 120 with a balance of 100 is fine, because 130 was available to it.

The ledger store does not enforce this. Callers check before add/update.
"""

from decimal import Decimal
from typing import Optional, Union

from wealthwise.ledger.errors import InsufficientFundsError
from wealthwise.models.transaction import Transaction, TransactionType


def effective_balance(
    current_balance: Decimal,
    transaction_being_edited: Optional[Transaction] = None,
) -> Decimal:
    """Balance with the edited entry's effect reversed."""
    if transaction_being_edited is None:
        return current_balance
    if transaction_being_edited.type == TransactionType.INCOME:
        return current_balance - transaction_being_edited.amount
    return current_balance + transaction_being_edited.amount


def check_affordable(
    amount: Decimal,
    transaction_type: Union[TransactionType, str],
    current_balance: Decimal,
    transaction_being_edited: Optional[Transaction] = None,
) -> bool:
    if TransactionType(transaction_type) == TransactionType.INCOME:
        return True
    return amount <= effective_balance(current_balance, transaction_being_edited)


def ensure_affordable(
    amount: Decimal,
    transaction_type: Union[TransactionType, str],
    current_balance: Decimal,
    transaction_being_edited: Optional[Transaction] = None,
) -> None:
    """
    Raise if the entry cannot be afforded.

    Raises:
        InsufficientFundsError: Carrying the effective balance
    """
    if not check_affordable(amount, transaction_type, current_balance, transaction_being_edited):
        raise InsufficientFundsError(
            requested=amount,
            available=effective_balance(current_balance, transaction_being_edited),
        )
