"""
Ledger Store

DESIGN DECISION: The store is an explicit object that owns the transaction
collection. Nothing else mutates entries; everyone else gets tuples.

Ordering: new entries are prepended, so list()[0] is the latest insertion.
Edits replace a record in place and keep its position.

The optional `on_change` callback receives the new snapshot after every
successful mutation. The ledger service wires it to persistence so the
local store mirrors memory (write-through).
"""

from typing import Callable, Iterable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from wealthwise.ledger.errors import NotFoundError, ValidationError
from wealthwise.models.transaction import Transaction, TransactionDraft


ChangeListener = Callable[[tuple[Transaction, ...]], None]
DraftInput = Union[TransactionDraft, dict]


def coerce_draft(draft: DraftInput) -> TransactionDraft:
    if isinstance(draft, TransactionDraft) and not isinstance(draft, Transaction):
        return draft
    if isinstance(draft, Transaction):
        return draft.to_draft()
    try:
        return TransactionDraft(**draft)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e
    except TypeError as e:
        raise ValidationError(f"Invalid transaction: {e}") from e


class LedgerStore:
    """
    In-memory ordered collection of transactions.

    Single writer at a time: callers serialize mutations (one user
    interaction at a time). A failed call leaves the collection unchanged.
    """

    def __init__(
        self,
        transactions: Optional[Iterable[Transaction]] = None,
        on_change: Optional[ChangeListener] = None,
    ):
        self._transactions: list[Transaction] = list(transactions or ())
        self._on_change = on_change

    def __len__(self) -> int:
        return len(self._transactions)

    def set_listener(self, on_change: Optional[ChangeListener]) -> None:
        self._on_change = on_change

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.list())

    def _index_of(self, transaction_id: str) -> int:
        for i, t in enumerate(self._transactions):
            if t.id == transaction_id:
                return i
        raise NotFoundError(transaction_id)

    def add(self, draft: DraftInput) -> Transaction:
        """
        Store a new transaction at the head of the ledger.

        Raises:
            ValidationError: If the draft is malformed
        """
        transaction = Transaction.from_draft(coerce_draft(draft))
        self._transactions.insert(0, transaction)
        self._notify()
        return transaction

    def update(self, transaction_id: str, draft: DraftInput) -> Transaction:
        """
        Replace every mutable field of an existing transaction.

        Raises:
            NotFoundError: If no transaction has this id
            ValidationError: If the draft is malformed
        """
        index = self._index_of(transaction_id)
        updated = Transaction.from_draft(coerce_draft(draft), transaction_id=transaction_id)
        self._transactions[index] = updated
        self._notify()
        return updated

    def remove(self, transaction_id: str) -> None:
        """
        Delete a transaction.

        Raises:
            NotFoundError: If no transaction has this id
        """
        index = self._index_of(transaction_id)
        del self._transactions[index]
        self._notify()

    def get(self, transaction_id: str) -> Transaction:
        return self._transactions[self._index_of(transaction_id)]

    def find(self, transaction_id: Optional[str]) -> Optional[Transaction]:
        """Like get(), but None instead of raising."""
        if transaction_id is None:
            return None
        try:
            return self.get(transaction_id)
        except NotFoundError:
            return None

    def list(self) -> tuple[Transaction, ...]:
        """Snapshot of all transactions, most recent insertion first."""
        return tuple(self._transactions)

    def clear(self) -> None:
        """Remove everything. Irreversible."""
        self._transactions.clear()
        self._notify()

    def replace_all(self, transactions: Iterable[Transaction]) -> None:
        """Load a restored collection without notifying the listener."""
        self._transactions = list(transactions)
