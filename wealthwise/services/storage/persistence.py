"""
Ledger Persistence Adapter

Serializes the transaction list, budgets and category icon overrides into
the key-value store, and restores them at startup.

FORMAT (kept compatible with the original browser storage):
- wealthwise_transactions: [{id, amount, category, type, description, date}]
- wealthwise_budgets: [{category, limit}]
- wealthwise_category_icons: {category: icon}

Amounts are written as JSON numbers and read back as Decimal.

CRITICAL: Loading never fails. A missing key, unreadable file or corrupt
JSON all mean "empty", with a warning in the log. Individual records that
no longer validate are skipped rather than discarding the whole ledger.
"""

import json
from decimal import Decimal
from typing import Any, Iterable, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from wealthwise.models.transaction import (
    ICON_POOL,
    Budget,
    Category,
    Transaction,
)
from wealthwise.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceError,
)


TRANSACTIONS_KEY = "wealthwise_transactions"
BUDGETS_KEY = "wealthwise_budgets"
CATEGORY_ICONS_KEY = "wealthwise_category_icons"

logger = structlog.get_logger(__name__)


def transaction_to_record(transaction: Transaction) -> dict[str, Any]:
    return {
        "id": transaction.id,
        "amount": float(transaction.amount),
        "category": transaction.category.value,
        "type": transaction.type.value,
        "description": transaction.description,
        "date": transaction.date.isoformat(),
    }


def budget_to_record(budget: Budget) -> dict[str, Any]:
    return {
        "category": budget.category.value,
        "limit": float(budget.limit),
    }


def serialize_transactions(transactions: Iterable[Transaction]) -> str:
    return json.dumps([transaction_to_record(t) for t in transactions])


def serialize_budgets(budgets: Iterable[Budget]) -> str:
    return json.dumps([budget_to_record(b) for b in budgets])


def deserialize_transactions(raw: str) -> list[Transaction]:
    """
    Parse a stored transaction list.

    Records repeating an id already seen are dropped; the first one wins.

    Raises:
        ValueError: If the payload is not a JSON list
    """
    records = json.loads(raw, parse_float=Decimal)
    if not isinstance(records, list):
        raise ValueError("transactions payload is not a list")

    transactions = []
    seen_ids: set[str] = set()
    for record in records:
        try:
            transaction = Transaction(**record)
        except (PydanticValidationError, TypeError):
            continue
        if transaction.id in seen_ids:
            logger.warning(
                "duplicate_transaction_skipped",
                transaction_id=transaction.id,
            )
            continue
        seen_ids.add(transaction.id)
        transactions.append(transaction)
    return transactions


def deserialize_budgets(raw: str) -> list[Budget]:
    records = json.loads(raw, parse_float=Decimal)
    if not isinstance(records, list):
        raise ValueError("budgets payload is not a list")

    budgets: dict[Category, Budget] = {}
    for record in records:
        try:
            budget = Budget(**record)
        except (PydanticValidationError, TypeError):
            continue
        budgets[budget.category] = budget
    return list(budgets.values())


class LedgerPersistence:
    """
    Reads and writes ledger state through a key-value store.

    Reads degrade to empty defaults. Writes raise PersistenceError so the
    caller can decide how loudly to complain.
    """

    def __init__(self, storage: KeyValueStorageInterface):
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> KeyValueStorageInterface:
        return self._storage

    def _read(self, key: str) -> Optional[str]:
        try:
            return self._storage.get_item(key)
        except PersistenceError as e:
            self._logger.warning("storage_read_failed", key=key, error=str(e))
            return None

    def load_transactions(self) -> list[Transaction]:
        raw = self._read(TRANSACTIONS_KEY)
        if not raw:
            return []
        try:
            return deserialize_transactions(raw)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            self._logger.warning("transactions_parse_failed", key=TRANSACTIONS_KEY, error=str(e))
            return []

    def load_budgets(self) -> list[Budget]:
        raw = self._read(BUDGETS_KEY)
        if not raw:
            return []
        try:
            return deserialize_budgets(raw)
        except ValueError as e:
            self._logger.warning("budgets_parse_failed", key=BUDGETS_KEY, error=str(e))
            return []

    def load_category_icons(self) -> dict[Category, str]:
        raw = self._read(CATEGORY_ICONS_KEY)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError as e:
            self._logger.warning("category_icons_parse_failed", key=CATEGORY_ICONS_KEY, error=str(e))
            return {}
        if not isinstance(data, dict):
            return {}

        icons = {}
        for name, icon in data.items():
            try:
                category = Category(name)
            except ValueError:
                continue
            if icon in ICON_POOL:
                icons[category] = icon
        return icons

    def save_transactions(self, transactions: Iterable[Transaction]) -> None:
        self._storage.set_item(TRANSACTIONS_KEY, serialize_transactions(transactions))

    def save_budgets(self, budgets: Iterable[Budget]) -> None:
        self._storage.set_item(BUDGETS_KEY, serialize_budgets(budgets))

    def save_category_icons(self, icons: dict[Category, str]) -> None:
        payload = {category.value: icon for category, icon in icons.items()}
        self._storage.set_item(CATEGORY_ICONS_KEY, json.dumps(payload))

    def clear_transactions(self) -> None:
        self._storage.remove_item(TRANSACTIONS_KEY)
