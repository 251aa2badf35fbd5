"""
Tests for local storage and the ledger persistence adapter.
"""

import json
import pytest
from datetime import datetime
from decimal import Decimal

from wealthwise.ledger import LedgerStore
from wealthwise.models.audit import AuditEventBuilder
from wealthwise.models.transaction import Budget, Category, TransactionDraft, TransactionType
from wealthwise.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueAuditStorage,
    LedgerPersistence,
    PersistenceError,
)
from wealthwise.services.storage.local import MAX_AUDIT_EVENTS
from wealthwise.services.storage.persistence import (
    BUDGETS_KEY,
    CATEGORY_ICONS_KEY,
    TRANSACTIONS_KEY,
    deserialize_transactions,
    serialize_transactions,
)


@pytest.fixture
def populated_store():
    store = LedgerStore()
    store.add(TransactionDraft(
        amount=Decimal("2500"),
        category=Category.SALARY,
        type=TransactionType.INCOME,
        date=datetime(2024, 3, 1, 9, 0),
    ))
    store.add(TransactionDraft(
        amount=Decimal("12.34"),
        category=Category.DINING_OUT,
        type=TransactionType.EXPENSE,
        description="Ramen with friends",
        date=datetime(2024, 3, 2, 20, 15),
    ))
    store.add(TransactionDraft(
        amount=Decimal("300.10"),
        category=Category.SAVINGS,
        type=TransactionType.SAVING,
        date=datetime(2024, 3, 3, 8, 45),
    ))
    return store


class TestSerialization:
    """Tests for the persisted JSON format."""

    def test_round_trip_reproduces_collection(self, populated_store):
        """Test that serialize then deserialize gives an equal ledger."""
        restored = deserialize_transactions(serialize_transactions(populated_store.list()))
        assert tuple(restored) == populated_store.list()

    def test_record_format(self, populated_store):
        """Test field names and value types of a stored record."""
        record = json.loads(serialize_transactions(populated_store.list()))[1]
        assert record["category"] == "dining_out"
        assert record["type"] == "expense"
        assert record["amount"] == 12.34
        assert record["date"] == "2024-03-02T20:15:00"
        assert set(record) == {"id", "amount", "category", "type", "description", "date"}

    def test_invalid_records_are_skipped(self):
        """Test that one bad record does not discard the ledger."""
        raw = json.dumps([
            {"id": "a", "amount": 5, "category": "food", "type": "expense",
             "description": "ok", "date": "2024-03-01T10:00:00"},
            {"id": "b", "amount": -5, "category": "food", "type": "expense",
             "description": "bad", "date": "2024-03-01T10:00:00"},
            "not a record",
        ])
        assert [t.id for t in deserialize_transactions(raw)] == ["a"]

    def test_duplicate_ids_keep_first_record(self):
        """Test that a repeated id is loaded only once."""
        record = {"id": "a", "amount": 5, "category": "food", "type": "expense",
                  "description": "first", "date": "2024-03-01T10:00:00"}
        raw = json.dumps([record, {**record, "description": "second"}, {**record, "id": "b"}])
        restored = deserialize_transactions(raw)
        assert [t.id for t in restored] == ["a", "b"]
        assert restored[0].description == "first"

    def test_largest_amount_survives_round_trip(self):
        """Test that a 15-digit amount is restored exactly."""
        store = LedgerStore()
        store.add(TransactionDraft(
            amount=Decimal("9999999999999.99"),
            category=Category.SALARY,
            type=TransactionType.INCOME,
            date=datetime(2024, 3, 1, 9, 0),
        ))
        restored = deserialize_transactions(serialize_transactions(store.list()))
        assert restored[0].amount == Decimal("9999999999999.99")

    def test_non_list_payload_rejected(self):
        """Test that the payload must be a list."""
        with pytest.raises(ValueError):
            deserialize_transactions('{"id": "a"}')


class TestLedgerPersistence:
    """Tests for loading and saving ledger state."""

    def test_missing_keys_load_empty(self):
        """Test defaults when nothing was saved yet."""
        persistence = LedgerPersistence(InMemoryStorage())
        assert persistence.load_transactions() == []
        assert persistence.load_budgets() == []
        assert persistence.load_category_icons() == {}

    def test_corrupt_json_loads_empty(self):
        """Test that unparsable data never fails the load."""
        storage = InMemoryStorage({
            TRANSACTIONS_KEY: "{not json",
            BUDGETS_KEY: "[[[",
            CATEGORY_ICONS_KEY: "nope",
        })
        persistence = LedgerPersistence(storage)
        assert persistence.load_transactions() == []
        assert persistence.load_budgets() == []
        assert persistence.load_category_icons() == {}

    def test_budgets_round_trip(self):
        """Test saving and loading budgets."""
        persistence = LedgerPersistence(InMemoryStorage())
        budgets = [Budget(category=Category.FOOD, limit=Decimal("200.50"))]
        persistence.save_budgets(budgets)
        assert persistence.load_budgets() == budgets

    def test_icons_ignore_unknown_entries(self):
        """Test that stale icon overrides are dropped."""
        storage = InMemoryStorage({
            CATEGORY_ICONS_KEY: json.dumps({"food": "Coffee", "lottery": "Star", "rent": "Rocket"}),
        })
        assert LedgerPersistence(storage).load_category_icons() == {Category.FOOD: "Coffee"}

    def test_clear_transactions(self, populated_store):
        """Test removing the stored ledger."""
        storage = InMemoryStorage()
        persistence = LedgerPersistence(storage)
        persistence.save_transactions(populated_store.list())
        persistence.clear_transactions()
        assert storage.get_item(TRANSACTIONS_KEY) is None


class TestJsonFileStorage:
    """Tests for the on-disk backend."""

    def test_persists_across_instances(self, tmp_path, populated_store):
        """Test that a new storage object sees earlier writes."""
        path = tmp_path / "ledger.json"
        LedgerPersistence(JsonFileStorage(path)).save_transactions(populated_store.list())
        restored = LedgerPersistence(JsonFileStorage(path)).load_transactions()
        assert tuple(restored) == populated_store.list()

    def test_remove_item(self, tmp_path):
        """Test key removal."""
        storage = JsonFileStorage(tmp_path / "ledger.json")
        storage.set_item("a", "1")
        storage.remove_item("a")
        assert JsonFileStorage(tmp_path / "ledger.json").keys() == []

    def test_corrupt_file_raises_persistence_error(self, tmp_path):
        """Test that the raw backend reports unreadable files."""
        path = tmp_path / "ledger.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonFileStorage(path).get_item(TRANSACTIONS_KEY)

    def test_corrupt_file_degrades_to_empty_ledger(self, tmp_path):
        """Test that the adapter turns read failures into empty state."""
        path = tmp_path / "ledger.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert LedgerPersistence(JsonFileStorage(path)).load_transactions() == []


class TestAuditStorage:
    """Tests for the key-value audit trail."""

    def test_append_and_read_newest_first(self):
        """Test event ordering."""
        audit = KeyValueAuditStorage(InMemoryStorage())
        audit.append_event(AuditEventBuilder.ledger_cleared(removed_count=1))
        audit.append_event(AuditEventBuilder.ledger_cleared(removed_count=2))
        events = audit.get_recent_events(limit=10)
        assert [e["details"]["removed_count"] for e in events] == [2, 1]

    def test_trail_is_capped(self):
        """Test that only the newest events are kept."""
        storage = InMemoryStorage()
        audit = KeyValueAuditStorage(storage)
        for i in range(MAX_AUDIT_EVENTS + 5):
            audit.append_event(AuditEventBuilder.ledger_cleared(removed_count=i))
        assert len(json.loads(storage.get_item("wealthwise_audit"))) == MAX_AUDIT_EVENTS


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
