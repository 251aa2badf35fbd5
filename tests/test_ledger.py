"""
Tests for the ledger core: store, funds guard and budget evaluator.
"""

import pytest
from datetime import datetime
from decimal import Decimal

from wealthwise.ledger import (
    InsufficientFundsError,
    LedgerStore,
    NotFoundError,
    ValidationError,
)
from wealthwise.ledger.aggregation import summarize
from wealthwise.ledger.budgets import budget_map, classify, evaluate, upsert_budget
from wealthwise.ledger.guard import check_affordable, effective_balance, ensure_affordable
from wealthwise.models.transaction import (
    Budget,
    BudgetSeverity,
    Category,
    Transaction,
    TransactionDraft,
    TransactionType,
)


def make_draft(amount="10", category=Category.FOOD, type=TransactionType.EXPENSE, **kwargs):
    return TransactionDraft(
        amount=Decimal(amount),
        category=category,
        type=type,
        date=kwargs.pop("date", datetime(2024, 3, 10, 9, 0)),
        **kwargs,
    )


def assert_balance_identity(store: LedgerStore):
    summary = summarize(store.list())
    assert summary.balance == summary.total_income - summary.total_expense - summary.total_saving


class TestLedgerStore:
    """Tests for LedgerStore mutations."""

    def test_add_prepends(self):
        """Test that the newest insertion comes first."""
        store = LedgerStore()
        first = store.add(make_draft("1"))
        second = store.add(make_draft("2"))
        assert [t.id for t in store.list()] == [second.id, first.id]

    def test_add_accepts_dict(self):
        """Test that plain dicts are validated into drafts."""
        store = LedgerStore()
        saved = store.add({
            "amount": "25",
            "category": "Groceries",
            "type": "expense",
            "date": datetime(2024, 3, 1),
        })
        assert saved.category == Category.GROCERIES
        assert saved.description == "Groceries"

    @pytest.mark.parametrize("payload", [
        {"amount": "0", "category": "food", "type": "expense"},
        {"amount": "-5", "category": "food", "type": "expense"},
        {"amount": "5", "category": "lottery", "type": "expense"},
        {"amount": "5", "category": "food", "type": "transfer"},
    ])
    def test_invalid_add_leaves_store_unchanged(self, payload):
        """Test that rejected adds do not touch the collection."""
        store = LedgerStore()
        store.add(make_draft("3"))
        before = store.list()
        with pytest.raises(ValidationError):
            store.add({**payload, "date": datetime(2024, 3, 1)})
        assert store.list() == before

    def test_update_keeps_id_and_position(self):
        """Test that edits replace fields but not identity."""
        store = LedgerStore()
        older = store.add(make_draft("1"))
        store.add(make_draft("2"))
        updated = store.update(older.id, make_draft("99", category=Category.RENT))
        assert updated.id == older.id
        matches = [t for t in store.list() if t.id == older.id]
        assert len(matches) == 1
        assert matches[0].amount == Decimal("99")
        assert store.list()[1].id == older.id

    def test_update_unknown_id(self):
        """Test that editing a missing id raises NotFoundError."""
        store = LedgerStore()
        with pytest.raises(NotFoundError):
            store.update("missing", make_draft())

    def test_remove(self):
        """Test removal and the missing-id error."""
        store = LedgerStore()
        saved = store.add(make_draft())
        store.remove(saved.id)
        assert len(store) == 0
        with pytest.raises(NotFoundError):
            store.remove(saved.id)

    def test_clear(self):
        """Test that clear empties the store."""
        store = LedgerStore()
        store.add(make_draft())
        store.add(make_draft())
        store.clear()
        assert store.list() == ()

    def test_listener_receives_snapshots(self):
        """Test that every mutation notifies with the new snapshot."""
        snapshots = []
        store = LedgerStore(on_change=snapshots.append)
        saved = store.add(make_draft())
        store.update(saved.id, make_draft("20"))
        store.remove(saved.id)
        assert [len(s) for s in snapshots] == [1, 1, 0]

    def test_replace_all_does_not_notify(self):
        """Test that restoring state is silent."""
        snapshots = []
        store = LedgerStore(on_change=snapshots.append)
        store.replace_all([Transaction.from_draft(make_draft())])
        assert len(store) == 1
        assert snapshots == []

    def test_balance_identity_after_every_operation(self):
        """Test balance == income - expense - saving through a mutation sequence."""
        store = LedgerStore()
        income = store.add(make_draft("1000", Category.SALARY, TransactionType.INCOME))
        assert_balance_identity(store)
        rent = store.add(make_draft("400", Category.RENT))
        assert_balance_identity(store)
        store.add(make_draft("150", Category.SAVINGS, TransactionType.SAVING))
        assert_balance_identity(store)
        store.update(rent.id, make_draft("450", Category.RENT))
        assert_balance_identity(store)
        store.remove(income.id)
        assert_balance_identity(store)
        assert summarize(store.list()).balance == Decimal("-600")


class TestFundsGuard:
    """Tests for the edit-aware affordability check."""

    def test_edit_reverses_original_expense(self):
        """Test that editing a 30 expense to 120 with balance 100 is allowed."""
        original = Transaction.from_draft(make_draft("30"))
        assert effective_balance(Decimal("100"), original) == Decimal("130")
        assert check_affordable(Decimal("120"), TransactionType.EXPENSE, Decimal("100"), original)

    def test_new_expense_above_balance_rejected(self):
        """Test that a new 120 expense with balance 100 is not affordable."""
        assert not check_affordable(Decimal("120"), TransactionType.EXPENSE, Decimal("100"))

    def test_edit_reverses_original_income(self):
        """Test that editing an income entry removes its contribution."""
        original = Transaction.from_draft(make_draft("50", Category.SALARY, TransactionType.INCOME))
        assert effective_balance(Decimal("100"), original) == Decimal("50")
        assert not check_affordable(Decimal("60"), TransactionType.SAVING, Decimal("100"), original)

    def test_income_always_affordable(self):
        """Test that income is never blocked."""
        assert check_affordable(Decimal("5000"), TransactionType.INCOME, Decimal("-20"))

    def test_exact_balance_allowed(self):
        """Test that spending the whole balance is allowed."""
        assert check_affordable(Decimal("100"), TransactionType.EXPENSE, Decimal("100"))

    def test_ensure_affordable_carries_effective_balance(self):
        """Test the error payload."""
        original = Transaction.from_draft(make_draft("30"))
        with pytest.raises(InsufficientFundsError) as exc_info:
            ensure_affordable(Decimal("200"), TransactionType.EXPENSE, Decimal("100"), original)
        assert exc_info.value.available == Decimal("130")
        assert exc_info.value.requested == Decimal("200")
        assert "130.00" in str(exc_info.value)


class TestBudgetEvaluator:
    """Tests for monthly budget warnings."""

    def test_warning_boundary_at_eighty_percent(self):
        """Test that 160 of 200 warns and 159.99 does not."""
        budgets = [Budget(category=Category.FOOD, limit=Decimal("200"))]
        at_threshold = evaluate(budgets, {Category.FOOD: Decimal("160")})
        below = evaluate(budgets, {Category.FOOD: Decimal("159.99")})
        assert len(at_threshold) == 1
        assert at_threshold[0].percent == Decimal("80")
        assert at_threshold[0].severity == BudgetSeverity.APPROACHING_LIMIT
        assert below == []

    def test_over_limit_severity(self):
        """Test that 100% and above is over limit."""
        budgets = [Budget(category=Category.FOOD, limit=Decimal("200"))]
        warnings = evaluate(budgets, {Category.FOOD: Decimal("200")})
        assert warnings[0].is_over_limit

    def test_no_spend_no_warning(self):
        """Test that untouched budgets are silent."""
        budgets = [Budget(category=Category.RENT, limit=Decimal("1000"))]
        assert evaluate(budgets, {}) == []

    def test_ordered_by_percent(self):
        """Test that the most urgent warning comes first."""
        budgets = [
            Budget(category=Category.FOOD, limit=Decimal("100")),
            Budget(category=Category.RENT, limit=Decimal("100")),
        ]
        spend = {Category.FOOD: Decimal("85"), Category.RENT: Decimal("120")}
        assert [w.category for w in evaluate(budgets, spend)] == [Category.RENT, Category.FOOD]

    def test_classify_thresholds(self):
        """Test severity classification."""
        assert classify(Decimal("79.99")) == BudgetSeverity.WITHIN_LIMIT
        assert classify(Decimal("80")) == BudgetSeverity.APPROACHING_LIMIT
        assert classify(Decimal("100")) == BudgetSeverity.OVER_LIMIT

    def test_upsert_replaces_and_removes(self):
        """Test one budget per category, and removal with a zero limit."""
        budgets = upsert_budget((), Category.FOOD, "200")
        budgets = upsert_budget(budgets, "food", 300)
        assert budget_map(budgets) == {Category.FOOD: Decimal("300")}
        assert upsert_budget(budgets, Category.FOOD, 0) == ()

    def test_upsert_rejects_income_category(self):
        """Test that salary budgets are refused."""
        with pytest.raises(ValidationError):
            upsert_budget((), Category.SALARY, "100")

    def test_upsert_rejects_garbage(self):
        """Test unknown categories and non-numeric limits."""
        with pytest.raises(ValidationError):
            upsert_budget((), "lottery", "100")
        with pytest.raises(ValidationError):
            upsert_budget((), Category.FOOD, "lots")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
