"""
Main Orchestrator for WealthWise

This module ties together all the components and defines the
end-to-end flows for:
1. Saving an entry (draft -> validate -> funds guard -> store -> persist -> audit)
2. Budgets and category preferences
3. Read models for the home, statistics and history views
4. Report export and AI advice

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is committed before the funds guard has passed
- Every mutation is mirrored to local storage right away
- Storage and advisor failures are logged, never raised to the UI
"""

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from wealthwise.agents import FinancialAdvisorAgent, InsightResponse
from wealthwise.audit import AuditLogger, create_correlation_id
from wealthwise.config import AppSettings, get_settings
from wealthwise.ledger import aggregation, budgets as budget_rules
from wealthwise.ledger.errors import (
    InsufficientFundsError,
    ValidationError,
)
from wealthwise.ledger.guard import effective_balance, ensure_affordable
from wealthwise.ledger.store import DraftInput, LedgerStore, coerce_draft
from wealthwise.models.audit import AuditEventBuilder
from wealthwise.models.transaction import (
    ICON_POOL,
    Budget,
    BudgetWarning,
    Category,
    Period,
    PeriodStatistics,
    SortField,
    SortOrder,
    Summary,
    Transaction,
    TransactionType,
    TypeFilter,
    quantize_money,
    resolve_icon,
)
from wealthwise.reports import build_report, render_csv, render_text
from wealthwise.services.storage import (
    InMemoryStorage,
    KeyValueAuditStorage,
    LedgerPersistence,
    PersistenceError,
    create_storage,
)


def _parse_category(category: Union[Category, str]) -> Category:
    try:
        return Category(category)
    except ValueError as e:
        raise ValidationError(f"Unknown category: {category}") from e


def default_entry_datetime(now: Optional[datetime] = None, days_ago: int = 0) -> datetime:
    """
    Default date for the entry form, to the minute.

    days_ago=0 is the "Now" preset, days_ago=1 is "Yesterday".
    """
    now = now or datetime.now()
    return (now - timedelta(days=days_ago)).replace(second=0, microsecond=0)


class QuickEntry(BaseModel):
    """
    Entry form state after tapping a category in the quick-entry strip.

    The amount is still missing; the user completes the form and it
    becomes a TransactionDraft.
    """

    category: Category
    type: TransactionType = TransactionType.EXPENSE
    date: datetime
    description: str = ""

    def complete(self, amount: Union[Decimal, str, int, float], description: Optional[str] = None) -> dict:
        return {
            "amount": amount,
            "category": self.category,
            "type": self.type,
            "description": self.description if description is None else description,
            "date": self.date,
        }


class Dashboard(BaseModel):
    """Home page read model."""

    summary: Summary
    recent: list[Transaction] = Field(default_factory=list)
    budget_warnings: list[BudgetWarning] = Field(default_factory=list)
    saving_history: list[Transaction] = Field(default_factory=list)
    saving_ratio: Decimal = Decimal("0")


class ReportFile(BaseModel):
    """A rendered report ready for download."""

    file_name: str
    mime_type: str
    content: str


REPORT_FORMATS = {
    "text": ("txt", "text/plain"),
    "csv": ("csv", "text/csv"),
}


class LedgerService:
    """
    Facade the presentation layer talks to.

    Owns the ledger store, the budget list and icon preferences, and keeps
    local storage in sync with them after every change.

    Flow for saving an entry:
    1. Validate the draft (ValidationError blocks)
    2. Reverse the edited entry's effect and check funds (InsufficientFundsError blocks)
    3. Add or update in the store
    4. Write through to storage (failures are logged, not raised)
    5. Audit
    """

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        persistence: Optional[LedgerPersistence] = None,
        audit_logger: Optional[AuditLogger] = None,
        advisor: Optional[FinancialAdvisorAgent] = None,
        settings: Optional[AppSettings] = None,
    ):
        self._store = store or LedgerStore()
        self._persistence = persistence or LedgerPersistence(InMemoryStorage())
        self._audit_logger = audit_logger or AuditLogger()
        self._advisor = advisor or FinancialAdvisorAgent()
        self._settings = settings or get_settings().app
        self._budgets: tuple[Budget, ...] = ()
        self._category_icons: dict[Category, str] = {}

        self._store.set_listener(self._persist_transactions)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def store(self) -> LedgerStore:
        return self._store

    @property
    def audit_logger(self) -> AuditLogger:
        return self._audit_logger

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._store.list()

    @property
    def budgets(self) -> tuple[Budget, ...]:
        return self._budgets

    @property
    def category_icons(self) -> dict[Category, str]:
        return dict(self._category_icons)

    def icon_for(self, category: Category) -> str:
        return resolve_icon(category, self._category_icons)

    def load(self) -> None:
        """Restore ledger state from local storage. Never raises."""
        self._store.replace_all(self._persistence.load_transactions())
        self._budgets = tuple(self._persistence.load_budgets())
        self._category_icons = self._persistence.load_category_icons()
        self._audit_logger.log(AuditEventBuilder.ledger_loaded(
            transaction_count=len(self._store),
            budget_count=len(self._budgets),
        ))

    # ------------------------------------------------------------------
    # Persistence (write-through, fire-and-forget)
    # ------------------------------------------------------------------

    def _log_persistence_failure(self, error: PersistenceError) -> None:
        self._audit_logger.log(AuditEventBuilder.persistence_failed(
            key=error.key,
            operation=error.operation,
            error_message=str(error),
        ))

    def _persist_transactions(self, snapshot: tuple[Transaction, ...]) -> None:
        try:
            self._persistence.save_transactions(snapshot)
        except PersistenceError as e:
            self._log_persistence_failure(e)

    def _persist_budgets(self) -> None:
        try:
            self._persistence.save_budgets(self._budgets)
        except PersistenceError as e:
            self._log_persistence_failure(e)

    def _persist_icons(self) -> None:
        try:
            self._persistence.save_category_icons(self._category_icons)
        except PersistenceError as e:
            self._log_persistence_failure(e)

    # ------------------------------------------------------------------
    # Ledger mutations
    # ------------------------------------------------------------------

    def summary(self) -> Summary:
        return aggregation.summarize(self._store.list())

    def available_balance(self, editing_id: Optional[str] = None) -> Decimal:
        """Balance available to the entry being created or edited."""
        return effective_balance(self.summary().balance, self._store.find(editing_id))

    def save_transaction(
        self,
        draft: DraftInput,
        editing_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Create a new entry, or replace the one with `editing_id`.

        Raises:
            ValidationError: Malformed draft
            NotFoundError: editing_id does not exist
            InsufficientFundsError: Expense/saving above the available balance
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            parsed = coerce_draft(draft)
        except ValidationError as e:
            self._audit_logger.log(AuditEventBuilder.validation_failed(
                errors=e.errors,
                correlation_id=correlation_id,
            ))
            raise

        original = self._store.get(editing_id) if editing_id is not None else None

        try:
            ensure_affordable(parsed.amount, parsed.type, self.summary().balance, original)
        except InsufficientFundsError as e:
            self._audit_logger.log(AuditEventBuilder.insufficient_funds(
                requested=str(quantize_money(e.requested)),
                available=str(quantize_money(e.available)),
                correlation_id=correlation_id,
            ))
            raise

        if original is None:
            saved = self._store.add(parsed)
            builder = AuditEventBuilder.transaction_added
        else:
            saved = self._store.update(original.id, parsed)
            builder = AuditEventBuilder.transaction_updated

        self._audit_logger.log(builder(
            transaction_id=saved.id,
            transaction_type=saved.type.value,
            category=saved.category.display_name,
            amount=str(quantize_money(saved.amount)),
            correlation_id=correlation_id,
        ))
        return saved

    def delete_transaction(self, transaction_id: str) -> None:
        """
        Raises:
            NotFoundError: If no transaction has this id
        """
        self._store.remove(transaction_id)
        self._audit_logger.log(AuditEventBuilder.transaction_deleted(transaction_id))

    def clear_all(self) -> int:
        """Delete every transaction. Returns how many were removed."""
        removed = len(self._store)
        self._store.clear()
        self._audit_logger.log(AuditEventBuilder.ledger_cleared(removed))
        return removed

    # ------------------------------------------------------------------
    # Budgets and preferences
    # ------------------------------------------------------------------

    def set_budget(
        self,
        category: Union[Category, str],
        limit: Union[Decimal, int, float, str],
    ) -> tuple[Budget, ...]:
        """
        Set a category's monthly limit; zero or less removes it.

        Raises:
            ValidationError: Unknown or income-only category, bad limit
        """
        self._budgets = budget_rules.upsert_budget(self._budgets, category, limit)
        self._persist_budgets()

        category = Category(category)
        current = budget_rules.budget_map(self._budgets).get(category)
        self._audit_logger.log(AuditEventBuilder.budget_changed(
            category=category.display_name,
            limit=str(quantize_money(current)) if current is not None else None,
        ))
        return self._budgets

    def set_category_icon(self, category: Union[Category, str], icon: str) -> None:
        """
        Raises:
            ValidationError: Icon not in the icon pool or unknown category
        """
        category = _parse_category(category)
        if icon not in ICON_POOL:
            raise ValidationError(f"Unknown icon: {icon}")

        self._category_icons[category] = icon
        self._persist_icons()
        self._audit_logger.log(AuditEventBuilder.category_icon_changed(
            category=category.display_name,
            icon=icon,
        ))

    def reset_category_icon(self, category: Union[Category, str]) -> None:
        """
        Raises:
            ValidationError: Unknown category
        """
        category = _parse_category(category)
        if self._category_icons.pop(category, None) is not None:
            self._persist_icons()

    # ------------------------------------------------------------------
    # Read models
    # ------------------------------------------------------------------

    def budget_warnings(self, now: Optional[datetime] = None) -> list[BudgetWarning]:
        now = now or datetime.now()
        month_spend = aggregation.current_month_spend_by_category(self._store.list(), now)
        return budget_rules.evaluate(
            self._budgets,
            month_spend,
            warning_percent=Decimal(str(self._settings.budget_warning_percent)),
            over_percent=Decimal(str(self._settings.budget_over_percent)),
        )

    def dashboard(self, now: Optional[datetime] = None) -> Dashboard:
        snapshot = self._store.list()
        summary = aggregation.summarize(snapshot)
        return Dashboard(
            summary=summary,
            recent=list(aggregation.recent(snapshot, self._settings.recent_limit)),
            budget_warnings=self.budget_warnings(now),
            saving_history=list(aggregation.by_type(snapshot, TransactionType.SAVING)),
            saving_ratio=aggregation.saving_ratio(summary),
        )

    def statistics(
        self,
        period: Union[Period, str] = Period.MONTH,
        now: Optional[datetime] = None,
    ) -> PeriodStatistics:
        return aggregation.period_statistics(
            self._store.list(),
            period,
            now or datetime.now(),
            week_days=self._settings.week_days,
        )

    def history(
        self,
        type_filter: Union[TypeFilter, str] = TypeFilter.ALL,
        sort_by: Union[SortField, str] = SortField.DATE,
        order: Union[SortOrder, str] = SortOrder.DESC,
    ) -> tuple[Transaction, ...]:
        return aggregation.filter_and_sort(self._store.list(), type_filter, sort_by, order)

    def quick_add_draft(
        self,
        category: Union[Category, str],
        transaction_type: Optional[Union[TransactionType, str]] = None,
        now: Optional[datetime] = None,
    ) -> QuickEntry:
        """Prefilled form state; income-only categories default to income."""
        category = _parse_category(category)
        if transaction_type is None:
            transaction_type = (
                TransactionType.INCOME if category.is_income_only else TransactionType.EXPENSE
            )
        return QuickEntry(
            category=category,
            type=TransactionType(transaction_type),
            date=default_entry_datetime(now),
        )

    # ------------------------------------------------------------------
    # Export and insights
    # ------------------------------------------------------------------

    def export_report(self, now: Optional[datetime] = None, fmt: str = "text") -> ReportFile:
        """
        Render the financial report for all transactions.

        Every call is audited, so call it once per user request.

        Args:
            fmt: "text" or "csv"
        """
        if fmt not in REPORT_FORMATS:
            raise ValueError(f"Unsupported report format: {fmt}")
        extension, mime_type = REPORT_FORMATS[fmt]

        report = build_report(
            self._store.list(),
            generated_at=now or datetime.now(),
            currency_symbol=self._settings.currency_symbol,
        )
        self._audit_logger.log(AuditEventBuilder.report_exported(len(report.rows), fmt))
        return ReportFile(
            file_name=f"{report.file_stem}.{extension}",
            mime_type=mime_type,
            content=render_csv(report) if fmt == "csv" else render_text(report),
        )

    async def get_insights(self) -> InsightResponse:
        """AI advice for the current snapshot. Never raises."""
        response = await self._advisor.get_insights(self._store.list())
        if response.error:
            self._audit_logger.log(AuditEventBuilder.insight_failed(response.error))
        elif response.from_model:
            self._audit_logger.log(AuditEventBuilder.insight_generated(response.transaction_count))
        return response

    def get_insights_sync(self) -> InsightResponse:
        """Blocking wrapper for callers without an event loop."""
        return asyncio.run(self.get_insights())


def create_app_components(use_storage: bool = True) -> LedgerService:
    """
    Factory function to create a ready-to-use ledger service.

    Args:
        use_storage: Whether to use the configured local storage.
                    Set to False for a throwaway in-memory session.

    Returns:
        A LedgerService with its state restored
    """
    storage = create_storage() if use_storage else InMemoryStorage()
    audit_logger = AuditLogger(KeyValueAuditStorage(storage))

    service = LedgerService(
        persistence=LedgerPersistence(storage),
        audit_logger=audit_logger,
    )
    service.load()
    return service
