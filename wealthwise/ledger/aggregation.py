"""
Aggregation Engine

DESIGN DECISION: Every aggregate is a pure function of a transaction
snapshot. Nothing here mutates its input or caches results; the ledger is
small enough to rescan on every render.

Amounts are summed as Decimal. Rounding to cents is left to the
presentation layer (see quantize_money).
"""

from collections import defaultdict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, Sequence, Union

from wealthwise.models.transaction import (
    Category,
    Period,
    PeriodStatistics,
    SortField,
    SortOrder,
    Summary,
    Transaction,
    TransactionType,
    TypeFilter,
    to_local_naive,
)


ZERO = Decimal("0")
HUNDRED = Decimal("100")


def summarize(transactions: Iterable[Transaction]) -> Summary:
    """Income, expense and saving totals; balance is derived from them."""
    totals = {t: ZERO for t in TransactionType}
    for t in transactions:
        totals[t.type] += t.amount
    return Summary(
        total_income=totals[TransactionType.INCOME],
        total_expense=totals[TransactionType.EXPENSE],
        total_saving=totals[TransactionType.SAVING],
    )


def filter_by_period(
    transactions: Iterable[Transaction],
    period: Union[Period, str],
    reference: datetime,
    week_days: int = 7,
) -> tuple[Transaction, ...]:
    """
    Transactions falling in a statistics window around `reference`.

    week  - dated on or after reference minus `week_days` days
    month - same calendar month and year as reference
    year  - same calendar year as reference
    all   - everything

    An aware reference is converted to local wall-clock time, like
    transaction dates are.
    """
    period = Period(period)
    reference = to_local_naive(reference)

    if period == Period.ALL:
        return tuple(transactions)

    if period == Period.WEEK:
        cutoff = reference - timedelta(days=week_days)
        return tuple(t for t in transactions if t.date >= cutoff)

    if period == Period.MONTH:
        return tuple(
            t for t in transactions
            if t.date.year == reference.year and t.date.month == reference.month
        )

    return tuple(t for t in transactions if t.date.year == reference.year)


def category_breakdown(transactions: Iterable[Transaction]) -> dict[Category, Decimal]:
    """
    Non-income spend per category.

    Categories without any expense or saving are absent, not zero.
    """
    totals: dict[Category, Decimal] = defaultdict(lambda: ZERO)
    for t in transactions:
        if t.type != TransactionType.INCOME:
            totals[t.category] += t.amount
    return {category: amount for category, amount in totals.items() if amount > 0}


def current_month_spend_by_category(
    transactions: Iterable[Transaction],
    now: datetime,
) -> dict[Category, Decimal]:
    """Per-category non-income spend for the calendar month containing `now`."""
    return category_breakdown(filter_by_period(transactions, Period.MONTH, now))


def surplus_rate(summary: Summary) -> Decimal:
    """
    Share of income not consumed by expenses, in percent.

    Savings count as retained, so this is (income - expense) / income.
    Zero when there is no income.
    """
    if summary.total_income <= 0:
        return ZERO
    return (summary.total_income - summary.total_expense) / summary.total_income * HUNDRED


def saving_ratio(summary: Summary) -> Decimal:
    """Saving as a percentage of income; zero when there is no income."""
    if summary.total_income <= 0:
        return ZERO
    return summary.total_saving / summary.total_income * HUNDRED


def period_statistics(
    transactions: Iterable[Transaction],
    period: Union[Period, str],
    reference: datetime,
    week_days: int = 7,
) -> PeriodStatistics:
    in_period = filter_by_period(transactions, period, reference, week_days=week_days)
    summary = summarize(in_period)
    return PeriodStatistics(
        period=Period(period),
        reference=reference,
        summary=summary,
        surplus_rate=surplus_rate(summary),
        saving_ratio=saving_ratio(summary),
        breakdown=category_breakdown(in_period),
        transaction_count=len(in_period),
    )


def by_type(
    transactions: Iterable[Transaction],
    transaction_type: Union[TransactionType, str],
) -> tuple[Transaction, ...]:
    transaction_type = TransactionType(transaction_type)
    return tuple(t for t in transactions if t.type == transaction_type)


def recent(transactions: Sequence[Transaction], limit: int = 8) -> tuple[Transaction, ...]:
    """The first `limit` entries in stored order (most recent insertions)."""
    return tuple(transactions[: max(0, limit)])


def _sort_key(field: SortField):
    if field == SortField.AMOUNT:
        return lambda t: t.amount
    if field == SortField.CATEGORY:
        return lambda t: t.category.display_name
    return lambda t: t.date


def filter_and_sort(
    transactions: Iterable[Transaction],
    type_filter: Union[TypeFilter, str] = TypeFilter.ALL,
    sort_by: Union[SortField, str] = SortField.DATE,
    order: Union[SortOrder, str] = SortOrder.DESC,
) -> tuple[Transaction, ...]:
    """
    History view: optional type filter, then a stable sort.

    Category sorting uses the display name, matching what the user sees.
    """
    type_filter = TypeFilter(type_filter)
    sort_by = SortField(sort_by)
    order = SortOrder(order)

    result = list(transactions)
    if type_filter != TypeFilter.ALL:
        result = [t for t in result if t.type.value == type_filter.value]

    result.sort(key=_sort_key(sort_by), reverse=order == SortOrder.DESC)
    return tuple(result)
