"""
Budget Evaluator

Compares this month's per-category spend against the user's monthly limits.

Warnings are emitted at 80% of a limit (configurable) and classified as
"approaching" below 100% and "over" from 100% on. Budgets are never linked
to individual transactions; the evaluator only reads the spend mapping.
"""

from decimal import Decimal
from typing import Iterable, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from wealthwise.ledger.errors import ValidationError
from wealthwise.models.transaction import (
    Budget,
    BudgetSeverity,
    BudgetWarning,
    Category,
)


DEFAULT_WARNING_PERCENT = Decimal("80")
DEFAULT_OVER_PERCENT = Decimal("100")
HUNDRED = Decimal("100")


def classify(
    percent: Decimal,
    warning_percent: Decimal = DEFAULT_WARNING_PERCENT,
    over_percent: Decimal = DEFAULT_OVER_PERCENT,
) -> BudgetSeverity:
    if percent >= over_percent:
        return BudgetSeverity.OVER_LIMIT
    if percent >= warning_percent:
        return BudgetSeverity.APPROACHING_LIMIT
    return BudgetSeverity.WITHIN_LIMIT


def evaluate(
    budgets: Iterable[Budget],
    month_spend: Mapping[Category, Decimal],
    warning_percent: Decimal = DEFAULT_WARNING_PERCENT,
    over_percent: Decimal = DEFAULT_OVER_PERCENT,
) -> list[BudgetWarning]:
    """
    Warnings for every budget whose spend is at or above the threshold.

    Ordered by percent descending, ties broken by category tag, so the
    most urgent warning comes first.
    """
    warning_percent = Decimal(str(warning_percent))
    over_percent = Decimal(str(over_percent))

    warnings = []
    for budget in budgets:
        spent = month_spend.get(budget.category, Decimal("0"))
        percent = spent / budget.limit * HUNDRED
        if percent < warning_percent:
            continue
        warnings.append(BudgetWarning(
            category=budget.category,
            spent=spent,
            limit=budget.limit,
            percent=percent,
            severity=classify(percent, warning_percent, over_percent),
        ))

    warnings.sort(key=lambda w: (-w.percent, w.category.value))
    return warnings


def upsert_budget(
    budgets: Iterable[Budget],
    category: Union[Category, str],
    limit: Union[Decimal, int, float, str],
) -> tuple[Budget, ...]:
    """
    Set or clear the monthly limit for one category.

    A limit of zero or less removes the category's budget. Any other value
    replaces the existing entry, keeping at most one budget per category.

    Raises:
        ValidationError: For unknown categories, income-only categories
            or non-numeric limits
    """
    try:
        category = Category(category)
    except ValueError as e:
        raise ValidationError(f"Unknown category: {category}") from e

    try:
        limit = Decimal(str(limit))
    except ArithmeticError as e:
        raise ValidationError(f"Invalid budget limit: {limit}") from e
    if not limit.is_finite():
        raise ValidationError(f"Invalid budget limit: {limit}")

    remaining = tuple(b for b in budgets if b.category != category)
    if limit <= 0:
        return remaining

    try:
        budget = Budget(category=category, limit=limit)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e

    return remaining + (budget,)


def budget_map(budgets: Iterable[Budget]) -> dict[Category, Decimal]:
    return {b.category: b.limit for b in budgets}
