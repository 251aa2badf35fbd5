"""
Data Models Package

This package contains all Pydantic models used in WealthWise.
All data flowing through the ledger must conform to these schemas.
"""

from wealthwise.models.transaction import (
    CATEGORY_STYLES,
    ICON_POOL,
    INCOME_ONLY_CATEGORIES,
    Budget,
    BudgetSeverity,
    BudgetWarning,
    Category,
    CategoryStyle,
    Period,
    PeriodStatistics,
    SortField,
    SortOrder,
    Summary,
    Transaction,
    TransactionDraft,
    TransactionType,
    TypeFilter,
    quantize_money,
    resolve_icon,
)
from wealthwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "CATEGORY_STYLES",
    "ICON_POOL",
    "INCOME_ONLY_CATEGORIES",
    "Budget",
    "BudgetSeverity",
    "BudgetWarning",
    "Category",
    "CategoryStyle",
    "Period",
    "PeriodStatistics",
    "SortField",
    "SortOrder",
    "Summary",
    "Transaction",
    "TransactionDraft",
    "TransactionType",
    "TypeFilter",
    "quantize_money",
    "resolve_icon",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
