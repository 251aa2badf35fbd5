"""
Core Data Models for WealthWise

These models define the strict schemas for all data flowing through the ledger.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for local storage
4. Stay immutable once stored

DESIGN DECISION: Amounts are Decimal end to end. Rounding to cents happens
only when a value is shown to the user (see quantize_money).
"""

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
)


CENTS = Decimal("0.01")

# Stored as JSON numbers; 15 significant digits survive the float round trip
MONEY_MAX_DIGITS = 15


def quantize_money(value: Decimal) -> Decimal:
    """Round a currency amount to 2 decimal places for display."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def new_transaction_id() -> str:
    return uuid4().hex


def to_local_naive(value: datetime) -> datetime:
    """Local wall-clock time without tzinfo; naive values pass through."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a ledger entry."""
    INCOME = "income"
    EXPENSE = "expense"
    SAVING = "saving"


class Category(str, Enum):
    """
    Supported transaction categories.

    DESIGN DECISION: Using explicit categories rather than free text ensures
    consistent breakdowns and lets budgets be keyed reliably.

    Lookup also accepts the display name ("Dining Out") so that entries
    recorded by older clients can still be read.
    """
    FOOD = "food"
    GROCERIES = "groceries"
    DINING_OUT = "dining_out"
    TRANSPORT = "transport"
    FUEL = "fuel"
    GASOLINE = "gasoline"
    RENT = "rent"
    UTILITIES = "utilities"
    HOUSING = "housing"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    SUBSCRIPTIONS = "subscriptions"
    PHONE_CARD = "phone_card"
    HEALTH = "health"
    PERSONAL_CARE = "personal_care"
    EDUCATION = "education"
    TRAVEL = "travel"
    MAINTENANCE = "maintenance"
    INSURANCE = "insurance"
    PETS = "pets"
    PARENTS = "parents"
    TAXES = "taxes"
    LOANS = "loans"
    SALARY = "salary"
    INVESTMENT = "investment"
    SAVINGS = "savings"
    BONUS = "bonus"
    DONATIONS = "donations"
    GIFT = "gift"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            normalized = value.strip().lower().replace(" ", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def display_name(self) -> str:
        return CATEGORY_STYLES[self].display_name

    @property
    def color(self) -> str:
        return CATEGORY_STYLES[self].color

    @property
    def default_icon(self) -> str:
        return CATEGORY_STYLES[self].icon

    @property
    def is_income_only(self) -> bool:
        return self in INCOME_ONLY_CATEGORIES


class Period(str, Enum):
    """Statistics window."""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"


class TypeFilter(str, Enum):
    """History filter by transaction type."""
    ALL = "all"
    INCOME = "income"
    EXPENSE = "expense"
    SAVING = "saving"


class SortField(str, Enum):
    DATE = "date"
    AMOUNT = "amount"
    CATEGORY = "category"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class BudgetSeverity(str, Enum):
    """
    How close a category is to its monthly limit.

    Only APPROACHING_LIMIT and OVER_LIMIT ever appear on a BudgetWarning.
    """
    WITHIN_LIMIT = "within_limit"
    APPROACHING_LIMIT = "approaching_limit"
    OVER_LIMIT = "over_limit"


# =============================================================================
# CATEGORY PRESENTATION TABLES
# =============================================================================

class CategoryStyle(BaseModel):
    """Display name, color and default icon of a category."""
    model_config = ConfigDict(frozen=True)

    display_name: str
    color: str = Field(pattern=r"^#[0-9a-f]{6}$")
    icon: str


# Icons the picker may offer for any category
ICON_POOL: tuple[str, ...] = (
    "Utensils", "Car", "ShoppingBag", "Film", "Activity", "Briefcase",
    "Gift", "More", "Home", "Coffee", "Fuel", "Gasoline", "Smartphone",
    "Book", "Heart", "Zap", "Music", "Wallet", "Shield", "Globe", "Plane",
    "Paw", "Bank", "Star", "User", "PiggyBank",
)

CATEGORY_STYLES: dict[Category, CategoryStyle] = {
    Category.FOOD: CategoryStyle(display_name="Food", color="#f59e0b", icon="Utensils"),
    Category.GROCERIES: CategoryStyle(display_name="Groceries", color="#10b981", icon="ShoppingBag"),
    Category.DINING_OUT: CategoryStyle(display_name="Dining Out", color="#f97316", icon="Coffee"),
    Category.TRANSPORT: CategoryStyle(display_name="Transport", color="#6366f1", icon="Car"),
    Category.FUEL: CategoryStyle(display_name="Fuel", color="#ef4444", icon="Fuel"),
    Category.GASOLINE: CategoryStyle(display_name="Gasoline", color="#f43f5e", icon="Gasoline"),
    Category.RENT: CategoryStyle(display_name="Rent", color="#3b82f6", icon="Home"),
    Category.UTILITIES: CategoryStyle(display_name="Utilities", color="#eab308", icon="Zap"),
    Category.HOUSING: CategoryStyle(display_name="Housing", color="#1e293b", icon="Home"),
    Category.SHOPPING: CategoryStyle(display_name="Shopping", color="#ec4899", icon="ShoppingBag"),
    Category.ENTERTAINMENT: CategoryStyle(display_name="Entertainment", color="#8b5cf6", icon="Film"),
    Category.SUBSCRIPTIONS: CategoryStyle(display_name="Subscriptions", color="#06b6d4", icon="Smartphone"),
    Category.PHONE_CARD: CategoryStyle(display_name="Phone Card", color="#6366f1", icon="Smartphone"),
    Category.HEALTH: CategoryStyle(display_name="Health", color="#10b981", icon="Activity"),
    Category.PERSONAL_CARE: CategoryStyle(display_name="Personal Care", color="#d946ef", icon="Heart"),
    Category.EDUCATION: CategoryStyle(display_name="Education", color="#64748b", icon="Book"),
    Category.TRAVEL: CategoryStyle(display_name="Travel", color="#0ea5e9", icon="Plane"),
    Category.MAINTENANCE: CategoryStyle(display_name="Maintenance", color="#475569", icon="Shield"),
    Category.INSURANCE: CategoryStyle(display_name="Insurance", color="#1e293b", icon="Shield"),
    Category.PETS: CategoryStyle(display_name="Pets", color="#fbbf24", icon="Paw"),
    Category.PARENTS: CategoryStyle(display_name="Parents", color="#8b5cf6", icon="User"),
    Category.TAXES: CategoryStyle(display_name="Taxes", color="#ef4444", icon="Bank"),
    Category.LOANS: CategoryStyle(display_name="Loans", color="#dc2626", icon="Bank"),
    Category.SALARY: CategoryStyle(display_name="Salary", color="#22c55e", icon="Briefcase"),
    Category.INVESTMENT: CategoryStyle(display_name="Investment", color="#84cc16", icon="Star"),
    Category.SAVINGS: CategoryStyle(display_name="Savings", color="#059669", icon="PiggyBank"),
    Category.BONUS: CategoryStyle(display_name="Bonus", color="#fcd34d", icon="Star"),
    Category.DONATIONS: CategoryStyle(display_name="Donations", color="#fb7185", icon="Heart"),
    Category.GIFT: CategoryStyle(display_name="Gift", color="#fb7185", icon="Gift"),
    Category.OTHER: CategoryStyle(display_name="Other", color="#94a3b8", icon="More"),
}

# Budgets make no sense for these
INCOME_ONLY_CATEGORIES: frozenset[Category] = frozenset({
    Category.SALARY,
    Category.BONUS,
})


def resolve_icon(category: Category, overrides: Optional[dict[Category, str]] = None) -> str:
    """Icon for a category, honoring user overrides that are still in the pool."""
    if overrides:
        icon = overrides.get(category)
        if icon in ICON_POOL:
            return icon
    return category.default_icon


# =============================================================================
# CORE LEDGER MODELS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    User-entered transaction fields, before an id is assigned.

    This is what the quick-add and full entry forms produce. The ledger
    store turns it into a Transaction on add, or applies it wholesale on edit.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=2,
        description="Amount in currency units (must be positive, whole cents)"
    )
    category: Category = Field(
        ...,
        description="Transaction category"
    )
    type: TransactionType = Field(
        ...,
        description="income, expense or saving"
    )
    description: str = Field(
        default="",
        max_length=200,
        validate_default=True,
        description="Free-text label; defaults to the category name"
    )
    date: datetime = Field(
        ...,
        description="When the transaction happened (local time)"
    )

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, v):
        """Accept tags or display names."""
        if isinstance(v, str) and not isinstance(v, Category):
            try:
                return Category(v)
            except ValueError:
                return v
        return v

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        """Calendar comparisons work on local wall-clock fields."""
        return to_local_naive(v)

    @field_validator("description")
    @classmethod
    def default_description(cls, v: str, info: ValidationInfo) -> str:
        """Fall back to the category display name for blank labels."""
        if not v:
            category = info.data.get("category")
            if category is not None:
                return category.display_name
        return v


class Transaction(TransactionDraft):
    """
    A single recorded financial event.

    CRITICAL: `id` is assigned once by the ledger store and never changes.
    Edits produce a new Transaction with the same id.
    """

    id: str = Field(
        default_factory=new_transaction_id,
        min_length=1,
        description="Opaque unique identifier"
    )

    @classmethod
    def from_draft(cls, draft: TransactionDraft, transaction_id: Optional[str] = None) -> "Transaction":
        data = draft.model_dump()
        if transaction_id is not None:
            data["id"] = transaction_id
        return cls(**data)

    def to_draft(self) -> TransactionDraft:
        return TransactionDraft(**self.model_dump(exclude={"id"}))

    @property
    def signed_amount(self) -> Decimal:
        """Effect on balance: income adds, expense and saving subtract."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


class Budget(BaseModel):
    """A monthly spending limit for one category."""
    model_config = ConfigDict(frozen=True)

    category: Category
    limit: Decimal = Field(
        ...,
        gt=0,
        max_digits=MONEY_MAX_DIGITS,
        decimal_places=2,
        description="Monthly limit in currency units"
    )

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, v):
        if isinstance(v, str) and not isinstance(v, Category):
            try:
                return Category(v)
            except ValueError:
                return v
        return v

    @field_validator("category")
    @classmethod
    def reject_income_categories(cls, v: Category) -> Category:
        if v.is_income_only:
            raise ValueError(f"Budgets cannot be set for income category {v.display_name}")
        return v


# =============================================================================
# DERIVED AGGREGATES (never persisted)
# =============================================================================

class Summary(BaseModel):
    """Totals over a set of transactions."""
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    total_saving: Decimal = Decimal("0")

    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense - self.total_saving


class BudgetWarning(BaseModel):
    """A category at or above the warning threshold of its monthly limit."""
    model_config = ConfigDict(frozen=True)

    category: Category
    spent: Decimal
    limit: Decimal
    percent: Decimal
    severity: BudgetSeverity

    @property
    def is_over_limit(self) -> bool:
        return self.severity == BudgetSeverity.OVER_LIMIT


class PeriodStatistics(BaseModel):
    """Everything the statistics view shows for one period."""
    model_config = ConfigDict(frozen=True)

    period: Period
    reference: datetime
    summary: Summary
    surplus_rate: Decimal
    saving_ratio: Decimal
    breakdown: dict[Category, Decimal] = Field(default_factory=dict)
    transaction_count: int = Field(ge=0)
