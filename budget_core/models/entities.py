"""
Core Entity Models for Budget Tracker Core

These models define the strict schemas for the four entity collections
and the immutable snapshot that holds them. They are designed to:
1. Reject malformed amounts (NaN, infinity, zero, negatives) at construction
2. Accept backend payloads in camelCase and Python code in snake_case
3. Be immutable, so a snapshot can be handed to any reader safely

Amounts carry no precision limit here. The two-decimal rule for form
input lives in the validator; stored rows keep what the backend holds.

DESIGN DECISION: Entities are split into a Draft (what the user submits)
and the entity itself (Draft + identity). Mutations receive drafts and
the store attaches identity, keeping id generation in one place.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


DEFAULT_CATEGORY_COLOR = "#6366F1"
DEFAULT_CATEGORY_ICON = "📝"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Collection(str, Enum):
    """
    The four entity collections held by the store.

    The values double as resource names for the remote backend.
    """
    CATEGORIES = "categories"
    BUDGETS = "budgets"
    EXPENSES = "expenses"
    INCOME = "income"


class BudgetPeriod(str, Enum):
    """Period a budget limit applies to."""
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class IncomeType(str, Enum):
    """Kind of income source."""
    SALARY = "salary"
    FREELANCE = "freelance"
    INVESTMENT = "investment"
    OTHER = "other"


class PaymentMethod(str, Enum):
    """
    Supported payment methods.

    Values are the display strings the backend stores.
    """
    UPI = "UPI"
    CASH = "Cash"
    CREDIT_CARD = "Credit Card"
    DEBIT_CARD = "Debit Card"
    BANK_TRANSFER = "Bank Transfer"
    DIGITAL_WALLET = "Digital Wallet"
    CHECK = "Check"


# =============================================================================
# BASE MODEL
# =============================================================================

class EntityModel(BaseModel):
    """
    Shared configuration for every entity and draft.

    Frozen so snapshots can be shared without copying.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_payload(self) -> dict[str, Any]:
        """Serialize for the backend (camelCase keys, decimals as strings)."""
        return self.model_dump(by_alias=True, mode="json")


# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryDraft(EntityModel):
    """A category as entered by the user."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name; also the source of the category id"
    )
    color: str = Field(
        default=DEFAULT_CATEGORY_COLOR,
        pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$",
        description="Hex color used in charts"
    )
    icon: str = Field(
        default=DEFAULT_CATEGORY_ICON,
        max_length=16,
        description="Emoji shown next to the name"
    )


class Category(CategoryDraft):
    """A stored category."""

    id: str = Field(..., min_length=1)


class CategoryPatch(EntityModel):
    """Fields that can change when a category is renamed or recolored."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color: Optional[str] = Field(
        default=None,
        pattern=r"^#(?:[0-9a-fA-F]{3}){1,2}$",
    )
    icon: Optional[str] = Field(default=None, max_length=16)


# =============================================================================
# BUDGETS
# =============================================================================

class BudgetDraft(EntityModel):
    """A spending limit for one category."""

    category_id: str = Field(
        ...,
        min_length=1,
        description="Category this budget limits"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Spending limit"
    )
    period: BudgetPeriod = Field(
        default=BudgetPeriod.MONTHLY,
        description="Period the limit applies to"
    )


class Budget(BudgetDraft):
    """
    A stored budget.

    `spent` only ever grows, through expense-add mutations
    for the same category.
    """

    id: str = Field(..., min_length=1)
    spent: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount spent against this budget"
    )


class BudgetPatch(EntityModel):
    """Fields that can change when a budget is edited."""

    amount: Optional[Decimal] = Field(default=None, gt=0)
    period: Optional[BudgetPeriod] = None


# =============================================================================
# TRANSACTIONS
# =============================================================================

class ExpenseDraft(EntityModel):
    """An expense as entered by the user."""

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category id (orphaned ids are allowed)"
    )
    date: dt.date
    description: str = Field(default="", max_length=500)
    payment_method: PaymentMethod


class Expense(ExpenseDraft):
    """A stored expense."""

    id: str = Field(..., min_length=1)


class IncomeDraft(EntityModel):
    """An income entry as entered by the user."""

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount received"
    )
    date: dt.date
    description: str = Field(default="", max_length=500)
    source: str = Field(default="", max_length=200)
    type: IncomeType = IncomeType.OTHER


class Income(IncomeDraft):
    """A stored income entry."""

    id: str = Field(..., min_length=1)


# =============================================================================
# SNAPSHOT
# =============================================================================

ENTITY_TYPES: dict[Collection, type[EntityModel]] = {
    Collection.CATEGORIES: Category,
    Collection.BUDGETS: Budget,
    Collection.EXPENSES: Expense,
    Collection.INCOME: Income,
}


class Snapshot(BaseModel):
    """
    An immutable view of all four collections at one instant.

    Expenses and income are ordered newest-first by insertion;
    categories and budgets keep insertion order.
    """
    model_config = ConfigDict(frozen=True)

    categories: tuple[Category, ...] = ()
    budgets: tuple[Budget, ...] = ()
    expenses: tuple[Expense, ...] = ()
    income: tuple[Income, ...] = ()

    def collection(self, name: Collection) -> tuple:
        """Get one collection by name."""
        return getattr(self, Collection(name).value)

    def replace(self, name: Collection, items: tuple) -> 'Snapshot':
        """Return a copy with one collection swapped out."""
        return self.model_copy(update={Collection(name).value: tuple(items)})

    @property
    def is_empty(self) -> bool:
        return not (self.categories or self.budgets or self.expenses or self.income)
