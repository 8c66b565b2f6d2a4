"""
Intent Models

An intent describes a requested mutation (add/update/delete + payload)
after validation but before it is applied to the store.

DESIGN DECISION: Intents are plain data, discriminated by `kind`.
The mutation layer dispatches on `kind`; the sync coordinator uses
the same field to decide which remote calls to issue. Add-intents
carry an optional `id` which the store fills in from its id generator
before the (pure) mutation runs.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from budget_core.models.entities import (
    BudgetDraft,
    BudgetPatch,
    CategoryDraft,
    CategoryPatch,
    Collection,
    ExpenseDraft,
    IncomeDraft,
)


class IntentBase(BaseModel):
    """Shared configuration for all intents."""
    model_config = ConfigDict(frozen=True)

    @property
    def collection(self) -> Collection:
        return INTENT_COLLECTIONS[self.kind]

    @property
    def is_add(self) -> bool:
        return self.kind.startswith("add_")


class AddExpense(IntentBase):
    kind: Literal["add_expense"] = "add_expense"
    expense: ExpenseDraft
    id: Optional[str] = None


class DeleteExpense(IntentBase):
    kind: Literal["delete_expense"] = "delete_expense"
    id: str


class AddIncome(IntentBase):
    kind: Literal["add_income"] = "add_income"
    income: IncomeDraft
    id: Optional[str] = None


class DeleteIncome(IntentBase):
    kind: Literal["delete_income"] = "delete_income"
    id: str


class AddCategory(IntentBase):
    kind: Literal["add_category"] = "add_category"
    category: CategoryDraft
    id: Optional[str] = None


class UpdateCategory(IntentBase):
    kind: Literal["update_category"] = "update_category"
    id: str
    patch: CategoryPatch


class DeleteCategory(IntentBase):
    kind: Literal["delete_category"] = "delete_category"
    id: str


class AddBudget(IntentBase):
    kind: Literal["add_budget"] = "add_budget"
    budget: BudgetDraft
    id: Optional[str] = None


class UpdateBudget(IntentBase):
    kind: Literal["update_budget"] = "update_budget"
    id: str
    patch: BudgetPatch


class DeleteBudget(IntentBase):
    kind: Literal["delete_budget"] = "delete_budget"
    id: str


Intent = Annotated[
    Union[
        AddExpense,
        DeleteExpense,
        AddIncome,
        DeleteIncome,
        AddCategory,
        UpdateCategory,
        DeleteCategory,
        AddBudget,
        UpdateBudget,
        DeleteBudget,
    ],
    Field(discriminator="kind"),
]


INTENT_COLLECTIONS: dict[str, Collection] = {
    "add_expense": Collection.EXPENSES,
    "delete_expense": Collection.EXPENSES,
    "add_income": Collection.INCOME,
    "delete_income": Collection.INCOME,
    "add_category": Collection.CATEGORIES,
    "update_category": Collection.CATEGORIES,
    "delete_category": Collection.CATEGORIES,
    "add_budget": Collection.BUDGETS,
    "update_budget": Collection.BUDGETS,
    "delete_budget": Collection.BUDGETS,
}
