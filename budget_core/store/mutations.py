"""
Mutation Layer

Each mutation is a pure function (snapshot, intent) -> snapshot'.

RULES:
- Adding an expense increases `spent` on the budget for its category
- Categories and budgets must stay unique (DuplicateCategory / DuplicateBudget)
- Update/delete of an unknown id returns the snapshot unchanged
  (the very same object), so callers can detect the no-op with `is`
- Deleting a category never cascades; references are left dangling
- `spent` is never decreased, not even when an expense is deleted

Amounts are validated before an intent is built, so mutations assume
well-formed input. Ids are assigned by `assign_id` before dispatch.
"""

from typing import Callable

from budget_core.errors import DuplicateBudget, DuplicateCategory
from budget_core.models.entities import (
    Budget,
    Category,
    Expense,
    Income,
    Snapshot,
)
from budget_core.models.intents import (
    AddBudget,
    AddCategory,
    AddExpense,
    AddIncome,
    DeleteBudget,
    DeleteCategory,
    DeleteExpense,
    DeleteIncome,
    IntentBase,
    UpdateBudget,
    UpdateCategory,
)
from budget_core.queries.lookups import (
    find_budget_for_category,
    find_category,
    find_category_by_name,
)
from budget_core.store.ids import IdGenerator, normalize_name


def assign_id(intent: IntentBase, generator: IdGenerator) -> IntentBase:
    """
    Fill in the id of an add-intent that does not carry one yet.

    Category ids always come from the normalized name.
    """
    if not intent.is_add or intent.id is not None:
        return intent

    if isinstance(intent, AddExpense):
        draft = intent.expense
    elif isinstance(intent, AddIncome):
        draft = intent.income
    elif isinstance(intent, AddCategory):
        draft = intent.category
    else:
        draft = intent.budget

    return intent.model_copy(
        update={"id": generator.new_id(intent.collection, draft)}
    )


def _require_id(intent: IntentBase) -> str:
    if intent.id is None:
        raise ValueError(f"{intent.kind} has no id; call assign_id first")
    return intent.id


def _without(items: tuple, entity_id: str) -> tuple:
    return tuple(item for item in items if item.id != entity_id)


# =============================================================================
# EXPENSES & INCOME
# =============================================================================

def add_expense(snapshot: Snapshot, intent: AddExpense) -> Snapshot:
    expense = Expense(id=_require_id(intent), **intent.expense.model_dump())

    budgets = tuple(
        budget.model_copy(update={"spent": budget.spent + expense.amount})
        if budget.category_id == expense.category
        else budget
        for budget in snapshot.budgets
    )

    return snapshot.model_copy(update={
        "expenses": (expense,) + snapshot.expenses,
        "budgets": budgets,
    })


def delete_expense(snapshot: Snapshot, intent: DeleteExpense) -> Snapshot:
    remaining = _without(snapshot.expenses, intent.id)
    if len(remaining) == len(snapshot.expenses):
        return snapshot
    return snapshot.model_copy(update={"expenses": remaining})


def add_income(snapshot: Snapshot, intent: AddIncome) -> Snapshot:
    income = Income(id=_require_id(intent), **intent.income.model_dump())
    return snapshot.model_copy(update={"income": (income,) + snapshot.income})


def delete_income(snapshot: Snapshot, intent: DeleteIncome) -> Snapshot:
    remaining = _without(snapshot.income, intent.id)
    if len(remaining) == len(snapshot.income):
        return snapshot
    return snapshot.model_copy(update={"income": remaining})


# =============================================================================
# CATEGORIES
# =============================================================================

def add_category(snapshot: Snapshot, intent: AddCategory) -> Snapshot:
    category_id = _require_id(intent)
    name = intent.category.name

    if (
        find_category(snapshot, category_id) is not None
        or find_category(snapshot, normalize_name(name)) is not None
        or find_category_by_name(snapshot, name) is not None
    ):
        raise DuplicateCategory(f"A category named '{name}' already exists")

    category = Category(id=category_id, **intent.category.model_dump())
    return snapshot.model_copy(update={
        "categories": snapshot.categories + (category,),
    })


def update_category(snapshot: Snapshot, intent: UpdateCategory) -> Snapshot:
    if find_category(snapshot, intent.id) is None:
        return snapshot

    changes = intent.patch.model_dump(exclude_unset=True, exclude_none=True)
    categories = tuple(
        category.model_copy(update=changes) if category.id == intent.id else category
        for category in snapshot.categories
    )
    return snapshot.model_copy(update={"categories": categories})


def delete_category(snapshot: Snapshot, intent: DeleteCategory) -> Snapshot:
    remaining = _without(snapshot.categories, intent.id)
    if len(remaining) == len(snapshot.categories):
        return snapshot
    return snapshot.model_copy(update={"categories": remaining})


# =============================================================================
# BUDGETS
# =============================================================================

def add_budget(snapshot: Snapshot, intent: AddBudget) -> Snapshot:
    category_id = intent.budget.category_id
    if find_budget_for_category(snapshot, category_id) is not None:
        raise DuplicateBudget(f"A budget for '{category_id}' already exists")

    budget = Budget(id=_require_id(intent), **intent.budget.model_dump())
    return snapshot.model_copy(update={"budgets": snapshot.budgets + (budget,)})


def update_budget(snapshot: Snapshot, intent: UpdateBudget) -> Snapshot:
    if not any(budget.id == intent.id for budget in snapshot.budgets):
        return snapshot

    changes = intent.patch.model_dump(exclude_unset=True, exclude_none=True)
    budgets = tuple(
        budget.model_copy(update=changes) if budget.id == intent.id else budget
        for budget in snapshot.budgets
    )
    return snapshot.model_copy(update={"budgets": budgets})


def delete_budget(snapshot: Snapshot, intent: DeleteBudget) -> Snapshot:
    remaining = _without(snapshot.budgets, intent.id)
    if len(remaining) == len(snapshot.budgets):
        return snapshot
    return snapshot.model_copy(update={"budgets": remaining})


# =============================================================================
# DISPATCH
# =============================================================================

MUTATIONS: dict[str, Callable[[Snapshot, IntentBase], Snapshot]] = {
    "add_expense": add_expense,
    "delete_expense": delete_expense,
    "add_income": add_income,
    "delete_income": delete_income,
    "add_category": add_category,
    "update_category": update_category,
    "delete_category": delete_category,
    "add_budget": add_budget,
    "update_budget": update_budget,
    "delete_budget": delete_budget,
}


def apply_intent(snapshot: Snapshot, intent: IntentBase) -> Snapshot:
    """Compute the next snapshot for an intent."""
    try:
        mutation = MUTATIONS[intent.kind]
    except KeyError:
        raise ValueError(f"Unknown intent kind: {intent.kind}")
    return mutation(snapshot, intent)
