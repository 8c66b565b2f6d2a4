"""
Lookup Helpers

Single resolution and fallback policy for every consumer that needs to
turn a category or budget reference into something displayable.

Orphaned references (a category id that no longer exists) are allowed
anywhere in the store; they resolve to the raw id as the name, with
the fallback color and icon.
"""

from typing import Optional

from budget_core.models.entities import (
    DEFAULT_CATEGORY_ICON,
    Budget,
    Category,
    Snapshot,
)


FALLBACK_CATEGORY_COLOR = "#666"
FALLBACK_CATEGORY_ICON = DEFAULT_CATEGORY_ICON
INCOME_COLOR = "#10B981"


def find_category(snapshot: Snapshot, category_id: str) -> Optional[Category]:
    for category in snapshot.categories:
        if category.id == category_id:
            return category
    return None


def find_category_by_name(snapshot: Snapshot, name: str) -> Optional[Category]:
    """Case-insensitive match on the trimmed name."""
    wanted = name.strip().lower()
    for category in snapshot.categories:
        if category.name.strip().lower() == wanted:
            return category
    return None


def category_name(snapshot: Snapshot, category_id: str) -> str:
    category = find_category(snapshot, category_id)
    return category.name if category else category_id


def category_color(snapshot: Snapshot, category_id: str) -> str:
    category = find_category(snapshot, category_id)
    return category.color if category else FALLBACK_CATEGORY_COLOR


def category_icon(snapshot: Snapshot, category_id: str) -> str:
    category = find_category(snapshot, category_id)
    return category.icon if category else FALLBACK_CATEGORY_ICON


def find_budget(snapshot: Snapshot, budget_id: str) -> Optional[Budget]:
    for budget in snapshot.budgets:
        if budget.id == budget_id:
            return budget
    return None


def find_budget_for_category(snapshot: Snapshot, category_id: str) -> Optional[Budget]:
    for budget in snapshot.budgets:
        if budget.category_id == category_id:
            return budget
    return None


def categories_without_budget(snapshot: Snapshot) -> list[Category]:
    """Categories a new budget can still be created for."""
    budgeted = {budget.category_id for budget in snapshot.budgets}
    return [c for c in snapshot.categories if c.id not in budgeted]


def budgets_for_category(snapshot: Snapshot, category_id: str) -> list[Budget]:
    """Budgets referencing a category, e.g. before deleting it."""
    return [b for b in snapshot.budgets if b.category_id == category_id]
