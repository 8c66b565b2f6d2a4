"""
Tests for the entity store and the mutation layer.
"""

import pytest
from datetime import date
from decimal import Decimal

from budget_core.errors import DuplicateBudget, DuplicateCategory
from budget_core.models import (
    AddBudget,
    AddCategory,
    AddExpense,
    AddIncome,
    Budget,
    BudgetDraft,
    BudgetPatch,
    BudgetPeriod,
    Category,
    CategoryDraft,
    CategoryPatch,
    DeleteBudget,
    DeleteCategory,
    DeleteExpense,
    DeleteIncome,
    Expense,
    ExpenseDraft,
    IncomeDraft,
    PaymentMethod,
    Snapshot,
    UpdateBudget,
    UpdateCategory,
)
from budget_core.store import (
    EntityStore,
    SequentialIdGenerator,
    UuidIdGenerator,
    apply_intent,
    assign_id,
    normalize_name,
)


def expense_draft(amount="10", category="food", when=date(2024, 5, 1)):
    return ExpenseDraft(
        amount=Decimal(amount),
        category=category,
        date=when,
        description="Test",
        payment_method=PaymentMethod.CASH,
    )


def make_store(**collections) -> EntityStore:
    store = EntityStore(id_generator=SequentialIdGenerator())
    for name, items in collections.items():
        store.replace_all(name, items)
    return store


class TestIdGeneration:
    """Tests for id strategies."""

    def test_normalize_name(self):
        assert normalize_name("  Eating   Out ") == "eating-out"
        assert normalize_name("Food") == "food"

    def test_sequential_ids_are_unique(self):
        generator = SequentialIdGenerator()
        first = assign_id(AddExpense(expense=expense_draft()), generator)
        second = assign_id(AddExpense(expense=expense_draft()), generator)
        assert first.id == "expenses-1"
        assert second.id == "expenses-2"

    def test_category_id_comes_from_name(self):
        intent = assign_id(
            AddCategory(category=CategoryDraft(name="Eating Out")),
            UuidIdGenerator(),
        )
        assert intent.id == "eating-out"

    def test_existing_id_is_kept(self):
        intent = AddExpense(expense=expense_draft(), id="given")
        assert assign_id(intent, SequentialIdGenerator()).id == "given"

    def test_uuid_ids_differ(self):
        generator = UuidIdGenerator()
        ids = {assign_id(AddIncome(income=IncomeDraft(
            amount=Decimal("1"), date=date(2024, 1, 1)
        )), generator).id for _ in range(5)}
        assert len(ids) == 5


class TestEntityStore:
    """Tests for EntityStore."""

    def test_starts_empty(self):
        assert EntityStore().get_snapshot().is_empty

    def test_replace_all_round_trips_in_order(self):
        """replace_all then get_snapshot returns exactly the supplied items."""
        categories = [
            Category(id="rent", name="Rent"),
            Category(id="food", name="Food"),
        ]
        store = make_store(categories=categories)
        assert list(store.get_snapshot().categories) == categories

    def test_replace_all_accepts_backend_dicts(self):
        store = make_store(budgets=[
            {"id": "b1", "categoryId": "food", "amount": "100", "period": "weekly", "spent": "20"},
        ])
        budget = store.get_snapshot().budgets[0]
        assert budget.category_id == "food"
        assert budget.period == BudgetPeriod.WEEKLY
        assert budget.spent == Decimal("20")

    def test_replace_all_keeps_sub_cent_amounts(self):
        """Backend rows with more than two decimal places load unchanged."""
        rows = [
            {"id": "e1", "amount": "12.5", "category": "food", "date": "2024-05-01", "paymentMethod": "Cash"},
            {"id": "e2", "amount": "33.333", "category": "food", "date": "2024-05-02", "paymentMethod": "UPI"},
        ]
        store = make_store(expenses=rows)

        expenses = store.get_snapshot().expenses
        assert [e.id for e in expenses] == ["e1", "e2"]
        assert expenses[1].amount == Decimal("33.333")

    def test_replace_all_unknown_collection(self):
        with pytest.raises(ValueError, match="Unknown collection"):
            EntityStore().replace_all("bills", [])

    def test_replace_all_leaves_other_collections(self):
        store = make_store(categories=[Category(id="food", name="Food")])
        store.replace_all("expenses", [])
        assert len(store.get_snapshot().categories) == 1

    def test_apply_swaps_snapshot(self):
        store = make_store()
        before = store.get_snapshot()
        outcome = store.apply(AddExpense(expense=expense_draft()))

        assert outcome.changed
        assert outcome.before is before
        assert store.get_snapshot() is outcome.after
        assert outcome.entity_id == "expenses-1"

    def test_failed_apply_leaves_store_unchanged(self):
        """A raising mutation never half-applies."""
        store = make_store(budgets=[Budget(id="b1", category_id="food", amount=Decimal("100"))])
        before = store.get_snapshot()

        with pytest.raises(DuplicateBudget):
            store.apply(AddBudget(budget=BudgetDraft(category_id="food", amount=Decimal("50"))))

        assert store.get_snapshot() is before

    def test_noop_is_flagged(self):
        store = make_store()
        outcome = store.apply(DeleteExpense(id="missing"))
        assert not outcome.changed
        assert store.get_snapshot() is outcome.before

    def test_reset(self):
        store = make_store(categories=[Category(id="food", name="Food")])
        store.reset()
        assert store.get_snapshot().is_empty


class TestExpenseMutations:
    """Tests for expense and income mutations."""

    def test_add_expense_prepends(self):
        store = make_store()
        store.apply(AddExpense(expense=expense_draft("1")))
        store.apply(AddExpense(expense=expense_draft("2")))

        amounts = [e.amount for e in store.get_snapshot().expenses]
        assert amounts == [Decimal("2"), Decimal("1")]

    def test_add_expense_increases_matching_budget(self):
        """spent grows by exactly the expense amount; other budgets untouched."""
        store = make_store(budgets=[
            Budget(id="b1", category_id="food", amount=Decimal("100"), spent=Decimal("80")),
            Budget(id="b2", category_id="rent", amount=Decimal("500"), spent=Decimal("5")),
        ])
        store.apply(AddExpense(expense=expense_draft("10", "food")))

        food, rent = store.get_snapshot().budgets
        assert food.spent == Decimal("90")
        assert rent.spent == Decimal("5")

    def test_add_expense_without_budget(self):
        store = make_store(budgets=[Budget(id="b1", category_id="rent", amount=Decimal("500"))])
        store.apply(AddExpense(expense=expense_draft("10", "food")))
        assert store.get_snapshot().budgets[0].spent == 0

    def test_add_orphan_expense_is_allowed(self):
        store = make_store()
        store.apply(AddExpense(expense=expense_draft(category="unknown")))
        assert store.get_snapshot().expenses[0].category == "unknown"

    def test_delete_expense_keeps_spent(self):
        store = make_store(budgets=[Budget(id="b1", category_id="food", amount=Decimal("100"))])
        outcome = store.apply(AddExpense(expense=expense_draft("30", "food")))
        store.apply(DeleteExpense(id=outcome.entity_id))

        snapshot = store.get_snapshot()
        assert snapshot.expenses == ()
        assert snapshot.budgets[0].spent == Decimal("30")

    def test_add_and_delete_income(self):
        store = make_store()
        outcome = store.apply(AddIncome(income=IncomeDraft(
            amount=Decimal("1000"), date=date(2024, 5, 1), source="Acme"
        )))
        assert store.get_snapshot().income[0].source == "Acme"

        store.apply(DeleteIncome(id=outcome.entity_id))
        assert store.get_snapshot().income == ()


class TestCategoryMutations:
    """Tests for category mutations."""

    def test_add_category(self):
        store = make_store()
        outcome = store.apply(AddCategory(category=CategoryDraft(name="Eating Out")))
        category = store.get_snapshot().categories[0]
        assert category.id == "eating-out"
        assert outcome.entity_id == "eating-out"

    @pytest.mark.parametrize("name", ["Food", "food", "  FOOD "])
    def test_duplicate_category(self, name):
        store = make_store(categories=[Category(id="food", name="Food")])
        with pytest.raises(DuplicateCategory):
            store.apply(AddCategory(category=CategoryDraft(name=name)))
        assert len(store.get_snapshot().categories) == 1

    def test_update_category_merges_set_fields(self):
        store = make_store(categories=[Category(id="food", name="Food", color="#111")])
        store.apply(UpdateCategory(id="food", patch=CategoryPatch(name="Groceries")))

        category = store.get_snapshot().categories[0]
        assert category.name == "Groceries"
        assert category.color == "#111"
        assert category.id == "food"

    def test_update_unknown_category_is_noop(self):
        snapshot = Snapshot(categories=(Category(id="food", name="Food"),))
        intent = UpdateCategory(id="nope", patch=CategoryPatch(name="X"))
        assert apply_intent(snapshot, intent) is snapshot

    def test_delete_category_does_not_cascade(self):
        store = make_store(
            categories=[Category(id="food", name="Food")],
            budgets=[Budget(id="b1", category_id="food", amount=Decimal("100"))],
            expenses=[Expense(
                id="e1",
                amount=Decimal("5"),
                category="food",
                date=date(2024, 5, 1),
                payment_method=PaymentMethod.UPI,
            )],
        )
        store.apply(DeleteCategory(id="food"))

        snapshot = store.get_snapshot()
        assert snapshot.categories == ()
        assert len(snapshot.budgets) == 1
        assert len(snapshot.expenses) == 1


class TestBudgetMutations:
    """Tests for budget mutations."""

    def test_add_budget_starts_unspent(self):
        store = make_store()
        store.apply(AddBudget(budget=BudgetDraft(category_id="food", amount=Decimal("100"))))
        budget = store.get_snapshot().budgets[0]
        assert budget.spent == 0
        assert budget.id == "budgets-1"

    def test_second_budget_for_category(self):
        store = make_store()
        store.apply(AddBudget(budget=BudgetDraft(category_id="food", amount=Decimal("100"))))
        before = store.get_snapshot()

        with pytest.raises(DuplicateBudget):
            store.apply(AddBudget(budget=BudgetDraft(category_id="food", amount=Decimal("200"))))
        assert store.get_snapshot() is before

    def test_update_budget_keeps_spent(self):
        store = make_store(budgets=[
            Budget(id="b1", category_id="food", amount=Decimal("100"), spent=Decimal("40")),
        ])
        store.apply(UpdateBudget(id="b1", patch=BudgetPatch(amount=Decimal("250"))))

        budget = store.get_snapshot().budgets[0]
        assert budget.amount == Decimal("250")
        assert budget.spent == Decimal("40")
        assert budget.period == BudgetPeriod.MONTHLY

    def test_update_unknown_budget_is_noop(self):
        snapshot = Snapshot()
        intent = UpdateBudget(id="nope", patch=BudgetPatch(amount=Decimal("1")))
        assert apply_intent(snapshot, intent) is snapshot

    def test_delete_budget(self):
        store = make_store(budgets=[Budget(id="b1", category_id="food", amount=Decimal("100"))])
        store.apply(DeleteBudget(id="b1"))
        assert store.get_snapshot().budgets == ()
