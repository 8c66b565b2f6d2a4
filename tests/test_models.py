"""
Tests for Budget Tracker Core

Test strategy:
1. Unit tests for individual components (models, mutations, aggregations)
2. Integration tests for flows (with the in-memory backend)
3. No real network calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal

from budget_core.models import (
    AddExpense,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Budget,
    BudgetPeriod,
    Category,
    CategoryDraft,
    CategoryPatch,
    Collection,
    Expense,
    ExpenseDraft,
    IncomeDraft,
    IncomeType,
    PaymentMethod,
    Snapshot,
    ValidationIssue,
    ValidationResult,
)
from budget_core.config import (
    AnalyticsSettings,
    SyncPolicy,
    SyncSettings,
    validate_all_settings,
)
from budget_core.models.intents import INTENT_COLLECTIONS


class TestEntityModels:
    """Tests for entity Pydantic models."""

    def test_expense_draft_creation(self):
        """Test ExpenseDraft model creation."""
        draft = ExpenseDraft(
            amount=Decimal("50.00"),
            category="food",
            date=date(2024, 5, 1),
            description="Lunch",
            payment_method=PaymentMethod.CASH,
        )
        assert draft.amount == Decimal("50.00")
        assert draft.payment_method == PaymentMethod.CASH

    def test_expense_accepts_camel_case(self):
        """Backend payloads use camelCase field names."""
        expense = Expense.model_validate({
            "id": "e1",
            "amount": "12.50",
            "category": "food",
            "date": "2024-05-01",
            "description": "Tea",
            "paymentMethod": "UPI",
        })
        assert expense.payment_method == PaymentMethod.UPI
        assert expense.date == date(2024, 5, 1)

    def test_payload_uses_camel_case(self):
        """Test to_payload serializes with aliases."""
        budget = Budget(id="b1", category_id="food", amount=Decimal("100"))
        payload = budget.to_payload()
        assert payload["categoryId"] == "food"
        assert payload["period"] == "monthly"
        assert Decimal(payload["spent"]) == 0

    @pytest.mark.parametrize("amount", ["0", "-5", "NaN", "Infinity"])
    def test_rejects_invalid_amounts(self, amount):
        """Zero, negative and non-finite amounts are rejected."""
        with pytest.raises(ValueError):
            IncomeDraft(amount=Decimal(amount), date=date(2024, 5, 1))

    def test_stored_amounts_keep_full_precision(self):
        """Backend rows are not limited to cents."""
        expense = Expense.model_validate({
            "id": "e1",
            "amount": "33.333",
            "category": "food",
            "date": "2024-05-01",
            "paymentMethod": "Cash",
        })
        assert expense.amount == Decimal("33.333")

        budget = Budget(id="b1", category_id="food", amount=Decimal("10.125"))
        assert budget.amount == Decimal("10.125")

    def test_category_defaults(self):
        """Test default color and icon."""
        draft = CategoryDraft(name="  Food  ")
        assert draft.name == "Food"
        assert draft.color == "#6366F1"
        assert draft.icon == "📝"

    def test_category_rejects_bad_color(self):
        with pytest.raises(ValueError):
            CategoryDraft(name="Food", color="red")

    def test_entities_are_frozen(self):
        """Entities cannot be mutated in place."""
        category = Category(id="food", name="Food")
        with pytest.raises(ValueError):
            category.name = "Groceries"

    def test_patch_tracks_set_fields(self):
        patch = CategoryPatch(color="#000")
        assert patch.model_dump(exclude_unset=True) == {"color": "#000"}

    def test_income_defaults_to_other(self):
        income = IncomeDraft(amount=Decimal("10"), date=date(2024, 1, 1))
        assert income.type == IncomeType.OTHER


class TestSnapshot:
    """Tests for the immutable snapshot."""

    def test_empty_snapshot(self):
        snapshot = Snapshot()
        assert snapshot.is_empty
        assert snapshot.collection(Collection.EXPENSES) == ()

    def test_replace_returns_new_snapshot(self):
        """Replacing a collection leaves the first snapshot untouched."""
        snapshot = Snapshot()
        category = Category(id="food", name="Food")
        updated = snapshot.replace(Collection.CATEGORIES, [category])

        assert updated.categories == (category,)
        assert snapshot.categories == ()

    def test_collection_by_string_name(self):
        snapshot = Snapshot(categories=(Category(id="food", name="Food"),))
        assert snapshot.collection("categories")[0].id == "food"


class TestIntents:
    """Tests for intent models."""

    def test_intent_collection(self):
        intent = AddExpense(expense=ExpenseDraft(
            amount=Decimal("5"),
            category="food",
            date=date(2024, 5, 1),
            payment_method=PaymentMethod.CASH,
        ))
        assert intent.collection == Collection.EXPENSES
        assert intent.is_add
        assert intent.id is None

    def test_every_kind_has_a_collection(self):
        assert len(INTENT_COLLECTIONS) == 10
        assert set(INTENT_COLLECTIONS.values()) == set(Collection)


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.MUTATION_APPLIED,
            description="Applied add_expense locally",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.mutation_applied("add_expense", "expenses", "e1")
        log_dict = event.to_log_dict()

        assert log_dict["event_type"] == "mutation_applied"
        assert log_dict["entity_type"] == "expenses"
        assert log_dict["entity_id"] == "e1"
        assert log_dict["is_user_action"] is True

    def test_audit_event_builder_sync_failed(self):
        """Test builder for sync failures."""
        event = AuditEventBuilder.sync_failed(
            "add_expense",
            "expenses",
            "e1",
            "backend down",
            local_change_kept=True,
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "backend down"
        assert event.details["local_change_kept"] is True

    def test_audit_event_builder_snapshot_loaded(self):
        event = AuditEventBuilder.snapshot_loaded({"expenses": 2, "income": 1})
        assert event.event_type == AuditEventType.SNAPSHOT_LOADED
        assert "3 entities" in event.description


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(
            action="add_expense",
            schema_valid=False,
            semantic_valid=False,
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount is required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors
        assert result.error_count == 1

    def test_validation_result_warnings_only(self):
        """Test result with only warnings."""
        result = ValidationResult(
            action="add_expense",
            schema_valid=True,
            semantic_valid=True,
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="future_date",
                    message="Date is in the future",
                    severity="warning",
                ),
            ],
            warnings=["Date is in the future"],
        )
        assert not result.has_errors
        assert result.error_count == 0

    def test_issue_severity_is_restricted(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestEnums:
    """Tests for enum values the backend stores."""

    def test_payment_method_values(self):
        assert [m.value for m in PaymentMethod] == [
            "UPI",
            "Cash",
            "Credit Card",
            "Debit Card",
            "Bank Transfer",
            "Digital Wallet",
            "Check",
        ]

    def test_budget_periods(self):
        assert {p.value for p in BudgetPeriod} == {"weekly", "monthly"}


class TestSettings:
    """Tests for configuration sections."""

    def test_defaults(self):
        settings = AnalyticsSettings()
        assert settings.warning_threshold_percent == 80.0
        assert settings.over_threshold_percent == 100.0
        assert SyncSettings().policy == SyncPolicy.OPTIMISTIC

    def test_warning_cannot_exceed_over(self):
        with pytest.raises(ValueError):
            AnalyticsSettings(warning_threshold_percent=120, over_threshold_percent=100)

    def test_backoff_bounds(self):
        with pytest.raises(ValueError):
            SyncSettings(backoff_min_seconds=5, backoff_max_seconds=1)

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("BUDGET_SYNC_POLICY", "strict")
        monkeypatch.setenv("BUDGET_SYNC_MAX_ATTEMPTS", "5")
        settings = SyncSettings()
        assert settings.policy == SyncPolicy.STRICT
        assert settings.max_attempts == 5

    def test_validate_all_settings(self):
        results = validate_all_settings()
        assert set(results) >= {"sync", "analytics", "app"}
