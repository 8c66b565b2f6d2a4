"""
Two-Stage Input Validation

DESIGN DECISION: Raw user input is validated before it becomes an intent.
The mutation layer assumes well-formed input, so nothing malformed
(missing fields, NaN or non-positive amounts, duplicate names) may reach it.

STAGE 1 - SCHEMA VALIDATION:
- Required field presence
- Amount parses to a finite positive decimal with at most 2 places
- Dates parse, enum values are known

STAGE 2 - SEMANTIC VALIDATION (needs the current snapshot):
- Duplicate category names, duplicate budgets per category
- Suspiciously large amounts, dates far in the future
- References to categories that do not exist

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the input.
"""

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from budget_core.config import AppSettings, get_settings
from budget_core.errors import DuplicateBudget, DuplicateCategory, ValidationError
from budget_core.models.entities import (
    BudgetDraft,
    BudgetPatch,
    BudgetPeriod,
    CategoryDraft,
    CategoryPatch,
    ExpenseDraft,
    IncomeDraft,
    IncomeType,
    PaymentMethod,
    Snapshot,
)
from budget_core.models.intents import (
    AddBudget,
    AddCategory,
    AddExpense,
    AddIncome,
    UpdateBudget,
    UpdateCategory,
)
from budget_core.models.validation import ValidationIssue, ValidationResult
from budget_core.queries.lookups import (
    find_budget,
    find_budget_for_category,
    find_category,
    find_category_by_name,
)
from budget_core.store.ids import normalize_name


CENT_EXPONENT = -2


def _get(data: dict, field: str) -> Any:
    """Read a field by its snake_case or camelCase name."""
    if field in data:
        return data[field]
    return data.get(to_camel(field))


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class IntentValidator:
    """
    Validates raw input for each user action and builds the intent.

    Stage 1 runs without state; stage 2 needs the current snapshot.
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    # -------------------------------------------------------------------------
    # Stage 1 helpers
    # -------------------------------------------------------------------------

    def _check_required(
        self,
        data: dict,
        fields: list[str],
        issues: list[ValidationIssue],
    ) -> None:
        for field in fields:
            if _is_blank(_get(data, field)):
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="missing",
                    message=f"{field.replace('_', ' ').capitalize()} is required",
                    severity="error",
                    suggested_fix="Please fill in all required fields",
                ))

    def _parse_amount(
        self,
        raw: Any,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        if _is_blank(raw):
            return None  # reported as missing

        try:
            amount = Decimal(str(raw).strip())
        except InvalidOperation:
            amount = None

        if amount is None or not amount.is_finite() or amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be a number greater than zero",
                severity="error",
                suggested_fix="Please enter a valid amount",
            ))
            return None

        if amount.as_tuple().exponent < CENT_EXPONENT:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_precision",
                message="Amount can have at most 2 decimal places",
                severity="error",
                suggested_fix=f"Did you mean {amount.quantize(Decimal('0.01'))}?",
            ))
            return None

        return amount

    def _parse_date(
        self,
        raw: Any,
        field: str,
        issues: list[ValidationIssue],
    ) -> Optional[date]:
        if _is_blank(raw):
            return None
        if isinstance(raw, date):
            return raw
        try:
            return date.fromisoformat(str(raw).strip())
        except ValueError:
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"'{raw}' is not a valid date",
                severity="error",
                suggested_fix="Use the YYYY-MM-DD format",
            ))
            return None

    def _parse_choice(
        self,
        raw: Any,
        field: str,
        choices: type,
        issues: list[ValidationIssue],
    ):
        if _is_blank(raw):
            return None
        try:
            return choices(raw)
        except ValueError:
            allowed = ", ".join(c.value for c in choices)
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_value",
                message=f"'{raw}' is not a valid {field.replace('_', ' ')}",
                severity="error",
                suggested_fix=f"Choose one of: {allowed}",
            ))
            return None

    def _build(
        self,
        factory: Callable[[], Any],
        issues: list[ValidationIssue],
    ) -> Any:
        """Construct a model, turning pydantic errors into issues."""
        try:
            return factory()
        except PydanticValidationError as e:
            for error in e.errors():
                issues.append(ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]) or "input",
                    issue_type="invalid_value",
                    message=error["msg"],
                    severity="error",
                ))
            return None

    # -------------------------------------------------------------------------
    # Stage 2 helpers
    # -------------------------------------------------------------------------

    def _check_amount_and_date(
        self,
        amount: Decimal,
        when: date,
        today: date,
        issues: list[ValidationIssue],
    ) -> None:
        max_amount = Decimal(str(self._settings.max_amount))
        if amount > max_amount:
            symbol = self._settings.currency_symbol
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({symbol}{amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        max_future = today + timedelta(days=self._settings.future_date_tolerance_days)
        if when > max_future:
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({when}) is in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

    def _result(
        self,
        action: str,
        schema_issues: list[ValidationIssue],
        semantic_issues: list[ValidationIssue],
        intent: Any,
    ) -> ValidationResult:
        schema_valid = not any(i.severity == "error" for i in schema_issues)
        semantic_valid = schema_valid and not any(
            i.severity == "error" for i in semantic_issues
        )
        all_issues = schema_issues + semantic_issues
        is_valid = schema_valid and semantic_valid

        return ValidationResult(
            action=action,
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=is_valid,
            issues=all_issues,
            warnings=[i.message for i in all_issues if i.severity == "warning"],
            intent=intent if is_valid else None,
        )

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def validate_expense(
        self,
        data: dict,
        snapshot: Snapshot,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """Validate an expense entry form."""
        today = today or date.today()
        issues: list[ValidationIssue] = []
        semantic: list[ValidationIssue] = []

        self._check_required(
            data,
            ["amount", "category", "description", "payment_method", "date"],
            issues,
        )
        amount = self._parse_amount(_get(data, "amount"), issues)
        when = self._parse_date(_get(data, "date"), "date", issues)
        method = self._parse_choice(
            _get(data, "payment_method"), "payment_method", PaymentMethod, issues
        )

        intent = None
        if not any(i.severity == "error" for i in issues):
            draft = self._build(lambda: ExpenseDraft(
                amount=amount,
                category=_get(data, "category"),
                date=when,
                description=_get(data, "description"),
                payment_method=method,
            ), issues)

            if draft is not None:
                self._check_amount_and_date(draft.amount, draft.date, today, semantic)
                if find_category(snapshot, draft.category) is None:
                    semantic.append(ValidationIssue(
                        field="category",
                        issue_type="unknown_category",
                        message=f"Category '{draft.category}' does not exist",
                        severity="warning",
                        suggested_fix="The expense will be shown under its raw category id",
                    ))
                intent = AddExpense(expense=draft)

        return self._result("add_expense", issues, semantic, intent)

    def validate_income(
        self,
        data: dict,
        snapshot: Snapshot,
        today: Optional[date] = None,
    ) -> ValidationResult:
        """Validate an income entry form."""
        today = today or date.today()
        issues: list[ValidationIssue] = []
        semantic: list[ValidationIssue] = []

        self._check_required(
            data,
            ["amount", "source", "description", "type", "date"],
            issues,
        )
        amount = self._parse_amount(_get(data, "amount"), issues)
        when = self._parse_date(_get(data, "date"), "date", issues)
        income_type = self._parse_choice(_get(data, "type"), "type", IncomeType, issues)

        intent = None
        if not any(i.severity == "error" for i in issues):
            draft = self._build(lambda: IncomeDraft(
                amount=amount,
                date=when,
                description=_get(data, "description"),
                source=_get(data, "source"),
                type=income_type,
            ), issues)

            if draft is not None:
                self._check_amount_and_date(draft.amount, draft.date, today, semantic)
                intent = AddIncome(income=draft)

        return self._result("add_income", issues, semantic, intent)

    def validate_category(
        self,
        data: dict,
        snapshot: Snapshot,
        editing_id: Optional[str] = None,
    ) -> ValidationResult:
        """
        Validate the category form.

        With `editing_id` the result holds an UpdateCategory intent,
        otherwise an AddCategory intent. An edit may change any one of
        name, color or icon on its own.
        """
        action = "update_category" if editing_id else "add_category"
        issues: list[ValidationIssue] = []
        semantic: list[ValidationIssue] = []

        fields = {
            key: _get(data, key)
            for key in ("name", "color", "icon")
            if not _is_blank(_get(data, key))
        }

        if not editing_id:
            self._check_required(data, ["name"], issues)
        elif not fields:
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Nothing to change",
                severity="error",
                suggested_fix="Enter a new name, color or icon",
            ))

        intent = None
        if not issues:
            model = CategoryPatch if editing_id else CategoryDraft
            payload = self._build(lambda: model(**fields), issues)

            if payload is not None:
                existing = None
                if payload.name is not None:
                    existing = find_category_by_name(snapshot, payload.name)
                    if existing is None and not editing_id:
                        existing = find_category(snapshot, normalize_name(payload.name))

                if existing is not None and existing.id != editing_id:
                    semantic.append(ValidationIssue(
                        field="name",
                        issue_type="duplicate_category",
                        message=f"A category named '{payload.name}' already exists",
                        severity="error",
                        suggested_fix="Choose a different name",
                    ))
                if editing_id and find_category(snapshot, editing_id) is None:
                    semantic.append(ValidationIssue(
                        field="id",
                        issue_type="not_found",
                        message=f"Category '{editing_id}' no longer exists",
                        severity="warning",
                    ))

                if editing_id:
                    intent = UpdateCategory(id=editing_id, patch=payload)
                else:
                    intent = AddCategory(category=payload)

        return self._result(action, issues, semantic, intent)

    def validate_budget(
        self,
        data: dict,
        snapshot: Snapshot,
        editing_id: Optional[str] = None,
    ) -> ValidationResult:
        """
        Validate the budget form.

        The category of an existing budget cannot change, so edits only
        carry amount and period.
        """
        action = "update_budget" if editing_id else "add_budget"
        issues: list[ValidationIssue] = []
        semantic: list[ValidationIssue] = []

        required = ["amount", "period"] if editing_id else ["category_id", "amount", "period"]
        self._check_required(data, required, issues)
        amount = self._parse_amount(_get(data, "amount"), issues)
        period = self._parse_choice(_get(data, "period"), "period", BudgetPeriod, issues)

        intent = None
        if not any(i.severity == "error" for i in issues):
            if editing_id:
                patch = self._build(lambda: BudgetPatch(amount=amount, period=period), issues)
                if patch is not None:
                    if find_budget(snapshot, editing_id) is None:
                        semantic.append(ValidationIssue(
                            field="id",
                            issue_type="not_found",
                            message=f"Budget '{editing_id}' no longer exists",
                            severity="warning",
                        ))
                    intent = UpdateBudget(id=editing_id, patch=patch)
            else:
                draft = self._build(lambda: BudgetDraft(
                    category_id=_get(data, "category_id"),
                    amount=amount,
                    period=period,
                ), issues)
                if draft is not None:
                    if find_budget_for_category(snapshot, draft.category_id) is not None:
                        semantic.append(ValidationIssue(
                            field="category_id",
                            issue_type="duplicate_budget",
                            message="Budget already exists for this category",
                            severity="error",
                            suggested_fix="Edit the existing budget instead",
                        ))
                    if find_category(snapshot, draft.category_id) is None:
                        semantic.append(ValidationIssue(
                            field="category_id",
                            issue_type="unknown_category",
                            message=f"Category '{draft.category_id}' does not exist",
                            severity="warning",
                        ))
                    intent = AddBudget(budget=draft)

        return self._result(action, issues, semantic, intent)

    # -------------------------------------------------------------------------
    # Results
    # -------------------------------------------------------------------------

    def require_valid(self, result: ValidationResult) -> Any:
        """
        Return the intent of a valid result, raise otherwise.

        Raises:
            DuplicateCategory / DuplicateBudget: For duplicate issues
            ValidationError: For any other error
        """
        if result.is_valid:
            return result.intent

        errors = [i for i in result.issues if i.severity == "error"]
        message = "; ".join(i.message for i in errors)
        issue_types = {i.issue_type for i in errors}

        if "duplicate_category" in issue_types:
            raise DuplicateCategory(message, errors)
        if "duplicate_budget" in issue_types:
            raise DuplicateBudget(message, errors)
        raise ValidationError(message, errors)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what we show next to the form.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if not result.is_valid:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
