"""
Data Models Package

This package contains all Pydantic models used by the engine.
All state held by the store and every aggregate it produces
conforms to these schemas.
"""

from budget_core.models.entities import (
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_CATEGORY_ICON,
    Budget,
    BudgetDraft,
    BudgetPatch,
    BudgetPeriod,
    Category,
    CategoryDraft,
    CategoryPatch,
    Collection,
    Expense,
    ExpenseDraft,
    Income,
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
    DeleteBudget,
    DeleteCategory,
    DeleteExpense,
    DeleteIncome,
    Intent,
    UpdateBudget,
    UpdateCategory,
)
from budget_core.models.reports import (
    BudgetHealth,
    BudgetOverview,
    BudgetStatus,
    CategorySlice,
    DashboardView,
    MonthlySummary,
    PaymentMethodStat,
    PeriodReport,
    Transaction,
    TransactionKind,
    TrendPoint,
)
from budget_core.models.validation import ValidationIssue, ValidationResult
from budget_core.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from budget_core.models.sync import LocalState, RemoteCall, RemoteState, SyncRecord

__all__ = [
    # Entities
    "DEFAULT_CATEGORY_COLOR",
    "DEFAULT_CATEGORY_ICON",
    "Budget",
    "BudgetDraft",
    "BudgetPatch",
    "BudgetPeriod",
    "Category",
    "CategoryDraft",
    "CategoryPatch",
    "Collection",
    "Expense",
    "ExpenseDraft",
    "Income",
    "IncomeDraft",
    "IncomeType",
    "PaymentMethod",
    "Snapshot",
    # Intents
    "AddBudget",
    "AddCategory",
    "AddExpense",
    "AddIncome",
    "DeleteBudget",
    "DeleteCategory",
    "DeleteExpense",
    "DeleteIncome",
    "Intent",
    "UpdateBudget",
    "UpdateCategory",
    # Reports
    "BudgetHealth",
    "BudgetOverview",
    "BudgetStatus",
    "CategorySlice",
    "DashboardView",
    "MonthlySummary",
    "PaymentMethodStat",
    "PeriodReport",
    "Transaction",
    "TransactionKind",
    "TrendPoint",
    # Validation
    "ValidationIssue",
    "ValidationResult",
    # Audit
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Sync
    "LocalState",
    "RemoteCall",
    "RemoteState",
    "SyncRecord",
]
