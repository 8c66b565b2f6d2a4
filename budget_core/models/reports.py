"""
Report Models

Values returned by the aggregation engine. They are derived on demand
from a snapshot and never stored back into it.

DESIGN DECISION: Money stays Decimal all the way through; only ratios
(percentages, savings rate) are floats, since they may be infinite
when a budget amount is zero.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReportModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class TransactionKind(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class BudgetHealth(str, Enum):
    """Budget status bands."""
    GOOD = "good"
    WARNING = "warning"
    OVER = "over"


class MonthlySummary(ReportModel):
    """Income and expense totals for one calendar month."""

    year: int
    month: int = Field(..., ge=1, le=12)
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_balance: Decimal = Decimal("0")
    expense_count: int = Field(default=0, ge=0)
    income_count: int = Field(default=0, ge=0)

    @property
    def is_surplus(self) -> bool:
        return self.net_balance >= 0


class Transaction(ReportModel):
    """An expense or income entry flattened for the recent activity list."""

    id: str
    kind: TransactionKind
    amount: Decimal
    date: dt.date
    description: str = ""
    label: str = Field(
        ...,
        description="Category name for expenses, source for income"
    )
    color: str

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.kind == TransactionKind.INCOME else -self.amount


class BudgetStatus(ReportModel):
    """
    How much of a budget has been consumed.

    `percentage` is infinite when the budget amount is zero.
    `progress` is the percentage capped at 100 for progress bars.
    """

    budget_id: str
    category_id: str
    category_name: str
    category_icon: str
    category_color: str
    amount: Decimal
    spent: Decimal
    percentage: float
    status: BudgetHealth
    remaining: Decimal
    overage: Decimal
    progress: float = Field(..., ge=0, le=100)

    @property
    def is_over(self) -> bool:
        return self.status == BudgetHealth.OVER


class BudgetOverview(ReportModel):
    """All budgets with their consumption and overall totals."""

    total_budgeted: Decimal = Decimal("0")
    total_spent: Decimal = Decimal("0")
    statuses: list[BudgetStatus] = Field(default_factory=list)

    @property
    def total_remaining(self) -> Decimal:
        return self.total_budgeted - self.total_spent


class CategorySlice(ReportModel):
    """One category's share of filtered expenses."""

    category_id: str
    name: str
    color: str
    value: Decimal
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0)


class TrendPoint(ReportModel):
    """Income and expenses for one month of a year."""

    month: int = Field(..., ge=1, le=12)
    label: str
    income: Decimal
    expenses: Decimal
    net: Decimal


class PaymentMethodStat(ReportModel):
    """Filtered expenses grouped by payment method."""

    method: str
    amount: Decimal
    count: int = Field(..., ge=0)
    percentage: float = Field(..., ge=0)


class DashboardView(ReportModel):
    """Everything the dashboard shows for the current month."""

    summary: MonthlySummary
    budgets: BudgetOverview
    recent_transactions: list[Transaction] = Field(default_factory=list)
    alerts: list[BudgetStatus] = Field(default_factory=list)


class PeriodReport(ReportModel):
    """
    Financial report for a monthly or yearly period.

    `monthly_trend` is only filled for yearly reports.
    """

    description: str
    period: str
    year: int
    month: Optional[int] = None

    total_income: Decimal
    total_expenses: Decimal
    net_balance: Decimal
    expense_count: int
    income_count: int
    average_daily_expense: Decimal

    category_breakdown: list[CategorySlice] = Field(default_factory=list)
    top_categories: list[CategorySlice] = Field(default_factory=list)
    payment_methods: list[PaymentMethodStat] = Field(default_factory=list)
    monthly_trend: list[TrendPoint] = Field(default_factory=list)

    savings_rate: float
    spending_ratio: float
    available_years: list[int] = Field(default_factory=list)

    @property
    def top_category(self) -> Optional[CategorySlice]:
        return self.top_categories[0] if self.top_categories else None

    @property
    def transaction_count(self) -> int:
        return self.expense_count + self.income_count

    @property
    def is_healthy(self) -> bool:
        return self.net_balance >= 0
