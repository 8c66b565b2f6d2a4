"""Aggregation engine and report assembly."""

from budget_core.queries.aggregations import (
    available_years,
    average_daily_expense,
    budget_alerts,
    budget_overview,
    budget_status,
    category_breakdown,
    filter_expenses,
    filter_income,
    monthly_summary,
    monthly_trend,
    payment_method_breakdown,
    recent_transactions,
    savings_rate,
    spending_ratio,
    top_categories,
    total_amount,
)
from budget_core.queries.periods import PeriodFilter, ReportPeriod
from budget_core.queries.reports import ReportBuilder

__all__ = [
    "PeriodFilter",
    "ReportBuilder",
    "ReportPeriod",
    "available_years",
    "average_daily_expense",
    "budget_alerts",
    "budget_overview",
    "budget_status",
    "category_breakdown",
    "filter_expenses",
    "filter_income",
    "monthly_summary",
    "monthly_trend",
    "payment_method_breakdown",
    "recent_transactions",
    "savings_rate",
    "spending_ratio",
    "top_categories",
    "total_amount",
]
