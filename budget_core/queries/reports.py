"""
Report Builder

DESIGN DECISION: Views are assembled DETERMINISTICALLY from one snapshot.
The builder never reads the store itself; the caller passes the snapshot,
so a view is always consistent with a single instant of state.

Thresholds and list sizes come from AnalyticsSettings so the dashboard
and the reports agree on what "warning" or "top 5" means.
"""

from datetime import date
from typing import Optional

from budget_core.config import AnalyticsSettings, get_settings
from budget_core.models.entities import Snapshot
from budget_core.models.reports import DashboardView, PeriodReport
from budget_core.queries.aggregations import (
    available_years,
    average_daily_expense,
    budget_alerts,
    budget_overview,
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
from budget_core.queries.periods import PeriodFilter


class ReportBuilder:
    """
    Builds the dashboard and period reports from a snapshot.

    GUARANTEES:
    - Only uses data present in the snapshot
    - Never raises for an empty snapshot; every figure is zero instead
    """

    def __init__(self, settings: Optional[AnalyticsSettings] = None):
        self._settings = settings or get_settings().analytics

    @property
    def _thresholds(self) -> dict:
        return {
            "warning_threshold": self._settings.warning_threshold_percent,
            "over_threshold": self._settings.over_threshold_percent,
        }

    def dashboard(self, snapshot: Snapshot, today: Optional[date] = None) -> DashboardView:
        """Current month at a glance."""
        today = today or date.today()

        return DashboardView(
            summary=monthly_summary(snapshot, today.year, today.month),
            budgets=budget_overview(snapshot, **self._thresholds),
            recent_transactions=recent_transactions(
                snapshot,
                self._settings.recent_limit,
                expense_count=self._settings.recent_expense_count,
                income_count=self._settings.recent_income_count,
            ),
            alerts=budget_alerts(snapshot, **self._thresholds),
        )

    def period_report(
        self,
        snapshot: Snapshot,
        period_filter: PeriodFilter,
        today: Optional[date] = None,
    ) -> PeriodReport:
        """Financial report for a monthly or yearly period."""
        expenses = filter_expenses(snapshot, period_filter)
        income = filter_income(snapshot, period_filter)

        total_expenses = total_amount(expenses)
        total_income = total_amount(income)
        net_balance = total_income - total_expenses

        breakdown = category_breakdown(snapshot, period_filter)
        trend = monthly_trend(snapshot, period_filter.year) if period_filter.is_yearly else []

        return PeriodReport(
            description=self._describe(period_filter, len(expenses) + len(income)),
            period=period_filter.period.value,
            year=period_filter.year,
            month=period_filter.month,
            total_income=total_income,
            total_expenses=total_expenses,
            net_balance=net_balance,
            expense_count=len(expenses),
            income_count=len(income),
            average_daily_expense=average_daily_expense(
                total_expenses,
                period_filter,
                days_per_month=self._settings.days_per_month,
                days_per_year=self._settings.days_per_year,
            ),
            category_breakdown=breakdown,
            top_categories=top_categories(breakdown, self._settings.top_category_limit),
            payment_methods=payment_method_breakdown(snapshot, period_filter),
            monthly_trend=trend,
            savings_rate=savings_rate(total_income, net_balance),
            spending_ratio=spending_ratio(total_income, total_expenses),
            available_years=available_years(snapshot, today),
        )

    def _describe(self, period_filter: PeriodFilter, transaction_count: int) -> str:
        """Format the report heading."""
        label = period_filter.describe()
        if period_filter.is_yearly:
            heading = f"Yearly report for {label}"
        else:
            heading = f"Monthly report for {label}"

        if transaction_count == 0:
            return f"{heading} | no transactions"
        return f"{heading} | {transaction_count} transactions"
