"""
Aggregation Engine

Pure, stateless query functions over a snapshot. Every function takes
a snapshot (plus parameters), returns a value, and has no side effects,
so they are safe to call repeatedly and from any reader.

GUARANTEES:
- Never raise on a well-formed snapshot
- Ratios with a zero denominator degrade to 0, except budget usage
  which becomes infinite (and therefore "over")
- Rankings use stable sorts, so ties keep collection order
"""

import calendar
import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from budget_core.models.entities import Budget, Expense, Income, Snapshot
from budget_core.models.reports import (
    BudgetHealth,
    BudgetOverview,
    BudgetStatus,
    CategorySlice,
    MonthlySummary,
    PaymentMethodStat,
    Transaction,
    TransactionKind,
    TrendPoint,
)
from budget_core.queries.lookups import (
    FALLBACK_CATEGORY_COLOR,
    FALLBACK_CATEGORY_ICON,
    INCOME_COLOR,
    category_color,
    category_icon,
    category_name,
)
from budget_core.queries.periods import PeriodFilter


ZERO = Decimal("0")
CENT = Decimal("0.01")

DEFAULT_WARNING_THRESHOLD = 80.0
DEFAULT_OVER_THRESHOLD = 100.0


def total_amount(items: Iterable) -> Decimal:
    """Sum of `.amount` over any entities."""
    return sum((item.amount for item in items), ZERO)


def _percent(part: Decimal, whole: Decimal) -> float:
    if not whole:
        return 0.0
    return float(part / whole * 100)


# =============================================================================
# FILTERS
# =============================================================================

def filter_expenses(snapshot: Snapshot, period_filter: PeriodFilter) -> list[Expense]:
    return [e for e in snapshot.expenses if period_filter.matches(e.date)]


def filter_income(snapshot: Snapshot, period_filter: PeriodFilter) -> list[Income]:
    return [i for i in snapshot.income if period_filter.matches(i.date)]


# =============================================================================
# SUMMARIES
# =============================================================================

def monthly_summary(snapshot: Snapshot, year: int, month: int) -> MonthlySummary:
    """
    Totals for one calendar month.

    `month` is 1-12 with January as 1, like `datetime.date.month`.
    Zero-based month indexes (May as 4) must be shifted by one first.
    """
    period_filter = PeriodFilter.monthly(year, month)
    expenses = filter_expenses(snapshot, period_filter)
    income = filter_income(snapshot, period_filter)

    total_income = total_amount(income)
    total_expenses = total_amount(expenses)

    return MonthlySummary(
        year=year,
        month=month,
        total_income=total_income,
        total_expenses=total_expenses,
        net_balance=total_income - total_expenses,
        expense_count=len(expenses),
        income_count=len(income),
    )


def recent_transactions(
    snapshot: Snapshot,
    n: int = 5,
    *,
    expense_count: int = 3,
    income_count: int = 2,
) -> list[Transaction]:
    """
    Latest activity for the dashboard.

    Takes the newest `expense_count` expenses and `income_count` income
    entries (by insertion), merges them expenses first, then sorts by
    date descending. Python's sort is stable, so equal dates keep the
    merge order.
    """
    merged = [
        Transaction(
            id=expense.id,
            kind=TransactionKind.EXPENSE,
            amount=expense.amount,
            date=expense.date,
            description=expense.description,
            label=category_name(snapshot, expense.category),
            color=category_color(snapshot, expense.category),
        )
        for expense in snapshot.expenses[:expense_count]
    ] + [
        Transaction(
            id=income.id,
            kind=TransactionKind.INCOME,
            amount=income.amount,
            date=income.date,
            description=income.description,
            label=income.source,
            color=INCOME_COLOR,
        )
        for income in snapshot.income[:income_count]
    ]

    merged.sort(key=lambda t: t.date, reverse=True)
    return merged[:n]


# =============================================================================
# BUDGETS
# =============================================================================

def budget_status(
    budget: Budget,
    snapshot: Optional[Snapshot] = None,
    *,
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
    over_threshold: float = DEFAULT_OVER_THRESHOLD,
) -> BudgetStatus:
    """
    Consumption of one budget.

    Without a snapshot the category is shown by its id with the
    fallback icon and color.
    """
    if budget.amount > 0:
        percentage = float(budget.spent / budget.amount * 100)
    else:
        percentage = math.inf

    if percentage >= over_threshold:
        status = BudgetHealth.OVER
    elif percentage >= warning_threshold:
        status = BudgetHealth.WARNING
    else:
        status = BudgetHealth.GOOD

    if snapshot is not None:
        name = category_name(snapshot, budget.category_id)
        icon = category_icon(snapshot, budget.category_id)
        color = category_color(snapshot, budget.category_id)
    else:
        name = budget.category_id
        icon = FALLBACK_CATEGORY_ICON
        color = FALLBACK_CATEGORY_COLOR

    return BudgetStatus(
        budget_id=budget.id,
        category_id=budget.category_id,
        category_name=name,
        category_icon=icon,
        category_color=color,
        amount=budget.amount,
        spent=budget.spent,
        percentage=percentage,
        status=status,
        remaining=budget.amount - budget.spent,
        overage=max(budget.spent - budget.amount, ZERO),
        progress=min(percentage, 100.0),
    )


def budget_overview(
    snapshot: Snapshot,
    *,
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
    over_threshold: float = DEFAULT_OVER_THRESHOLD,
) -> BudgetOverview:
    return BudgetOverview(
        total_budgeted=total_amount(snapshot.budgets),
        total_spent=sum((b.spent for b in snapshot.budgets), ZERO),
        statuses=[
            budget_status(
                budget,
                snapshot,
                warning_threshold=warning_threshold,
                over_threshold=over_threshold,
            )
            for budget in snapshot.budgets
        ],
    )


def budget_alerts(
    snapshot: Snapshot,
    *,
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
    over_threshold: float = DEFAULT_OVER_THRESHOLD,
) -> list[BudgetStatus]:
    """Budgets at or above the warning threshold, in collection order."""
    overview = budget_overview(
        snapshot,
        warning_threshold=warning_threshold,
        over_threshold=over_threshold,
    )
    return [s for s in overview.statuses if s.percentage >= warning_threshold]


# =============================================================================
# BREAKDOWNS
# =============================================================================

def category_breakdown(
    snapshot: Snapshot,
    period_filter: PeriodFilter,
) -> list[CategorySlice]:
    """
    Filtered expenses per category.

    Known categories come first in collection order, followed by
    orphaned category references in first-seen order. Categories with
    no spending are left out.
    """
    expenses = filter_expenses(snapshot, period_filter)
    grand_total = total_amount(expenses)

    totals: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, ZERO) + expense.amount
        counts[expense.category] = counts.get(expense.category, 0) + 1

    known_ids = [category.id for category in snapshot.categories]
    known = set(known_ids)
    orphan_ids = [cid for cid in totals if cid not in known]

    slices = []
    for category_id in known_ids + orphan_ids:
        value = totals.get(category_id, ZERO)
        if value <= 0:
            continue
        slices.append(CategorySlice(
            category_id=category_id,
            name=category_name(snapshot, category_id),
            color=category_color(snapshot, category_id),
            value=value,
            count=counts[category_id],
            percentage=_percent(value, grand_total),
        ))
    return slices


def top_categories(slices: list[CategorySlice], limit: int = 5) -> list[CategorySlice]:
    """Highest-spending categories first; ties keep their order."""
    return sorted(slices, key=lambda s: s.value, reverse=True)[:limit]


def monthly_trend(snapshot: Snapshot, year: int) -> list[TrendPoint]:
    """Income, expenses and net for each month of a year (Jan..Dec)."""
    points = []
    for month in range(1, 13):
        summary = monthly_summary(snapshot, year, month)
        points.append(TrendPoint(
            month=month,
            label=calendar.month_abbr[month],
            income=summary.total_income,
            expenses=summary.total_expenses,
            net=summary.net_balance,
        ))
    return points


def payment_method_breakdown(
    snapshot: Snapshot,
    period_filter: PeriodFilter,
) -> list[PaymentMethodStat]:
    """Filtered expenses per payment method, in first-seen order."""
    expenses = filter_expenses(snapshot, period_filter)
    grand_total = total_amount(expenses)

    amounts: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for expense in expenses:
        method = expense.payment_method.value
        amounts[method] = amounts.get(method, ZERO) + expense.amount
        counts[method] = counts.get(method, 0) + 1

    return [
        PaymentMethodStat(
            method=method,
            amount=amount,
            count=counts[method],
            percentage=_percent(amount, grand_total),
        )
        for method, amount in amounts.items()
    ]


# =============================================================================
# RATIOS
# =============================================================================

def savings_rate(total_income: Decimal, net_balance: Decimal) -> float:
    """Share of income kept, in percent. 0 when there is no income."""
    if total_income > 0:
        return float(Decimal(net_balance) / Decimal(total_income) * 100)
    return 0.0


def spending_ratio(total_income: Decimal, total_expenses: Decimal) -> float:
    """Expenses as a percentage of income. 0 when there is no income."""
    if total_income > 0:
        return float(Decimal(total_expenses) / Decimal(total_income) * 100)
    return 0.0


def average_daily_expense(
    total_expenses: Decimal,
    period_filter: PeriodFilter,
    *,
    days_per_month: int = 30,
    days_per_year: int = 365,
) -> Decimal:
    days = days_per_year if period_filter.is_yearly else days_per_month
    return (Decimal(total_expenses) / days).quantize(CENT, rounding=ROUND_HALF_UP)


def available_years(snapshot: Snapshot, today: Optional[date] = None) -> list[int]:
    """Years with any transaction, plus the current one, newest first."""
    today = today or date.today()
    years = {e.date.year for e in snapshot.expenses}
    years.update(i.date.year for i in snapshot.income)
    years.add(today.year)
    return sorted(years, reverse=True)
