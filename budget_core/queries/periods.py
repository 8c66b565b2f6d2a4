"""
Period Filters

A period filter is the monthly (same year and month) or yearly
(same year) predicate used by report queries. Months are calendar
months, 1-12.
"""

import calendar
from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ReportPeriod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class PeriodFilter(BaseModel):
    """Which transactions a report covers."""
    model_config = ConfigDict(frozen=True)

    period: ReportPeriod
    year: int = Field(..., ge=1, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)

    @model_validator(mode='after')
    def validate_month(self) -> 'PeriodFilter':
        if self.period == ReportPeriod.MONTHLY and self.month is None:
            raise ValueError("A monthly period filter needs a month")
        return self

    @classmethod
    def monthly(cls, year: int, month: int) -> 'PeriodFilter':
        return cls(period=ReportPeriod.MONTHLY, year=year, month=month)

    @classmethod
    def yearly(cls, year: int) -> 'PeriodFilter':
        return cls(period=ReportPeriod.YEARLY, year=year)

    @classmethod
    def current(cls, period: ReportPeriod, today: Optional[date] = None) -> 'PeriodFilter':
        """Filter for the month or year containing `today`."""
        today = today or date.today()
        if ReportPeriod(period) == ReportPeriod.YEARLY:
            return cls.yearly(today.year)
        return cls.monthly(today.year, today.month)

    @property
    def is_yearly(self) -> bool:
        return self.period == ReportPeriod.YEARLY

    def matches(self, value: date) -> bool:
        if value.year != self.year:
            return False
        return self.is_yearly or value.month == self.month

    def describe(self) -> str:
        """Human-readable label, e.g. "May 2024" or "2024"."""
        if self.is_yearly:
            return str(self.year)
        return f"{calendar.month_name[self.month]} {self.year}"
