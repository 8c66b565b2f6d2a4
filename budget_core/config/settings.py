"""
Configuration Management for Budget Tracker Core

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Thresholds used by the aggregation engine and the sync policy are
read from one place so the session wiring stays declarative.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SyncPolicy(str, Enum):
    """
    How local mutations are sequenced with remote calls.

    OPTIMISTIC: apply locally first, report remote failures, never revert.
    STRICT: call the backend first, apply locally only once confirmed.
    """
    OPTIMISTIC = "optimistic"
    STRICT = "strict"


class SyncSettings(BaseSettings):
    """Remote synchronization configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_SYNC_",
        extra="ignore"
    )

    policy: SyncPolicy = Field(
        default=SyncPolicy.OPTIMISTIC,
        description="Optimistic (apply first) or strict (confirm first)"
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per remote call, including the first one"
    )
    backoff_multiplier: float = Field(
        default=0.5,
        ge=0.0,
        description="Exponential backoff multiplier in seconds"
    )
    backoff_min_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Lower bound of the wait between attempts"
    )
    backoff_max_seconds: float = Field(
        default=10.0,
        ge=0.0,
        description="Upper bound of the wait between attempts"
    )

    @model_validator(mode='after')
    def validate_backoff_bounds(self) -> 'SyncSettings':
        if self.backoff_max_seconds < self.backoff_min_seconds:
            raise ValueError("backoff_max_seconds cannot be below backoff_min_seconds")
        return self


class AnalyticsSettings(BaseSettings):
    """Thresholds and sizes used by the aggregation engine."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_ANALYTICS_",
        extra="ignore"
    )

    warning_threshold_percent: float = Field(
        default=80.0,
        gt=0,
        description="Budget usage that triggers a warning"
    )
    over_threshold_percent: float = Field(
        default=100.0,
        gt=0,
        description="Budget usage that counts as over budget"
    )
    recent_expense_count: int = Field(
        default=3,
        ge=0,
        description="Newest expenses considered for recent transactions"
    )
    recent_income_count: int = Field(
        default=2,
        ge=0,
        description="Newest income entries considered for recent transactions"
    )
    recent_limit: int = Field(
        default=5,
        ge=1,
        description="Length of the recent transactions list"
    )
    top_category_limit: int = Field(
        default=5,
        ge=1,
        description="Number of categories in the top spending list"
    )
    days_per_month: int = Field(
        default=30,
        ge=1,
        description="Divisor for average daily spend in monthly reports"
    )
    days_per_year: int = Field(
        default=365,
        ge=1,
        description="Divisor for average daily spend in yearly reports"
    )

    @model_validator(mode='after')
    def validate_thresholds(self) -> 'AnalyticsSettings':
        if self.warning_threshold_percent > self.over_threshold_percent:
            raise ValueError("Warning threshold cannot exceed the over-budget threshold")
        return self


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for local logs"
    )
    currency_symbol: str = Field(
        default="₹",
        max_length=5,
        description="Symbol used in user-facing messages"
    )

    # Validation thresholds
    max_amount: float = Field(
        default=10_000_000.0,
        gt=0,
        description="Amounts above this are flagged for review"
    )
    future_date_tolerance_days: int = Field(
        default=7,
        ge=0,
        description="How many days in the future a transaction date can be"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def sync(self) -> SyncSettings:
        return SyncSettings()

    @property
    def analytics(self) -> AnalyticsSettings:
        return AnalyticsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus
    `<name>_error` entries for the sections that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("sync", "analytics", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
