"""Configuration package."""

from budget_core.config.settings import (
    AnalyticsSettings,
    AppSettings,
    Settings,
    SyncPolicy,
    SyncSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AnalyticsSettings",
    "AppSettings",
    "Settings",
    "SyncPolicy",
    "SyncSettings",
    "get_settings",
    "validate_all_settings",
]
