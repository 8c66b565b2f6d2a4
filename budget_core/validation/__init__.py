"""Input validation package."""

from budget_core.validation.validator import IntentValidator

__all__ = ["IntentValidator"]
