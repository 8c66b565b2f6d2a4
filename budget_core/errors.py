"""
Exception taxonomy for Budget Tracker Core.

DESIGN DECISION: Errors are split by where they stop the flow:
- ValidationError stops an action at the boundary, nothing is applied
- SyncError is reported after the local change already happened
- NotFoundError is a backend concern; the mutation layer treats
  unknown ids as a no-op instead
- Read-side aggregation never raises
"""

from typing import Optional


class BudgetCoreError(Exception):
    """Base exception for the engine."""
    pass


class ValidationError(BudgetCoreError):
    """
    User input was rejected before reaching the mutation layer.

    Carries the individual issues so the caller can show them.
    """

    def __init__(self, message: str, issues: Optional[list] = None):
        super().__init__(message)
        self.issues = issues or []


class DuplicateCategory(ValidationError):
    """A category with the same id or name already exists."""
    pass


class DuplicateBudget(ValidationError):
    """A budget for this category already exists."""
    pass


class NotFoundError(BudgetCoreError):
    """Entity not found in the remote backend."""
    pass


class TransportError(BudgetCoreError):
    """Base exception for remote backend calls."""
    pass


class RemoteUnavailableError(TransportError):
    """Backend could not be reached. Transient, safe to retry."""
    pass


class RemoteRejectedError(TransportError):
    """Backend refused the request (validation, auth). Not retried."""
    pass


class SyncError(BudgetCoreError):
    """
    A remote call failed after (or instead of) the local mutation.

    Raised to the caller only under the strict policy. Under the
    optimistic policy it is recorded and reported as a notice.
    """

    def __init__(
        self,
        message: str,
        intent_kind: Optional[str] = None,
        resource: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.intent_kind = intent_kind
        self.resource = resource
        self.cause = cause
