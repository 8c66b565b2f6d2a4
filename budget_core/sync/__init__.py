"""
Sync Package

Sequences local mutations with remote backend calls.
"""

from budget_core.sync.coordinator import SyncCoordinator, plan_remote_calls

__all__ = ["SyncCoordinator", "plan_remote_calls"]
