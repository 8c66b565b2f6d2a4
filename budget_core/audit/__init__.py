"""
Audit Package

Structured audit trail for mutations and remote synchronization.
"""

from budget_core.audit.logger import AuditLogger, create_correlation_id

__all__ = ["AuditLogger", "create_correlation_id"]
