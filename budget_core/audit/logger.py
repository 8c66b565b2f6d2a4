"""
Audit Logger

DESIGN DECISION: Every significant action in the engine is logged.
This provides:
1. Traceability from a user action to the remote calls it caused
2. A record of optimistic changes the backend never confirmed
3. Debugging capability

The audit logger:
- Is async so it can share the event loop with remote calls
- Gracefully handles failures (a broken audit store never breaks a mutation)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from budget_core.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from budget_core.services.remote import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("budget_core.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_snapshot_loaded(
        self,
        counts: dict[str, int],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.snapshot_loaded(counts, correlation_id))

    async def log_load_failed(
        self,
        collection: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.load_failed(collection, error_message, correlation_id))

    async def log_validation_failed(
        self,
        action: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log validation failure."""
        await self.log(AuditEventBuilder.validation_failed(action, issues, correlation_id))

    async def log_mutation(
        self,
        kind: str,
        collection: str,
        entity_id: Optional[str],
        changed: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a local mutation, or that it was a no-op."""
        if changed:
            event = AuditEventBuilder.mutation_applied(kind, collection, entity_id, correlation_id)
        else:
            event = AuditEventBuilder.mutation_skipped(kind, collection, entity_id, correlation_id)
        await self.log(event)

    async def log_mutation_rejected(
        self,
        kind: str,
        collection: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.mutation_rejected(
            kind, collection, error_message, correlation_id
        ))

    async def log_sync_requested(
        self,
        kind: str,
        collection: str,
        entity_id: Optional[str],
        call_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.sync_requested(
            kind, collection, entity_id, call_count, correlation_id
        ))

    async def log_sync_confirmed(
        self,
        kind: str,
        collection: str,
        entity_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.sync_confirmed(kind, collection, entity_id, correlation_id))

    async def log_sync_failed(
        self,
        kind: str,
        collection: str,
        entity_id: Optional[str],
        error_message: str,
        local_change_kept: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a remote call that was not confirmed."""
        await self.log(AuditEventBuilder.sync_failed(
            kind,
            collection,
            entity_id,
            error_message,
            local_change_kept,
            correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., adding an expense).
    Pass it through the local mutation and every remote call it causes.
    """
    return uuid4()
