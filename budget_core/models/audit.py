"""
Audit Models for Budget Tracker Core

Every significant action in the engine is logged for audit purposes:
1. Traceability of each mutation and the remote calls it caused
2. Visibility of optimistic changes the backend never confirmed
3. Debugging information when things go wrong

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session
    SNAPSHOT_LOADED = "snapshot_loaded"
    LOAD_FAILED = "load_failed"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Local state
    MUTATION_APPLIED = "mutation_applied"
    MUTATION_SKIPPED = "mutation_skipped"
    MUTATION_REJECTED = "mutation_rejected"

    # Remote synchronization
    SYNC_REQUESTED = "sync_requested"
    SYNC_CONFIRMED = "sync_confirmed"
    SYNC_FAILED = "sync_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Collection the entity belongs to (e.g., 'expenses')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - ties a local mutation to its remote calls
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.mutation_applied("add_expense", "expenses", id, cid)
        event = AuditEventBuilder.sync_failed("add_expense", "expenses", id, err, cid)
    """

    @staticmethod
    def snapshot_loaded(
        counts: dict[str, int],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_LOADED,
            correlation_id=correlation_id,
            description=f"Loaded {sum(counts.values())} entities from backend",
            details={"counts": counts},
        )

    @staticmethod
    def load_failed(
        collection: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=collection,
            correlation_id=correlation_id,
            description=f"Could not load {collection}; collection left empty",
            error_message=error_message,
        )

    @staticmethod
    def validation_failed(
        action: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Validation of {action} failed with {len(issues)} issues",
            details={
                "action": action,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def mutation_applied(
        kind: str,
        collection: str,
        entity_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_APPLIED,
            entity_type=collection,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Applied {kind} locally",
            details={"kind": kind},
            is_user_action=True,
        )

    @staticmethod
    def mutation_skipped(
        kind: str,
        collection: str,
        entity_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_SKIPPED,
            severity=AuditSeverity.WARNING,
            entity_type=collection,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Skipped {kind}: no {collection} entry with id {entity_id}",
            details={"kind": kind},
            is_user_action=True,
        )

    @staticmethod
    def mutation_rejected(
        kind: str,
        collection: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MUTATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=collection,
            correlation_id=correlation_id,
            description=f"Rejected {kind}",
            error_message=error_message,
            details={"kind": kind},
            is_user_action=True,
        )

    @staticmethod
    def sync_requested(
        kind: str,
        collection: str,
        entity_id: Optional[str],
        call_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_REQUESTED,
            severity=AuditSeverity.DEBUG,
            entity_type=collection,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Requested {call_count} remote call(s) for {kind}",
            details={"kind": kind, "call_count": call_count},
        )

    @staticmethod
    def sync_confirmed(
        kind: str,
        collection: str,
        entity_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_CONFIRMED,
            entity_type=collection,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Backend confirmed {kind}",
            details={"kind": kind},
        )

    @staticmethod
    def sync_failed(
        kind: str,
        collection: str,
        entity_id: Optional[str],
        error_message: str,
        local_change_kept: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=collection,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Backend did not confirm {kind}",
            error_message=error_message,
            details={
                "kind": kind,
                "local_change_kept": local_change_kept,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
