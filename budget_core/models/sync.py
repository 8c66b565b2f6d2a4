"""
Sync Models

Tracks one submitted intent through its local and remote lifecycle.

Local:  pending -> applied | skipped
Remote: not_requested -> requested -> confirmed | failed
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class LocalState(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    SKIPPED = "skipped"  # update/delete of an unknown id


class RemoteState(str, Enum):
    NOT_REQUESTED = "not_requested"
    REQUESTED = "requested"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class RemoteCall(BaseModel):
    """One backend request derived from a mutation."""

    operation: str = Field(
        ...,
        pattern="^(create|update|delete)$",
    )
    resource: str
    entity_id: str
    payload: dict = Field(default_factory=dict)


class SyncRecord(BaseModel):
    """
    Lifecycle of one submitted intent.

    Mutable: the coordinator advances the states as calls complete.
    """

    record_id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    correlation_id: Optional[UUID] = None

    intent_kind: str
    collection: str
    entity_id: Optional[str] = None

    local_state: LocalState = LocalState.PENDING
    remote_state: RemoteState = RemoteState.NOT_REQUESTED
    calls: list[RemoteCall] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_settled(self) -> bool:
        """No remote work outstanding."""
        return self.remote_state != RemoteState.REQUESTED

    @property
    def failed(self) -> bool:
        return self.remote_state == RemoteState.FAILED
