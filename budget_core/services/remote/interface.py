"""
Abstract Remote Backend Interface

DESIGN DECISION: The engine never talks HTTP itself. It talks to an
abstract backend with four CRUD operations per resource. This allows us to:
1. Plug in any transport (REST client, local database) without touching
   the store or the aggregation engine
2. Use in-memory storage for testing
3. Keep retry and sync policy in the coordinator, not in the transport

Resources are the four collection names: categories, budgets,
expenses, income.
"""

from abc import ABC, abstractmethod
from typing import Any

from budget_core.models.audit import AuditEvent


class RemoteBackend(ABC):
    """
    Abstract interface for the persistence backend.

    Any transport implementation must implement these methods and raise
    TransportError subclasses on failure:
    - RemoteUnavailableError for transient failures (retried)
    - RemoteRejectedError for permanent failures (not retried)
    """

    @abstractmethod
    async def fetch_all(self, resource: str) -> list[dict[str, Any]]:
        """
        Fetch every entity of a resource.

        Args:
            resource: Collection name

        Returns:
            Entities as camelCase dicts, in backend order
        """
        pass

    @abstractmethod
    async def create(self, resource: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        Create an entity.

        Args:
            resource: Collection name
            payload: Entity fields including the locally assigned id

        Returns:
            The stored entity (includes `id`)
        """
        pass

    @abstractmethod
    async def update(
        self,
        resource: str,
        entity_id: str,
        patch: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Merge fields into an existing entity.

        Raises:
            NotFoundError: If the entity doesn't exist
        """
        pass

    @abstractmethod
    async def delete(self, resource: str, entity_id: str) -> bool:
        """
        Delete an entity by id.

        Raises:
            NotFoundError: If the entity doesn't exist
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass
