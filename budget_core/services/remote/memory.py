"""
In-Memory Backend

Dict-backed implementations of the remote interfaces. Used by tests
and for running a session without a server.
"""

from typing import Any, Optional

from budget_core.errors import NotFoundError, RemoteRejectedError
from budget_core.models.audit import AuditEvent
from budget_core.models.entities import Collection
from budget_core.services.remote.interface import AuditStorageInterface, RemoteBackend


class InMemoryBackend(RemoteBackend):
    """
    Keeps each resource as an insertion-ordered dict of id -> entity.

    Every call is recorded in `calls` as (operation, resource, id) so
    tests can assert which remote requests a mutation produced.
    """

    def __init__(self, seed: Optional[dict[str, list[dict[str, Any]]]] = None):
        self._data: dict[str, dict[str, dict[str, Any]]] = {
            c.value: {} for c in Collection
        }
        self.calls: list[tuple[str, str, Optional[str]]] = []

        for resource, items in (seed or {}).items():
            table = self._table(resource)
            for item in items:
                table[item["id"]] = dict(item)

    def _table(self, resource: str) -> dict[str, dict[str, Any]]:
        if resource not in self._data:
            raise RemoteRejectedError(f"Unknown resource '{resource}'")
        return self._data[resource]

    async def fetch_all(self, resource: str) -> list[dict[str, Any]]:
        self.calls.append(("fetch_all", resource, None))
        return [dict(item) for item in self._table(resource).values()]

    async def create(self, resource: str, payload: dict[str, Any]) -> dict[str, Any]:
        entity_id = payload.get("id")
        self.calls.append(("create", resource, entity_id))
        if not entity_id:
            raise RemoteRejectedError(f"Cannot create {resource} entry without an id")

        stored = dict(payload)
        self._table(resource)[entity_id] = stored
        return dict(stored)

    async def update(
        self,
        resource: str,
        entity_id: str,
        patch: dict[str, Any],
    ) -> dict[str, Any]:
        self.calls.append(("update", resource, entity_id))
        table = self._table(resource)
        if entity_id not in table:
            raise NotFoundError(f"No {resource} entry with id {entity_id}")

        table[entity_id].update(patch)
        return dict(table[entity_id])

    async def delete(self, resource: str, entity_id: str) -> bool:
        self.calls.append(("delete", resource, entity_id))
        table = self._table(resource)
        if entity_id not in table:
            raise NotFoundError(f"No {resource} entry with id {entity_id}")

        del table[entity_id]
        return True

    def get(self, resource: str, entity_id: str) -> Optional[dict[str, Any]]:
        """Stored entity, or None."""
        item = self._table(resource).get(entity_id)
        return dict(item) if item is not None else None


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
