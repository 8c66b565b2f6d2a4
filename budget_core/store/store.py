"""
Entity Store

DESIGN DECISION: The store is the single writer of session state.
It holds exactly one immutable Snapshot and replaces it wholesale:
every mutation computes the next snapshot first and swaps it in with
one assignment. Readers therefore see a fully-applied mutation or
none of it, and a mutation that raises leaves the store untouched.

There is no module-level store. A session owns one instance from
session start to session end.
"""

from typing import Any, Iterable, Optional

import structlog
from pydantic import BaseModel, ConfigDict

from budget_core.models.entities import ENTITY_TYPES, Collection, Snapshot
from budget_core.models.intents import IntentBase
from budget_core.store.ids import IdGenerator, UuidIdGenerator
from budget_core.store.mutations import apply_intent, assign_id


logger = structlog.get_logger(__name__)


class MutationOutcome(BaseModel):
    """
    Result of applying one intent.

    `changed` is False when an update/delete referenced an unknown id.
    `intent` is the intent as applied, i.e. with its id assigned.
    """
    model_config = ConfigDict(frozen=True)

    intent: Any
    before: Snapshot
    after: Snapshot
    changed: bool

    @property
    def entity_id(self) -> Optional[str]:
        return self.intent.id


class EntityStore:
    """
    Owns the four entity collections for one session.

    Contract:
    - get_snapshot() returns the current immutable snapshot
    - replace_all() bulk-loads one collection after a fetch
    - apply() runs one intent through the mutation layer
    """

    def __init__(
        self,
        id_generator: Optional[IdGenerator] = None,
        snapshot: Optional[Snapshot] = None,
    ):
        self._id_generator = id_generator or UuidIdGenerator()
        self._snapshot = snapshot or Snapshot()

    @property
    def id_generator(self) -> IdGenerator:
        return self._id_generator

    def get_snapshot(self) -> Snapshot:
        """Get the current snapshot (immutable, safe to share)."""
        return self._snapshot

    def replace_all(
        self,
        collection_name: str,
        items: Iterable[Any],
    ) -> Snapshot:
        """
        Replace one collection with the supplied items, order preserved.

        Items may be entity models or dicts in camelCase or snake_case.

        Raises:
            ValueError: If the collection name is unknown
            pydantic.ValidationError: If an item is malformed
        """
        try:
            collection = Collection(collection_name)
        except ValueError:
            raise ValueError(
                f"Unknown collection '{collection_name}'. "
                f"Expected one of: {[c.value for c in Collection]}"
            )

        entity_type = ENTITY_TYPES[collection]
        entities = tuple(
            item if isinstance(item, entity_type) else entity_type.model_validate(item)
            for item in items
        )

        self._snapshot = self._snapshot.replace(collection, entities)
        logger.debug(
            "collection_replaced",
            collection=collection.value,
            count=len(entities),
        )
        return self._snapshot

    def apply(self, intent: IntentBase) -> MutationOutcome:
        """
        Apply an intent and atomically swap in the resulting snapshot.

        Raises:
            DuplicateCategory / DuplicateBudget: Store is left unchanged
        """
        intent = assign_id(intent, self._id_generator)
        before = self._snapshot
        after = apply_intent(before, intent)

        changed = after is not before
        if changed:
            self._snapshot = after
        else:
            logger.debug(
                "mutation_noop",
                kind=intent.kind,
                entity_id=intent.id,
            )

        return MutationOutcome(
            intent=intent,
            before=before,
            after=after,
            changed=changed,
        )

    def reset(self) -> None:
        """Drop all state (session end)."""
        self._snapshot = Snapshot()
