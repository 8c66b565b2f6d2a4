"""Entity store and mutation layer."""

from budget_core.store.ids import (
    IdGenerator,
    SequentialIdGenerator,
    UuidIdGenerator,
    normalize_name,
)
from budget_core.store.mutations import apply_intent, assign_id
from budget_core.store.store import EntityStore, MutationOutcome

__all__ = [
    "EntityStore",
    "IdGenerator",
    "MutationOutcome",
    "SequentialIdGenerator",
    "UuidIdGenerator",
    "apply_intent",
    "assign_id",
    "normalize_name",
]
