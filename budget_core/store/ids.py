"""
Id Generation

DESIGN DECISION: One injected strategy assigns every id.
Categories are addressed by their normalized name (the backend looks
them up that way); every other entity gets an opaque id from the
strategy. Tests inject SequentialIdGenerator for stable ids.
"""

import itertools
import re
from abc import ABC, abstractmethod
from uuid import uuid4

from budget_core.models.entities import Collection, EntityModel


_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """
    Normalize a category name into its id.

    "  Eating Out " -> "eating-out"
    """
    return _WHITESPACE.sub("-", name.strip().lower())


class IdGenerator(ABC):
    """Assigns ids to newly created entities."""

    def new_id(self, collection: Collection, draft: EntityModel) -> str:
        if collection == Collection.CATEGORIES:
            return normalize_name(draft.name)
        return self._next_id(collection)

    @abstractmethod
    def _next_id(self, collection: Collection) -> str:
        pass


class UuidIdGenerator(IdGenerator):
    """Random ids, unique within and across sessions."""

    def _next_id(self, collection: Collection) -> str:
        return uuid4().hex


class SequentialIdGenerator(IdGenerator):
    """
    Deterministic ids of the form "<collection>-<n>".

    The counter is shared across collections so ids stay unique
    even if collections are mixed up.
    """

    def __init__(self, start: int = 1):
        self._counter = itertools.count(start)

    def _next_id(self, collection: Collection) -> str:
        return f"{Collection(collection).value}-{next(self._counter)}"
