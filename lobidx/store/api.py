"""Entity store API."""

from __future__ import annotations

from typing import Protocol, TypeVar

E = TypeVar("E")


class EntityStore(Protocol):
    def load(self, entity_type: type[E], entity_id: str) -> E | None:
        """Return a copy of the stored entity, or None."""

    def save(self, entity: object) -> None:
        """Insert or replace an entity."""

    def delete(self, entity_type: type, entity_id: str) -> None:
        """Remove an entity; absent ids are ignored."""
