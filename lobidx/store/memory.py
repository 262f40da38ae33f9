"""In-memory entity store and per-event write buffer.

Stored entities are copied on load and on save, so mutating a loaded record
has no effect until it is saved again.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterator, TypeVar

from lobidx.core.errors import SchemaError
from lobidx.core.hashing import hash_json, to_jsonable
from lobidx.store.entities import ENTITY_TYPES

E = TypeVar("E")

_Key = tuple[str, str]


def _type_name(entity_type: type) -> str:
    name = getattr(entity_type, "entity_type", None)
    if name not in ENTITY_TYPES:
        raise SchemaError(f"unknown entity type: {entity_type!r}")
    return name


class MemoryStore:
    def __init__(self) -> None:
        self._entities: dict[_Key, object] = {}

    def load(self, entity_type: type[E], entity_id: str) -> E | None:
        entity = self._entities.get((_type_name(entity_type), entity_id))
        return None if entity is None else replace(entity)

    def save(self, entity: object) -> None:
        key = (_type_name(type(entity)), entity.id)
        self._entities[key] = replace(entity)

    def delete(self, entity_type: type, entity_id: str) -> None:
        self._entities.pop((_type_name(entity_type), entity_id), None)

    def __len__(self) -> int:
        return len(self._entities)

    def iter_type(self, entity_type: type[E]) -> Iterator[E]:
        name = _type_name(entity_type)
        for (type_name, _), entity in sorted(
            self._entities.items(), key=lambda item: item[0]
        ):
            if type_name == name:
                yield replace(entity)

    def dump(self) -> dict[str, dict[str, object]]:
        out: dict[str, dict[str, object]] = {}
        for (type_name, entity_id), entity in sorted(self._entities.items()):
            out.setdefault(type_name, {})[entity_id] = to_jsonable(entity)
        return out

    def digest(self) -> str:
        return hash_json(self.dump())


_DELETED = object()


class BufferedStore:
    """Write buffer over another store.

    Reads see buffered writes first. Nothing reaches the backing store until
    ``commit``; ``discard`` drops the buffer.
    """

    def __init__(self, backing) -> None:
        self._backing = backing
        self._writes: dict[_Key, object] = {}

    def load(self, entity_type: type[E], entity_id: str) -> E | None:
        key = (_type_name(entity_type), entity_id)
        if key in self._writes:
            entity = self._writes[key]
            return None if entity is _DELETED else replace(entity)
        return self._backing.load(entity_type, entity_id)

    def save(self, entity: object) -> None:
        key = (_type_name(type(entity)), entity.id)
        self._writes[key] = replace(entity)

    def delete(self, entity_type: type, entity_id: str) -> None:
        self._writes[(_type_name(entity_type), entity_id)] = _DELETED

    @property
    def pending(self) -> int:
        return len(self._writes)

    def commit(self) -> None:
        for (type_name, entity_id), entity in self._writes.items():
            if entity is _DELETED:
                self._backing.delete(ENTITY_TYPES[type_name], entity_id)
            else:
                self._backing.save(entity)
        self._writes.clear()

    def discard(self) -> None:
        self._writes.clear()
