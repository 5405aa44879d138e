"""Field editing operations.

Each function takes the current field tuple and returns the new tuple, or
``None`` when the operation does not change anything. Callers commit a
history entry only for non-``None`` results.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, Literal, Mapping, Sequence

from formbuilder.fields import FormField, merge_field, new_field, with_id
from formbuilder.utils import new_field_id

Direction = Literal["up", "down"]
Fields = tuple[FormField, ...]
IdFactory = Callable[[], str]


def index_of(fields: Sequence[FormField], field_id: str) -> int:
    for index, field in enumerate(fields):
        if field.id == field_id:
            return index
    return -1


def _fresh_id(fields: Sequence[FormField], id_factory: IdFactory) -> str:
    existing = {field.id for field in fields}
    while True:
        candidate = id_factory()
        if candidate not in existing:
            return candidate


def add_field(
    fields: Sequence[FormField], field_type: str, id_factory: IdFactory = new_field_id
) -> Fields:
    return (*fields, new_field(field_type, _fresh_id(fields, id_factory)))


def update_field(
    fields: Sequence[FormField], field_id: str, partial: Mapping[str, Any]
) -> Fields | None:
    index = index_of(fields, field_id)
    if index < 0:
        return None
    updated = list(fields)
    updated[index] = merge_field(fields[index], partial)
    return tuple(updated)


def delete_field(fields: Sequence[FormField], field_id: str) -> Fields | None:
    if index_of(fields, field_id) < 0:
        return None
    return tuple(field for field in fields if field.id != field_id)


def move_field(fields: Sequence[FormField], field_id: str, direction: Direction) -> Fields | None:
    if direction not in ("up", "down"):
        raise ValueError(f"direction must be 'up' or 'down', got {direction!r}")
    index = index_of(fields, field_id)
    if index < 0:
        return None
    if (direction == "up" and index == 0) or (direction == "down" and index == len(fields) - 1):
        return None
    other = index - 1 if direction == "up" else index + 1
    moved = list(fields)
    moved[index], moved[other] = moved[other], moved[index]
    return tuple(moved)


def duplicate_field(
    fields: Sequence[FormField], field_id: str, id_factory: IdFactory = new_field_id
) -> Fields | None:
    index = index_of(fields, field_id)
    if index < 0:
        return None
    copy = with_id(fields[index], _fresh_id(fields, id_factory))
    return (*fields[: index + 1], copy, *fields[index + 1 :])


def reorder_steps(
    fields: Sequence[FormField], source_id: str, target_id: str
) -> Iterator[Direction]:
    """Yield the single-step moves that walk ``source_id`` onto ``target_id``'s slot.

    A drag across N positions becomes N adjacent swaps.
    """
    if source_id == target_id:
        return
    source = index_of(fields, source_id)
    target = index_of(fields, target_id)
    if source < 0 or target < 0:
        return
    direction: Direction = "down" if source < target else "up"
    for _ in range(abs(target - source)):
        yield direction
