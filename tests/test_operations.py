"""Tests for the pure field editing operations."""

import itertools
import random

import pytest

from formbuilder.fields import DropdownField, TextField
from formbuilder.operations import (
    add_field,
    delete_field,
    duplicate_field,
    move_field,
    reorder_steps,
    update_field,
)


@pytest.fixture
def fields():
    return (
        TextField(id="a", label="A"),
        DropdownField(id="b", label="B", options=("x", "y")),
        TextField(id="c", label="C"),
        TextField(id="d", label="D"),
    )


def ids(fields):
    return [field.id for field in fields]


class TestAddAndDelete:
    def test_add_appends(self, fields) -> None:
        result = add_field(fields, "phone", lambda: "e")
        assert ids(result) == ["a", "b", "c", "d", "e"]
        assert result[-1].label == "Phone Number"

    def test_add_skips_colliding_ids(self, fields) -> None:
        candidates = iter(["a", "b", "z"])
        result = add_field(fields, "text", lambda: next(candidates))
        assert result[-1].id == "z"

    def test_delete_preserves_order(self, fields) -> None:
        assert ids(delete_field(fields, "b")) == ["a", "c", "d"]

    def test_delete_missing_is_noop(self, fields) -> None:
        assert delete_field(fields, "zz") is None


class TestUpdate:
    def test_update_merges(self, fields) -> None:
        result = update_field(fields, "c", {"label": "Comments", "required": True})
        assert result[2] == TextField(id="c", label="Comments", required=True)
        assert result[:2] == fields[:2]

    def test_update_missing_is_noop(self, fields) -> None:
        assert update_field(fields, "zz", {"label": "x"}) is None


class TestMove:
    def test_move_up_swaps_with_previous(self, fields) -> None:
        assert ids(move_field(fields, "c", "up")) == ["a", "c", "b", "d"]

    def test_move_down_swaps_with_next(self, fields) -> None:
        assert ids(move_field(fields, "a", "down")) == ["b", "a", "c", "d"]

    def test_first_cannot_move_up(self, fields) -> None:
        assert move_field(fields, "a", "up") is None

    def test_last_cannot_move_down(self, fields) -> None:
        assert move_field(fields, "d", "down") is None

    def test_bad_direction(self, fields) -> None:
        with pytest.raises(ValueError):
            move_field(fields, "a", "left")  # type: ignore[arg-type]


class TestDuplicate:
    def test_copy_inserted_after_source(self, fields) -> None:
        result = duplicate_field(fields, "b", lambda: "b2")
        assert ids(result) == ["a", "b", "b2", "c", "d"]
        copy = result[2]
        assert copy == DropdownField(id="b2", label="B", options=("x", "y"))

    def test_duplicate_missing_is_noop(self, fields) -> None:
        assert duplicate_field(fields, "zz", lambda: "n") is None


class TestReorderSteps:
    def test_walk_down(self, fields) -> None:
        assert list(reorder_steps(fields, "a", "d")) == ["down", "down", "down"]

    def test_walk_up(self, fields) -> None:
        assert list(reorder_steps(fields, "d", "b")) == ["up", "up"]

    def test_same_or_missing_ids(self, fields) -> None:
        assert list(reorder_steps(fields, "a", "a")) == []
        assert list(reorder_steps(fields, "a", "zz")) == []


def test_ids_stay_unique_under_random_edits() -> None:
    rng = random.Random(20240501)
    counter = itertools.count()

    def id_factory() -> str:
        # small pool, so fresh-id selection has to skip collisions
        return f"id{next(counter) % 7}"
    fields: tuple = ()
    for _ in range(300):
        op = rng.choice(["add", "update", "delete", "move", "duplicate"])
        target = rng.choice(fields).id if fields else "missing"
        if op == "add":
            result = (
                add_field(fields, rng.choice(["text", "email", "checkbox"]), id_factory)
                if len(fields) < 7
                else None
            )
        elif op == "update":
            result = update_field(fields, target, {"label": f"L{rng.random():.3f}"})
        elif op == "delete":
            result = delete_field(fields, target)
        elif op == "move":
            result = move_field(fields, target, rng.choice(["up", "down"]))
        else:
            result = duplicate_field(fields, target, id_factory) if len(fields) < 7 else None
        if result is not None:
            fields = result
        assert len(set(ids(fields))) == len(fields)
