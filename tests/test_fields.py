"""Tests for field definitions."""

from dataclasses import FrozenInstanceError

import pytest

from formbuilder.errors import FieldDefinitionError
from formbuilder.fields import (
    CheckboxField,
    DropdownField,
    EmailField,
    TextField,
    field_from_dict,
    field_to_dict,
    fields_from_list,
    merge_field,
    new_field,
)


class TestNewField:
    def test_defaults_per_type(self) -> None:
        field = new_field("email", "f1")
        assert isinstance(field, EmailField)
        assert field.label == "Email Address"
        assert field.placeholder == "Enter email..."
        assert field.required is False

    def test_dropdown_has_empty_options_and_no_placeholder(self) -> None:
        field = new_field("dropdown", "f1")
        assert isinstance(field, DropdownField)
        assert field.options == ()
        assert field.placeholder is None

    def test_checkbox_has_empty_checkbox_options(self) -> None:
        field = new_field("checkbox", "f1")
        assert isinstance(field, CheckboxField)
        assert field.checkbox_options == ()
        assert not hasattr(field, "options")

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(FieldDefinitionError):
            new_field("signature", "f1")


class TestFieldFromDict:
    def test_dropdown_from_wire(self) -> None:
        field = field_from_dict(
            {"id": "a", "type": "dropdown", "label": "Size", "options": ["S", "M"]}
        )
        assert field == DropdownField(id="a", label="Size", options=("S", "M"))

    def test_checkbox_options_use_camel_case_on_the_wire(self) -> None:
        field = CheckboxField(id="c", label="Pick", required=True, checkbox_options=("x", "y"))
        data = field_to_dict(field)
        assert data["checkboxOptions"] == ["x", "y"]
        assert field_from_dict(data) == field

    def test_foreign_options_rejected(self) -> None:
        with pytest.raises(FieldDefinitionError):
            field_from_dict({"id": "a", "type": "text", "label": "Name", "options": ["x"]})
        with pytest.raises(FieldDefinitionError):
            field_from_dict(
                {"id": "a", "type": "dropdown", "label": "Size", "checkboxOptions": ["x"]}
            )

    def test_null_option_lists_are_ignored(self) -> None:
        field = field_from_dict(
            {"id": "a", "type": "text", "label": "Name", "options": None, "checkboxOptions": None}
        )
        assert field == TextField(id="a", label="Name")

    def test_missing_id_rejected(self) -> None:
        with pytest.raises(FieldDefinitionError):
            field_from_dict({"type": "text", "label": "Name"})

    def test_duplicate_ids_rejected(self) -> None:
        with pytest.raises(FieldDefinitionError):
            fields_from_list(
                [
                    {"id": "a", "type": "text", "label": "One"},
                    {"id": "a", "type": "email", "label": "Two"},
                ]
            )


class TestMergeField:
    def test_fields_are_frozen(self) -> None:
        field = TextField(id="a", label="Name")
        with pytest.raises(FrozenInstanceError):
            field.label = "Other"  # type: ignore[misc]

    def test_merge_keeps_id(self) -> None:
        field = TextField(id="a", label="Name")
        merged = merge_field(field, {"id": "b", "label": "Full name", "required": True})
        assert merged == TextField(id="a", label="Full name", required=True)

    def test_type_change_drops_old_option_list(self) -> None:
        field = DropdownField(id="a", label="Size", options=("S",))
        merged = merge_field(field, {"type": "text"})
        assert merged == TextField(id="a", label="Size")

    def test_type_change_to_dropdown_starts_with_no_options(self) -> None:
        merged = merge_field(TextField(id="a", label="Size"), {"type": "dropdown"})
        assert isinstance(merged, DropdownField)
        assert merged.options == ()

    def test_partial_with_foreign_options_rejected(self) -> None:
        with pytest.raises(FieldDefinitionError):
            merge_field(TextField(id="a", label="Name"), {"options": ["x"]})
