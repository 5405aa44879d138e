"""Field definitions.

Every field type is its own frozen dataclass. Option lists exist only on the
variants that use them: ``DropdownField.options`` and
``CheckboxField.checkbox_options`` (``checkboxOptions`` on the wire).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, ClassVar, Mapping, Union

from formbuilder.config import DEFAULT_LABELS, FIELD_TYPES
from formbuilder.errors import FieldDefinitionError

OPTION_KEYS = {"dropdown": "options", "checkbox": "checkboxOptions"}


@dataclass(frozen=True)
class BaseField:
    id: str
    label: str
    required: bool = False
    placeholder: str | None = None

    type: ClassVar[str] = ""


@dataclass(frozen=True)
class TextField(BaseField):
    type: ClassVar[str] = "text"


@dataclass(frozen=True)
class TextAreaField(BaseField):
    type: ClassVar[str] = "textarea"


@dataclass(frozen=True)
class DropdownField(BaseField):
    options: tuple[str, ...] = ()

    type: ClassVar[str] = "dropdown"


@dataclass(frozen=True)
class CheckboxField(BaseField):
    checkbox_options: tuple[str, ...] = ()

    type: ClassVar[str] = "checkbox"


@dataclass(frozen=True)
class DateField(BaseField):
    type: ClassVar[str] = "date"


@dataclass(frozen=True)
class EmailField(BaseField):
    type: ClassVar[str] = "email"


@dataclass(frozen=True)
class PhoneField(BaseField):
    type: ClassVar[str] = "phone"


@dataclass(frozen=True)
class NumberField(BaseField):
    type: ClassVar[str] = "number"


FormField = Union[
    TextField,
    TextAreaField,
    DropdownField,
    CheckboxField,
    DateField,
    EmailField,
    PhoneField,
    NumberField,
]

FIELD_CLASSES: dict[str, type[BaseField]] = {
    cls.type: cls
    for cls in (
        TextField,
        TextAreaField,
        DropdownField,
        CheckboxField,
        DateField,
        EmailField,
        PhoneField,
        NumberField,
    )
}


def _parse_options(raw: Any, loc: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        raise FieldDefinitionError(f"{loc} must be a list of strings")
    options: list[str] = []
    for value in raw:
        if not isinstance(value, str):
            raise FieldDefinitionError(f"{loc} must be a list of strings")
        options.append(value)
    return tuple(options)


def new_field(field_type: str, field_id: str) -> FormField:
    """Build a freshly added field with the defaults for ``field_type``."""
    if field_type not in FIELD_CLASSES:
        raise FieldDefinitionError(f"unknown field type: {field_type!r}")
    label = DEFAULT_LABELS.get(field_type, "Field")
    placeholder = None if field_type == "dropdown" else f"Enter {field_type}..."
    return FIELD_CLASSES[field_type](id=field_id, label=label, placeholder=placeholder)


def field_from_dict(raw: Mapping[str, Any]) -> FormField:
    if not isinstance(raw, Mapping):
        raise FieldDefinitionError("field definition must be an object")
    field_type = str(raw.get("type", "")).strip()
    if field_type not in FIELD_TYPES:
        raise FieldDefinitionError(f"unknown field type: {field_type!r}")

    field_id = raw.get("id")
    if not isinstance(field_id, str) or not field_id:
        raise FieldDefinitionError("field id is required")

    for other_type, key in OPTION_KEYS.items():
        if other_type != field_type and raw.get(key) is not None:
            raise FieldDefinitionError(f"{key} is only allowed on {other_type} fields")

    placeholder = raw.get("placeholder")
    kwargs: dict[str, Any] = {
        "id": field_id,
        "label": str(raw.get("label") or ""),
        "required": bool(raw.get("required", False)),
        "placeholder": str(placeholder) if placeholder is not None else None,
    }
    if field_type == "dropdown":
        kwargs["options"] = _parse_options(raw.get("options"), "options")
    elif field_type == "checkbox":
        kwargs["checkbox_options"] = _parse_options(raw.get("checkboxOptions"), "checkboxOptions")
    return FIELD_CLASSES[field_type](**kwargs)


def field_to_dict(field: BaseField) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": field.id,
        "type": field.type,
        "label": field.label,
        "required": field.required,
    }
    if field.placeholder is not None:
        data["placeholder"] = field.placeholder
    if isinstance(field, DropdownField):
        data["options"] = list(field.options)
    elif isinstance(field, CheckboxField):
        data["checkboxOptions"] = list(field.checkbox_options)
    return data


def merge_field(field: BaseField, partial: Mapping[str, Any]) -> FormField:
    """Apply ``partial`` (wire-shaped keys) to ``field``. The id is kept."""
    data = field_to_dict(field)
    changes = {key: value for key, value in partial.items() if key != "id"}
    new_type = changes.get("type", field.type)
    if new_type != field.type:
        old_key = OPTION_KEYS.get(field.type)
        if old_key:
            data.pop(old_key, None)
    data.update(changes)
    return field_from_dict(data)


def with_id(field: BaseField, field_id: str) -> FormField:
    return replace(field, id=field_id)


def fields_from_list(raw_fields: Any) -> tuple[FormField, ...]:
    if raw_fields is None:
        return ()
    if not isinstance(raw_fields, (list, tuple)):
        raise FieldDefinitionError("fields must be a list")
    fields = tuple(field_from_dict(raw) for raw in raw_fields)
    seen: set[str] = set()
    for field in fields:
        if field.id in seen:
            raise FieldDefinitionError(f"duplicate field id: {field.id}")
        seen.add(field.id)
    return fields


def fields_to_list(fields: Any) -> list[dict[str, Any]]:
    return [field_to_dict(field) for field in fields]
