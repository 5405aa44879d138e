from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from jsonschema import Draft7Validator

from formbuilder.fields import BaseField

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
# exactly ten ASCII digits, any other characters around them
PHONE_PATTERN = r"^[^0-9]*(?:[0-9][^0-9]*){10}$"

EMAIL_MESSAGE = "Please enter a valid email address"
PHONE_MESSAGE = "Please enter a valid 10-digit phone number"

_FORMAT_RULES: dict[str, tuple[dict[str, Any], str]] = {
    "email": ({"type": "string", "pattern": EMAIL_PATTERN}, EMAIL_MESSAGE),
    "phone": ({"type": "string", "pattern": PHONE_PATTERN}, PHONE_MESSAGE),
}


@dataclass(frozen=True)
class FieldError:
    field_id: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"fieldId": self.field_id, "message": self.message}


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set)):
        return all(is_blank(item) for item in value)
    return False


def field_schema(field: BaseField) -> dict[str, Any]:
    """Draft-7 schema checking one field's entry in a value map."""
    schema: dict[str, Any] = {"type": "object", "properties": {}}
    if field.required:
        schema["required"] = [field.id]
    rule = _FORMAT_RULES.get(field.type)
    if rule:
        schema["properties"][field.id] = rule[0]
    return schema


def _instance(field: BaseField, value: Any) -> dict[str, Any]:
    # blank values are treated as absent, so ``required`` reports them
    if is_blank(value):
        return {}
    if field.type == "phone" and not isinstance(value, str):
        value = str(value)
    return {field.id: value}


def validate_field(field: BaseField, value: Any) -> FieldError | None:
    validator = Draft7Validator(field_schema(field))
    error = next(validator.iter_errors(_instance(field, value)), None)
    if error is None:
        return None
    if error.validator == "required":
        return FieldError(field.id, f"{field.label} is required")
    return FieldError(field.id, _FORMAT_RULES[field.type][1])


def validate(fields: Iterable[BaseField], values: Mapping[str, Any]) -> list[FieldError]:
    """Check ``values`` against ``fields``. Errors come back in field order, one per field at most."""
    errors: list[FieldError] = []
    for field in fields:
        error = validate_field(field, values.get(field.id))
        if error:
            errors.append(error)
    return errors
