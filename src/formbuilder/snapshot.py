from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from formbuilder.config import DEFAULT_FORM_NAME
from formbuilder.fields import FormField, fields_from_list, fields_to_list
from formbuilder.utils import new_field_id

_SETTINGS_KEYS = {
    "submitButtonText": "submit_button_text",
    "successMessage": "success_message",
    "title": "title",
    "description": "description",
}


@dataclass(frozen=True)
class FormSettings:
    submit_button_text: str = "Submit"
    success_message: str = "Thank you for your submission!"
    title: str = ""
    description: str = ""

    def to_dict(self) -> dict[str, str]:
        return {wire: getattr(self, attr) for wire, attr in _SETTINGS_KEYS.items()}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | None) -> FormSettings:
        if not raw:
            return cls()
        kwargs = {
            attr: str(raw[wire])
            for wire, attr in _SETTINGS_KEYS.items()
            if raw.get(wire) is not None
        }
        return cls(**kwargs)

    def merged(self, partial: Mapping[str, Any]) -> FormSettings:
        data = self.to_dict()
        data.update({key: value for key, value in partial.items() if key in _SETTINGS_KEYS})
        return FormSettings.from_dict(data)


@dataclass(frozen=True)
class Snapshot:
    """One immutable point of the editor's history."""

    fields: tuple[FormField, ...] = ()
    settings: FormSettings = field(default_factory=FormSettings)
    form_name: str = DEFAULT_FORM_NAME
    form_description: str = ""

    def evolve(self, **changes: Any) -> Snapshot:
        if "fields" in changes:
            changes["fields"] = tuple(changes["fields"])
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fields": fields_to_list(self.fields),
            "settings": self.settings.to_dict(),
            "formName": self.form_name,
            "formDescription": self.form_description,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Snapshot:
        return cls(
            fields=fields_from_list(raw.get("fields")),
            settings=FormSettings.from_dict(raw.get("settings")),
            form_name=str(raw.get("formName") or DEFAULT_FORM_NAME),
            form_description=str(raw.get("formDescription") or ""),
        )

    @classmethod
    def from_template(cls, template: Mapping[str, Any]) -> Snapshot:
        """Copy a template into a new snapshot. Every field gets a fresh id."""
        raw_settings = dict(template.get("settings") or {})
        title = raw_settings.get("title") or template.get("title") or DEFAULT_FORM_NAME
        description = raw_settings.get("description") or template.get("description") or ""
        raw_settings["title"] = title
        raw_settings["description"] = description
        fields = fields_from_list(
            [{**raw, "id": new_field_id()} for raw in template.get("fields") or []]
        )
        return cls(
            fields=fields,
            settings=FormSettings.from_dict(raw_settings),
            form_name=title,
            form_description=description,
        )
