from __future__ import annotations

from typing import Any

from formbuilder.errors import FieldDefinitionError
from formbuilder.fields import fields_from_list, fields_to_list
from formbuilder.snapshot import FormSettings, Snapshot
from formbuilder.utils import now_utc, to_iso


def parse_fields(raw_fields: Any) -> list[dict[str, Any]]:
    """Normalise a wire field list. Raises ``FieldDefinitionError`` on bad input."""
    return fields_to_list(fields_from_list(raw_fields))


def parse_settings(raw_settings: Any) -> dict[str, str]:
    if raw_settings is not None and not isinstance(raw_settings, dict):
        raise FieldDefinitionError("settings must be an object")
    return FormSettings.from_dict(raw_settings).to_dict()


def definition_from_snapshot(
    snapshot: Snapshot,
    user_id: str,
    form_id: str | None = None,
    is_public: bool = True,
) -> dict[str, Any]:
    """Wire definition of an editor snapshot, as sent to ``FormService``."""
    definition: dict[str, Any] = {
        "userId": user_id,
        "title": snapshot.form_name,
        "description": snapshot.form_description,
        "fields": fields_to_list(snapshot.fields),
        "settings": snapshot.settings.to_dict(),
        "isPublic": is_public,
    }
    if form_id:
        definition["formId"] = form_id
    return definition


def form_to_wire(form: dict[str, Any]) -> dict[str, Any]:
    return {
        "formId": form["form_id"],
        "userId": form.get("user_id", ""),
        "title": form.get("title", ""),
        "description": form.get("description", ""),
        "fields": form.get("fields", []),
        "settings": form.get("settings", {}),
        "isPublic": bool(form.get("is_public", True)),
        "createdAt": to_iso(form.get("created_at", now_utc())),
        "updatedAt": to_iso(form.get("updated_at", now_utc())),
    }


def form_metadata(form: dict[str, Any]) -> dict[str, Any]:
    return {
        "formId": form["form_id"],
        "title": form.get("title", ""),
        "description": form.get("description", ""),
        "createdAt": to_iso(form.get("created_at", now_utc())),
        "updatedAt": to_iso(form.get("updated_at", now_utc())),
    }


def submission_to_wire(submission: dict[str, Any]) -> dict[str, Any]:
    return {
        "formId": submission["form_id"],
        "data": submission.get("data", {}),
        "submittedAt": to_iso(submission["submitted_at"]),
    }
