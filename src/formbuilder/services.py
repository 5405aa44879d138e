"""Form and submission services.

``FormService`` and ``SubmissionService`` are the collaborator contracts the
editor and the submission controller talk to. The ``Local*`` classes below
implement them directly on top of a ``Storage``; ``formbuilder.client`` has
the HTTP implementations.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

from sqlalchemy.exc import SQLAlchemyError

from formbuilder.errors import InvalidFormError, NotFoundError, SubmissionNetworkError
from formbuilder.schema import (
    form_metadata,
    form_to_wire,
    parse_fields,
    parse_settings,
    submission_to_wire,
)
from formbuilder.storage import Storage
from formbuilder.utils import new_form_id, new_ulid, now_utc

logger = logging.getLogger(__name__)

SUBMIT_OK_MESSAGE = "Form submitted successfully"


class FormService(Protocol):
    async def create_form(self, definition: Mapping[str, Any]) -> dict[str, Any]: ...

    async def update_form(self, form_id: str, patch: Mapping[str, Any]) -> dict[str, Any]: ...

    async def delete_form(self, form_id: str) -> None: ...

    async def get_form(self, form_id: str) -> dict[str, Any]: ...

    async def list_forms(self, user_id: str) -> list[dict[str, Any]]: ...


class SubmissionService(Protocol):
    async def submit_form(self, form_id: str, values: Mapping[str, Any]) -> dict[str, Any]: ...

    async def list_submissions(self, form_id: str) -> list[dict[str, Any]]: ...


def _form_updates(patch: Mapping[str, Any]) -> dict[str, Any]:
    updates: dict[str, Any] = {}
    if patch.get("title"):
        updates["title"] = str(patch["title"]).strip()
    if patch.get("description"):
        updates["description"] = str(patch["description"]).strip()
    if patch.get("fields") is not None:
        updates["fields"] = parse_fields(patch["fields"])
    if patch.get("settings") is not None:
        updates["settings"] = parse_settings(patch["settings"])
    if isinstance(patch.get("isPublic"), bool):
        updates["is_public"] = patch["isPublic"]
    return updates


class LocalFormService:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    async def create_form(self, definition: Mapping[str, Any]) -> dict[str, Any]:
        user_id = str(definition.get("userId") or "").strip()
        if not user_id:
            raise InvalidFormError("User ID is required")
        title = str(definition.get("title") or "").strip()
        if not title:
            raise InvalidFormError("Title is required")
        form_id = str(definition.get("formId") or "").strip() or new_form_id()
        if self._storage.forms.get_form(form_id):
            raise InvalidFormError("Form with this ID already exists")

        now = now_utc()
        self._storage.forms.create_form(
            {
                "form_id": form_id,
                "user_id": user_id,
                "title": title,
                "description": str(definition.get("description") or "").strip(),
                "fields": parse_fields(definition.get("fields") or []),
                "settings": parse_settings(definition.get("settings")),
                "is_public": bool(definition.get("isPublic", True)),
                "created_at": now,
                "updated_at": now,
            }
        )
        logger.info("Form created: %s (user %s)", form_id, user_id)
        form = self._storage.forms.get_form(form_id)
        return {"success": True, "formId": form_id, "form": form_to_wire(form or {"form_id": form_id})}

    async def update_form(self, form_id: str, patch: Mapping[str, Any]) -> dict[str, Any]:
        if not self._storage.forms.get_form(form_id):
            raise NotFoundError("Form not found")
        updates = _form_updates(patch)
        updates["updated_at"] = now_utc()
        return form_to_wire(self._storage.forms.update_form(form_id, updates))

    async def delete_form(self, form_id: str) -> None:
        if not self._storage.forms.delete_form(form_id):
            raise NotFoundError("Form not found")
        removed = self._storage.submissions.delete_for_form(form_id)
        logger.info("Form deleted: %s (%d submissions)", form_id, removed)

    async def get_form(self, form_id: str) -> dict[str, Any]:
        form = self._storage.forms.get_form(form_id)
        if not form:
            raise NotFoundError("Form not found")
        return form_to_wire(form)

    async def list_forms(self, user_id: str) -> list[dict[str, Any]]:
        return [form_metadata(form) for form in self._storage.forms.list_forms(user_id)]

    async def list_public_forms(self) -> list[dict[str, Any]]:
        return [form_metadata(form) for form in self._storage.forms.list_public_forms()]


class LocalSubmissionService:
    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    async def submit_form(self, form_id: str, values: Mapping[str, Any]) -> dict[str, Any]:
        if not self._storage.forms.get_form(form_id):
            raise NotFoundError("Form not found")
        submission = {
            "id": new_ulid(),
            "form_id": form_id,
            "data": dict(values),
            "submitted_at": now_utc(),
        }
        try:
            self._storage.submissions.create_submission(submission)
        except (SQLAlchemyError, OSError) as exc:
            logger.exception("Submission failed: %s", form_id)
            raise SubmissionNetworkError("An error occurred while submitting the form") from exc
        logger.info("Submission stored: %s -> %s", submission["id"], form_id)
        return {"success": True, "message": SUBMIT_OK_MESSAGE}

    async def list_submissions(self, form_id: str) -> list[dict[str, Any]]:
        if not self._storage.forms.get_form(form_id):
            raise NotFoundError("Form not found")
        return [
            submission_to_wire(item)
            for item in self._storage.submissions.list_submissions(form_id)
        ]
