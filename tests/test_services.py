"""Tests for the storage-backed form and submission services."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from formbuilder.errors import FieldDefinitionError, InvalidFormError, NotFoundError
from formbuilder.repo_json import JSONStorage
from formbuilder.services import LocalFormService, LocalSubmissionService

FIELDS = [
    {"id": "name", "type": "text", "label": "Name", "required": True},
    {"id": "topics", "type": "checkbox", "label": "Topics", "checkboxOptions": ["a", "b"]},
]


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def forms(storage) -> LocalFormService:
    return LocalFormService(storage)


@pytest.fixture
def submissions(storage) -> LocalSubmissionService:
    return LocalSubmissionService(storage)


@pytest.fixture
def form_id(forms) -> str:
    result = run(
        forms.create_form(
            {"formId": "contact", "userId": "u1", "title": "Contact", "fields": FIELDS}
        )
    )
    return result["formId"]


class TestForms:
    def test_create_returns_wire_form(self, forms) -> None:
        result = run(forms.create_form({"userId": "u1", "title": " Survey ", "fields": FIELDS}))
        assert result["success"] is True
        form = result["form"]
        assert form["formId"] == result["formId"]
        assert form["title"] == "Survey"
        assert form["fields"][1]["checkboxOptions"] == ["a", "b"]
        assert form["settings"]["submitButtonText"] == "Submit"
        assert form["isPublic"] is True

    def test_user_id_is_required(self, forms) -> None:
        with pytest.raises(InvalidFormError, match="User ID"):
            run(forms.create_form({"title": "x"}))

    def test_duplicate_form_id_is_rejected(self, forms, form_id) -> None:
        with pytest.raises(InvalidFormError, match="already exists"):
            run(forms.create_form({"formId": form_id, "userId": "u2", "title": "Again"}))

    def test_bad_field_definitions_are_rejected(self, forms) -> None:
        with pytest.raises(FieldDefinitionError):
            run(
                forms.create_form(
                    {"userId": "u1", "title": "x", "fields": [{"type": "slider", "id": "s"}]}
                )
            )

    def test_update(self, forms, form_id) -> None:
        form = run(forms.update_form(form_id, {"title": "Reach us", "isPublic": False}))
        assert form["title"] == "Reach us"
        assert form["isPublic"] is False
        assert form["fields"] == run(forms.get_form(form_id))["fields"]

    def test_update_unknown_form(self, forms) -> None:
        with pytest.raises(NotFoundError):
            run(forms.update_form("missing", {"title": "x"}))

    def test_listing(self, forms, form_id) -> None:
        run(forms.create_form({"userId": "u2", "title": "Private", "isPublic": False}))
        mine = run(forms.list_forms("u1"))
        assert [item["formId"] for item in mine] == [form_id]
        assert set(mine[0]) == {"formId", "title", "description", "createdAt", "updatedAt"}
        public = run(forms.list_public_forms())
        assert [item["title"] for item in public] == ["Contact"]

    def test_delete_cascades_to_submissions(self, forms, submissions, storage, form_id) -> None:
        run(submissions.submit_form(form_id, {"name": "Ada"}))
        run(forms.delete_form(form_id))
        with pytest.raises(NotFoundError):
            run(forms.get_form(form_id))
        assert storage.submissions.list_submissions(form_id) == []

    def test_delete_unknown_form(self, forms) -> None:
        with pytest.raises(NotFoundError):
            run(forms.delete_form("missing"))


class TestSubmissions:
    def test_submit_stores_values(self, submissions, form_id) -> None:
        result = run(submissions.submit_form(form_id, {"name": "Ada", "topics": ["a"]}))
        assert result == {"success": True, "message": "Form submitted successfully"}
        (stored,) = run(submissions.list_submissions(form_id))
        assert set(stored) == {"formId", "data", "submittedAt"}
        assert stored["formId"] == form_id
        assert stored["data"] == {"name": "Ada", "topics": ["a"]}

    def test_submit_to_unknown_form(self, submissions) -> None:
        with pytest.raises(NotFoundError):
            run(submissions.submit_form("missing", {}))

    def test_newest_first(self, storage, submissions, form_id) -> None:
        base = datetime(2024, 5, 1, tzinfo=timezone.utc)
        for index in range(3):
            storage.submissions.create_submission(
                {
                    "id": f"s{index}",
                    "form_id": form_id,
                    "data": {"n": index},
                    "submitted_at": base + timedelta(minutes=index),
                }
            )
        listed = run(submissions.list_submissions(form_id))
        assert [item["data"]["n"] for item in listed] == [2, 1, 0]


def test_public_listing_needs_a_true_flag(tmp_path) -> None:
    storage = JSONStorage(tmp_path / "jsonstore.json")
    stamp = datetime(2024, 5, 1, tzinfo=timezone.utc)
    for form_id, flag in [("yes", True), ("text", "false"), ("no", False)]:
        storage.forms.create_form(
            {
                "form_id": form_id,
                "user_id": "u1",
                "title": form_id,
                "is_public": flag,
                "created_at": stamp,
                "updated_at": stamp,
            }
        )
    assert [form["form_id"] for form in storage.forms.list_public_forms()] == ["yes"]
