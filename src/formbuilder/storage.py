from __future__ import annotations

from typing import Any, Protocol

from formbuilder.config import Settings, ensure_dirs
from formbuilder.persistence import TinyDBSessionStore
from formbuilder.repo_json import JSONStorage
from formbuilder.repo_sqlite import SQLiteStorage


class FormRepository(Protocol):
    def list_forms(self, user_id: str | None = None) -> list[dict[str, Any]]: ...

    def list_public_forms(self) -> list[dict[str, Any]]: ...

    def get_form(self, form_id: str) -> dict[str, Any] | None: ...

    def create_form(self, form: dict[str, Any]) -> None: ...

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]: ...

    def delete_form(self, form_id: str) -> bool: ...


class SubmissionRepository(Protocol):
    def list_submissions(self, form_id: str) -> list[dict[str, Any]]: ...

    def create_submission(self, submission: dict[str, Any]) -> None: ...

    def delete_for_form(self, form_id: str) -> int: ...


class Storage(Protocol):
    forms: FormRepository
    submissions: SubmissionRepository


def init_storage(settings: Settings) -> Storage:
    ensure_dirs(settings)
    if settings.storage_backend == "json":
        return JSONStorage(settings.json_path)
    return SQLiteStorage(settings.sqlite_path)


def init_session_store(settings: Settings) -> TinyDBSessionStore:
    ensure_dirs(settings)
    return TinyDBSessionStore(settings.session_store_path)
