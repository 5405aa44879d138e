from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from filelock import FileLock
from tinydb import Query, TinyDB

from formbuilder.errors import NotFoundError
from formbuilder.utils import now_utc, parse_dt, to_iso

_TIMESTAMPS = {"created_at", "updated_at"}


class JSONRepoBase:
    def __init__(self, path: Path, lock: FileLock) -> None:
        self._path = path
        self._lock = lock

    @contextmanager
    def _db(self) -> Iterable[TinyDB]:
        with self._lock:
            db = TinyDB(self._path)
            try:
                yield db
            finally:
                db.close()


class JSONFormRepo(JSONRepoBase):
    def list_forms(self, user_id: str | None = None) -> list[dict[str, Any]]:
        with self._db() as db:
            table = db.table("forms")
            items = table.all() if user_id is None else table.search(Query().user_id == user_id)
        forms = [self._from_record(item) for item in items]
        return sorted(forms, key=lambda x: x["updated_at"], reverse=True)

    def list_public_forms(self) -> list[dict[str, Any]]:
        with self._db() as db:
            items = db.table("forms").search(Query().is_public == True)  # noqa: E712
        forms = [self._from_record(item) for item in items]
        return sorted(forms, key=lambda x: x["updated_at"], reverse=True)

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("forms").get(Query().form_id == form_id)
        return self._from_record(item) if item else None

    def create_form(self, form: dict[str, Any]) -> None:
        record = self._to_record(form)
        with self._db() as db:
            db.table("forms").insert(record)

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        with self._db() as db:
            table = db.table("forms")
            item = table.get(Query().form_id == form_id)
            if not item:
                raise NotFoundError(form_id)
            item.update(self._to_record(updates, partial=True))
            table.update(item, Query().form_id == form_id)
        return self._from_record(item)

    def delete_form(self, form_id: str) -> bool:
        with self._db() as db:
            removed = db.table("forms").remove(Query().form_id == form_id)
        return bool(removed)

    @staticmethod
    def _to_record(form: dict[str, Any], partial: bool = False) -> dict[str, Any]:
        record = dict(form)
        if not partial:
            record.setdefault("created_at", now_utc())
            record.setdefault("updated_at", record["created_at"])
        for key in _TIMESTAMPS & record.keys():
            if isinstance(record[key], datetime):
                record[key] = to_iso(record[key])
        return record

    @staticmethod
    def _from_record(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "form_id": record["form_id"],
            "user_id": record.get("user_id", ""),
            "title": record.get("title", ""),
            "description": record.get("description", ""),
            "fields": record.get("fields", []),
            "settings": record.get("settings", {}),
            "is_public": record.get("is_public", True),
            "created_at": parse_dt(record.get("created_at")),
            "updated_at": parse_dt(record.get("updated_at")),
        }


class JSONSubmissionRepo(JSONRepoBase):
    def list_submissions(self, form_id: str) -> list[dict[str, Any]]:
        with self._db() as db:
            items = db.table("submissions").search(Query().form_id == form_id)
        submissions = [self._from_record(item) for item in items]
        return sorted(submissions, key=lambda x: (x["submitted_at"], x["id"]), reverse=True)

    def create_submission(self, submission: dict[str, Any]) -> None:
        record = self._to_record(submission)
        with self._db() as db:
            db.table("submissions").insert(record)

    def delete_for_form(self, form_id: str) -> int:
        with self._db() as db:
            removed = db.table("submissions").remove(Query().form_id == form_id)
        return len(removed)

    @staticmethod
    def _to_record(submission: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": submission["id"],
            "form_id": submission["form_id"],
            "data": submission["data"],
            "submitted_at": to_iso(submission["submitted_at"]),
        }

    @staticmethod
    def _from_record(record: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": record["id"],
            "form_id": record["form_id"],
            "data": record.get("data", {}),
            "submitted_at": parse_dt(record.get("submitted_at")),
        }


class JSONStorage:
    def __init__(self, path: Path) -> None:
        self._lock = FileLock(f"{path}.lock")
        self.forms = JSONFormRepo(path, self._lock)
        self.submissions = JSONSubmissionRepo(path, self._lock)
