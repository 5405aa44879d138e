from __future__ import annotations

from pathlib import Path
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from formbuilder.errors import NotFoundError
from formbuilder.models import Base, FormModel, SubmissionModel
from formbuilder.utils import dumps_json, loads_json, parse_dt

_JSON_COLUMNS = {"fields": "fields_json", "settings": "settings_json"}


class SQLiteFormRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def list_forms(self, user_id: str | None = None) -> list[dict[str, Any]]:
        with self._Session() as session:
            query = session.query(FormModel)
            if user_id is not None:
                query = query.filter(FormModel.user_id == user_id)
            rows = query.order_by(FormModel.updated_at.desc()).all()
            return [self._to_dict(row) for row in rows]

    def list_public_forms(self) -> list[dict[str, Any]]:
        with self._Session() as session:
            rows = (
                session.query(FormModel)
                .filter(FormModel.is_public.is_(True))
                .order_by(FormModel.updated_at.desc())
                .all()
            )
            return [self._to_dict(row) for row in rows]

    def get_form(self, form_id: str) -> dict[str, Any] | None:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            return self._to_dict(row) if row else None

    def create_form(self, form: dict[str, Any]) -> None:
        with self._Session() as session:
            row = FormModel(
                form_id=form["form_id"],
                user_id=form["user_id"],
                title=form["title"],
                description=form.get("description", ""),
                fields_json=dumps_json(form.get("fields", [])),
                settings_json=dumps_json(form.get("settings", {})),
                is_public=bool(form.get("is_public", True)),
                created_at=form["created_at"],
                updated_at=form["updated_at"],
            )
            session.add(row)
            session.commit()

    def update_form(self, form_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if not row:
                raise NotFoundError(form_id)
            for key, value in updates.items():
                if key in _JSON_COLUMNS:
                    setattr(row, _JSON_COLUMNS[key], dumps_json(value))
                else:
                    setattr(row, key, value)
            session.commit()
            session.refresh(row)
            return self._to_dict(row)

    def delete_form(self, form_id: str) -> bool:
        with self._Session() as session:
            row = session.get(FormModel, form_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            return True

    @staticmethod
    def _to_dict(row: FormModel) -> dict[str, Any]:
        return {
            "form_id": row.form_id,
            "user_id": row.user_id,
            "title": row.title,
            "description": row.description or "",
            "fields": loads_json(row.fields_json) or [],
            "settings": loads_json(row.settings_json) or {},
            "is_public": bool(row.is_public),
            "created_at": parse_dt(row.created_at),
            "updated_at": parse_dt(row.updated_at),
        }


class SQLiteSubmissionRepo:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._Session = session_factory

    def list_submissions(self, form_id: str) -> list[dict[str, Any]]:
        with self._Session() as session:
            rows = (
                session.query(SubmissionModel)
                .filter(SubmissionModel.form_id == form_id)
                .order_by(SubmissionModel.submitted_at.desc(), SubmissionModel.id.desc())
                .all()
            )
            return [self._to_dict(row) for row in rows]

    def create_submission(self, submission: dict[str, Any]) -> None:
        with self._Session() as session:
            row = SubmissionModel(
                id=submission["id"],
                form_id=submission["form_id"],
                data_json=dumps_json(submission["data"]),
                submitted_at=submission["submitted_at"],
            )
            session.add(row)
            session.commit()

    def delete_for_form(self, form_id: str) -> int:
        with self._Session() as session:
            count = (
                session.query(SubmissionModel)
                .filter(SubmissionModel.form_id == form_id)
                .delete()
            )
            session.commit()
            return count

    @staticmethod
    def _to_dict(row: SubmissionModel) -> dict[str, Any]:
        return {
            "id": row.id,
            "form_id": row.form_id,
            "data": loads_json(row.data_json) or {},
            "submitted_at": parse_dt(row.submitted_at),
        }


class SQLiteStorage:
    def __init__(self, db_path: Path) -> None:
        self._engine = create_engine(f"sqlite:///{db_path}", future=True)
        self._Session = sessionmaker(self._engine, expire_on_commit=False)
        Base.metadata.create_all(self._engine)
        self.forms = SQLiteFormRepo(self._Session)
        self.submissions = SQLiteSubmissionRepo(self._Session)
