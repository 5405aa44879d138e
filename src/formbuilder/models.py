from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class FormModel(Base):
    __tablename__ = "forms"

    form_id = Column(String, primary_key=True)
    user_id = Column(String, index=True)
    title = Column(String)
    description = Column(Text)
    fields_json = Column(Text)
    settings_json = Column(Text)
    is_public = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True))


class SubmissionModel(Base):
    __tablename__ = "form_submissions"

    id = Column(String, primary_key=True)
    form_id = Column(String, index=True)
    data_json = Column(Text)
    submitted_at = Column(DateTime(timezone=True), index=True)
