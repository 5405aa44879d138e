from formbuilder.errors import (
    FieldDefinitionError,
    FormBuilderError,
    InvalidFormError,
    NotFoundError,
    PersistenceError,
    SubmissionNetworkError,
)
from formbuilder.history import EditHistory
from formbuilder.session import EditorSession, session_key
from formbuilder.snapshot import FormSettings, Snapshot
from formbuilder.submission import SubmissionController, SubmissionState, SubmitStatus
from formbuilder.validation import FieldError, validate

__all__ = [
    "EditHistory",
    "EditorSession",
    "FieldDefinitionError",
    "FieldError",
    "FormBuilderError",
    "FormSettings",
    "InvalidFormError",
    "NotFoundError",
    "PersistenceError",
    "Snapshot",
    "SubmissionController",
    "SubmissionNetworkError",
    "SubmissionState",
    "SubmitStatus",
    "session_key",
    "validate",
]
