from __future__ import annotations


class FormBuilderError(Exception):
    """Base class for every error raised by formbuilder."""


class FieldDefinitionError(FormBuilderError, ValueError):
    """A field definition is malformed or carries attributes of another field type."""


class PersistenceError(FormBuilderError):
    """The session store could not load or save a session record."""


class SubmissionNetworkError(FormBuilderError):
    """The submission service could not accept a submission."""


class NotFoundError(FormBuilderError, KeyError):
    """A form (or its responses) does not exist."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "not found"


class InvalidFormError(FormBuilderError, ValueError):
    """A form definition or patch was rejected."""
