"""Respondent-side submission lifecycle.

    IDLE -> VALIDATING -> INVALID -> IDLE
                       -> SUBMITTING -> SUBMITTED
                                     -> FAILED -> IDLE

``SUBMITTING`` is single-flight and ``SUBMITTED`` is terminal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

from formbuilder.errors import SubmissionNetworkError
from formbuilder.fields import FormField, fields_from_list
from formbuilder.services import FormService, SubmissionService
from formbuilder.snapshot import FormSettings
from formbuilder.validation import FieldError, is_blank, validate

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred while submitting the form"
FORM_ERROR_ID = "form"


class SubmissionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    INVALID = "invalid"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    FAILED = "failed"


class SubmitStatus(str, Enum):
    SUBMITTED = "submitted"
    INVALID = "invalid"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class SubmitResult:
    status: SubmitStatus
    errors: tuple[FieldError, ...] = ()
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is SubmitStatus.SUBMITTED


@dataclass
class SubmissionController:
    form_id: str
    fields: tuple[FormField, ...]
    service: SubmissionService
    settings: FormSettings = field(default_factory=FormSettings)
    values: dict[str, Any] = field(default_factory=dict)
    state: SubmissionState = SubmissionState.IDLE
    errors: list[FieldError] = field(default_factory=list)
    transitions: list[SubmissionState] = field(default_factory=list)

    @classmethod
    async def for_form(
        cls, forms: FormService, submissions: SubmissionService, form_id: str
    ) -> SubmissionController:
        """Load the published form and prepare a controller for it.

        Raises ``NotFoundError`` when the form does not exist.
        """
        definition = await forms.get_form(form_id)
        return cls(
            form_id=form_id,
            fields=fields_from_list(definition.get("fields") or []),
            service=submissions,
            settings=FormSettings.from_dict(definition.get("settings")),
        )

    @property
    def submitted(self) -> bool:
        return self.state is SubmissionState.SUBMITTED

    @property
    def completed_fields(self) -> set[str]:
        return {field_id for field_id, value in self.values.items() if not is_blank(value)}

    def _enter(self, state: SubmissionState) -> None:
        self.state = state
        self.transitions.append(state)

    def set_value(self, field_id: str, value: Any) -> None:
        if self.submitted:
            return
        self.values[field_id] = value

    def update_values(self, values: Mapping[str, Any]) -> None:
        for field_id, value in values.items():
            self.set_value(field_id, value)

    def errors_for(self, field_ids: Iterable[str]) -> list[FieldError]:
        wanted = set(field_ids)
        return [error for error in self.errors if error.field_id in wanted]

    async def submit(self) -> SubmitResult:
        if self.state is SubmissionState.SUBMITTING:
            logger.info("Submit ignored, already in flight: %s", self.form_id)
            return SubmitResult(SubmitStatus.REJECTED, message="Submission already in progress")
        if self.submitted:
            return SubmitResult(SubmitStatus.REJECTED, message="Form already submitted")

        self._enter(SubmissionState.VALIDATING)
        errors = validate(self.fields, self.values)
        if errors:
            self.errors = errors
            self._enter(SubmissionState.INVALID)
            self._enter(SubmissionState.IDLE)
            return SubmitResult(SubmitStatus.INVALID, tuple(errors))

        self.errors = []
        self._enter(SubmissionState.SUBMITTING)
        try:
            response = await self.service.submit_form(self.form_id, dict(self.values))
            if not response.get("success"):
                raise SubmissionNetworkError(str(response.get("message") or GENERIC_ERROR))
        except Exception:
            logger.exception("Submission failed: %s", self.form_id)
            self.errors = [FieldError(FORM_ERROR_ID, GENERIC_ERROR)]
            self._enter(SubmissionState.FAILED)
            self._enter(SubmissionState.IDLE)
            return SubmitResult(SubmitStatus.FAILED, tuple(self.errors), GENERIC_ERROR)
        except BaseException:
            self._enter(SubmissionState.IDLE)
            raise

        self._enter(SubmissionState.SUBMITTED)
        return SubmitResult(SubmitStatus.SUBMITTED, message=self.settings.success_message)
