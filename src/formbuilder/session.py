"""Editor session: the context object that owns one form being edited.

All edits go through an ``EditorSession``. It keeps the live snapshot, commits
each change to its ``EditHistory`` and schedules a debounced save of the whole
record through its ``AutoSaver``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping

from formbuilder.autosave import DEFAULT_DELAY, FRESHNESS_WINDOW, AutoSaver, load_fresh
from formbuilder.config import SESSION_KEY_PREFIX, Settings
from formbuilder.errors import FieldDefinitionError, FormBuilderError
from formbuilder.fields import FormField
from formbuilder.history import EditHistory
from formbuilder.operations import (
    Direction,
    add_field,
    delete_field,
    duplicate_field,
    index_of,
    move_field,
    reorder_steps,
    update_field,
)
from formbuilder.persistence import PersistenceAdapter
from formbuilder.scheduler import AsyncioScheduler, Scheduler
from formbuilder.schema import definition_from_snapshot
from formbuilder.services import FormService
from formbuilder.snapshot import Snapshot
from formbuilder.storage import init_session_store
from formbuilder.utils import new_field_id, now_utc

logger = logging.getLogger(__name__)

Listener = Callable[[Snapshot], None]


def session_key(template_id: str | None = None) -> str:
    return f"{SESSION_KEY_PREFIX}{template_id or 'new-form'}"


class EditorSession:
    def __init__(
        self,
        store: PersistenceAdapter,
        scheduler: Scheduler,
        key: str | None = None,
        initial: Snapshot | None = None,
        history: EditHistory | None = None,
        delay: float = DEFAULT_DELAY,
        clock: Callable[[], datetime] = now_utc,
        id_factory: Callable[[], str] = new_field_id,
    ) -> None:
        self.key = key or session_key()
        self.history = history or EditHistory(initial)
        self._state = self.history.current
        self._id_factory = id_factory
        self._listeners: list[Listener] = []
        self.closed = False
        self.autosaver = AutoSaver(store, self.key, self.to_record, scheduler, delay, clock)

    @classmethod
    def open(
        cls,
        store: PersistenceAdapter,
        scheduler: Scheduler,
        template_id: str | None = None,
        template: Mapping[str, Any] | None = None,
        delay: float = DEFAULT_DELAY,
        clock: Callable[[], datetime] = now_utc,
        max_age: timedelta = FRESHNESS_WINDOW,
        id_factory: Callable[[], str] = new_field_id,
    ) -> EditorSession:
        """Resume the stored session for ``template_id`` if fresh, else start anew.

        A fresh start copies ``template`` (with new field ids) or begins empty.
        """
        key = session_key(template_id)
        options: dict[str, Any] = {"delay": delay, "clock": clock, "id_factory": id_factory}
        blob = load_fresh(store, key, now=clock(), max_age=max_age)
        if blob:
            try:
                history = EditHistory.from_record(blob)
            except (FieldDefinitionError, TypeError, ValueError):
                logger.exception("Stored session is unreadable, starting fresh: %s", key)
            else:
                logger.info("Restored session %s at history index %d", key, history.cursor)
                return cls(store, scheduler, key, history=history, **options)
        initial = Snapshot.from_template(template) if template else Snapshot()
        return cls(store, scheduler, key, initial=initial, **options)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        template_id: str | None = None,
        template: Mapping[str, Any] | None = None,
        scheduler: Scheduler | None = None,
    ) -> EditorSession:
        """``open()`` against the configured TinyDB session store.

        Without an explicit ``scheduler`` this must be called from a running
        event loop; autosave timers are bound to that loop.
        """
        if scheduler is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError as exc:
                raise FormBuilderError(
                    "from_settings() needs a running event loop or an explicit scheduler"
                ) from exc
            scheduler = AsyncioScheduler(loop)
        return cls.open(
            init_session_store(settings),
            scheduler,
            template_id=template_id,
            template=template,
            delay=settings.autosave_delay,
            max_age=timedelta(hours=settings.session_max_age_hours),
        )

    @property
    def snapshot(self) -> Snapshot:
        return self._state

    @property
    def fields(self) -> tuple[FormField, ...]:
        return self._state.fields

    def get_field(self, field_id: str) -> FormField | None:
        index = index_of(self._state.fields, field_id)
        return self._state.fields[index] if index >= 0 else None

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def to_record(self) -> dict[str, Any]:
        record = self._state.to_dict()
        record.update(self.history.to_record())
        return record

    def _ensure_open(self) -> None:
        if self.closed:
            raise FormBuilderError("editor session is closed")

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)

    def commit(self, snapshot: Snapshot) -> bool:
        """Make ``snapshot`` live and record it. Suppressed while undo/redo restores state."""
        self._ensure_open()
        if self.history.restoring:
            logger.debug("commit suppressed during history restoration")
            return False
        self.autosaver.schedule()
        self.history.commit(snapshot)
        self._state = snapshot
        self._notify()
        return True

    def _commit_fields(self, fields: tuple[FormField, ...] | None) -> bool:
        self._ensure_open()
        if fields is None:
            return False
        return self.commit(self._state.evolve(fields=fields))

    def add(self, field_type: str) -> FormField:
        self._ensure_open()
        fields = add_field(self._state.fields, field_type, self._id_factory)
        self._commit_fields(fields)
        return fields[-1]

    def update(self, field_id: str, partial: Mapping[str, Any]) -> bool:
        return self._commit_fields(update_field(self._state.fields, field_id, partial))

    def delete(self, field_id: str) -> bool:
        return self._commit_fields(delete_field(self._state.fields, field_id))

    def move(self, field_id: str, direction: Direction) -> bool:
        return self._commit_fields(move_field(self._state.fields, field_id, direction))

    def duplicate(self, field_id: str) -> FormField | None:
        self._ensure_open()
        fields = duplicate_field(self._state.fields, field_id, self._id_factory)
        if fields is None:
            return None
        self._commit_fields(fields)
        return fields[index_of(fields, field_id) + 1]

    def reorder(self, source_id: str, target_id: str) -> int:
        """Drag ``source_id`` onto ``target_id``. Returns the number of commits made.

        Walks the field one slot at a time; each step is its own history entry.
        """
        self._ensure_open()
        commits = 0
        for direction in list(reorder_steps(self._state.fields, source_id, target_id)):
            if self.move(source_id, direction):
                commits += 1
        return commits

    def update_details(self, name: str | None = None, description: str | None = None) -> bool:
        self._ensure_open()
        changes: dict[str, Any] = {}
        if name is not None:
            changes["form_name"] = name
        if description is not None:
            changes["form_description"] = description
        if not changes:
            return False
        return self.commit(self._state.evolve(**changes))

    def update_settings(self, partial: Mapping[str, Any]) -> bool:
        self._ensure_open()
        return self.commit(self._state.evolve(settings=self._state.settings.merged(partial)))

    def _restore(self, snapshot: Snapshot | None) -> Snapshot | None:
        if snapshot is None:
            return None
        with self.history.restoring_state():
            self._state = snapshot
            self._notify()
        self.autosaver.schedule()
        return snapshot

    def undo(self) -> Snapshot | None:
        self._ensure_open()
        return self._restore(self.history.undo())

    def redo(self) -> Snapshot | None:
        self._ensure_open()
        return self._restore(self.history.redo())

    def load_template(self, template: Mapping[str, Any]) -> Snapshot:
        """Replace the session content with ``template`` and start a new history."""
        self._ensure_open()
        snapshot = Snapshot.from_template(template)
        self.autosaver.schedule()
        self.history.reset(snapshot)
        self._state = snapshot
        self._notify()
        return snapshot

    async def publish(
        self,
        forms: FormService,
        user_id: str,
        form_id: str | None = None,
        is_public: bool = True,
    ) -> str:
        """Save the live snapshot as a form definition and return its form id.

        Creates the form when ``form_id`` is None, otherwise updates it.
        """
        definition = definition_from_snapshot(self._state, user_id, form_id, is_public)
        if form_id:
            await forms.update_form(form_id, definition)
            logger.info("Form updated from session %s: %s", self.key, form_id)
            return form_id
        result = await forms.create_form(definition)
        logger.info("Form created from session %s: %s", self.key, result["formId"])
        return result["formId"]

    def flush(self) -> bool:
        return self.autosaver.flush()

    def close(self) -> None:
        if self.closed:
            return
        self.autosaver.flush()
        self.closed = True
