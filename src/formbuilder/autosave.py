from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable

from formbuilder.errors import PersistenceError
from formbuilder.persistence import PersistenceAdapter
from formbuilder.scheduler import Scheduler, TimerHandle
from formbuilder.utils import now_utc, parse_dt, to_iso

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 0.5
FRESHNESS_WINDOW = timedelta(hours=24)


class AutoSaver:
    """Trailing-debounced writer of one session record.

    Every ``schedule()`` cancels the pending timer and starts a new one, so at
    most one save is pending. ``flush()`` writes immediately.
    """

    def __init__(
        self,
        store: PersistenceAdapter,
        key: str,
        source: Callable[[], dict[str, Any]],
        scheduler: Scheduler,
        delay: float = DEFAULT_DELAY,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.store = store
        self.key = key
        self._source = source
        self._scheduler = scheduler
        self._delay = delay
        self._clock = clock
        self._pending: TimerHandle | None = None
        self.dirty = False
        self.saves = 0
        self.last_saved: datetime | None = None
        self.last_error: PersistenceError | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def schedule(self) -> None:
        self.dirty = True
        self._cancel()
        self._pending = self._scheduler.call_later(self._delay, self._on_timer)

    def flush(self) -> bool:
        self._cancel()
        return self._save()

    def _cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _on_timer(self) -> None:
        self._pending = None
        self._save()

    def _save(self) -> bool:
        saved_at = self._clock()
        blob = dict(self._source())
        blob["lastSaved"] = to_iso(saved_at)
        try:
            self.store.save(self.key, blob)
        except PersistenceError as exc:
            self.last_error = exc
            logger.exception("Session save failed: %s", self.key)
            return False
        self.dirty = False
        self.saves += 1
        self.last_saved = saved_at
        self.last_error = None
        logger.debug("Session saved: %s", self.key)
        return True


def is_fresh(blob: dict[str, Any], now: datetime, max_age: timedelta = FRESHNESS_WINDOW) -> bool:
    saved = blob.get("lastSaved")
    if saved is None:
        return False
    if isinstance(saved, str):
        try:
            datetime.fromisoformat(saved)
        except ValueError:
            return False
    return now - parse_dt(saved) <= max_age


def load_fresh(
    store: PersistenceAdapter,
    key: str,
    now: datetime | None = None,
    max_age: timedelta = FRESHNESS_WINDOW,
) -> dict[str, Any] | None:
    """Return the stored record for ``key`` if it is young enough, else ``None``."""
    try:
        blob = store.load(key)
    except PersistenceError:
        logger.exception("Session load failed: %s", key)
        return None
    if not blob:
        return None
    if not is_fresh(blob, now or now_utc(), max_age):
        logger.info("Discarding stale session: %s", key)
        return None
    return blob
