from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping

from formbuilder.snapshot import Snapshot

logger = logging.getLogger(__name__)


class EditHistory:
    """Linear undo/redo stack of snapshots.

    ``snapshots[cursor]`` is always the live state. Committing while the cursor
    is behind the newest entry drops the redo tail; there is no branching.
    """

    def __init__(self, initial: Snapshot | None = None) -> None:
        self._snapshots: list[Snapshot] = [initial or Snapshot()]
        self._cursor = 0
        self._restoring = False

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def snapshots(self) -> tuple[Snapshot, ...]:
        return tuple(self._snapshots)

    @property
    def current(self) -> Snapshot:
        return self._snapshots[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    @property
    def restoring(self) -> bool:
        return self._restoring

    def __len__(self) -> int:
        return len(self._snapshots)

    def commit(self, snapshot: Snapshot) -> bool:
        """Record ``snapshot`` as the new live state. Returns False when suppressed."""
        if self._restoring:
            logger.debug("commit suppressed during history restoration")
            return False
        del self._snapshots[self._cursor + 1 :]
        self._snapshots.append(snapshot)
        self._cursor = len(self._snapshots) - 1
        return True

    def undo(self) -> Snapshot | None:
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._snapshots[self._cursor]

    def redo(self) -> Snapshot | None:
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._snapshots[self._cursor]

    @contextmanager
    def restoring_state(self) -> Iterator[None]:
        """Hold the re-entrancy guard while a caller applies a restored snapshot."""
        self._restoring = True
        try:
            yield
        finally:
            self._restoring = False

    def reset(self, snapshot: Snapshot) -> None:
        self._snapshots = [snapshot]
        self._cursor = 0

    def to_record(self) -> dict[str, Any]:
        return {
            "history": [snapshot.to_dict() for snapshot in self._snapshots],
            "currentHistoryIndex": self._cursor,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> EditHistory:
        raw_history = record.get("history") or []
        snapshots = [Snapshot.from_dict(item) for item in raw_history]
        if not snapshots:
            return cls(Snapshot.from_dict(record))
        history = cls()
        history._snapshots = snapshots
        cursor = int(record.get("currentHistoryIndex", len(snapshots) - 1))
        history._cursor = min(max(cursor, 0), len(snapshots) - 1)
        return history
