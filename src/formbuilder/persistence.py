from __future__ import annotations

import copy
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Protocol

from filelock import FileLock, Timeout
from tinydb import Query, TinyDB

from formbuilder.errors import PersistenceError


class PersistenceAdapter(Protocol):
    def load(self, key: str) -> dict[str, Any] | None: ...

    def save(self, key: str, blob: dict[str, Any]) -> None: ...


class MemorySessionStore:
    def __init__(self) -> None:
        self._blobs: dict[str, dict[str, Any]] = {}

    def load(self, key: str) -> dict[str, Any] | None:
        blob = self._blobs.get(key)
        return copy.deepcopy(blob) if blob is not None else None

    def save(self, key: str, blob: dict[str, Any]) -> None:
        self._blobs[key] = copy.deepcopy(blob)

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._blobs)


class TinyDBSessionStore:
    """Session records in a TinyDB JSON file, one document per key."""

    def __init__(self, path: Path, lock_timeout: float = 10.0) -> None:
        self._path = path
        self._lock = FileLock(f"{path}.lock", timeout=lock_timeout)

    @contextmanager
    def _db(self) -> Iterable[TinyDB]:
        try:
            with self._lock:
                db = TinyDB(self._path)
                try:
                    yield db
                finally:
                    db.close()
        except Timeout as exc:
            raise PersistenceError(f"session store is locked: {self._path}") from exc
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"session store failed: {exc}") from exc

    def load(self, key: str) -> dict[str, Any] | None:
        with self._db() as db:
            item = db.table("sessions").get(Query().key == key)
        if not item:
            return None
        return dict(item.get("blob") or {})

    def save(self, key: str, blob: dict[str, Any]) -> None:
        with self._db() as db:
            db.table("sessions").upsert({"key": key, "blob": blob}, Query().key == key)

    def delete(self, key: str) -> None:
        with self._db() as db:
            db.table("sessions").remove(Query().key == key)

    def keys(self) -> list[str]:
        with self._db() as db:
            items = db.table("sessions").all()
        return sorted(item["key"] for item in items)
