"""Pytest configuration and shared fixtures."""

import itertools
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from formbuilder.persistence import MemorySessionStore
from formbuilder.repo_json import JSONStorage
from formbuilder.repo_sqlite import SQLiteStorage
from formbuilder.scheduler import VirtualScheduler
from formbuilder.session import EditorSession


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def scheduler() -> VirtualScheduler:
    return VirtualScheduler()


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def id_factory():
    """Deterministic field ids: f1, f2, ..."""
    counter = itertools.count(1)
    return lambda: f"f{next(counter)}"


@pytest.fixture
def session(store, scheduler, clock, id_factory) -> EditorSession:
    return EditorSession(store, scheduler, delay=0.5, clock=clock, id_factory=id_factory)


@pytest.fixture(params=["sqlite", "json"])
def storage(request, tmp_path: Path):
    """Both storage backends, each in a fresh temporary directory."""
    if request.param == "json":
        return JSONStorage(tmp_path / "jsonstore.json")
    return SQLiteStorage(tmp_path / "app.db")
