"""Shared test fixtures and configuration.

Provides a fixed clock, in-memory storage and ready-made task stores so tests
never touch the real data or log directories.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from taskdeck.adapters import InMemoryKeyValueStore, TaskStorageAdapter
from taskdeck.adapters.task_storage import TASKS_STORAGE_KEY
from taskdeck.services import TaskStore
from taskdeck.utils.id_generator import MonotonicIdGenerator

FIXED_NOW = datetime(2025, 3, 14, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class CountingIds(MonotonicIdGenerator):
    """Id generator with a deterministic clock starting at 100."""

    def __init__(self):
        counter = iter(range(100, 1_000_000))
        super().__init__(clock=lambda: next(counter))


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path_factory):
    """Keep the file logger out of the real user log directory."""
    log_dir = tmp_path_factory.mktemp("logs")
    with patch("taskdeck.utils.logger.user_log_dir", return_value=str(log_dir)):
        yield log_dir


# ---------------------------------------------------------------------------
# Storage and store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def kv_store():
    """Empty collection already persisted, so no seed data is loaded."""
    return InMemoryKeyValueStore({TASKS_STORAGE_KEY: "[]"})


@pytest.fixture()
def adapter(kv_store):
    return TaskStorageAdapter(kv_store)


@pytest.fixture()
def store(adapter, clock):
    """TaskStore over an empty in-memory collection with a fixed clock."""
    return TaskStore(adapter, id_generator=CountingIds(), clock=clock)


@pytest.fixture()
def make_store(clock):
    """Factory building a TaskStore preloaded with the given tasks.

    Returns ``(store, kv_store)`` so tests can inspect the persisted payload.
    """
    from taskdeck.adapters.task_storage import encode_tasks

    def _make(tasks=(), kv=None):
        kv = kv if kv is not None else InMemoryKeyValueStore()
        kv.set(TASKS_STORAGE_KEY, encode_tasks(list(tasks)))
        task_store = TaskStore(
            TaskStorageAdapter(kv), id_generator=CountingIds(), clock=clock
        )
        return task_store, kv

    return _make


@pytest.fixture()
def task_factory():
    """Build Task objects with sensible defaults."""
    from taskdeck.models import Task

    def _task(task_id: int, **fields) -> Task:
        fields.setdefault("title", f"Task {task_id}")
        fields.setdefault("order", task_id - 1)
        fields.setdefault("created_at", FIXED_NOW - timedelta(days=10))
        fields.setdefault("updated_at", FIXED_NOW - timedelta(days=10))
        return Task(id=task_id, **fields)

    return _task


@pytest.fixture()
def services(tmp_path, make_store, task_factory):
    """AppServices holding two tasks, passed to commands via ``obj=``."""
    from taskdeck.services import AppServices, ConfigService
    from taskdeck.services.theme_service import ThemeService

    store, kv = make_store(
        [
            task_factory(1, title="Write report", priority="high", tags=["work"]),
            task_factory(2, title="Buy milk", priority="low", completed=True),
        ]
    )
    return AppServices(
        config_service=ConfigService(tmp_path / "config"),
        kv_store=kv,
        task_store=store,
        theme_service=ThemeService(kv),
    )
