import os
from datetime import datetime, timedelta, timezone

import pytest

# Default to the memory backend so importing the app never touches the filesystem
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from src.kanban.kvstore import InMemoryKeyValueStore  # noqa: E402
from src.kanban.persistence import PersistenceBridge  # noqa: E402
from src.kanban.repositories import TaskStore  # noqa: E402


class FakeClock:
    """
    Deterministic clock: ids are 't1', 't2', ... and each call to now()
    advances one second from a fixed start.
    """

    def __init__(self, start: datetime = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)) -> None:
        self._now = start
        self._ids = 0

    def now(self) -> datetime:
        current = self._now
        self._now += timedelta(seconds=1)
        return current

    def new_id(self) -> str:
        self._ids += 1
        return f"t{self._ids}"


class RecordingBridge(PersistenceBridge):
    """PersistenceBridge that also keeps every collection it was asked to persist."""

    def __init__(self, store) -> None:
        super().__init__(store)
        self.writes = []

    def persist(self, tasks) -> None:
        self.writes.append(list(tasks))
        super().persist(tasks)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture()
def bridge(kv) -> RecordingBridge:
    return RecordingBridge(kv)


@pytest.fixture()
def store(bridge, clock) -> TaskStore:
    return TaskStore(bridge.load(), clock=clock, on_change=bridge.persist)
