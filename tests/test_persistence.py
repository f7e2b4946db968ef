import json
import logging

import pytest

from src.kanban.board import open_board
from src.kanban.kvstore import InMemoryKeyValueStore, KeyValueStore, StoreReadError, StoreWriteError
from src.kanban.models import TaskStatus
from src.kanban.persistence import STORAGE_KEY, PersistenceBridge, decode_snapshot, encode_snapshot


def make_tasks(clock, n):
    statuses = list(TaskStatus)
    return [
        {
            "id": clock.new_id(),
            "title": f"Task {i}",
            "description": "" if i % 2 else f"Details {i}",
            "status": statuses[i % 3],
            "created_at": clock.now(),
        }
        for i in range(n)
    ]


class FailingStore(KeyValueStore):
    name = "failing"

    def get(self, key):
        return None

    def set(self, key, value):
        raise StoreWriteError("disk full")


class TestRoundTrip:
    @pytest.mark.parametrize("n", [0, 1, 7])
    def test_load_after_persist_reproduces_collection(self, kv, clock, n):
        tasks = make_tasks(clock, n)
        bridge = PersistenceBridge(kv)
        bridge.persist(tasks)
        assert bridge.load() == tasks

    def test_snapshot_shape(self, clock):
        tasks = make_tasks(clock, 1)
        data = json.loads(encode_snapshot(tasks))
        assert isinstance(data, list)
        assert set(data[0]) == {"id", "title", "description", "status", "createdAt"}
        assert data[0]["status"] == "todo"
        assert data[0]["createdAt"].startswith("2024-01-01T09:00:00")

    def test_accepts_javascript_style_timestamps(self):
        raw = json.dumps([
            {
                "id": "1700000000000",
                "title": "From the browser",
                "description": "",
                "status": "inprogress",
                "createdAt": "2023-11-14T22:13:20.000Z",
            }
        ])
        result = decode_snapshot(raw)
        assert result.ok
        task = result.tasks[0]
        assert task["status"] is TaskStatus.INPROGRESS
        assert task["created_at"].year == 2023
        assert task["created_at"].utcoffset().total_seconds() == 0

    def test_persist_overwrites_previous_snapshot(self, kv, clock):
        bridge = PersistenceBridge(kv)
        bridge.persist(make_tasks(clock, 3))
        bridge.persist([])
        assert json.loads(kv.get(STORAGE_KEY)) == []


class TestLoadRecovery:
    def test_absent_key_is_empty_board(self, kv):
        assert PersistenceBridge(kv).load() == []

    @pytest.mark.parametrize(
        "raw",
        [
            "not json at all",
            "42",
            '"a string"',
            '{"id": "1"}',
            '[{"id": "1", "title": "t", "description": "", "createdAt": "2024-01-01T00:00:00Z"}]',
            '[{"id": 1, "title": "t", "description": "", "status": "todo", "createdAt": "2024-01-01T00:00:00Z"}]',
            '[{"id": "1", "title": "t", "description": "", "status": "doing", "createdAt": "2024-01-01T00:00:00Z"}]',
            '[{"id": "1", "title": "t", "description": "", "status": "todo", "createdAt": "yesterday"}]',
            '[{"id": "1", "title": null, "description": "", "status": "todo", "createdAt": "2024-01-01T00:00:00Z"}]',
            '[42]',
        ],
    )
    def test_corrupt_snapshot_yields_empty_board(self, raw, caplog):
        kv = InMemoryKeyValueStore({STORAGE_KEY: raw})
        with caplog.at_level(logging.ERROR):
            assert PersistenceBridge(kv).load() == []
        assert any("Error loading tasks" in r.getMessage() for r in caplog.records)

    def test_duplicate_ids_are_rejected(self):
        record = {"id": "1", "title": "t", "description": "", "status": "todo", "createdAt": "2024-01-01T00:00:00Z"}
        result = decode_snapshot(json.dumps([record, record]))
        assert not result.ok
        assert result.tasks == []
        assert "duplicate" in result.error

    def test_valid_snapshot_decodes_without_error(self, clock):
        result = decode_snapshot(encode_snapshot(make_tasks(clock, 2)))
        assert result.ok
        assert result.error is None
        assert len(result.tasks) == 2


class TestWriteFailure:
    def test_write_failure_is_logged_and_swallowed(self, clock, caplog):
        bridge = PersistenceBridge(FailingStore())
        with caplog.at_level(logging.ERROR):
            bridge.persist(make_tasks(clock, 1))
        assert any("Failed to persist" in r.getMessage() for r in caplog.records)

    def test_board_keeps_working_when_store_rejects_writes(self, clock):
        store = open_board(FailingStore(), clock=clock)
        task = store.create("Still here", "", TaskStatus.TODO)
        assert store.get(task["id"])["title"] == "Still here"

    def test_unencodable_text_is_logged_and_board_keeps_working(self, kv, clock, caplog):
        store = open_board(kv, clock=clock)
        with caplog.at_level(logging.ERROR):
            bad = store.create("bad \ud800", "", TaskStatus.TODO)
        assert any("Failed to persist" in r.getMessage() for r in caplog.records)
        assert kv.get(STORAGE_KEY) is None

        store.delete(bad["id"])
        store.create("Good", "", TaskStatus.TODO)
        assert [t["title"] for t in json.loads(kv.get(STORAGE_KEY))] == ["Good"]

    def test_read_failure_starts_empty(self, caplog):
        class UnreadableStore(FailingStore):
            def get(self, key):
                raise StoreReadError("file is not a database")

        with caplog.at_level(logging.ERROR):
            assert PersistenceBridge(UnreadableStore()).load() == []
        assert any("starting empty" in r.getMessage() for r in caplog.records)


class TestOpenBoard:
    def test_reopened_board_sees_previous_session(self, kv, clock):
        first = open_board(kv, clock=clock)
        a = first.create("A", "", TaskStatus.TODO)
        b = first.create("B", "", TaskStatus.TODO)
        first.advance_status(b["id"])
        first.delete(a["id"])

        second = open_board(kv, clock=clock)
        remaining = second.list()
        assert [t["title"] for t in remaining] == ["B"]
        assert remaining[0]["status"] == TaskStatus.INPROGRESS
        assert remaining == first.list()

    def test_corrupt_store_opens_empty_and_is_overwritten(self, clock):
        kv = InMemoryKeyValueStore({STORAGE_KEY: "{broken"})
        store = open_board(kv, clock=clock)
        assert store.list() == []
        store.create("Fresh", "", TaskStatus.TODO)
        assert json.loads(kv.get(STORAGE_KEY))[0]["title"] == "Fresh"
