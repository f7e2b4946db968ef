"""
Synchronization between the in-memory board and the durable key-value store.

The whole collection is written as one JSON snapshot under a fixed key after
every mutation and read back once at startup. Snapshots carry no version tag,
so older shapes are not migrated; anything that does not decode cleanly is
discarded and the board starts empty.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .kvstore import KeyValueStore, StoreReadError, StoreWriteError
from .models import TaskEntity
from .schemas import TaskRecord

logger = logging.getLogger(__name__)

STORAGE_KEY = "notion-kanban-tasks"

_SNAPSHOT = TypeAdapter(List[TaskRecord])


@dataclass(frozen=True)
class DecodeResult:
    """
    Outcome of decoding a snapshot. On failure `tasks` is empty and `error`
    describes the first problem found.
    """
    ok: bool
    tasks: List[TaskEntity] = field(default_factory=list)
    error: Optional[str] = None


# PUBLIC_INTERFACE
def encode_snapshot(tasks: Sequence[TaskEntity]) -> str:
    """Serialize the collection, in order, to the persisted JSON form."""
    records = [TaskRecord.from_entity(t) for t in tasks]
    return _SNAPSHOT.dump_json(records, by_alias=True).decode("utf-8")


# PUBLIC_INTERFACE
def decode_snapshot(raw: str) -> DecodeResult:
    """
    Validate a persisted snapshot and rebuild the task collection.

    Fails on malformed JSON, a top-level value that is not a list, any record
    with a missing or mistyped field or an unknown status, and on duplicate
    ids. Never raises.
    """
    try:
        records = _SNAPSHOT.validate_json(raw)
    except ValidationError as e:
        return DecodeResult(ok=False, error=str(e))

    tasks: List[TaskEntity] = []
    seen = set()
    for record in records:
        if record.id in seen:
            return DecodeResult(ok=False, error=f"duplicate task id {record.id!r}")
        seen.add(record.id)
        tasks.append(record.to_entity())
    return DecodeResult(ok=True, tasks=tasks)


class PersistenceBridge:
    """
    Reads the board snapshot at startup and writes it back after each change.
    """

    def __init__(self, store: KeyValueStore, key: str = STORAGE_KEY) -> None:
        self._store = store
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> List[TaskEntity]:
        """
        Return the stored collection, or an empty one when nothing is stored
        or the stored value is unusable.
        """
        try:
            raw = self._store.get(self._key)
        except StoreReadError:
            logger.exception("Error reading saved board under %r, starting empty", self._key)
            return []
        if raw is None:
            logger.info("No saved board under %r; starting empty", self._key)
            return []

        result = decode_snapshot(raw)
        if not result.ok:
            logger.error("Error loading tasks from %r, starting empty: %s", self._key, result.error)
            return []

        logger.info("Loaded %d task(s) from %r", len(result.tasks), self._key)
        return result.tasks

    def persist(self, tasks: Sequence[TaskEntity]) -> None:
        """
        Overwrite the stored snapshot with the full collection. A failed write
        is logged and the in-memory board stays authoritative.
        """
        try:
            self._store.set(self._key, encode_snapshot(tasks))
        except (PydanticSerializationError, StoreWriteError):
            logger.exception("Failed to persist %d task(s) to %r", len(tasks), self._key)
            return
        logger.debug("Persisted %d task(s) to %r", len(tasks), self._key)
