from __future__ import annotations

from collections import Counter
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional

from .clock import Clock, SystemClock
from .models import COLUMNS, TaskEntity, TaskStatus, next_status
from .schemas import TaskUpdate

ChangeListener = Callable[[List[TaskEntity]], None]


# PUBLIC_INTERFACE
class TaskStore:
    """
    Authoritative in-memory task collection.

    Tasks are kept in insertion order; updates never reorder them. After each
    mutation that touched a task, the full collection is handed to the
    change listener while the lock is still held, so writes reach the
    listener in mutation order.
    """

    def __init__(
        self,
        tasks: Optional[Iterable[TaskEntity]] = None,
        *,
        clock: Optional[Clock] = None,
        on_change: Optional[ChangeListener] = None,
    ) -> None:
        self._lock = RLock()
        self._clock: Clock = clock or SystemClock()
        self._on_change = on_change
        # dicts preserve insertion order, which is the board order
        self._items: Dict[str, TaskEntity] = {}
        for task in tasks or ():
            self._items[task["id"]] = task.copy()

    def _snapshot(self) -> List[TaskEntity]:
        return [t.copy() for t in self._items.values()]

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self._snapshot())

    def _allocate_id(self) -> str:
        new_id = self._clock.new_id()
        while new_id in self._items:
            new_id = self._clock.new_id()
        return new_id

    # ---- mutations ----

    def create(self, title: str, description: str, status: TaskStatus) -> TaskEntity:
        """Append a new task and return it."""
        with self._lock:
            entity: TaskEntity = {
                "id": self._allocate_id(),
                "title": title,
                "description": description,
                "status": status,
                "created_at": self._clock.now(),
            }
            self._items[entity["id"]] = entity
            self._changed()
            return entity.copy()

    def update(self, task_id: str, data: TaskUpdate) -> Optional[TaskEntity]:
        """
        Apply the provided fields to a task. Returns the updated task, or None
        (without notifying) when no task has that id.
        """
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None

            updated = existing.copy()
            if data.title is not None:
                updated["title"] = data.title
            if data.description is not None:
                updated["description"] = data.description
            if data.status is not None:
                updated["status"] = data.status

            self._items[task_id] = updated
            self._changed()
            return updated.copy()

    def delete(self, task_id: str) -> bool:
        """Remove a task. Returns False when it was already gone."""
        with self._lock:
            if self._items.pop(task_id, None) is None:
                return False
            self._changed()
            return True

    def advance_status(self, task_id: str) -> Optional[TaskEntity]:
        """Move a task one column forward, wrapping done back to todo."""
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None
            return self.update(task_id, TaskUpdate(status=next_status(existing["status"])))

    # ---- queries ----

    def get(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()

    def list(self) -> List[TaskEntity]:
        with self._lock:
            return self._snapshot()

    def tasks_by_status(self, status: TaskStatus) -> List[TaskEntity]:
        with self._lock:
            return [t.copy() for t in self._items.values() if t["status"] == status]

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def column_counts(self) -> Dict[TaskStatus, int]:
        """Number of tasks per column, including empty columns."""
        with self._lock:
            counts = Counter(t["status"] for t in self._items.values())
        return {status: counts.get(status, 0) for status, _label in COLUMNS}
