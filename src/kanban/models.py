from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, Tuple, TypedDict


# PUBLIC_INTERFACE
class TaskStatus(str, Enum):
    """Lifecycle stage of a task. The set is closed."""

    TODO = "todo"
    INPROGRESS = "inprogress"
    DONE = "done"


# PUBLIC_INTERFACE
class InvalidStatus(ValueError):
    """Raised when an open string does not name one of the three stages."""

    def __init__(self, value: object) -> None:
        self.value = value
        allowed = ", ".join(s.value for s in TaskStatus)
        super().__init__(f"Invalid status {value!r}; expected one of: {allowed}")


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    In-memory representation of a task on the board.

    Fields:
    - id: Opaque unique identifier, fixed at creation
    - title: Free-form title, may be empty
    - description: Free-form description, empty string when unset
    - status: Current lifecycle stage
    - created_at: Timezone-aware creation timestamp, never modified
    """

    id: str
    title: str
    description: str
    status: TaskStatus
    created_at: datetime


_NEXT_STATUS: Dict[TaskStatus, TaskStatus] = {
    TaskStatus.TODO: TaskStatus.INPROGRESS,
    TaskStatus.INPROGRESS: TaskStatus.DONE,
    TaskStatus.DONE: TaskStatus.TODO,
}

# Board order with display labels; not persisted.
COLUMNS: Tuple[Tuple[TaskStatus, str], ...] = (
    (TaskStatus.TODO, "📋 To Do"),
    (TaskStatus.INPROGRESS, "⚡ In Progress"),
    (TaskStatus.DONE, "✅ Done"),
)

UNTITLED = "Untitled"


# PUBLIC_INTERFACE
def next_status(status: TaskStatus) -> TaskStatus:
    """Return the cyclic successor: todo -> inprogress -> done -> todo."""
    return _NEXT_STATUS[status]


# PUBLIC_INTERFACE
def parse_status(value: object) -> TaskStatus:
    """
    Convert a raw token into a TaskStatus.

    Raises:
        InvalidStatus: if the value is not one of the known tokens.
    """
    if isinstance(value, TaskStatus):
        return value
    if isinstance(value, str):
        try:
            return TaskStatus(value)
        except ValueError:
            pass
    raise InvalidStatus(value)


def display_title(task: TaskEntity) -> str:
    return task["title"] or UNTITLED
