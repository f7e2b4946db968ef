from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from .models import TaskEntity, TaskStatus, display_title, parse_status


def _status_or_none(v: object) -> Optional[TaskStatus]:
    if v is None:
        return None
    return parse_status(v)


def _require_utf8(v: Optional[str]) -> Optional[str]:
    # Lone surrogates survive JSON decoding but cannot be written back out
    if v is not None:
        try:
            v.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValueError("text must be valid unicode (no lone surrogates)") from e
    return v


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for adding a task to a column.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Write spec",
                "description": "First draft of the board contract",
                "status": "todo",
            }
        }
    )

    title: str = Field(default="", description="Task title; may be empty")
    description: str = Field(default="", description="Optional description")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="Column the task starts in")

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """
        Trim surrounding whitespace, as the add form does.
        """
        return _require_utf8(v).strip()

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: object) -> TaskStatus:
        """
        Accept only todo, inprogress or done.
        """
        return parse_status(v)


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for editing a task.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Write spec (v2)",
                "status": "inprogress",
            }
        }
    )

    title: Optional[str] = Field(default=None, description="New title")
    description: Optional[str] = Field(default=None, description="New description")
    status: Optional[TaskStatus] = Field(default=None, description="New column")

    @field_validator("title", "description")
    @classmethod
    def check_text(cls, v: Optional[str]) -> Optional[str]:
        return _require_utf8(v)

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: object) -> Optional[TaskStatus]:
        return _status_or_none(v)


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task card.
    """

    id: str = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Stored title, possibly empty")
    display_title: str = Field(..., description="Title shown on the card ('Untitled' when empty)")
    description: str = Field(..., description="Task description")
    status: TaskStatus = Field(..., description="Current column")
    created_at: datetime = Field(..., description="Creation timestamp")

    @classmethod
    def from_entity(cls, task: TaskEntity) -> "TaskOut":
        return cls(display_title=display_title(task), **task)


class ColumnOut(BaseModel):
    status: TaskStatus
    label: str
    count: int
    tasks: List[TaskOut]


class BoardOut(BaseModel):
    """
    Full board view: every column in display order plus the total task count.
    """

    columns: List[ColumnOut]
    total: int


# PUBLIC_INTERFACE
class TaskRecord(BaseModel):
    """
    Persisted shape of a single task inside a snapshot.

    Every field is required and strictly typed; `created_at` is stored under
    the `createdAt` key as an ISO8601 string.
    """

    model_config = ConfigDict(strict=True, populate_by_name=True)

    id: StrictStr
    title: StrictStr
    description: StrictStr
    status: TaskStatus
    created_at: datetime = Field(..., alias="createdAt")

    @classmethod
    def from_entity(cls, task: TaskEntity) -> "TaskRecord":
        return cls(**task)

    def to_entity(self) -> TaskEntity:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "created_at": self.created_at,
        }
