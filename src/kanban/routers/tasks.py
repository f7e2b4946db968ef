from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ..board import get_task_store
from ..models import COLUMNS, InvalidStatus, parse_status
from ..repositories import TaskStore
from ..schemas import BoardOut, ColumnOut, TaskCreate, TaskOut, TaskUpdate

router = APIRouter(
    prefix="/api/v1",
    tags=["tasks"],
)


def _get_store(store: TaskStore = Depends(get_task_store)) -> TaskStore:
    """
    Dependency wrapper for the task store to keep signatures clean.
    """
    return store


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


# PUBLIC_INTERFACE
@router.get(
    "/board",
    response_model=BoardOut,
    summary="Board",
    description="All columns in display order, each with its label, task count and tasks.",
)
def get_board(store: TaskStore = Depends(_get_store)) -> BoardOut:
    """
    Render the board column by column.
    """
    columns = []
    for column_status, label in COLUMNS:
        tasks = store.tasks_by_status(column_status)
        columns.append(
            ColumnOut(
                status=column_status,
                label=label,
                count=len(tasks),
                tasks=[TaskOut.from_entity(t) for t in tasks],
            )
        )
    return BoardOut(columns=columns, total=sum(c.count for c in columns))


# PUBLIC_INTERFACE
@router.get(
    "/tasks",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="List tasks in board order, optionally restricted to one column.",
    responses={422: {"description": "Unknown status"}},
)
def list_tasks(
    status_filter: Optional[str] = Query(None, alias="status", description="todo, inprogress or done"),
    store: TaskStore = Depends(_get_store),
) -> List[TaskOut]:
    """
    List tasks, all or by status.
    """
    if status_filter is None:
        items = store.list()
    else:
        try:
            column_status = parse_status(status_filter)
        except InvalidStatus as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        items = store.tasks_by_status(column_status)
    return [TaskOut.from_entity(t) for t in items]


# PUBLIC_INTERFACE
@router.post(
    "/tasks",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Add a task to the end of the given column.",
)
def create_task(payload: TaskCreate, store: TaskStore = Depends(_get_store)) -> TaskOut:
    created = store.create(payload.title, payload.description, payload.status)
    return TaskOut.from_entity(created)


# PUBLIC_INTERFACE
@router.get(
    "/tasks/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    responses={404: {"description": "Task not found"}},
)
def get_task(task_id: str, store: TaskStore = Depends(_get_store)) -> TaskOut:
    item = store.get(task_id)
    if item is None:
        raise _not_found()
    return TaskOut.from_entity(item)


# PUBLIC_INTERFACE
@router.patch(
    "/tasks/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Partially update title, description or status of a task.",
    responses={404: {"description": "Task not found"}},
)
def patch_task(task_id: str, payload: TaskUpdate, store: TaskStore = Depends(_get_store)) -> TaskOut:
    updated = store.update(task_id, payload)
    if updated is None:
        raise _not_found()
    return TaskOut.from_entity(updated)


# PUBLIC_INTERFACE
@router.post(
    "/tasks/{task_id}/advance",
    response_model=TaskOut,
    summary="Advance Task",
    description="Move a task to the next column: todo, inprogress, done, then back to todo.",
    responses={404: {"description": "Task not found"}},
)
def advance_task(task_id: str, store: TaskStore = Depends(_get_store)) -> TaskOut:
    updated = store.advance_status(task_id)
    if updated is None:
        raise _not_found()
    return TaskOut.from_entity(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    description="Delete a task. Deleting an unknown or already deleted task also returns 204.",
)
def delete_task(task_id: str, store: TaskStore = Depends(_get_store)) -> Response:
    store.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
