"""
Kanban board package.

The core lives in `repositories` (TaskStore) and `persistence`
(PersistenceBridge); `main` exposes it as a FastAPI app:

    uvicorn src.kanban.main:app
"""

from .models import COLUMNS, InvalidStatus, TaskEntity, TaskStatus, next_status, parse_status  # noqa: F401
from .persistence import STORAGE_KEY, PersistenceBridge  # noqa: F401
from .repositories import TaskStore  # noqa: F401
