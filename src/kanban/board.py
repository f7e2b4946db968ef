from __future__ import annotations

from functools import lru_cache
from typing import Optional

from .clock import Clock
from .kvstore import KeyValueStore, get_kv_store
from .persistence import PersistenceBridge
from .repositories import TaskStore
from .settings import get_settings


# PUBLIC_INTERFACE
def open_board(store: KeyValueStore, clock: Optional[Clock] = None) -> TaskStore:
    """
    Load the saved board from store and return a TaskStore that writes every
    change back to it.
    """
    bridge = PersistenceBridge(store)
    return TaskStore(bridge.load(), clock=clock, on_change=bridge.persist)


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_task_store() -> TaskStore:
    """Process-wide board backed by the configured key-value store."""
    return open_board(get_kv_store(get_settings()))
