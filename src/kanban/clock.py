from __future__ import annotations

import time
from datetime import datetime, timezone
from threading import Lock
from typing import Protocol


# PUBLIC_INTERFACE
class Clock(Protocol):
    """Source of creation timestamps and task identifiers."""

    def now(self) -> datetime:
        """Return the current time as an aware datetime."""

    def new_id(self) -> str:
        """Return a fresh identifier, distinct from every earlier one."""


class SystemClock:
    """
    Wall-clock provider.

    Identifiers are epoch milliseconds rendered as text. Two calls within the
    same millisecond would collide, so the value is bumped to stay strictly
    increasing for the life of the process.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._last_id = 0

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def new_id(self) -> str:
        with self._lock:
            candidate = time.time_ns() // 1_000_000
            if candidate <= self._last_id:
                candidate = self._last_id + 1
            self._last_id = candidate
            return str(candidate)
