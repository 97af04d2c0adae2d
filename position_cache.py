"""Last-known click target."""

from __future__ import annotations

import threading
from typing import Optional

from errors import PositionUnavailable
from models import ClickPosition


class PositionCache:
    """Holds the click target and refreshes it from the pointer on demand."""

    def __init__(self, pointer) -> None:
        self._pointer = pointer
        self._position: Optional[ClickPosition] = None
        self._lock = threading.Lock()

    def resolve_current(self) -> ClickPosition:
        """Query the live pointer location. Does not touch the cache."""
        try:
            position = self._pointer.position()
        except PositionUnavailable:
            raise
        except Exception as exc:
            raise PositionUnavailable(str(exc)) from exc
        return ClickPosition(int(position.x), int(position.y))

    def get(self) -> Optional[ClickPosition]:
        with self._lock:
            return self._position

    def set(self, position: ClickPosition) -> None:
        with self._lock:
            self._position = position

    def refresh(self) -> ClickPosition:
        """Resolve the pointer location and cache it. On failure the old value is kept."""
        position = self.resolve_current()
        self.set(position)
        return position

    def clear(self) -> None:
        with self._lock:
            self._position = None
