"""Mirror of the latest value reported for each register."""

import asyncio
from datetime import datetime

from vallox_gateway.core.models import Event


class RegisterCache:
    """Async-safe in-memory store of the newest event per register.

    Query frames (register 0) carry no value and are never stored.
    """

    def __init__(self) -> None:
        """Initialize empty register cache."""
        self._lock = asyncio.Lock()
        self._events: dict[int, Event] = {}
        self._last_update: datetime | None = None

    async def get(self, register: int) -> Event | None:
        """Get the latest event for a register."""
        async with self._lock:
            return self._events.get(register)

    async def get_all(self) -> dict[int, Event]:
        """Get the latest event for every known register."""
        async with self._lock:
            return dict(self._events)

    async def set(self, event: Event) -> bool:
        """Store an event. Returns False for query frames, which are skipped."""
        if event.register_id == 0:
            return False

        async with self._lock:
            self._events[event.register_id] = event
            self._last_update = event.time
        return True

    async def clear(self) -> None:
        """Remove all cached values."""
        async with self._lock:
            self._events.clear()
            self._last_update = None

    @property
    def last_update(self) -> datetime | None:
        """Get timestamp of last cache update."""
        return self._last_update

    @property
    def count(self) -> int:
        """Get number of cached registers."""
        return len(self._events)
