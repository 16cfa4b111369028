from __future__ import annotations

import asyncio
from typing import Protocol


class PresenceStore(Protocol):
    """
    Abstraction over the key-value store holding passport scan events.

    Entries are written by the external tap-recording process and consumed
    here exactly once.
    """

    async def consume(self, badge_id: int) -> bool | None:
        """
        Atomically read and delete the readiness flag for ``badge_id``.

        :returns: ``None`` when no scan was recorded (or it was already
                  consumed), otherwise the readiness flag.
        """
        ...


class InMemoryPresenceStore(PresenceStore):
    """Dictionary-backed presence store for unit tests."""

    def __init__(self) -> None:
        self._flags: dict[int, bool] = {}
        self._lock = asyncio.Lock()

    def record(self, badge_id: int, ready: bool = True) -> None:
        self._flags[badge_id] = ready

    async def consume(self, badge_id: int) -> bool | None:
        async with self._lock:
            return self._flags.pop(badge_id, None)
