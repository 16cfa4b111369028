# comments in English; reST docstrings
from __future__ import annotations

import logging
from dataclasses import dataclass

import redis.asyncio as redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from idserver.services._shared.errors import StorageUnavailable
from idserver.services._shared.ports import PresenceStore

log = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = ""

_READY_VALUES = {"1", "true"}


@dataclass(slots=True)
class RedisPresenceStore(PresenceStore):
    """
    Redis-backed presence signal store.

    The tap-recording process writes ``<prefix><badge_id>`` with a readiness
    flag; :meth:`consume` reads and deletes it in a single ``GETDEL`` so two
    concurrent consent requests can never both observe the same scan.

    :param r: An asyncio Redis client (already connected).
    :param prefix: Key prefix shared with the writer.
    """

    r: redis.Redis
    prefix: str = DEFAULT_KEY_PREFIX

    def _k(self, badge_id: int) -> str:
        return f"{self.prefix}{badge_id}"

    @staticmethod
    def _is_ready(raw: bytes | str) -> bool:
        value = raw.decode() if isinstance(raw, bytes) else raw
        return value.strip().lower() in _READY_VALUES

    async def consume(self, badge_id: int) -> bool | None:
        try:
            raw = await self.r.getdel(self._k(badge_id))
        except RedisError as exc:
            log.error("presence.kv_error", exc_info=True)
            raise StorageUnavailable() from exc
        if raw is None:
            return None
        return self._is_ready(raw)
