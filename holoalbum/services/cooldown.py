"""
Envelope cooldowns.

Each envelope slot has an optional absolute deadline (epoch ms). A slot is
available when it has no deadline or the deadline has passed. The whole
slot-id -> deadline mapping is persisted after every mutation.
"""

import asyncio
import logging
import math
from collections.abc import Iterable
from typing import Any

from holoalbum.config import COOLDOWN_STORAGE_KEY, settings
from holoalbum.db.storage import KeyValueStore, read_json, write_json
from holoalbum.services.clock import Clock, now_ms

logger = logging.getLogger(__name__)


def format_remaining(milliseconds: int) -> str:
    """Format a remaining time as m:ss, rounding seconds up."""
    seconds = math.ceil(max(milliseconds, 0) / 1000)
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes}:{seconds:02d}"


def _parse_deadlines(raw: Any) -> dict[str, int]:
    """Keep only well-formed slot-id -> deadline entries."""
    if not isinstance(raw, dict):
        return {}

    deadlines: dict[str, int] = {}
    for slot_id, deadline in raw.items():
        if isinstance(deadline, bool) or not isinstance(deadline, int | float):
            continue
        if not math.isfinite(deadline):
            continue
        deadlines[str(slot_id)] = int(deadline)
    return deadlines


class CooldownManager:
    """Recharge deadlines per envelope slot."""

    def __init__(
        self,
        storage: KeyValueStore,
        duration_ms: int | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self.storage = storage
        self.duration_ms = duration_ms if duration_ms is not None else settings.cooldown_ms
        self.clock = clock
        self._deadlines: dict[str, int] = {}

    @property
    def deadlines(self) -> dict[str, int]:
        return dict(self._deadlines)

    async def load(self) -> None:
        """Read persisted deadlines, dropping malformed and expired entries."""
        raw = await read_json(self.storage, COOLDOWN_STORAGE_KEY)
        now = self.clock()
        self._deadlines = {
            slot_id: deadline
            for slot_id, deadline in _parse_deadlines(raw).items()
            if deadline > now
        }

    async def save(self) -> None:
        await write_json(self.storage, COOLDOWN_STORAGE_KEY, self._deadlines)

    async def start(self, slot_id: str) -> int:
        """Start a slot's cooldown. Returns the deadline."""
        return await self.start_all([slot_id])

    async def start_all(self, slot_ids: Iterable[str]) -> int:
        """Start every listed slot with one shared deadline and one persist."""
        deadline = self.clock() + self.duration_ms
        for slot_id in slot_ids:
            self._deadlines[slot_id] = deadline
        await self.save()
        return deadline

    def is_available(self, slot_id: str) -> bool:
        deadline = self._deadlines.get(slot_id)
        return deadline is None or deadline <= self.clock()

    def remaining(self, slot_id: str) -> int:
        """Milliseconds until the slot is available, 0 if it already is."""
        deadline = self._deadlines.get(slot_id)
        if deadline is None:
            return 0
        return max(0, deadline - self.clock())

    async def purge_expired(self) -> int:
        """Drop expired deadlines from storage. Returns how many were dropped."""
        now = self.clock()
        expired = [slot_id for slot_id, deadline in self._deadlines.items() if deadline <= now]
        if not expired:
            return 0

        for slot_id in expired:
            del self._deadlines[slot_id]
        await self.save()
        logger.debug("Purged %d expired cooldown(s)", len(expired))
        return len(expired)

    async def clear(self) -> None:
        """Make every slot available immediately."""
        self._deadlines = {}
        await self.save()

    async def run_purge_loop(self, interval_seconds: float | None = None) -> None:
        """Purge expired deadlines forever. Cancel the task to stop."""
        interval = (
            interval_seconds if interval_seconds is not None else settings.purge_interval_seconds
        )
        while True:
            await asyncio.sleep(interval)
            await self.purge_expired()
