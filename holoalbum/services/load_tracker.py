"""
Card load diagnostics.

Records every fetch attempt made while opening envelopes so failure rates and
load times can be inspected. Purely observational: nothing here influences
the loading itself.
"""

import logging
from collections import Counter, deque
from dataclasses import dataclass, field

from holoalbum.models.card import CardId
from holoalbum.services.clock import Clock, now_ms

logger = logging.getLogger(__name__)

# Window for "recent" errors
RECENT_WINDOW_MS = 60_000

# Records kept per log; totals keep counting past it
MAX_RECORDS = 500


@dataclass(frozen=True)
class LoadErrorRecord:
    timestamp: int
    card_id: CardId
    error: str
    attempt: int


@dataclass(frozen=True)
class LoadSuccessRecord:
    timestamp: int
    card_id: CardId
    load_time_ms: int


@dataclass(frozen=True)
class LoadStats:
    total_errors: int
    total_success: int
    avg_load_time_ms: int
    errors_by_category: dict[str, int] = field(default_factory=dict)
    recent_errors: int = 0
    success_rate: int = 100


class LoadTracker:
    """
    In-memory log of load attempts.

    Only the latest max_records errors and successes are kept as records.
    Totals, average load time and errors by category are running counters,
    so they cover every attempt since startup or the last clear().
    """

    def __init__(self, clock: Clock = now_ms, max_records: int = MAX_RECORDS) -> None:
        self.clock = clock
        self.errors: deque[LoadErrorRecord] = deque(maxlen=max_records)
        self.successes: deque[LoadSuccessRecord] = deque(maxlen=max_records)
        self._started: dict[CardId, int] = {}
        self._reset_totals()

    def _reset_totals(self) -> None:
        self._error_total = 0
        self._success_total = 0
        self._load_time_total = 0
        self._errors_by_category: Counter[str] = Counter()

    def start(self, card_id: CardId) -> None:
        self._started[card_id] = self.clock()

    def success(self, card_id: CardId) -> None:
        now = self.clock()
        started = self._started.pop(card_id, None)
        load_time = now - started if started is not None else 0
        self.successes.append(LoadSuccessRecord(now, card_id, load_time))
        self._success_total += 1
        self._load_time_total += load_time
        logger.info("Loaded %s in %d ms", card_id, load_time)

    def error(self, card_id: CardId, message: str, attempt: int) -> None:
        self._started.pop(card_id, None)
        self.errors.append(LoadErrorRecord(self.clock(), card_id, message, attempt))
        self._error_total += 1
        self._errors_by_category[card_id.category.value] += 1
        logger.warning("Failed to load %s (attempt %d): %s", card_id, attempt, message)

    def stats(self) -> LoadStats:
        total_errors = self._error_total
        total_success = self._success_total
        attempts = total_errors + total_success

        avg = self._load_time_total / total_success if total_success else 0.0
        cutoff = self.clock() - RECENT_WINDOW_MS

        return LoadStats(
            total_errors=total_errors,
            total_success=total_success,
            avg_load_time_ms=round(avg),
            errors_by_category=dict(self._errors_by_category),
            recent_errors=sum(1 for e in self.errors if e.timestamp > cutoff),
            success_rate=round(total_success * 100 / attempts) if attempts else 100,
        )

    def clear(self) -> None:
        self.errors.clear()
        self.successes.clear()
        self._started.clear()
        self._reset_totals()
