"""
Envelope opening session.

State machine for one "open envelope" transaction:

    idle -> opening -> awaiting_decisions -> (close) -> idle

Opening any envelope starts the cooldown of every envelope in the bank.
Closing is only permitted once every loaded card has been kept or discarded;
failed cards never block closing and are dropped when it happens.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from holoalbum.config import ENVELOPE_IDS
from holoalbum.models.errors import (
    DecisionsPendingError,
    EnvelopeUnavailableError,
    InvalidDecisionError,
    SessionBusyError,
    UnknownEnvelopeError,
)
from holoalbum.services.album_store import AlbumStore
from holoalbum.services.card_loader import CardLoader, LoadItem, LoadStatus
from holoalbum.services.cooldown import CooldownManager, format_remaining
from holoalbum.services.pack_composer import PackComposer, PackRecipe

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    OPENING = "opening"
    AWAITING_DECISIONS = "awaiting_decisions"


class Decision(str, Enum):
    KEEP = "keep"
    DISCARD = "discard"


@dataclass(frozen=True)
class EnvelopeStatus:
    envelope_id: str
    available: bool
    remaining_ms: int

    @property
    def remaining_label(self) -> str:
        return format_remaining(self.remaining_ms)


@dataclass(frozen=True)
class SessionSummary:
    """Outcome of a closed session."""

    envelope_id: str | None
    kept: int
    discarded: int
    failed: int


class SessionController:
    """Orchestrates cooldowns, pack composition, loading and album updates."""

    def __init__(
        self,
        cooldowns: CooldownManager,
        composer: PackComposer,
        loader: CardLoader,
        album: AlbumStore,
        envelope_ids: Sequence[str] = ENVELOPE_IDS,
    ) -> None:
        self.cooldowns = cooldowns
        self.composer = composer
        self.loader = loader
        self.album = album
        self.envelope_ids = tuple(envelope_ids)

        self._state = SessionState.IDLE
        self._envelope_id: str | None = None
        self._recipe: PackRecipe | None = None
        self._decisions: dict[int, Decision] = {}

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def envelope_id(self) -> str | None:
        return self._envelope_id

    @property
    def recipe(self) -> PackRecipe | None:
        return self._recipe

    @property
    def items(self) -> list[LoadItem]:
        return self.loader.items

    @property
    def decisions(self) -> dict[int, Decision]:
        return dict(self._decisions)

    def envelopes(self) -> list[EnvelopeStatus]:
        return [
            EnvelopeStatus(
                envelope_id=envelope_id,
                available=self.cooldowns.is_available(envelope_id),
                remaining_ms=self.cooldowns.remaining(envelope_id),
            )
            for envelope_id in self.envelope_ids
        ]

    async def open(self, envelope_id: str) -> list[LoadItem]:
        """
        Open an envelope and load its cards.

        Raises:
            UnknownEnvelopeError: If envelope_id is not in the bank
            SessionBusyError: If a session is already in progress
            EnvelopeUnavailableError: If the envelope is recharging
        """
        if envelope_id not in self.envelope_ids:
            raise UnknownEnvelopeError(f"Unknown envelope: {envelope_id}")
        if self._state is not SessionState.IDLE:
            raise SessionBusyError(f"Envelope {self._envelope_id} is still open")
        if not self.cooldowns.is_available(envelope_id):
            raise EnvelopeUnavailableError(envelope_id, self.cooldowns.remaining(envelope_id))

        self._state = SessionState.OPENING
        self._envelope_id = envelope_id
        self._decisions = {}

        try:
            await self.cooldowns.start_all(self.envelope_ids)
            self._recipe = self.composer.choose_recipe()
            card_ids = self.composer.compose(self._recipe)
            logger.info(
                "Opening envelope %s: %s",
                envelope_id,
                ", ".join(str(card_id) for card_id in card_ids),
            )
            items = await self.loader.load_batch(card_ids)
        except Exception:
            self._reset()
            raise

        self._state = SessionState.AWAITING_DECISIONS
        return items

    async def retry(self, index: int) -> LoadItem:
        """
        Retry one failed card.

        Raises:
            InvalidDecisionError: If no envelope is awaiting decisions
            IndexError, ValueError: See CardLoader.retry
        """
        self._require_awaiting()
        return await self.loader.retry(index)

    async def decide(self, index: int, decision: Decision) -> bool:
        """
        Keep or discard a loaded card.

        Keeping adds the card to the album; discarding removes it if held.
        A second decision for the same card replaces the first and its
        effect is applied again.

        Returns:
            True if the album changed

        Raises:
            InvalidDecisionError: If no envelope is open or the card is not loaded
        """
        self._require_awaiting()

        items = self.loader.items
        if not 0 <= index < len(items):
            raise InvalidDecisionError(f"No card at position {index}")

        item = items[index]
        if item.status is not LoadStatus.LOADED or item.card is None:
            raise InvalidDecisionError(
                f"Card at position {index} is {item.status.value} and cannot be decided"
            )

        self._decisions[index] = decision

        if decision is Decision.KEEP:
            return await self.album.add(item.card)
        if self.album.has_card(item.card):
            return await self.album.remove(item.card)
        return False

    @property
    def pending_decisions(self) -> list[int]:
        """Positions of loaded cards that have no decision yet."""
        return [
            index
            for index, item in enumerate(self.loader.items)
            if item.status is LoadStatus.LOADED and index not in self._decisions
        ]

    @property
    def processed_count(self) -> int:
        """Decided cards plus failed cards."""
        return sum(
            1
            for index, item in enumerate(self.loader.items)
            if item.status is LoadStatus.FAILED or index in self._decisions
        )

    @property
    def can_close(self) -> bool:
        return (
            self._state is SessionState.AWAITING_DECISIONS
            and self.loader.settled
            and not self.pending_decisions
        )

    def close(self) -> SessionSummary:
        """
        Finish the session and return to idle.

        Raises:
            InvalidDecisionError: If no envelope is awaiting decisions
            DecisionsPendingError: If a loaded card is still undecided
        """
        self._require_awaiting()
        pending = self.pending_decisions
        if pending or not self.loader.settled:
            raise DecisionsPendingError(pending)

        decisions = list(self._decisions.values())
        summary = SessionSummary(
            envelope_id=self._envelope_id,
            kept=decisions.count(Decision.KEEP),
            discarded=decisions.count(Decision.DISCARD),
            failed=sum(1 for item in self.loader.items if item.status is LoadStatus.FAILED),
        )
        logger.info(
            "Closed envelope %s: kept %d, discarded %d, failed %d",
            summary.envelope_id,
            summary.kept,
            summary.discarded,
            summary.failed,
        )
        self._reset()
        return summary

    def _require_awaiting(self) -> None:
        if self._state is not SessionState.AWAITING_DECISIONS:
            raise InvalidDecisionError(
                f"No envelope is awaiting decisions (state: {self._state.value})"
            )

    def _reset(self) -> None:
        self.loader.reset()
        self._decisions = {}
        self._envelope_id = None
        self._recipe = None
        self._state = SessionState.IDLE
