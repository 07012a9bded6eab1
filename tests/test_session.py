"""Tests for the envelope session state machine."""

import asyncio
import random
from collections.abc import Callable

import pytest

from holoalbum.config import ENVELOPE_IDS
from holoalbum.db.storage import MemoryStore
from holoalbum.models.card import CardId
from holoalbum.models.catalog import CatalogEntity, Category
from holoalbum.models.errors import (
    DecisionsPendingError,
    EnvelopeUnavailableError,
    InvalidDecisionError,
    SessionBusyError,
    UnknownEnvelopeError,
    UpstreamError,
)
from holoalbum.services.album_store import AlbumStore
from holoalbum.services.card_loader import CardLoader, LoadStatus
from holoalbum.services.cooldown import CooldownManager
from holoalbum.services.identifier_pool import IdentifierPool
from holoalbum.services.pack_composer import PACK_RECIPES, PackComposer
from holoalbum.services.session import Decision, SessionController, SessionState

DURATION = 60_000


def build_session(
    gateway,
    store: MemoryStore,
    clock,
    rng: random.Random,
) -> SessionController:
    cooldowns = CooldownManager(store, duration_ms=DURATION, clock=clock)
    return SessionController(
        cooldowns=cooldowns,
        composer=PackComposer(IdentifierPool(rng=rng), recipes=PACK_RECIPES[:1]),
        loader=CardLoader(gateway),
        album=AlbumStore(store, cooldowns=cooldowns),
    )


@pytest.fixture
def session(
    gateway, store: MemoryStore, clock, rng: random.Random
) -> SessionController:
    return build_session(gateway, store, clock, rng)


class TestOpen:
    async def test_open_loads_pack(self, session: SessionController) -> None:
        items = await session.open("1")

        assert session.state is SessionState.AWAITING_DECISIONS
        assert session.envelope_id == "1"
        assert len(items) == 5
        assert all(item.status is LoadStatus.LOADED for item in items)

    async def test_open_recharges_every_envelope(self, session: SessionController) -> None:
        """Opening one envelope starts the cooldown of all four."""
        await session.open("3")

        statuses = session.envelopes()
        assert [s.envelope_id for s in statuses] == list(ENVELOPE_IDS)
        assert all(not s.available for s in statuses)
        assert all(s.remaining_ms == DURATION for s in statuses)
        assert all(s.remaining_label == "1:00" for s in statuses)

    async def test_envelopes_available_again_after_cooldown(
        self, session: SessionController, clock
    ) -> None:
        await session.open("1")
        for i in range(5):
            await session.decide(i, Decision.DISCARD)
        session.close()

        clock.advance(DURATION)

        assert all(s.available for s in session.envelopes())
        await session.open("2")

    async def test_unknown_envelope(self, session: SessionController) -> None:
        with pytest.raises(UnknownEnvelopeError):
            await session.open("9")

    async def test_recharging_envelope_is_refused(self, session: SessionController) -> None:
        await session.open("1")
        for i in range(5):
            await session.decide(i, Decision.KEEP)
        session.close()

        with pytest.raises(EnvelopeUnavailableError) as exc_info:
            await session.open("2")

        assert exc_info.value.remaining_ms == DURATION

    async def test_open_while_awaiting_is_busy(
        self, session: SessionController, clock
    ) -> None:
        await session.open("1")
        clock.advance(DURATION)

        with pytest.raises(SessionBusyError):
            await session.open("2")

    async def test_open_while_opening_is_busy(
        self, store: MemoryStore, clock, rng: random.Random, payload_for
    ) -> None:
        release = asyncio.Event()

        class BlockingGateway:
            async def fetch(self, card_id: CardId) -> CatalogEntity:
                await release.wait()
                return payload_for(card_id)

        session = build_session(BlockingGateway(), store, clock, rng)
        task = asyncio.create_task(session.open("1"))
        await asyncio.sleep(0)

        assert session.state is SessionState.OPENING
        clock.advance(DURATION)
        with pytest.raises(SessionBusyError):
            await session.open("2")

        release.set()
        await task
        assert session.state is SessionState.AWAITING_DECISIONS


class TestDecisions:
    async def test_keep_adds_to_album(self, session: SessionController) -> None:
        items = await session.open("1")

        changed = await session.decide(0, Decision.KEEP)

        assert changed is True
        assert session.album.has_card(items[0].card)

    async def test_keep_of_held_card_is_noop(self, session: SessionController) -> None:
        items = await session.open("1")
        await session.album.add(items[0].card)

        assert await session.decide(0, Decision.KEEP) is False
        assert 0 not in session.pending_decisions

    async def test_discard_removes_held_card(self, session: SessionController) -> None:
        items = await session.open("1")
        await session.album.add(items[1].card)

        assert await session.decide(1, Decision.DISCARD) is True
        assert session.album.has_card(items[1].card) is False

    async def test_discard_of_unheld_card_is_noop(self, session: SessionController) -> None:
        await session.open("1")

        assert await session.decide(2, Decision.DISCARD) is False

    async def test_redeciding_reapplies_effect(self, session: SessionController) -> None:
        items = await session.open("1")

        await session.decide(0, Decision.KEEP)
        await session.decide(0, Decision.DISCARD)

        assert session.decisions == {0: Decision.DISCARD}
        assert session.album.has_card(items[0].card) is False

    async def test_cannot_decide_failed_card(
        self, store: MemoryStore, clock, rng: random.Random, upstream_500, payload_for
    ) -> None:
        session = build_session(FailingAt({2}, upstream_500, payload_for), store, clock, rng)
        await session.open("1")

        with pytest.raises(InvalidDecisionError):
            await session.decide(2, Decision.KEEP)

    async def test_cannot_decide_without_session(self, session: SessionController) -> None:
        with pytest.raises(InvalidDecisionError):
            await session.decide(0, Decision.KEEP)

    async def test_cannot_decide_unknown_position(self, session: SessionController) -> None:
        await session.open("1")

        with pytest.raises(InvalidDecisionError):
            await session.decide(7, Decision.KEEP)


class FailingAt:
    """Gateway whose n-th fetch (by call order) fails until healed."""

    def __init__(
        self,
        positions: set[int],
        error: UpstreamError,
        payloads: Callable[[CardId], CatalogEntity],
    ) -> None:
        self.positions = positions
        self.error = error
        self.payloads = payloads
        self.failing: set[CardId] = set()
        self.calls = 0

    async def fetch(self, card_id: CardId) -> CatalogEntity:
        position = self.calls
        self.calls += 1
        if position in self.positions:
            self.failing.add(card_id)
        if card_id in self.failing:
            raise self.error
        return self.payloads(card_id)

    def heal(self) -> None:
        self.failing.clear()


class TestPartialFailure:
    async def test_failed_item_retryable_alone(
        self, store: MemoryStore, clock, rng: random.Random, upstream_500, payload_for
    ) -> None:
        gateway = FailingAt({4}, upstream_500, payload_for)
        session = build_session(gateway, store, clock, rng)

        items = await session.open("1")

        assert [item.status for item in items].count(LoadStatus.FAILED) == 1
        assert [item.status for item in items].count(LoadStatus.LOADED) == 4
        assert session.state is SessionState.AWAITING_DECISIONS

        failed_index = next(i for i, item in enumerate(items) if item.status is LoadStatus.FAILED)
        gateway.heal()
        calls_before = gateway.calls
        item = await session.retry(failed_index)

        assert item.status is LoadStatus.LOADED
        assert gateway.calls == calls_before + 1

    async def test_failed_items_do_not_block_close(
        self, store: MemoryStore, clock, rng: random.Random, upstream_500, payload_for
    ) -> None:
        session = build_session(FailingAt({0, 1}, upstream_500, payload_for), store, clock, rng)
        items = await session.open("1")

        for i, item in enumerate(items):
            if item.status is LoadStatus.LOADED:
                await session.decide(i, Decision.KEEP)

        assert session.processed_count == 5
        assert session.can_close is True
        summary = session.close()
        assert summary.failed == 2
        assert summary.kept == 3

    async def test_retry_without_session(self, session: SessionController) -> None:
        with pytest.raises(InvalidDecisionError):
            await session.retry(0)


class TestClose:
    async def test_close_blocked_until_last_decision(self, session: SessionController) -> None:
        await session.open("1")

        for i in range(4):
            await session.decide(i, Decision.KEEP)
            assert session.can_close is False
            with pytest.raises(DecisionsPendingError):
                session.close()

        assert session.pending_decisions == [4]
        await session.decide(4, Decision.DISCARD)

        assert session.can_close is True
        summary = session.close()
        assert summary.kept == 4
        assert summary.discarded == 1

    async def test_close_returns_to_idle(self, session: SessionController) -> None:
        await session.open("1")
        for i in range(5):
            await session.decide(i, Decision.KEEP)

        session.close()

        assert session.state is SessionState.IDLE
        assert session.items == []
        assert session.decisions == {}
        assert session.envelope_id is None

    async def test_close_without_session(self, session: SessionController) -> None:
        with pytest.raises(InvalidDecisionError):
            session.close()

    async def test_kept_cards_outlive_session(self, session: SessionController) -> None:
        items = await session.open("1")
        for i in range(5):
            await session.decide(i, Decision.KEEP)
        session.close()

        assert all(session.album.has_card(item.card) for item in items)
        assert session.album.stats().overall.collected == 5
