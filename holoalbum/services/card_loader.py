"""
Card loader.

Resolves drawn card ids into cards, one independent fetch per item. Each
item has its own load state; a failure only ever affects its own item and can
be retried on its own. Nothing is retried automatically.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from holoalbum.models.card import Card, CardId, rarity_for
from holoalbum.models.catalog import CatalogEntity
from holoalbum.models.errors import CatalogError, CatalogErrorKind
from holoalbum.services.images import image_url
from holoalbum.services.load_tracker import LoadTracker

logger = logging.getLogger(__name__)


class EntityFetcher(Protocol):
    """What the loader needs from the catalog gateway."""

    async def fetch(self, card_id: CardId) -> CatalogEntity: ...


class LoadStatus(str, Enum):
    PENDING = "pending"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass
class LoadItem:
    """Load state of one drawn card id."""

    card_id: CardId
    status: LoadStatus = LoadStatus.PENDING
    card: Card | None = None
    error: str | None = None
    error_kind: CatalogErrorKind | None = None
    attempts: int = 0


def build_card(card_id: CardId, payload: CatalogEntity) -> Card:
    """Attach the derived fields to a fetched payload."""
    name = payload.display_name
    return Card(
        card_id=card_id,
        name=name,
        rarity=rarity_for(card_id.category, card_id.id),
        payload=payload,
        image_url=image_url(card_id.category, card_id.id, name),
    )


class CardLoader:
    """Per-item loading with isolated failures and explicit retry."""

    def __init__(self, gateway: EntityFetcher, tracker: LoadTracker | None = None) -> None:
        self.gateway = gateway
        self.tracker = tracker or LoadTracker()
        self._items: list[LoadItem] = []

    @property
    def items(self) -> list[LoadItem]:
        return list(self._items)

    @property
    def settled(self) -> bool:
        """True when no item is pending."""
        return all(item.status is not LoadStatus.PENDING for item in self._items)

    async def load_one(self, card_id: CardId) -> Card:
        """
        Fetch and build one card.

        Raises:
            CatalogError: If the fetch fails
        """
        payload = await self.gateway.fetch(card_id)
        return build_card(card_id, payload)

    async def load_batch(self, card_ids: Sequence[CardId]) -> list[LoadItem]:
        """
        Load every card concurrently.

        Replaces the current items. Returns once every item is loaded or
        failed.
        """
        self._items = [LoadItem(card_id) for card_id in card_ids]
        await asyncio.gather(*(self._attempt(item) for item in self._items))
        return self.items

    async def retry(self, index: int) -> LoadItem:
        """
        Re-attempt one failed item in place.

        Raises:
            IndexError: If index does not name an item
            ValueError: If the item has not failed
        """
        if not 0 <= index < len(self._items):
            raise IndexError(f"No card at position {index}")

        item = self._items[index]
        if item.status is not LoadStatus.FAILED:
            raise ValueError(f"Card at position {index} is {item.status.value}, not failed")

        item.status = LoadStatus.PENDING
        item.error = None
        item.error_kind = None
        await self._attempt(item)
        return item

    def reset(self) -> None:
        self._items = []

    async def _attempt(self, item: LoadItem) -> None:
        # Results are written to the item object, so a batch replaced
        # mid-flight never receives a stale result.
        item.attempts += 1
        self.tracker.start(item.card_id)

        try:
            card = await self.load_one(item.card_id)
        except CatalogError as e:
            item.status = LoadStatus.FAILED
            item.error = e.message
            item.error_kind = e.kind
            logger.debug("%s failed with a %s error", item.card_id, e.kind.value)
            self.tracker.error(item.card_id, e.message, item.attempts)
            return

        item.card = card
        item.status = LoadStatus.LOADED
        self.tracker.success(item.card_id)
