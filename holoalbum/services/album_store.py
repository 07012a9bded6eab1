"""
Album store.

Owns the in-memory Album and keeps storage in sync: state is read once by
load() and written after every mutation. Add and remove report success as a
bool, so "already collected" and "not collected" are ordinary outcomes.
"""

import logging

from holoalbum.config import ALBUM_STORAGE_KEY
from holoalbum.db.storage import KeyValueStore, read_json, write_json
from holoalbum.models.album import Album, AlbumStats
from holoalbum.models.card import Card
from holoalbum.models.catalog import Category
from holoalbum.models.errors import InvalidIdentifierError
from holoalbum.services.cooldown import CooldownManager

logger = logging.getLogger(__name__)


class AlbumStore:
    """Persistent album with one card per slot."""

    def __init__(self, storage: KeyValueStore, cooldowns: CooldownManager | None = None) -> None:
        self.storage = storage
        self.cooldowns = cooldowns
        self._album = Album.empty()

    @property
    def album(self) -> Album:
        return self._album

    async def load(self) -> None:
        raw = await read_json(self.storage, ALBUM_STORAGE_KEY)
        self._album = Album.from_dict(raw) if raw is not None else Album.empty()

    async def save(self) -> None:
        await write_json(self.storage, ALBUM_STORAGE_KEY, self._album.to_dict())

    async def _replace(self, album: Album) -> None:
        self._album = album
        await self.save()

    def has_card(self, card: Card) -> bool:
        try:
            return self._album.get(card.card_id) is not None
        except InvalidIdentifierError:
            return False

    async def add(self, card: Card) -> bool:
        """Collect a card. False if its slot is taken or its id is invalid."""
        try:
            if self._album.get(card.card_id) is not None:
                logger.debug("%s already collected", card.card_id)
                return False
            album = self._album.with_card(card)
        except InvalidIdentifierError as e:
            logger.warning("Refusing to add card: %s", e)
            return False

        await self._replace(album)
        logger.info("Added %s (%s) to album", card.card_id, card.name)
        return True

    async def remove(self, card: Card) -> bool:
        """Uncollect a card. False if its slot is empty or its id is invalid."""
        try:
            if self._album.get(card.card_id) is None:
                return False
            album = self._album.without_card(card.card_id)
        except InvalidIdentifierError as e:
            logger.warning("Refusing to remove card: %s", e)
            return False

        await self._replace(album)
        logger.info("Removed %s (%s) from album", card.card_id, card.name)
        return True

    def stats(self) -> AlbumStats:
        return self._album.stats()

    def collected(self, category: Category) -> list[Card]:
        return self._album.collected(category)

    async def reset_all(self) -> None:
        """Empty the album and re-arm every envelope."""
        await self._replace(Album.empty())
        if self.cooldowns is not None:
            await self.cooldowns.clear()
        logger.info("Album reset")

    async def reset_category(self, category: Category) -> None:
        await self._replace(self._album.with_category_reset(category))
        logger.info("Album section %s reset", category.value)
