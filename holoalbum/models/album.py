"""
Album value object.

The album holds one fixed-length slot tuple per category. Every update
returns a new Album; slot tuples are never mutated in place.
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from holoalbum.models.card import Card, CardId
from holoalbum.models.catalog import CATEGORY_TOTALS, VALID_IDS, Category
from holoalbum.models.errors import InvalidIdentifierError

logger = logging.getLogger(__name__)

# Categories whose ids are consecutive from 1
_CONSECUTIVE = frozenset({Category.MOVIES, Category.CHARACTERS})


def slot_index(card_id: CardId) -> int:
    """
    Resolve the album slot for a card id.

    Consecutive categories map by id - 1. Starships map by position in
    the explicit valid-id list.

    Raises:
        InvalidIdentifierError: If the id is outside the category's valid set
    """
    valid = VALID_IDS[card_id.category]

    if card_id.category in _CONSECUTIVE:
        index = card_id.id - 1
        if 0 <= index < len(valid):
            return index
    elif card_id.id in valid:
        return valid.index(card_id.id)

    raise InvalidIdentifierError(card_id.category.value, card_id.id)


def _percentage(collected: int, total: int) -> int:
    """Completion percentage, rounded half up."""
    if total <= 0:
        return 0
    return math.floor(collected * 100 / total + 0.5)


Slots = tuple[Card | None, ...]


def _empty_slots(category: Category) -> Slots:
    return (None,) * CATEGORY_TOTALS[category]


@dataclass(frozen=True)
class CategoryStats:
    """Completion of one category (or the whole album)."""

    collected: int
    total: int
    percentage: int


@dataclass(frozen=True)
class AlbumStats:
    """Completion per category plus overall."""

    categories: dict[Category, CategoryStats]
    overall: CategoryStats


@dataclass(frozen=True)
class Album:
    """Three fixed-length slot arrays, None meaning uncollected."""

    slots: Mapping[Category, Slots] = field(
        default_factory=lambda: {c: _empty_slots(c) for c in Category}
    )

    def __post_init__(self) -> None:
        # Read-only view; every change goes through the with_* copies
        object.__setattr__(self, "slots", MappingProxyType(dict(self.slots)))

    @classmethod
    def empty(cls) -> "Album":
        return cls()

    def get(self, card_id: CardId) -> Card | None:
        """Card held in the slot for card_id. Raises InvalidIdentifierError."""
        return self.slots[card_id.category][slot_index(card_id)]

    def with_card(self, card: Card) -> "Album":
        """Return a copy with card written into its slot."""
        return self._replace_slot(card.card_id, card)

    def without_card(self, card_id: CardId) -> "Album":
        """Return a copy with the slot for card_id emptied."""
        return self._replace_slot(card_id, None)

    def with_category_reset(self, category: Category) -> "Album":
        """Return a copy with one category emptied."""
        slots = dict(self.slots)
        slots[category] = _empty_slots(category)
        return Album(slots=slots)

    def _replace_slot(self, card_id: CardId, card: Card | None) -> "Album":
        index = slot_index(card_id)
        section = list(self.slots[card_id.category])
        section[index] = card
        slots = dict(self.slots)
        slots[card_id.category] = tuple(section)
        return Album(slots=slots)

    def collected(self, category: Category) -> list[Card]:
        """Occupied slots of a category, in slot order."""
        return [card for card in self.slots[category] if card is not None]

    def stats(self) -> AlbumStats:
        """Derive completion statistics."""
        categories: dict[Category, CategoryStats] = {}
        for category in Category:
            collected = len(self.collected(category))
            total = CATEGORY_TOTALS[category]
            categories[category] = CategoryStats(
                collected=collected,
                total=total,
                percentage=_percentage(collected, total),
            )

        collected = sum(s.collected for s in categories.values())
        total = sum(s.total for s in categories.values())
        return AlbumStats(
            categories=categories,
            overall=CategoryStats(collected, total, _percentage(collected, total)),
        )

    def to_dict(self) -> dict[str, list[dict[str, Any] | None]]:
        """Serialize to the persisted shape: one list per category."""
        return {
            category.value: [card.to_dict() if card else None for card in self.slots[category]]
            for category in Category
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "Album":
        """
        Rebuild an album from its persisted shape.

        Anything malformed falls back to empty: a missing or non-list
        category becomes all-empty, and a slot entry that fails to parse or
        does not belong at its index is dropped.
        """
        if not isinstance(raw, dict):
            return cls.empty()

        slots: dict[Category, Slots] = {}
        for category in Category:
            section = raw.get(category.value)
            if not isinstance(section, list):
                slots[category] = _empty_slots(category)
                continue

            parsed: list[Card | None] = []
            for index in range(CATEGORY_TOTALS[category]):
                entry = section[index] if index < len(section) else None
                parsed.append(_parse_slot(category, index, entry))
            slots[category] = tuple(parsed)

        return cls(slots=slots)


def _parse_slot(category: Category, index: int, entry: Any) -> Card | None:
    if entry is None:
        return None

    try:
        card = Card.from_dict(entry)
        if card.category is not category or slot_index(card.card_id) != index:
            raise ValueError(f"{card.card_id} does not belong at {category.value}[{index}]")
    except (KeyError, ValueError, TypeError, InvalidIdentifierError) as e:
        logger.warning("Dropping malformed album slot %s[%d]: %s", category.value, index, e)
        return None

    return card
