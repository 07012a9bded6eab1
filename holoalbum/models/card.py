from dataclasses import dataclass
from enum import Enum
from typing import Any

from holoalbum.models.catalog import PAYLOAD_MODELS, CatalogEntity, Category


class Rarity(str, Enum):
    """Deterministic card classification."""

    SPECIAL = "special"
    REGULAR = "regular"


# Ids at or below the threshold are special; None means the whole category is.
SPECIAL_THRESHOLDS: dict[Category, int | None] = {
    Category.MOVIES: None,
    Category.CHARACTERS: 20,
    Category.STARSHIPS: 10,
}


def rarity_for(category: Category, entity_id: int) -> Rarity:
    """Derive the rarity tag from the card's id range."""
    threshold = SPECIAL_THRESHOLDS[category]
    if threshold is None or entity_id <= threshold:
        return Rarity.SPECIAL
    return Rarity.REGULAR


@dataclass(frozen=True, slots=True)
class CardId:
    """
    Identifies one catalog entity.

    Attributes:
        category: Catalog partition
        id: Numeric SWAPI id within the category
    """

    category: Category
    id: int

    def __str__(self) -> str:
        return f"{self.category.value}/{self.id}"


@dataclass(frozen=True, slots=True)
class Card:
    """
    A materialized card.

    Attributes:
        card_id: Category and numeric id
        name: Display name (film title or entity name)
        rarity: Derived from the id, never random
        payload: Validated catalog entity
        image_url: Presentational image reference
    """

    card_id: CardId
    name: str
    rarity: Rarity
    payload: CatalogEntity
    image_url: str = ""

    @property
    def category(self) -> Category:
        return self.card_id.category

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "category": self.card_id.category.value,
            "id": self.card_id.id,
            "name": self.name,
            "rarity": self.rarity.value,
            "image": self.image_url,
            "data": self.payload.model_dump(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Card":
        """
        Rehydrate a card serialized with to_dict.

        Raises:
            KeyError, ValueError, TypeError: If the dict is malformed
                (pydantic's ValidationError is a ValueError)
        """
        category = Category(raw["category"])
        entity_id = raw["id"]
        if not isinstance(entity_id, int) or isinstance(entity_id, bool):
            raise TypeError(f"Card id must be an int, got {entity_id!r}")

        payload = PAYLOAD_MODELS[category].model_validate(raw["data"])
        return cls(
            card_id=CardId(category, entity_id),
            name=str(raw.get("name") or payload.display_name),
            rarity=rarity_for(category, entity_id),
            payload=payload,
            image_url=str(raw.get("image", "")),
        )
