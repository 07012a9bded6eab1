"""
Pack composition.

A pack is drawn from one recipe (cards per category). Ids are unique within
each category, categories never share ids, and the combined list is shuffled
so category order carries no information.
"""

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field

from holoalbum.models.card import CardId
from holoalbum.models.catalog import Category
from holoalbum.services.identifier_pool import IdentifierPool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackRecipe:
    """Number of cards drawn per category."""

    counts: dict[Category, int] = field(default_factory=dict)

    def count(self, category: Category) -> int:
        return self.counts.get(category, 0)

    @property
    def size(self) -> int:
        return sum(self.counts.values())

    def matches(self, card_ids: Sequence[CardId]) -> bool:
        """True if card_ids has exactly this recipe's category composition."""
        return all(
            sum(1 for c in card_ids if c.category is category) == self.count(category)
            for category in Category
        ) and len(card_ids) == self.size


PACK_RECIPES: tuple[PackRecipe, ...] = (
    PackRecipe({Category.MOVIES: 1, Category.CHARACTERS: 3, Category.STARSHIPS: 1}),
    PackRecipe({Category.MOVIES: 0, Category.CHARACTERS: 3, Category.STARSHIPS: 2}),
)


class PackComposer:
    """Chooses a recipe and draws a shuffled, duplicate-free pack."""

    def __init__(
        self,
        pool: IdentifierPool,
        recipes: Sequence[PackRecipe] = PACK_RECIPES,
        rng: random.Random | None = None,
    ) -> None:
        if not recipes:
            raise ValueError("At least one pack recipe is required")
        self.pool = pool
        self.recipes = tuple(recipes)
        self.rng = rng or pool.rng

    def choose_recipe(self) -> PackRecipe:
        return self.recipes[self.rng.randrange(len(self.recipes))]

    def compose(self, recipe: PackRecipe | None = None) -> list[CardId]:
        """
        Draw the card ids for one envelope.

        Args:
            recipe: Recipe to draw; chosen at random when omitted

        Returns:
            Shuffled card ids matching the recipe, no duplicates
        """
        recipe = recipe or self.choose_recipe()

        card_ids: list[CardId] = []
        for category in Category:
            count = recipe.count(category)
            if count > 0:
                ids = self.pool.sample_unique(category, count)
                card_ids.extend(CardId(category, entity_id) for entity_id in ids)

        self._shuffle(card_ids)
        logger.debug("Composed pack %s", [str(c) for c in card_ids])
        return card_ids

    def _shuffle(self, items: list[CardId]) -> None:
        """Fisher-Yates, in place."""
        for i in range(len(items) - 1, 0, -1):
            j = self.rng.randint(0, i)
            items[i], items[j] = items[j], items[i]
