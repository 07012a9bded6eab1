import random
from collections.abc import Mapping, Sequence

from holoalbum.models.card import CardId
from holoalbum.models.catalog import VALID_IDS, Category


class IdentifierPool:
    """
    The closed set of fetchable ids per category.

    All draws go through the injected random source so tests can fix
    the sequence.
    """

    def __init__(
        self,
        valid_ids: Mapping[Category, Sequence[int]] = VALID_IDS,
        rng: random.Random | None = None,
    ) -> None:
        self._valid_ids = {category: tuple(ids) for category, ids in valid_ids.items()}
        self.rng = rng or random.Random()

    def valid_ids(self, category: Category) -> tuple[int, ...]:
        return self._valid_ids[category]

    def contains(self, card_id: CardId) -> bool:
        return card_id.id in self._valid_ids.get(card_id.category, ())

    def sample_unique(self, category: Category, count: int) -> list[int]:
        """
        Draw distinct ids uniformly without replacement.

        Returns min(count, pool size) ids. Each draw removes the picked id
        from a working copy of the pool.
        """
        remaining = list(self._valid_ids[category])
        selected: list[int] = []

        for _ in range(min(max(count, 0), len(remaining))):
            index = self.rng.randrange(len(remaining))
            selected.append(remaining.pop(index))

        return selected
