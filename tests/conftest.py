import random
from collections.abc import Callable
from typing import Any

import pytest

from holoalbum.db.storage import MemoryStore
from holoalbum.models.card import Card, CardId
from holoalbum.models.catalog import PAYLOAD_MODELS, CatalogEntity, Category
from holoalbum.models.errors import CatalogError, UpstreamError
from holoalbum.services.card_loader import build_card


class FakeClock:
    """Manually advanced epoch-ms clock."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def film_payload(entity_id: int = 1) -> dict[str, Any]:
    return {
        "title": f"Episode {entity_id}",
        "episode_id": entity_id,
        "opening_crawl": "It is a period of civil war...",
        "director": "George Lucas",
        "producer": "Gary Kurtz",
        "release_date": "1977-05-25",
        "characters": ["https://swapi.dev/api/people/1/"],
        "url": f"https://swapi.dev/api/films/{entity_id}/",
    }


def person_payload(entity_id: int = 1) -> dict[str, Any]:
    return {
        "name": f"Person {entity_id}",
        "height": "172",
        "mass": "77",
        "gender": "male",
        "homeworld": "https://swapi.dev/api/planets/1/",
        "url": f"https://swapi.dev/api/people/{entity_id}/",
    }


def starship_payload(entity_id: int = 9) -> dict[str, Any]:
    return {
        "name": f"Starship {entity_id}",
        "model": "DS-1 Orbital Battle Station",
        "manufacturer": "Imperial Department of Military Research",
        "starship_class": "Deep Space Mobile Battlestation",
        "url": f"https://swapi.dev/api/starships/{entity_id}/",
    }


PAYLOAD_FACTORIES = {
    Category.MOVIES: film_payload,
    Category.CHARACTERS: person_payload,
    Category.STARSHIPS: starship_payload,
}


def make_payload(card_id: CardId) -> CatalogEntity:
    raw = PAYLOAD_FACTORIES[card_id.category](card_id.id)
    return PAYLOAD_MODELS[card_id.category].model_validate(raw)


def build_test_card(category: Category, entity_id: int) -> Card:
    card_id = CardId(category, entity_id)
    return build_card(card_id, make_payload(card_id))


class FakeGateway:
    """
    In-memory catalog.

    Card ids listed in `failures` raise the mapped error, and `fail_first`
    is raised by the first fetch whatever its id. Everything else succeeds.
    `calls` records every fetch in order.
    """

    def __init__(
        self,
        failures: dict[CardId, CatalogError] | None = None,
        fail_first: CatalogError | None = None,
    ) -> None:
        self.failures = dict(failures or {})
        self.fail_first = fail_first
        self.calls: list[CardId] = []

    async def fetch(self, card_id: CardId) -> CatalogEntity:
        self.calls.append(card_id)
        if self.fail_first is not None:
            error, self.fail_first = self.fail_first, None
            raise error
        if card_id in self.failures:
            raise self.failures[card_id]
        return make_payload(card_id)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1977)


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def upstream_500() -> UpstreamError:
    return UpstreamError("Error 500: could not fetch", status_code=500)


@pytest.fixture
def make_gateway() -> type[FakeGateway]:
    """Factory for gateways with scripted failures."""
    return FakeGateway


@pytest.fixture
def payload_for() -> Callable[[CardId], CatalogEntity]:
    """Validated catalog payload for a card id."""
    return make_payload


@pytest.fixture
def raw_payload() -> Callable[[Category, int], dict[str, Any]]:
    """Raw SWAPI JSON for a category and id."""

    def build(category: Category, entity_id: int) -> dict[str, Any]:
        return PAYLOAD_FACTORIES[category](entity_id)

    return build


@pytest.fixture
def make_card() -> Callable[[Category, int], Card]:
    """Fully built card for a category and id."""
    return build_test_card
