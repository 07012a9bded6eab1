"""
Catalog categories, valid identifiers and remote payload shapes.

The valid-id sets are a fixed constant: they list the SWAPI entities known to
exist, so random draws never produce a 404. Payload models validate the JSON
the catalog returns, one model per category.
"""

import re
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Catalog partitions, one album section each."""

    MOVIES = "movies"
    CHARACTERS = "characters"
    STARSHIPS = "starships"


# Remote resource name per category
RESOURCE_NAMES: dict[Category, str] = {
    Category.MOVIES: "films",
    Category.CHARACTERS: "people",
    Category.STARSHIPS: "starships",
}

VALID_IDS: dict[Category, tuple[int, ...]] = {
    Category.MOVIES: tuple(range(1, 7)),
    Category.CHARACTERS: tuple(range(1, 83)),
    Category.STARSHIPS: (
        2, 3, 5, 9, 10, 11, 12, 13, 15, 17, 21, 22, 23, 27, 28, 29, 31, 39,
        40, 41, 43, 47, 48, 49, 52, 58, 59, 61, 63, 64, 65, 66, 68, 74, 75, 77,
    ),
}  # fmt: skip

# Album slots per category
CATEGORY_TOTALS: dict[Category, int] = {c: len(ids) for c, ids in VALID_IDS.items()}


def is_valid_id(category: Category, entity_id: int) -> bool:
    """Check whether an id is known to exist in the catalog."""
    return entity_id in VALID_IDS[category]


def extract_id_from_url(url: str) -> int | None:
    """
    Extract the numeric id from a SWAPI entity URL.

    Example: "https://swapi.dev/api/people/1/" -> 1
    """
    match = re.search(r"/(\d+)/?$", url)
    return int(match.group(1)) if match else None


# =============================================================================
# PAYLOAD MODELS
# =============================================================================


class CatalogEntity(BaseModel):
    """Fields shared by every catalog entity."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    category: ClassVar[Category]

    url: str

    @property
    def display_name(self) -> str:
        raise NotImplementedError


class Film(CatalogEntity):
    """A movie."""

    category: ClassVar[Category] = Category.MOVIES

    title: str
    episode_id: int
    opening_crawl: str = ""
    director: str = ""
    producer: str = ""
    release_date: str = ""
    characters: list[str] = Field(default_factory=list)
    planets: list[str] = Field(default_factory=list)
    starships: list[str] = Field(default_factory=list)
    vehicles: list[str] = Field(default_factory=list)
    species: list[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.title


class Person(CatalogEntity):
    """A character."""

    category: ClassVar[Category] = Category.CHARACTERS

    name: str
    height: str = ""
    mass: str = ""
    hair_color: str = ""
    skin_color: str = ""
    eye_color: str = ""
    birth_year: str = ""
    gender: str = ""
    homeworld: str = ""
    films: list[str] = Field(default_factory=list)
    species: list[str] = Field(default_factory=list)
    vehicles: list[str] = Field(default_factory=list)
    starships: list[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name


class Starship(CatalogEntity):
    """A starship."""

    category: ClassVar[Category] = Category.STARSHIPS

    name: str
    model: str
    manufacturer: str = ""
    cost_in_credits: str = ""
    length: str = ""
    max_atmosphering_speed: str = ""
    crew: str = ""
    passengers: str = ""
    cargo_capacity: str = ""
    consumables: str = ""
    hyperdrive_rating: str = ""
    MGLT: str = ""
    starship_class: str = ""
    pilots: list[str] = Field(default_factory=list)
    films: list[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name


PAYLOAD_MODELS: dict[Category, type[CatalogEntity]] = {
    Category.MOVIES: Film,
    Category.CHARACTERS: Person,
    Category.STARSHIPS: Starship,
}
