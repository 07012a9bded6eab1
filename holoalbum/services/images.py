"""
Image references for cards.

Characters have real portraits in the swapi-gallery assets. Movies and
starships get generated placeholder graphics carrying their name.
"""

import re

from holoalbum.models.catalog import Category

PORTRAIT_TEMPLATE = (
    "https://vieraboschkova.github.io/swapi-gallery/static/assets/img/people/{id}.jpg"
)
PLACEHOLDER_BASE = "https://dummyimage.com/300x400"

# (background, foreground, heading, fallback label, max label length)
_PLACEHOLDER_STYLES: dict[Category, tuple[str, str, str, str, int]] = {
    Category.MOVIES: ("000000", "FFD700", "STAR+WARS", "Episode", 20),
    Category.STARSHIPS: ("1E3A8A", "FFFFFF", "STARSHIP", "Starship", 18),
}


def _label(name: str | None, fallback: str, entity_id: int, max_length: int) -> str:
    if not name:
        return f"{fallback}+{entity_id}"
    return re.sub(r"\s+", "+", name)[:max_length]


def image_url(category: Category, entity_id: int, name: str | None = None) -> str:
    """Build the image reference for a catalog entity."""
    if category is Category.CHARACTERS:
        return PORTRAIT_TEMPLATE.format(id=entity_id)

    background, foreground, heading, fallback, max_length = _PLACEHOLDER_STYLES[category]
    text = _label(name, fallback, entity_id, max_length)
    return f"{PLACEHOLDER_BASE}/{background}/{foreground}.png&text={heading}%0A{text}"
