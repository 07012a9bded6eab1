"""Tests for card image references."""

from holoalbum.models.catalog import Category
from holoalbum.services.images import image_url


class TestImageUrl:
    def test_character_portrait(self) -> None:
        assert image_url(Category.CHARACTERS, 4, "Darth Vader") == (
            "https://vieraboschkova.github.io/swapi-gallery/static/assets/img/people/4.jpg"
        )

    def test_movie_placeholder_uses_title(self) -> None:
        url = image_url(Category.MOVIES, 1, "A New Hope")

        assert url.startswith("https://dummyimage.com/300x400/000000/FFD700.png")
        assert url.endswith("text=STAR+WARS%0AA+New+Hope")

    def test_starship_placeholder_truncates_name(self) -> None:
        url = image_url(Category.STARSHIPS, 12, "Imperial shuttle of the long name")

        assert url.endswith("text=STARSHIP%0AImperial+shuttle+o")

    def test_placeholder_without_name(self) -> None:
        assert image_url(Category.STARSHIPS, 12).endswith("%0AStarship+12")
