"""Tests for the SWAPI catalog gateway."""

import asyncio

import httpx
import pytest
import respx

from holoalbum.models.card import CardId
from holoalbum.models.catalog import Category, Film, Person, Starship
from holoalbum.models.errors import (
    CatalogErrorKind,
    CatalogNetworkError,
    CatalogTimeoutError,
    ShapeError,
    UpstreamError,
)
from holoalbum.services.catalog_gateway import CatalogGateway

BASE = "https://swapi.test/api"


@pytest.fixture
async def gateway():
    async with CatalogGateway(base_url=BASE, timeout_ms=5000) as gw:
        yield gw


class TestFetch:
    @respx.mock
    async def test_fetches_film(self, gateway: CatalogGateway, raw_payload) -> None:
        film = raw_payload(Category.MOVIES, 1)
        respx.get(f"{BASE}/films/1/").mock(return_value=httpx.Response(200, json=film))

        entity = await gateway.fetch(CardId(Category.MOVIES, 1))

        assert isinstance(entity, Film)
        assert entity.display_name == "Episode 1"

    @respx.mock
    async def test_fetches_person(self, gateway: CatalogGateway, raw_payload) -> None:
        respx.get(f"{BASE}/people/4/").mock(
            return_value=httpx.Response(200, json=raw_payload(Category.CHARACTERS, 4))
        )

        entity = await gateway.fetch(CardId(Category.CHARACTERS, 4))

        assert isinstance(entity, Person)
        assert entity.name == "Person 4"

    @respx.mock
    async def test_fetches_starship(self, gateway: CatalogGateway, raw_payload) -> None:
        respx.get(f"{BASE}/starships/9/").mock(
            return_value=httpx.Response(200, json=raw_payload(Category.STARSHIPS, 9))
        )

        entity = await gateway.fetch(CardId(Category.STARSHIPS, 9))

        assert isinstance(entity, Starship)
        assert entity.model == "DS-1 Orbital Battle Station"

    @respx.mock
    async def test_non_success_status_is_upstream_error(self, gateway: CatalogGateway) -> None:
        respx.get(f"{BASE}/people/1/").mock(return_value=httpx.Response(500))

        with pytest.raises(UpstreamError) as exc_info:
            await gateway.fetch(CardId(Category.CHARACTERS, 1))

        assert exc_info.value.status_code == 500
        assert exc_info.value.kind is CatalogErrorKind.UPSTREAM
        assert "500" in exc_info.value.message

    @respx.mock
    async def test_not_found_is_upstream_error(self, gateway: CatalogGateway) -> None:
        respx.get(f"{BASE}/starships/2/").mock(return_value=httpx.Response(404))

        with pytest.raises(UpstreamError):
            await gateway.fetch(CardId(Category.STARSHIPS, 2))

    @respx.mock
    async def test_wrong_shape_is_shape_error(self, gateway: CatalogGateway, raw_payload) -> None:
        """A person payload where a film is expected is rejected."""
        person = raw_payload(Category.CHARACTERS, 1)
        respx.get(f"{BASE}/films/2/").mock(return_value=httpx.Response(200, json=person))

        with pytest.raises(ShapeError):
            await gateway.fetch(CardId(Category.MOVIES, 2))

    @respx.mock
    async def test_non_object_is_shape_error(self, gateway: CatalogGateway) -> None:
        respx.get(f"{BASE}/films/2/").mock(return_value=httpx.Response(200, json=[1, 2]))

        with pytest.raises(ShapeError):
            await gateway.fetch(CardId(Category.MOVIES, 2))

    @respx.mock
    async def test_non_json_is_shape_error(self, gateway: CatalogGateway) -> None:
        respx.get(f"{BASE}/films/3/").mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(ShapeError):
            await gateway.fetch(CardId(Category.MOVIES, 3))

    @respx.mock
    async def test_connection_failure_is_network_error(self, gateway: CatalogGateway) -> None:
        respx.get(f"{BASE}/people/2/").mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(CatalogNetworkError):
            await gateway.fetch(CardId(Category.CHARACTERS, 2))

    @respx.mock
    async def test_transport_timeout_is_timeout_error(self, gateway: CatalogGateway) -> None:
        respx.get(f"{BASE}/people/3/").mock(side_effect=httpx.ReadTimeout("slow"))

        with pytest.raises(CatalogTimeoutError):
            await gateway.fetch(CardId(Category.CHARACTERS, 3))


class TestDeadline:
    async def test_slow_response_is_cancelled(self, raw_payload) -> None:
        """The deadline aborts a request that never answers."""
        cancelled = asyncio.Event()

        async def slow_handler(request: httpx.Request) -> httpx.Response:
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return httpx.Response(200, json=raw_payload(Category.MOVIES, 1))

        client = httpx.AsyncClient(transport=httpx.MockTransport(slow_handler))
        gateway = CatalogGateway(base_url=BASE, timeout_ms=50, client=client)

        try:
            with pytest.raises(CatalogTimeoutError) as exc_info:
                await gateway.fetch(CardId(Category.MOVIES, 1))
        finally:
            await client.aclose()

        assert cancelled.is_set()
        assert exc_info.value.kind is CatalogErrorKind.TIMEOUT

    async def test_shared_client_is_not_closed(self) -> None:
        client = httpx.AsyncClient()
        gateway = CatalogGateway(base_url=BASE, client=client)

        await gateway.aclose()

        assert client.is_closed is False
        await client.aclose()


class TestListIds:
    @respx.mock
    async def test_follows_pagination(self, gateway: CatalogGateway) -> None:
        respx.get(f"{BASE}/films/", params={"page": "2"}).mock(
            return_value=httpx.Response(
                200,
                json={"next": None, "results": [{"url": f"{BASE}/films/3/"}]},
            )
        )
        respx.get(f"{BASE}/films/").mock(
            return_value=httpx.Response(
                200,
                json={
                    "next": f"{BASE}/films/?page=2",
                    "results": [{"url": f"{BASE}/films/1/"}, {"url": f"{BASE}/films/2/"}],
                },
            )
        )

        ids = await gateway.list_ids(Category.MOVIES)

        assert ids == [1, 2, 3]

    @respx.mock
    async def test_malformed_listing_is_shape_error(self, gateway: CatalogGateway) -> None:
        respx.get(f"{BASE}/starships/").mock(return_value=httpx.Response(200, json={"count": 1}))

        with pytest.raises(ShapeError):
            await gateway.list_ids(Category.STARSHIPS)
