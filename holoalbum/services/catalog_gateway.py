"""
Catalog gateway.

Fetches single entities from SWAPI with a fixed timeout and normalizes every
failure into a CatalogError subclass. Payloads are validated into the
category's model at this boundary; callers never see raw JSON.
"""

import asyncio
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from holoalbum.config import settings
from holoalbum.models.card import CardId
from holoalbum.models.catalog import (
    PAYLOAD_MODELS,
    RESOURCE_NAMES,
    CatalogEntity,
    Category,
    extract_id_from_url,
)
from holoalbum.models.errors import (
    CatalogNetworkError,
    CatalogTimeoutError,
    ShapeError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

USER_AGENT = "holoalbum/1.0"


class CatalogGateway:
    """
    Async SWAPI client.

    Owns its httpx.AsyncClient unless one is supplied. Use as an async
    context manager or call aclose() when done.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout_ms: int | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.catalog_base_url).rstrip("/")
        self.timeout_ms = timeout_ms if timeout_ms is not None else settings.catalog_timeout_ms
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
        )

    async def __aenter__(self) -> "CatalogGateway":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def entity_url(self, card_id: CardId) -> str:
        return f"{self.base_url}/{RESOURCE_NAMES[card_id.category]}/{card_id.id}/"

    async def _get_json(self, url: str) -> Any:
        """
        GET a URL and decode its JSON body.

        The deadline covers the whole exchange and cancels the request
        when exceeded.

        Raises:
            CatalogTimeoutError: If the deadline is exceeded
            CatalogNetworkError: If the request could not complete
            UpstreamError: If the status is not 2xx
            ShapeError: If the body is not JSON
        """
        try:
            async with asyncio.timeout(self.timeout_ms / 1000):
                response = await self._client.get(url)
        except (TimeoutError, httpx.TimeoutException) as e:
            raise CatalogTimeoutError(
                f"The catalog took longer than {self.timeout_ms} ms to respond"
            ) from e
        except httpx.RequestError as e:
            raise CatalogNetworkError(f"Could not reach the catalog: {e}") from e

        if not response.is_success:
            raise UpstreamError(
                f"Error {response.status_code}: could not fetch {url}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ShapeError(f"Catalog returned a non-JSON body for {url}") from e

    async def fetch(self, card_id: CardId) -> CatalogEntity:
        """
        Fetch one entity and validate it against its category model.

        Raises:
            CatalogError: Any subclass, see _get_json; ShapeError also on
                a payload that does not match the category model
        """
        data = await self._get_json(self.entity_url(card_id))

        if not isinstance(data, dict):
            raise ShapeError(f"Expected an object for {card_id}, got {type(data).__name__}")

        try:
            return PAYLOAD_MODELS[card_id.category].model_validate(data)
        except ValidationError as e:
            raise ShapeError(
                f"Unexpected {card_id.category.value} payload for {card_id}: "
                f"{e.error_count()} invalid field(s)"
            ) from e

    async def list_ids(self, category: Category) -> list[int]:
        """
        List every id the catalog exposes for a category.

        Follows the paginated listing through its `next` links.

        Raises:
            CatalogError: If any page fails
        """
        ids: list[int] = []
        url: str | None = f"{self.base_url}/{RESOURCE_NAMES[category]}/"

        while url:
            page = await self._get_json(url)
            if not isinstance(page, dict) or not isinstance(page.get("results"), list):
                raise ShapeError(f"Unexpected listing page for {category.value}")

            for entry in page["results"]:
                entity_url = entry.get("url") if isinstance(entry, dict) else None
                entity_id = extract_id_from_url(entity_url) if entity_url else None
                if entity_id is not None:
                    ids.append(entity_id)

            url = page.get("next")

        logger.debug("Listed %d %s ids", len(ids), category.value)
        return ids
