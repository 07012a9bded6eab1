"""
Album API endpoints.

Read the collected cards and completion stats; reset the album.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from holoalbum.api.deps import ServiceContainer, get_container
from holoalbum.api.schemas import CardResponse, card_to_response
from holoalbum.models.album import CategoryStats
from holoalbum.models.catalog import Category

router = APIRouter(prefix="/album", tags=["album"])


class StatsEntry(BaseModel):
    collected: int
    total: int
    percentage: int


class AlbumStatsResponse(BaseModel):
    """Completion per category and overall."""

    categories: dict[str, StatsEntry] = Field(default_factory=dict)
    overall: StatsEntry


class AlbumResponse(BaseModel):
    """Collected cards per category, in slot order."""

    cards: dict[str, list[CardResponse]] = Field(default_factory=dict)
    stats: AlbumStatsResponse


class ResetResponse(BaseModel):
    reset: list[str]


def _entry(stats: CategoryStats) -> StatsEntry:
    return StatsEntry(collected=stats.collected, total=stats.total, percentage=stats.percentage)


def _stats_response(container: ServiceContainer) -> AlbumStatsResponse:
    stats = container.album.stats()
    return AlbumStatsResponse(
        categories={c.value: _entry(s) for c, s in stats.categories.items()},
        overall=_entry(stats.overall),
    )


@router.get("", response_model=AlbumResponse)
async def get_album(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> AlbumResponse:
    return AlbumResponse(
        cards={
            category.value: [card_to_response(c) for c in container.album.collected(category)]
            for category in Category
        },
        stats=_stats_response(container),
    )


@router.get("/stats", response_model=AlbumStatsResponse)
async def get_album_stats(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> AlbumStatsResponse:
    return _stats_response(container)


@router.delete("", response_model=ResetResponse)
async def reset_album(
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> ResetResponse:
    """Empty the whole album. Also makes every envelope available again."""
    await container.album.reset_all()
    return ResetResponse(reset=[c.value for c in Category])


@router.delete("/{category}", response_model=ResetResponse)
async def reset_album_category(
    category: Category,
    container: Annotated[ServiceContainer, Depends(get_container)],
) -> ResetResponse:
    """Empty one album section. Cooldowns are untouched."""
    await container.album.reset_category(category)
    return ResetResponse(reset=[category.value])
