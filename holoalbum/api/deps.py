"""
Service container and FastAPI dependencies.

The container holds the single in-memory instance of every stateful service.
It is built once at startup and shared by all requests.
"""

import random
from dataclasses import dataclass

from fastapi import Request

from holoalbum.db.storage import KeyValueStore
from holoalbum.services.album_store import AlbumStore
from holoalbum.services.card_loader import CardLoader, EntityFetcher
from holoalbum.services.clock import Clock, now_ms
from holoalbum.services.cooldown import CooldownManager
from holoalbum.services.identifier_pool import IdentifierPool
from holoalbum.services.load_tracker import LoadTracker
from holoalbum.services.pack_composer import PackComposer
from holoalbum.services.session import SessionController


@dataclass
class ServiceContainer:
    storage: KeyValueStore
    cooldowns: CooldownManager
    album: AlbumStore
    tracker: LoadTracker
    session: SessionController

    async def load(self) -> None:
        """Read persisted state. Called once at startup."""
        await self.cooldowns.load()
        await self.album.load()


def build_container(
    storage: KeyValueStore,
    gateway: EntityFetcher,
    rng: random.Random | None = None,
    clock: Clock = now_ms,
    cooldown_ms: int | None = None,
) -> ServiceContainer:
    """Wire every service around one storage backend and one random source."""
    rng = rng or random.Random()

    cooldowns = CooldownManager(storage, duration_ms=cooldown_ms, clock=clock)
    album = AlbumStore(storage, cooldowns=cooldowns)
    tracker = LoadTracker(clock=clock)
    pool = IdentifierPool(rng=rng)
    session = SessionController(
        cooldowns=cooldowns,
        composer=PackComposer(pool, rng=rng),
        loader=CardLoader(gateway, tracker=tracker),
        album=album,
    )
    return ServiceContainer(
        storage=storage,
        cooldowns=cooldowns,
        album=album,
        tracker=tracker,
        session=session,
    )


def get_container(request: Request) -> ServiceContainer:
    """Dependency that provides the application's service container."""
    container: ServiceContainer = request.app.state.container
    return container
