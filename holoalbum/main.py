import asyncio
import contextlib
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from holoalbum.api import album_router, envelopes_router, health_router, session_router
from holoalbum.api.deps import build_container
from holoalbum.config import settings
from holoalbum.db.storage import JsonFileStore, KeyValueStore, MemoryStore, SqlStore
from holoalbum.services.catalog_gateway import CatalogGateway


async def create_store() -> KeyValueStore:
    """Build the storage backend selected in settings."""
    if settings.storage_backend == "memory":
        return MemoryStore()
    if settings.storage_backend == "file":
        return JsonFileStore(settings.storage_dir)

    from holoalbum.db.database import async_session_factory, init_db

    await init_db()
    return SqlStore(async_session_factory)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    store = await create_store()
    async with CatalogGateway() as gateway:
        container = build_container(store, gateway)
        await container.load()
        app.state.container = container

        purge_task = asyncio.create_task(container.cooldowns.run_purge_loop())
        try:
            yield
        finally:
            purge_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await purge_task


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("holoalbum"),
    lifespan=lifespan,
)

app.include_router(album_router)
app.include_router(envelopes_router)
app.include_router(health_router)
app.include_router(session_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
