"""
SQL backend wiring for the key-value store.

The process-wide engine is built from settings.database_url. Tests build
their own engine with make_engine and pass it to init_db/drop_db.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from holoalbum.config import settings
from holoalbum.models.db import Base


def make_engine(url: str, echo: bool = False) -> AsyncEngine:
    return create_async_engine(url, echo=echo, pool_pre_ping=True)


def make_session_factory(target: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Sessions for SqlStore. Each store operation opens and commits its own."""
    return async_sessionmaker(target, class_=AsyncSession, expire_on_commit=False)


engine = make_engine(settings.database_url, echo=settings.debug)
async_session_factory = make_session_factory(engine)


async def init_db(target: AsyncEngine | None = None) -> None:
    """Create the blob table if it is missing. Safe to call on every startup."""
    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db(target: AsyncEngine | None = None) -> None:
    """Drop the blob table and every album and cooldown stored in it."""
    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
