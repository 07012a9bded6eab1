"""
Key-value storage port and adapters.

Album and cooldown state are persisted as two independently keyed JSON blobs.
Business logic only talks to the KeyValueStore protocol, so the backend can be
swapped (memory, JSON files, SQL) without touching the services.

Persistence is best-effort: read_json and write_json log and swallow storage
and decode errors so the application stays usable with no history.
"""

import asyncio
import json
import logging
import re
from pathlib import Path
from typing import Any, Protocol

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from holoalbum.models.db import KeyValueBlobDB

logger = logging.getLogger(__name__)

# Dialects with a native INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {"postgresql": postgresql_insert, "sqlite": sqlite_insert}


class KeyValueStore(Protocol):
    """Async string blob storage."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...


class MemoryStore:
    """Process-local store. Used by tests and the memory backend."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """
    One file per key inside a directory.

    File access runs in a worker thread so the event loop is never blocked.

    Raises:
        OSError: If a file cannot be read or written
        UnicodeDecodeError: If a file is not valid UTF-8
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe}.json"

    def _read(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def _write(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        # Write then rename so a crash never leaves a half-written blob
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    async def get(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._path(key).unlink, missing_ok=True)


class SqlStore:
    """Blobs in the key_value_blobs table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get(self, key: str) -> str | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(KeyValueBlobDB.value).where(KeyValueBlobDB.key == key)
            )
            return result.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        async with self.session_factory() as session:
            insert = _UPSERT_INSERTS.get(session.get_bind().dialect.name)
            if insert is None:
                await session.merge(KeyValueBlobDB(key=key, value=value))
            else:
                stmt = insert(KeyValueBlobDB).values(key=key, value=value)
                stmt = stmt.on_conflict_do_update(
                    index_elements=[KeyValueBlobDB.key],
                    set_={"value": stmt.excluded.value, "updated_at": func.now()},
                )
                await session.execute(stmt)
            await session.commit()

    async def delete(self, key: str) -> None:
        async with self.session_factory() as session:
            await session.execute(delete(KeyValueBlobDB).where(KeyValueBlobDB.key == key))
            await session.commit()


# =============================================================================
# BEST-EFFORT JSON HELPERS
# =============================================================================


async def read_json(store: KeyValueStore, key: str) -> Any | None:
    """
    Read and decode a JSON blob.

    Returns None if the key is absent, unreadable, or not valid JSON.
    """
    try:
        raw = await store.get(key)
    except (OSError, UnicodeDecodeError, SQLAlchemyError) as e:
        logger.warning("Could not read %s from storage: %s", key, e)
        return None

    if raw is None:
        return None

    try:
        return json.loads(raw)
    except ValueError as e:
        logger.warning("Ignoring malformed %s blob: %s", key, e)
        return None


async def write_json(store: KeyValueStore, key: str, value: Any) -> bool:
    """
    Encode and write a JSON blob.

    Returns False if the write failed. The failure is logged, not raised.
    """
    try:
        await store.set(key, json.dumps(value))
    except (OSError, SQLAlchemyError) as e:
        logger.error("Could not write %s to storage: %s", key, e)
        return False
    return True


async def delete_key(store: KeyValueStore, key: str) -> bool:
    """Remove a blob. Returns False if the delete failed."""
    try:
        await store.delete(key)
    except (OSError, SQLAlchemyError) as e:
        logger.error("Could not delete %s from storage: %s", key, e)
        return False
    return True
