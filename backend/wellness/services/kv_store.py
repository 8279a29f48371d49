from __future__ import annotations
from typing import Dict, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wellness.models import KeyValueEntry


class KeyValueStore(Protocol):
    """
    Async key-value persistence used by the dashboard storage.
    Values are serialized JSON strings; an absent key returns None.
    """

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self, initial: Dict[str, str] | None = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def keys(self):
        return list(self._data.keys())


class SQLKeyValueStore:
    """
    Store backed by the kv_entries table.
    Each call opens its own session so one store instance can be shared process-wide.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        async with self._session_factory() as db:
            res = await db.execute(select(KeyValueEntry.value).where(KeyValueEntry.key == key))
            return res.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        async with self._session_factory() as db:
            entry = await db.get(KeyValueEntry, key)
            if entry is None:
                db.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            await db.commit()
