"""
Persisted key-value store: one durable slot per entity collection.

Values are JSON-compatible structures. An absent key is never an error;
callers fall back to the documented default for that slot.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from appvault.kernel.models import StateSlot
from appvault.logging_config import get_logger

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """Store contract used by the engine."""

    @abstractmethod
    async def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Return the stored value for every key that exists."""

    @abstractmethod
    async def set_many(self, items: Dict[str, Any]) -> None:
        """Write all items in one unit; either every key is written or none is."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key if present."""

    async def get(self, key: str, default: Any = None) -> Any:
        found = await self.get_many([key])
        return found.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        await self.set_many({key: value})


class InMemoryKeyValueStore(KeyValueStore):
    """
    Process-local store.

    Values are round-tripped through JSON so callers see exactly what a
    durable backend would give back.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    async def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        return {k: json.loads(self._data[k]) for k in keys if k in self._data}

    async def set_many(self, items: Dict[str, Any]) -> None:
        encoded = {k: json.dumps(v) for k, v in items.items()}
        self._data.update(encoded)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class SqlKeyValueStore(KeyValueStore):
    """Store backed by the `state_slots` table (SQLAlchemy async)."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def get_many(self, keys: Iterable[str]) -> Dict[str, Any]:
        wanted = list(keys)
        if not wanted:
            return {}
        async with self.session_maker() as session:
            result = await session.execute(
                select(StateSlot).where(StateSlot.key.in_(wanted))
            )
            return {row.key: row.value for row in result.scalars().all()}

    async def set_many(self, items: Dict[str, Any]) -> None:
        if not items:
            return
        async with self.session_maker() as session:
            try:
                for key, value in items.items():
                    await session.merge(StateSlot(key=key, value=value))
                await session.commit()
            except Exception:
                await session.rollback()
                raise
        logger.debug("Persisted slots", extra={"slots": sorted(items)})

    async def delete(self, key: str) -> None:
        async with self.session_maker() as session:
            await session.execute(delete(StateSlot).where(StateSlot.key == key))
            await session.commit()
