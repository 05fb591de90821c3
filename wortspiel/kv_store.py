# wortspiel/kv_store.py
from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import KVEntry, KVHashField


def _insert_for(session: AsyncSession):
    """Pick the dialect insert that supports ON CONFLICT upserts."""
    if session.bind.dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert


class KeyValueStore:
    """Redis-shaped string and hash keys persisted through SQLAlchemy.

    Every call opens its own short session and commits on success; a single
    key write is atomic, nothing spans more than one call.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._sessions = session_factory

    # ───────── string keys ─────────
    async def get(self, key: str) -> Optional[str]:
        async with self._sessions() as session:
            res = await session.execute(select(KVEntry.value).where(KVEntry.key == key))
            return res.scalar_one_or_none()

    async def mget(self, *keys: str) -> List[Optional[str]]:
        async with self._sessions() as session:
            res = await session.execute(select(KVEntry.key, KVEntry.value).where(KVEntry.key.in_(keys)))
            found = {k: v for k, v in res.all()}
        return [found.get(k) for k in keys]

    async def set(self, key: str, value: str) -> None:
        await self.mset({key: value})

    async def mset(self, values: Mapping[str, str]) -> None:
        if not values:
            return
        async with self._sessions() as session:
            insert = _insert_for(session)
            stmt = insert(KVEntry).values([{"key": k, "value": v} for k, v in values.items()])
            stmt = stmt.on_conflict_do_update(
                index_elements=[KVEntry.key],
                set_={"value": stmt.excluded.value},
            )
            await session.execute(stmt)
            await session.commit()

    async def delete(self, key: str) -> None:
        async with self._sessions() as session:
            await session.execute(delete(KVEntry).where(KVEntry.key == key))
            await session.execute(delete(KVHashField).where(KVHashField.key == key))
            await session.commit()

    async def exists(self, key: str) -> bool:
        async with self._sessions() as session:
            n = await session.scalar(select(func.count()).select_from(KVEntry).where(KVEntry.key == key))
            if n:
                return True
            n = await session.scalar(select(func.count()).select_from(KVHashField).where(KVHashField.key == key))
            return bool(n)

    # ───────── hash keys ─────────
    async def hgetall(self, key: str) -> Dict[str, str]:
        async with self._sessions() as session:
            res = await session.execute(
                select(KVHashField.field, KVHashField.value)
                .where(KVHashField.key == key)
                .order_by(KVHashField.field)
            )
            return {f: v for f, v in res.all()}

    async def hset(self, key: str, mapping: Mapping[str, str]) -> int:
        if not mapping:
            return 0
        async with self._sessions() as session:
            insert = _insert_for(session)
            stmt = insert(KVHashField).values(
                [{"key": key, "field": f, "value": v} for f, v in mapping.items()]
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[KVHashField.key, KVHashField.field],
                set_={"value": stmt.excluded.value},
            )
            await session.execute(stmt)
            await session.commit()
        return len(mapping)
