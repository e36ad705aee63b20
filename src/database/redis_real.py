"""
Real Redis-backed session store for production when REDIS_URL is set.
Implements the same interface as src.database.redis (in-memory stub).

Session blobs are written by the upstream loan-origination workflow under
their bare session/transaction id, so keys are used as given.
"""

from __future__ import annotations

from typing import Optional

import redis.asyncio as redis


class RedisCache:
    """
    Async Redis key/value store. Values are JSON strings owned by the caller.
    """

    def __init__(self, url: str, db: int = 0) -> None:
        self._client = redis.from_url(url, db=db, decode_responses=True)

    async def key_exists(self, key: str) -> bool:
        return bool(await self._client.exists(key))

    async def get_key(self, key: str) -> Optional[str]:
        return await self._client.get(key)

    async def set_key(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        if ttl:
            result = await self._client.set(key, value, ex=ttl)
        else:
            result = await self._client.set(key, value)
        return bool(result)

    async def delete_key(self, key: str) -> None:
        await self._client.delete(key)

    async def close(self) -> None:
        await self._client.aclose()
