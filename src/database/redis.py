"""
Lightweight in-memory RedisCache replacement for local development.

This implements the same async key/value interface as
src.database.redis_real.RedisCache so that the gateway can run (and be
tested) without a real Redis instance.
"""

from __future__ import annotations

import time
from typing import Dict, Optional, Tuple


class RedisCache:
    def __init__(self) -> None:
        # key -> (value, expires_at monotonic seconds or None)
        self._store: Dict[str, Tuple[str, Optional[float]]] = {}

    def _live_entry(self, key: str) -> Optional[Tuple[str, Optional[float]]]:
        entry = self._store.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and time.monotonic() >= expires_at:
            self._store.pop(key, None)
            return None
        return entry

    async def key_exists(self, key: str) -> bool:
        return self._live_entry(key) is not None

    async def get_key(self, key: str) -> Optional[str]:
        entry = self._live_entry(key)
        return entry[0] if entry else None

    async def set_key(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        expires_at = time.monotonic() + ttl if ttl else None
        self._store[key] = (value, expires_at)
        return True

    async def delete_key(self, key: str) -> None:
        self._store.pop(key, None)

    async def close(self) -> None:
        self._store.clear()
