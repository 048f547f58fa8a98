"""Shared key-value / counter stores backing the cache and the rate limiter."""

import heapq
import time
from collections.abc import Callable
from typing import Any, Protocol

from redis import asyncio as redis_asyncio
from redis.exceptions import RedisError

from ..errors import StoreError


class KeyValueStore(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def incr(self, key: str, ttl_seconds: int) -> int: ...

    async def close(self) -> None: ...


class MemoryStore:
    """Process-local store; limits are only shared inside one worker."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._values: dict[str, tuple[Any, float]] = {}
        self._expiries: list[tuple[float, str]] = []

    def __len__(self) -> int:
        return len(self._values)

    def _sweep(self) -> None:
        # Heap entries can be stale when a key was rewritten with a later expiry.
        now = self._clock()
        while self._expiries and self._expiries[0][0] <= now:
            expires_at, key = heapq.heappop(self._expiries)
            entry = self._values.get(key)
            if entry is not None and entry[1] == expires_at:
                del self._values[key]

    def _store(self, key: str, value: Any, expires_at: float) -> None:
        self._values[key] = (value, expires_at)
        heapq.heappush(self._expiries, (expires_at, key))

    def _live(self, key: str) -> Any | None:
        entry = self._values.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._values[key]
            return None
        return value

    async def get(self, key: str) -> str | None:
        value = self._live(key)
        return None if value is None else str(value)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._sweep()
        self._store(key, value, self._clock() + ttl_seconds)

    async def incr(self, key: str, ttl_seconds: int) -> int:
        self._sweep()
        current = self._live(key)
        if current is None:
            self._store(key, 1, self._clock() + ttl_seconds)
            return 1
        expires_at = self._values[key][1]
        count = int(current) + 1
        self._values[key] = (count, expires_at)
        return count

    async def close(self) -> None:
        self._values.clear()
        self._expiries.clear()


class RedisStore:
    def __init__(self, url: str = "", client: Any | None = None) -> None:
        self._client = client or redis_asyncio.Redis.from_url(url, decode_responses=True)

    async def get(self, key: str) -> str | None:
        try:
            return await self._client.get(key)
        except (RedisError, OSError) as exc:
            raise StoreError(f"redis GET failed: {exc}") from exc

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except (RedisError, OSError) as exc:
            raise StoreError(f"redis SET failed: {exc}") from exc

    async def incr(self, key: str, ttl_seconds: int) -> int:
        # SET NX EX and INCR run as one transaction; the key always carries a TTL.
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.set(key, 0, ex=ttl_seconds, nx=True)
                pipe.incr(key)
                _, count = await pipe.execute()
            return int(count)
        except (RedisError, OSError) as exc:
            raise StoreError(f"redis INCR failed: {exc}") from exc

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except (RedisError, OSError) as exc:
            raise StoreError(f"redis close failed: {exc}") from exc


def build_store(redis_url: str) -> KeyValueStore:
    if redis_url:
        return RedisStore(redis_url)
    return MemoryStore()
