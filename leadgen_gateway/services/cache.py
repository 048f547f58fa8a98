"""Read-through response cache keyed by canonicalized request parameters."""

import json
import logging
from typing import Any

from ..errors import StoreError
from .store import KeyValueStore
from .utils.constants import CACHE_TTL_SECONDS
from .utils.payload import stable_hash

logger = logging.getLogger(__name__)


def cache_key(tag: str, params: Any) -> str:
    """``<tag>:<sha256 of canonical JSON>``; key order in ``params`` is irrelevant."""
    if tag not in CACHE_TTL_SECONDS:
        raise ValueError(f"unknown cache tag: {tag}")
    return f"{tag}:{stable_hash(params)}"


class ResponseCache:
    def __init__(self, store: KeyValueStore, ttls: dict[str, int] | None = None) -> None:
        self.store = store
        self.ttls = dict(CACHE_TTL_SECONDS if ttls is None else ttls)

    def ttl_for(self, key: str) -> int:
        return self.ttls[key.split(":", 1)[0]]

    async def get(self, key: str) -> Any | None:
        try:
            raw = await self.store.get(key)
        except StoreError as exc:
            logger.warning("Cache read error for %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        ttl = self.ttl_for(key) if ttl_seconds is None else ttl_seconds
        try:
            await self.store.set(key, json.dumps(value, default=str), ttl)
        except StoreError as exc:
            logger.warning("Cache write error for %s: %s", key, exc)
