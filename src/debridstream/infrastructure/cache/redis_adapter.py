"""Redis-Adapter - Async Redis via redis.asyncio."""

from __future__ import annotations

import asyncio
import pickle
from typing import Any

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

log = structlog.get_logger(__name__)


class RedisAdapter:
    """Async Redis cache with bounded parallelism.

    Read/write failures are raised to the caller; the debrid use cases treat
    them as cache misses or log-and-continue.

    Args:
        url: Redis URL (e.g. `redis://localhost:6379/0`).
        ttl_seconds: Default TTL.
        max_concurrent: Max parallel Redis ops.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        ttl_seconds: int = 86400,
        max_concurrent: int = 50,
    ) -> None:
        self.url = url
        self.default_ttl = ttl_seconds
        self._client: Redis | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    async def __aenter__(self) -> RedisAdapter:
        """Initialize Redis client (connection pool) and PING it."""
        if self._client is None:
            self._client = Redis.from_url(self.url, decode_responses=False)
            try:
                await self._client.ping()
                log.info("redis_connected", url=self.url)
            except RedisError as e:
                log.error("redis_connection_failed", url=self.url, error=str(e))
                await self._client.aclose()
                self._client = None
                raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            log.info("redis_closed")

    def _require_open(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Redis not initialized. Use 'async with cache:'")
        return self._client

    async def get(self, key: str) -> Any | None:
        """GET with pickle deserialization."""
        client = self._require_open()
        async with self._semaphore:
            raw = await client.get(key)
        if raw is None:
            log.debug("cache_miss", key=key)
            return None
        log.debug("cache_hit", key=key)
        return pickle.loads(raw)  # noqa: S301

    async def set(self, key: str, value: Any, *, ttl: int | None = None) -> None:
        """SET with pickle serialization; `ttl=0` stores without expiry."""
        client = self._require_open()
        expire_time = ttl if ttl is not None else self.default_ttl
        packed = pickle.dumps(value)
        async with self._semaphore:
            if expire_time:
                await client.setex(key, expire_time, packed)
            else:
                await client.set(key, packed)
        log.debug("cache_set", key=key, ttl=expire_time, size_bytes=len(packed))
