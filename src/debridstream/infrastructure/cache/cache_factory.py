"""Cache factory - creates the storage adapter selected in config."""

from __future__ import annotations

from typing import Literal

import structlog

from debridstream.domain.ports.cache import CachePort
from debridstream.infrastructure.cache.diskcache_adapter import DiskcacheAdapter
from debridstream.infrastructure.cache.redis_adapter import RedisAdapter

log = structlog.get_logger(__name__)

CacheBackend = Literal["diskcache", "redis"]


def create_cache(
    backend: CacheBackend = "diskcache",
    *,
    directory: str = "./.cache/debridstream",
    redis_url: str = "redis://localhost:6379/0",
    ttl_seconds: int = 86400,
    max_concurrent: int = 10,
) -> CachePort:
    """Create a cache adapter for *backend*.

    Args:
        backend: "diskcache" (SQLite) or "redis".
        directory: Diskcache path.
        redis_url: Redis connection string.
        ttl_seconds: Default storage TTL (stores pass their own per entry).
        max_concurrent: Semaphore limit for parallel cache operations.

    Raises:
        ValueError: Unknown `backend`.
    """
    if backend == "diskcache":
        log.info("cache_factory_create", backend=backend, directory=directory)
        return DiskcacheAdapter(
            directory=directory,
            ttl_seconds=ttl_seconds,
            max_concurrent=max_concurrent,
        )
    if backend == "redis":
        log.info("cache_factory_create", backend=backend, url=redis_url)
        return RedisAdapter(
            url=redis_url,
            ttl_seconds=ttl_seconds,
            max_concurrent=max_concurrent,
        )
    raise ValueError(
        f"Unknown cache backend: {backend!r}. Must be 'diskcache' or 'redis'."
    )
