"""Timestamp store backed by CachePort (diskcache/redis).

Each entry is the ISO-8601 UTC time the key was confirmed. The storage TTL
lets the backend evict entries the use cases would treat as stale anyway.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone

import structlog

from debridstream.domain.ports.cache import CachePort

log = structlog.get_logger(__name__)


class CorruptCacheEntryError(ValueError):
    """Stored value is not a readable timestamp."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _serialize_timestamp(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).isoformat()


def _deserialize_timestamp(data: object) -> datetime:
    if not isinstance(data, str):
        raise CorruptCacheEntryError(f"expected str, got {type(data).__name__}")
    try:
        ts = datetime.fromisoformat(data)
    except ValueError as e:
        raise CorruptCacheEntryError(str(e)) from e
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class CacheTimestampStore:
    """Stores "confirmed at" timestamps under ``{namespace}:{key}``."""

    def __init__(
        self,
        cache: CachePort,
        namespace: str,
        ttl_seconds: int = 86400,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.cache = cache
        self.namespace = namespace
        self.ttl = ttl_seconds
        self._now = now

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def set(self, key: str) -> None:
        """Record the current time for *key*."""
        await self.cache.set(
            self._key(key), _serialize_timestamp(self._now()), ttl=self.ttl
        )
        log.debug("timestamp_saved", namespace=self.namespace, ttl=self.ttl)

    async def get(self, key: str) -> datetime | None:
        """Return the stored time, ``None`` if absent.

        Raises:
            CorruptCacheEntryError: the stored value cannot be parsed.
        """
        data = await self.cache.get(self._key(key))
        if data is None:
            return None
        return _deserialize_timestamp(data)
