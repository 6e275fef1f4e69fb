"""Instant availability use case.

Info hashes confirmed within ``cache_age`` are answered from the cache; the
rest are checked with a single batched request. Unavailable hashes are
never cached because their state can change at any time. A zero
``cache_age`` disables the cache: nothing is read or written.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone

import structlog

from debridstream.application.responses import parse_json_object
from debridstream.domain.ports.debrid_transport import DebridTransportPort
from debridstream.domain.ports.timestamp_store import TimestampStorePort

log = structlog.get_logger(__name__)

_AVAILABILITY_PATH = "/rest/1.0/torrents/instantAvailability"

# Descriptor sub-list that must be non-empty for a hash to count as available.
_PROVIDER_KEY = "rd"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize(info_hashes: Iterable[str]) -> list[str]:
    """Uppercase and de-duplicate, keeping first-seen order."""
    seen: dict[str, None] = {}
    for info_hash in info_hashes:
        if info_hash:
            seen.setdefault(info_hash.upper(), None)
    return list(seen)


class CheckAvailabilityUseCase:
    """Reconciles cached and remote instant-availability knowledge."""

    def __init__(
        self,
        *,
        transport: DebridTransportPort,
        availability_store: TimestampStorePort,
        base_url: str,
        cache_age: timedelta,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transport = transport
        self._store = availability_store
        self._base_url = base_url.rstrip("/")
        self._cache_age = cache_age
        self._use_cache = cache_age > timedelta(0)
        self._now = now

    async def execute(self, api_token: str, info_hashes: Iterable[str]) -> list[str]:
        """Return the uppercased subset of *info_hashes* that is available.

        Raises:
            TypeError: *info_hashes* is a single string instead of a collection.
        """
        if isinstance(info_hashes, (str, bytes)):
            raise TypeError("info_hashes must be a collection of hashes, not a string")
        wanted = _normalize(info_hashes)
        if not wanted:
            return []

        result: list[str] = []
        unresolved: list[str] = []
        for info_hash in wanted:
            if self._use_cache and await self._cached_as_available(
                api_token, info_hash
            ):
                result.append(info_hash)
            else:
                unresolved.append(info_hash)

        if not unresolved:
            return result

        result.extend(await self._check_remote(api_token, unresolved))

        log.debug(
            "availability_checked",
            api_token=api_token,
            requested=len(wanted),
            remote_checked=len(unresolved),
            available=len(result),
        )
        return result

    async def _cached_as_available(self, api_token: str, info_hash: str) -> bool:
        try:
            created = await self._store.get(info_hash)
        except Exception as e:  # noqa: BLE001
            log.error(
                "availability_cache_read_failed",
                api_token=api_token,
                info_hash=info_hash,
                error=str(e),
            )
            return False

        if created is None:
            log.debug("availability_cache_miss", info_hash=info_hash)
            return False

        age = self._now() - created
        if age > self._cache_age:
            log.debug(
                "availability_cache_expired",
                info_hash=info_hash,
                expired_since=str(age - self._cache_age),
            )
            return False

        log.debug("availability_cache_hit", info_hash=info_hash)
        return True

    async def _check_remote(self, api_token: str, info_hashes: list[str]) -> list[str]:
        """One batched request; failures degrade to "nothing confirmed"."""
        url = self._base_url + _AVAILABILITY_PATH + "/" + "/".join(info_hashes)
        try:
            body = await self._transport.get(url, api_token)
            descriptors = parse_json_object(
                body, "Couldn't parse instant availability response"
            )
        except Exception as e:  # noqa: BLE001
            log.error(
                "availability_remote_check_failed",
                api_token=api_token,
                hashes=len(info_hashes),
                error=str(e),
            )
            return []

        requested = set(info_hashes)
        confirmed: list[str] = []
        for key, descriptor in descriptors.items():
            info_hash = key.upper()
            if info_hash not in requested or info_hash in confirmed:
                continue
            if not isinstance(descriptor, dict):
                continue
            providers = descriptor.get(_PROVIDER_KEY)
            if not isinstance(providers, list) or not providers:
                continue

            confirmed.append(info_hash)
            if not self._use_cache:
                continue
            try:
                await self._store.set(info_hash)
            except Exception as e:  # noqa: BLE001
                log.error(
                    "availability_cache_write_failed",
                    api_token=api_token,
                    info_hash=info_hash,
                    error=str(e),
                )

        return confirmed
