"""Caller-facing entry point bundling the debrid use cases."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urlsplit

from debridstream.application.use_cases.check_availability import (
    CheckAvailabilityUseCase,
)
from debridstream.application.use_cases.resolve_stream import (
    DEFAULT_POLL_BUDGET,
    DEFAULT_POLL_INTERVAL,
    ResolveStreamUseCase,
)
from debridstream.application.use_cases.unrestrict_link import UnrestrictLinkUseCase
from debridstream.application.use_cases.validate_token import ValidateTokenUseCase
from debridstream.domain.entities.debrid import InvalidConfigurationError
from debridstream.domain.ports.debrid_transport import DebridTransportPort
from debridstream.domain.ports.timestamp_store import TimestampStorePort


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_base_url(base_url: str) -> str:
    """Return *base_url* without trailing slash, or raise if unusable."""
    if not base_url:
        raise InvalidConfigurationError("base_url must not be empty")
    parts = urlsplit(base_url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidConfigurationError(
            f"base_url must be an absolute http(s) URL, got {base_url!r}"
        )
    return base_url.rstrip("/")


class DebridClient:
    """Token validation, availability checks and stream resolution.

    Both stores are injected so callers (and tests) own their lifecycle.
    """

    def __init__(
        self,
        *,
        transport: DebridTransportPort,
        token_store: TimestampStorePort,
        availability_store: TimestampStorePort,
        base_url: str,
        cache_age: timedelta = timedelta(hours=24),
        poll_budget: int = DEFAULT_POLL_BUDGET,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.base_url = validate_base_url(base_url)

        self._validate_token = ValidateTokenUseCase(
            transport=transport,
            token_store=token_store,
            base_url=self.base_url,
            now=now,
        )
        self._check_availability = CheckAvailabilityUseCase(
            transport=transport,
            availability_store=availability_store,
            base_url=self.base_url,
            cache_age=cache_age,
            now=now,
        )
        self._resolve_stream = ResolveStreamUseCase(
            transport=transport,
            unrestrict=UnrestrictLinkUseCase(transport=transport, base_url=self.base_url),
            base_url=self.base_url,
            poll_budget=poll_budget,
            poll_interval=poll_interval,
            sleep=sleep,
        )

    async def validate_token(self, api_token: str) -> None:
        await self._validate_token.execute(api_token)

    async def check_availability(
        self, api_token: str, info_hashes: Iterable[str]
    ) -> list[str]:
        return await self._check_availability.execute(api_token, info_hashes)

    async def get_stream_url(
        self, api_token: str, magnet: str, remote: bool = False
    ) -> str:
        resolution = await self._resolve_stream.execute(api_token, magnet, remote)
        return resolution.stream_url
