"""Token validation use case.

Only valid tokens are cached; a rejected token is checked again on every call.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import structlog

from debridstream.application.responses import parse_json_object
from debridstream.domain.entities.debrid import MalformedResponseError
from debridstream.domain.ports.debrid_transport import DebridTransportPort
from debridstream.domain.ports.timestamp_store import TimestampStorePort

log = structlog.get_logger(__name__)

TOKEN_TTL = timedelta(hours=24)

_USER_PATH = "/rest/1.0/user"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ValidateTokenUseCase:
    """Checks an API token, consulting the token cache before the service."""

    def __init__(
        self,
        *,
        transport: DebridTransportPort,
        token_store: TimestampStorePort,
        base_url: str,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transport = transport
        self._store = token_store
        self._base_url = base_url.rstrip("/")
        self._now = now

    async def execute(self, api_token: str) -> None:
        """Raise a DebridError if *api_token* is not valid."""
        log.debug("token_check_started", api_token=api_token)

        if await self._cached_as_valid(api_token):
            return

        try:
            body = await self._transport.get(self._base_url + _USER_PATH, api_token)
        except Exception as e:
            log.info("token_check_failed", api_token=api_token, error=str(e))
            raise

        user = parse_json_object(body, "Couldn't parse user info response")
        if "id" not in user:
            raise MalformedResponseError(
                "Couldn't parse user info response: missing \"id\" key"
            )

        log.debug("token_ok", api_token=api_token)

        try:
            await self._store.set(api_token)
        except Exception as e:  # noqa: BLE001
            log.error("token_cache_write_failed", api_token=api_token, error=str(e))

    async def _cached_as_valid(self, api_token: str) -> bool:
        try:
            created = await self._store.get(api_token)
        except Exception as e:  # noqa: BLE001
            log.error("token_cache_read_failed", api_token=api_token, error=str(e))
            return False

        if created is None:
            log.debug("token_cache_miss", api_token=api_token)
            return False

        age = self._now() - created
        if age > TOKEN_TTL:
            log.debug(
                "token_cache_expired",
                api_token=api_token,
                expired_since=str(age - TOKEN_TTL),
            )
            return False

        log.debug("token_cache_hit", api_token=api_token)
        return True
