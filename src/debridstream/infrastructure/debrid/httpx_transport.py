"""httpx transport for the Real-Debrid REST API.

Adds the bearer token, operator-configured static headers and a randomized
browser User-Agent (the service has been known to block requests based on
the User-Agent), then classifies the response status:

    401 -> InvalidCredentialError
    403 -> AccountLockedError
    other non-success -> BadStatusError (with body, if any)
"""

from __future__ import annotations

import random
from collections.abc import Iterable, Mapping

import httpx
import structlog

from debridstream.domain.entities.debrid import (
    AccountLockedError,
    BadStatusError,
    DebridTransportError,
    InvalidConfigurationError,
    InvalidCredentialError,
)

log = structlog.get_logger(__name__)

_GET_OK = frozenset({200})
# Different POST endpoints answer with different success codes.
_POST_OK = frozenset({200, 201, 204})

_USER_AGENT_TEMPLATE = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/80.0.{build}.149 Safari/537.36"
)


def parse_extra_headers(raw_headers: Iterable[str]) -> dict[str, str]:
    """Parse ``"Name: Value"`` strings into a header dict.

    Empty strings are skipped. The colon must be neither the first nor the
    last character.

    Raises:
        InvalidConfigurationError: an element is malformed.
    """
    headers: dict[str, str] = {}
    for raw in raw_headers:
        if not raw:
            continue
        colon = raw.find(":")
        if colon <= 0 or colon == len(raw) - 1:
            raise InvalidConfigurationError(
                f'extra headers must have a format like "X-Foo: bar", got {raw!r}'
            )
        name, value = raw.split(":", 1)
        headers[name.strip()] = value.strip()
    return headers


def _random_user_agent() -> str:
    return _USER_AGENT_TEMPLATE.format(build=random.randint(0, 9999))  # noqa: S311


class HttpxDebridTransport:
    """DebridTransportPort implementation over a shared ``httpx.AsyncClient``.

    The per-request timeout is whatever the client was configured with.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        extra_headers: Iterable[str] = (),
    ) -> None:
        self._http = http_client
        self._extra_headers = parse_extra_headers(extra_headers)

    async def get(self, url: str, api_token: str) -> bytes:
        return await self._request("GET", url, api_token, ok=_GET_OK)

    async def post(self, url: str, api_token: str, data: Mapping[str, str]) -> bytes:
        return await self._request("POST", url, api_token, ok=_POST_OK, data=data)

    async def _request(
        self,
        method: str,
        url: str,
        api_token: str,
        *,
        ok: frozenset[int],
        data: Mapping[str, str] | None = None,
    ) -> bytes:
        headers = dict(self._extra_headers)
        headers["Authorization"] = f"Bearer {api_token}"
        headers["User-Agent"] = _random_user_agent()

        try:
            resp = await self._http.request(
                method,
                url,
                headers=headers,
                data=dict(data) if data is not None else None,
            )
        except httpx.HTTPError as e:
            log.warning("debrid_request_failed", method=method, url=url, error=str(e))
            raise DebridTransportError(
                f"Couldn't send {method} request to '{url}': {e}"
            ) from e

        if resp.status_code in ok:
            return resp.content

        if resp.status_code == 401:
            raise InvalidCredentialError("Invalid token")
        if resp.status_code == 403:
            raise AccountLockedError("Account locked")

        log.warning(
            "debrid_http_error",
            method=method,
            url=url,
            status=resp.status_code,
        )
        raise BadStatusError(resp.status_code, method, url, resp.text)
