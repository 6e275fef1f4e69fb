"""Port for authenticated requests against the debrid REST API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol, runtime_checkable


@runtime_checkable
class DebridTransportPort(Protocol):
    """Performs authenticated GET/POST calls and returns the raw body.

    Implementations raise:
      - InvalidCredentialError on HTTP 401
      - AccountLockedError on HTTP 403
      - BadStatusError on any other non-success status
      - DebridTransportError on network failures
    """

    async def get(self, url: str, api_token: str) -> bytes: ...

    async def post(
        self, url: str, api_token: str, data: Mapping[str, str]
    ) -> bytes: ...
