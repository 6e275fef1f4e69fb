"""Unrestrict use case: debrid-internal link -> public download URL."""

from __future__ import annotations

import structlog

from debridstream.application.responses import parse_json_object
from debridstream.domain.entities.debrid import MalformedResponseError
from debridstream.domain.ports.debrid_transport import DebridTransportPort

log = structlog.get_logger(__name__)

_UNRESTRICT_PATH = "/rest/1.0/unrestrict/link"


class UnrestrictLinkUseCase:
    def __init__(self, *, transport: DebridTransportPort, base_url: str) -> None:
        self._transport = transport
        self._base_url = base_url.rstrip("/")

    async def execute(self, api_token: str, link: str, remote: bool = False) -> str:
        """Return the streamable URL for *link*.

        With *remote* set, the service is told the target is a remote/cloud
        destination rather than a direct download.
        """
        data = {"link": link}
        if remote:
            data["remote"] = "1"

        log.debug("unrestrict_started", api_token=api_token, remote=remote)
        body = await self._transport.post(
            self._base_url + _UNRESTRICT_PATH, api_token, data
        )

        response = parse_json_object(body, "Couldn't unrestrict link")
        download = response.get("download")
        if not isinstance(download, str) or not download:
            raise MalformedResponseError(
                "Couldn't unrestrict link: response body doesn't contain \"download\" key"
            )

        log.debug("unrestrict_done", api_token=api_token, stream_url=download)
        return download
