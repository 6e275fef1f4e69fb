"""Magnet -> stream URL resolution use case.

Submit magnet -> inspect torrent -> select file -> commit selection
-> poll until downloaded -> unrestrict link.

Each step depends on the result of the previous one, so the flow is
strictly sequential. The poll loop is a bounded wait: one shared budget
for the queued and downloading phases, with a fixed interval between polls.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from debridstream.application.file_selector import select_file_id
from debridstream.application.responses import as_int, parse_json_object
from debridstream.application.url_rewrite import rewrite_base_url
from debridstream.application.use_cases.unrestrict_link import UnrestrictLinkUseCase
from debridstream.domain.entities.debrid import (
    MalformedResponseError,
    PollTimeoutError,
    TerminalTorrentStatusError,
    TorrentFile,
    TorrentResolution,
    TorrentStatus,
)
from debridstream.domain.ports.debrid_transport import DebridTransportPort

log = structlog.get_logger(__name__)

_ADD_MAGNET_PATH = "/rest/1.0/torrents/addMagnet"
_SELECT_FILES_PATH = "/rest/1.0/torrents/selectFiles/"

DEFAULT_POLL_BUDGET = 5
DEFAULT_POLL_INTERVAL = 1.0

_SleepFn = Callable[[float], Awaitable[Any]]


def _parse_files(raw_files: Any) -> list[TorrentFile]:
    if not isinstance(raw_files, list):
        return []
    return [
        TorrentFile(id=as_int(f.get("id")), size=as_int(f.get("bytes")))
        for f in raw_files
        if isinstance(f, dict)
    ]


class ResolveStreamUseCase:
    """Drives a single magnet link until it becomes a streamable URL."""

    def __init__(
        self,
        *,
        transport: DebridTransportPort,
        unrestrict: UnrestrictLinkUseCase,
        base_url: str,
        poll_budget: int = DEFAULT_POLL_BUDGET,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: _SleepFn = asyncio.sleep,
    ) -> None:
        if poll_budget < 1:
            raise ValueError("poll_budget must be >= 1")
        self._transport = transport
        self._unrestrict = unrestrict
        self._base_url = base_url.rstrip("/")
        self._poll_budget = poll_budget
        self._poll_interval = poll_interval
        self._sleep = sleep

    async def execute(
        self, api_token: str, magnet: str, remote: bool = False
    ) -> TorrentResolution:
        """Resolve *magnet* and return the finished resolution.

        Raises:
            DebridError: any step failed; see the subclass for the reason.
        """
        resolution = TorrentResolution(magnet=magnet, remote=remote)

        # 1) Submit magnet
        resolution.torrent_url = await self._add_magnet(api_token, magnet)

        # 2) Inspect torrent
        info = await self._fetch_info(api_token, resolution.torrent_url)
        torrent_id = info.get("id")
        if torrent_id is None or str(torrent_id) == "":
            raise MalformedResponseError(
                "Couldn't get torrent info: response body doesn't contain \"id\" key"
            )
        resolution.torrent_id = str(torrent_id)
        resolution.files = _parse_files(info.get("files"))
        if not resolution.files:
            raise MalformedResponseError(
                "Couldn't get torrent info: response body doesn't contain \"files\" key"
            )

        # 3) Select file
        resolution.selected_file_id = select_file_id(resolution.files)
        log.debug(
            "torrent_info_ok",
            api_token=api_token,
            torrent_id=resolution.torrent_id,
            files=len(resolution.files),
            selected_file_id=resolution.selected_file_id,
        )

        # 4) Commit selection
        await self._transport.post(
            self._base_url + _SELECT_FILES_PATH + resolution.torrent_id,
            api_token,
            {"files": str(resolution.selected_file_id)},
        )
        log.debug(
            "torrent_files_selected",
            api_token=api_token,
            torrent_id=resolution.torrent_id,
        )

        # 5) Poll until downloaded
        info = await self._wait_until_downloaded(api_token, resolution)

        # 6) First link of the finished torrent
        links = info.get("links")
        if not isinstance(links, list) or not links or not links[0]:
            raise MalformedResponseError(
                "Couldn't get torrent info: downloaded torrent has no \"links\""
            )
        resolution.debrid_link = str(links[0])
        log.debug(
            "torrent_downloaded",
            api_token=api_token,
            torrent_id=resolution.torrent_id,
            polls=resolution.polls,
        )

        # 7) Unrestrict
        resolution.stream_url = await self._unrestrict.execute(
            api_token, resolution.debrid_link, resolution.remote
        )
        log.info(
            "stream_resolved",
            api_token=api_token,
            torrent_id=resolution.torrent_id,
            polls=resolution.polls,
        )
        return resolution

    async def _add_magnet(self, api_token: str, magnet: str) -> str:
        log.debug("magnet_adding", api_token=api_token)
        body = await self._transport.post(
            self._base_url + _ADD_MAGNET_PATH, api_token, {"magnet": magnet}
        )
        response = parse_json_object(body, "Couldn't add torrent")
        uri = response.get("uri")
        if not isinstance(uri, str) or not uri:
            raise MalformedResponseError(
                "Couldn't add torrent: response body doesn't contain \"uri\" key"
            )

        # Route follow-up traffic through the configured base (may be a proxy)
        try:
            return rewrite_base_url(uri, self._base_url)
        except ValueError as e:
            raise MalformedResponseError(f"Couldn't rewrite torrent URL: {e}") from e

    async def _fetch_info(self, api_token: str, torrent_url: str) -> dict[str, Any]:
        body = await self._transport.get(torrent_url, api_token)
        return parse_json_object(body, "Couldn't get torrent info")

    async def _wait_until_downloaded(
        self, api_token: str, resolution: TorrentResolution
    ) -> dict[str, Any]:
        """Poll the torrent info URL until ``downloaded`` or budget exhausted."""
        for attempt in range(1, self._poll_budget + 1):
            info = await self._fetch_info(api_token, resolution.torrent_url)
            resolution.polls = attempt

            raw_status = info.get("status")
            resolution.raw_status = raw_status if isinstance(raw_status, str) else ""
            resolution.status = TorrentStatus.from_remote(raw_status)

            if resolution.status.is_terminal_failure:
                log.warning(
                    "torrent_failed",
                    api_token=api_token,
                    torrent_id=resolution.torrent_id,
                    status=resolution.raw_status,
                )
                raise TerminalTorrentStatusError(resolution.raw_status)

            if resolution.status.is_downloaded:
                return info

            remaining = self._poll_budget - attempt
            log.debug(
                "torrent_waiting",
                api_token=api_token,
                torrent_id=resolution.torrent_id,
                status=resolution.raw_status,
                remaining_polls=remaining,
            )
            if remaining:
                await self._sleep(self._poll_interval)

        waited = self._poll_budget * self._poll_interval
        log.info(
            "torrent_poll_timeout",
            api_token=api_token,
            torrent_id=resolution.torrent_id,
            status=resolution.raw_status,
            waited_seconds=waited,
        )
        raise PollTimeoutError(resolution.raw_status or "unknown", waited)
