"""Domain entities for debrid torrent resolution.

Pure value objects and errors; no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class TorrentStatus(Enum):
    """Torrent states reported by the debrid service.

    ``UNRECOGNIZED`` covers values the service may add in the future;
    they are treated as "still in progress".
    """

    MAGNET_ERROR = "magnet_error"
    MAGNET_CONVERSION = "magnet_conversion"
    WAITING_FILES_SELECTION = "waiting_files_selection"
    QUEUED = "queued"
    DOWNLOADING = "downloading"
    DOWNLOADED = "downloaded"
    ERROR = "error"
    VIRUS = "virus"
    COMPRESSING = "compressing"
    UPLOADING = "uploading"
    DEAD = "dead"
    UNRECOGNIZED = "unrecognized"

    @classmethod
    def from_remote(cls, value: object) -> TorrentStatus:
        """Map a raw status value to a member (``UNRECOGNIZED`` if unknown)."""
        if isinstance(value, str):
            for member in cls:
                if member is not cls.UNRECOGNIZED and member.value == value:
                    return member
        return cls.UNRECOGNIZED

    @property
    def is_terminal_failure(self) -> bool:
        return self in _TERMINAL_FAILURES

    @property
    def is_downloaded(self) -> bool:
        return self is TorrentStatus.DOWNLOADED


_TERMINAL_FAILURES = frozenset(
    {
        TorrentStatus.MAGNET_ERROR,
        TorrentStatus.ERROR,
        TorrentStatus.VIRUS,
        TorrentStatus.DEAD,
    }
)


@dataclass(frozen=True)
class TorrentFile:
    """A single file inside a torrent (ids start at 1)."""

    id: int
    size: int  # bytes


@dataclass
class TorrentResolution:
    """Transient state of one magnet -> stream URL resolution.

    Created when the magnet is submitted, discarded when the call returns.
    """

    magnet: str
    remote: bool = False
    torrent_url: str = ""
    torrent_id: str = ""
    status: TorrentStatus | None = None
    raw_status: str = ""
    files: list[TorrentFile] = field(default_factory=list)
    selected_file_id: int | None = None
    polls: int = 0
    debrid_link: str = ""
    stream_url: str = ""


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class DebridError(Exception):
    """Base error for debrid resolution use cases."""


class InvalidCredentialError(DebridError):
    """The service rejected the API token (HTTP 401)."""


class AccountLockedError(DebridError):
    """The account behind the API token is locked (HTTP 403)."""


class DebridTransportError(DebridError):
    """Network / IO failure while talking to the service."""


class MalformedResponseError(DebridError):
    """An expected field is absent or the body is unparseable."""


class BadStatusError(DebridError):
    """Non-success HTTP status other than 401/403."""

    def __init__(
        self, status_code: int, method: str, url: str, body: str = ""
    ) -> None:
        self.status_code = status_code
        self.method = method
        self.url = url
        self.body = body
        message = f"bad HTTP response status: {status_code} ({method} request to '{url}'"
        if body:
            message += f"; response body: '{body}'"
        super().__init__(message + ")")


class TerminalTorrentStatusError(DebridError):
    """Torrent reached a failure state (magnet_error, error, virus, dead)."""

    def __init__(self, status: str) -> None:
        self.status = status
        super().__init__(f"Bad torrent status: {status}")


class PollTimeoutError(DebridError):
    """Torrent did not become ``downloaded`` within the wait budget."""

    def __init__(self, last_status: str, waited_seconds: float) -> None:
        self.last_status = last_status
        self.waited_seconds = waited_seconds
        super().__init__(
            f"Torrent still {last_status} after waiting for "
            f"{waited_seconds:g} seconds"
        )


class NoEligibleFileError(DebridError):
    """The torrent file listing holds no selectable file."""


class InvalidConfigurationError(DebridError, ValueError):
    """Bad base URL or malformed extra header."""
