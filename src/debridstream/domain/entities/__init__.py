from .debrid import (
    AccountLockedError,
    BadStatusError,
    DebridError,
    DebridTransportError,
    InvalidConfigurationError,
    InvalidCredentialError,
    MalformedResponseError,
    NoEligibleFileError,
    PollTimeoutError,
    TerminalTorrentStatusError,
    TorrentFile,
    TorrentResolution,
    TorrentStatus,
)

__all__ = [
    "AccountLockedError",
    "BadStatusError",
    "DebridError",
    "DebridTransportError",
    "InvalidConfigurationError",
    "InvalidCredentialError",
    "MalformedResponseError",
    "NoEligibleFileError",
    "PollTimeoutError",
    "TerminalTorrentStatusError",
    "TorrentFile",
    "TorrentResolution",
    "TorrentStatus",
]
