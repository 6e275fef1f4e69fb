"""Pick the file to fetch from a torrent's file listing."""

from __future__ import annotations

from collections.abc import Sequence

from debridstream.domain.entities.debrid import NoEligibleFileError, TorrentFile


def select_file_id(files: Sequence[TorrentFile]) -> int:
    """Return the id of the largest file.

    Scans in input order and only replaces the current pick on a strictly
    larger size, so the first file with the maximum size wins.

    Raises:
        NoEligibleFileError: empty listing, or no positive id after the scan
            (all sizes zero, or the winning entry carries id 0).
    """
    if not files:
        raise NoEligibleFileError("Empty list of files")

    file_id = 0
    size = 0
    for f in files:
        if f.size > size:
            size = f.size
            file_id = f.id

    if file_id <= 0:
        raise NoEligibleFileError("No file ID found")
    return file_id
