"""Port for "confirmed at" timestamp caches (token validity, availability)."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class TimestampStorePort(Protocol):
    """Remembers when a key was last confirmed.

    ``get`` returns the insertion time or ``None`` when the key is unknown,
    and raises when the stored entry cannot be read. ``set`` records "now".
    Implementations must tolerate concurrent calls for different keys.
    """

    async def get(self, key: str) -> datetime | None: ...

    async def set(self, key: str) -> None: ...
