"""Shared test fixtures for debridstream test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeTimestampStore:
    """In-memory TimestampStorePort with injectable failures."""

    def __init__(self, now: datetime = NOW) -> None:
        self.entries: dict[str, datetime] = {}
        self.now = now
        self.get_error: Exception | None = None
        self.set_error: Exception | None = None
        self.get_calls: list[str] = []
        self.set_calls: list[str] = []

    def put(self, key: str, age: timedelta) -> None:
        self.entries[key] = self.now - age

    async def get(self, key: str) -> datetime | None:
        self.get_calls.append(key)
        if self.get_error is not None:
            raise self.get_error
        return self.entries.get(key)

    async def set(self, key: str) -> None:
        self.set_calls.append(key)
        if self.set_error is not None:
            raise self.set_error
        self.entries[key] = self.now


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def token_store() -> FakeTimestampStore:
    return FakeTimestampStore()


@pytest.fixture()
def availability_store() -> FakeTimestampStore:
    return FakeTimestampStore()


@pytest.fixture()
def mock_transport() -> AsyncMock:
    """Mock DebridTransportPort."""
    transport = AsyncMock()
    transport.get = AsyncMock(return_value=b"{}")
    transport.post = AsyncMock(return_value=b"{}")
    return transport


@pytest.fixture()
def mock_cache() -> AsyncMock:
    """Mock CachePort."""
    cache = AsyncMock()
    cache.get = AsyncMock(return_value=None)
    cache.set = AsyncMock()
    cache.aclose = AsyncMock()
    return cache
