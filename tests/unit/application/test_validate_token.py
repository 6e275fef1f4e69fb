"""Tests for ValidateTokenUseCase."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock

import pytest

from debridstream.application.use_cases.validate_token import ValidateTokenUseCase
from debridstream.domain.entities.debrid import (
    DebridTransportError,
    InvalidCredentialError,
    MalformedResponseError,
)

_NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
_USER_URL = "https://api.real-debrid.com/rest/1.0/user"


def _body(data: Any) -> bytes:
    return json.dumps(data).encode()


def _make_use_case(transport: AsyncMock, store: Any) -> ValidateTokenUseCase:
    return ValidateTokenUseCase(
        transport=transport,
        token_store=store,
        base_url="https://api.real-debrid.com/",
        now=lambda: _NOW,
    )


class TestCachedToken:
    async def test_fresh_entry_skips_remote_call(
        self, mock_transport: AsyncMock, token_store: Any
    ) -> None:
        token_store.put("tok", timedelta(hours=23))
        await _make_use_case(mock_transport, token_store).execute("tok")
        mock_transport.get.assert_not_awaited()
        assert token_store.set_calls == []

    async def test_entry_exactly_24h_old_is_still_fresh(
        self, mock_transport: AsyncMock, token_store: Any
    ) -> None:
        token_store.put("tok", timedelta(hours=24))
        await _make_use_case(mock_transport, token_store).execute("tok")
        mock_transport.get.assert_not_awaited()

    async def test_stale_entry_triggers_remote_check(
        self, mock_transport: AsyncMock, token_store: Any
    ) -> None:
        token_store.put("tok", timedelta(hours=24, seconds=1))
        mock_transport.get.return_value = _body({"id": 42, "username": "u"})

        await _make_use_case(mock_transport, token_store).execute("tok")

        mock_transport.get.assert_awaited_once_with(_USER_URL, "tok")
        assert token_store.set_calls == ["tok"]


class TestRemoteCheck:
    async def test_cache_miss_checks_and_caches(
        self, mock_transport: AsyncMock, token_store: Any
    ) -> None:
        mock_transport.get.return_value = _body({"id": 1})
        await _make_use_case(mock_transport, token_store).execute("tok")
        mock_transport.get.assert_awaited_once_with(_USER_URL, "tok")
        assert token_store.set_calls == ["tok"]

    async def test_cache_read_error_is_treated_as_miss(
        self, mock_transport: AsyncMock, token_store: Any
    ) -> None:
        token_store.get_error = RuntimeError("disk gone")
        mock_transport.get.return_value = _body({"id": 1})
        await _make_use_case(mock_transport, token_store).execute("tok")
        mock_transport.get.assert_awaited_once()

    async def test_cache_write_error_does_not_fail(
        self, mock_transport: AsyncMock, token_store: Any
    ) -> None:
        token_store.set_error = RuntimeError("read-only")
        mock_transport.get.return_value = _body({"id": 1})
        await _make_use_case(mock_transport, token_store).execute("tok")
        assert token_store.set_calls == ["tok"]

    async def test_invalid_token_propagates_and_is_not_cached(
        self, mock_transport: AsyncMock, token_store: Any
    ) -> None:
        mock_transport.get.side_effect = InvalidCredentialError("Invalid token")
        with pytest.raises(InvalidCredentialError):
            await _make_use_case(mock_transport, token_store).execute("tok")
        assert token_store.set_calls == []

    async def test_transport_failure_propagates(
        self, mock_transport: AsyncMock, token_store: Any
    ) -> None:
        mock_transport.get.side_effect = DebridTransportError("timeout")
        with pytest.raises(DebridTransportError):
            await _make_use_case(mock_transport, token_store).execute("tok")

    async def test_missing_id_is_malformed(
        self, mock_transport: AsyncMock, token_store: Any
    ) -> None:
        mock_transport.get.return_value = _body({"username": "u"})
        with pytest.raises(MalformedResponseError):
            await _make_use_case(mock_transport, token_store).execute("tok")
        assert token_store.set_calls == []

    async def test_non_json_body_is_malformed(
        self, mock_transport: AsyncMock, token_store: Any
    ) -> None:
        mock_transport.get.return_value = b"<html>maintenance</html>"
        with pytest.raises(MalformedResponseError):
            await _make_use_case(mock_transport, token_store).execute("tok")
