"""Tests for logging setup and credential masking."""

from __future__ import annotations

import pytest

from debridstream.infrastructure.config.schema import AppConfig
from debridstream.infrastructure.logging.setup import (
    _mask_secrets,
    build_logging_config,
    mask_secret,
)


class TestMaskSecret:
    def test_keeps_prefix(self) -> None:
        assert mask_secret("ABCDEFGHIJ") == "ABCD***"

    @pytest.mark.parametrize("value", ["", "abc", "abcd"])
    def test_short_values_fully_hidden(self, value: str) -> None:
        assert mask_secret(value) == "***"

    def test_processor_masks_known_keys_only(self) -> None:
        event = {
            "event": "x",
            "api_token": "SECRETTOKEN",
            "authorization": "Bearer SECRETTOKEN",
            "torrent_id": "ABCDEFGH",
        }
        out = _mask_secrets(None, None, event)
        assert out["api_token"] == "SECR***"
        assert out["authorization"] == "Bear***"
        assert out["torrent_id"] == "ABCDEFGH"

    def test_processor_ignores_non_strings(self) -> None:
        out = _mask_secrets(None, None, {"token": None})
        assert out["token"] is None


class TestBuildLoggingConfig:
    def test_level_applied_everywhere(self) -> None:
        cfg = build_logging_config(AppConfig(log_level="DEBUG"))
        assert cfg["root"]["level"] == "DEBUG"
        assert cfg["loggers"]["uvicorn"]["level"] == "DEBUG"
        assert cfg["handlers"]["default"]["formatter"] == "structlog"

    def test_httpx_is_quiet(self) -> None:
        cfg = build_logging_config(AppConfig())
        assert cfg["loggers"]["httpx"]["level"] == "WARNING"

    def test_base_config_not_mutated(self) -> None:
        build_logging_config(AppConfig(log_level="ERROR"))
        cfg = build_logging_config(AppConfig(log_level="INFO"))
        assert cfg["loggers"]["uvicorn"]["level"] == "INFO"
