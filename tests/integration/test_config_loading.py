"""Integration tests for configuration loading with layered precedence.

Tests the real load_config() function with actual YAML files, environment
variables, and CLI overrides to verify precedence: defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from debridstream.infrastructure.config.load import load_config

pytestmark = pytest.mark.integration


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    """Write a minimal YAML config and return its path."""
    config = {
        "app_name": "debridstream-test",
        "environment": "test",
        "debrid": {
            "base_url": "http://rd-proxy.local:8080/",
            "timeout_seconds": 15.0,
            "extra_headers": ["X-Proxy-Key: abc"],
        },
        "logging": {"level": "DEBUG", "format": "console"},
        "cache": {"dir": str(tmp_path / "cache"), "backend": "diskcache"},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    """Load with no YAML, no ENV, no CLI: pure defaults."""

    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "debridstream"
        assert config.environment == "dev"
        assert config.debrid.base_url == "https://api.real-debrid.com"
        assert config.debrid.timeout_seconds == 5.0
        assert config.debrid.cache_age_seconds == 86400
        assert config.log_level == "INFO"
        assert config.log_format == "console"  # dev → console
        assert config.cache.backend == "diskcache"

    def test_defaults_derive_log_format_from_environment(self) -> None:
        config = load_config(cli_overrides={"environment": "prod"})
        assert config.log_format == "json"


class TestYamlOverrides:
    """YAML values override defaults."""

    def test_yaml_overrides_defaults(self, yaml_config: Path, tmp_path: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "debridstream-test"
        assert config.environment == "test"
        assert config.debrid.base_url == "http://rd-proxy.local:8080"
        assert config.debrid.timeout_seconds == 15.0
        assert config.debrid.extra_headers == ["X-Proxy-Key: abc"]
        assert config.log_level == "DEBUG"
        assert config.cache.directory == tmp_path / "cache"

    def test_yaml_file_not_found_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")

    def test_yaml_partial_override_preserves_defaults(self, tmp_path: Path) -> None:
        """YAML that only sets debrid.timeout_seconds keeps other defaults."""
        path = tmp_path / "partial.yaml"
        path.write_text(yaml.dump({"debrid": {"timeout_seconds": 9.0}}), encoding="utf-8")

        config = load_config(config_path=path)
        assert config.debrid.timeout_seconds == 9.0
        assert config.debrid.poll_budget == 5  # default preserved
        assert config.app_name == "debridstream"  # default preserved

    def test_yaml_malformed_header_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text(
            yaml.dump({"debrid": {"extra_headers": ["X-Missing-Value:"]}}),
            encoding="utf-8",
        )
        with pytest.raises(ValidationError):
            load_config(config_path=path)

    def test_yaml_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(config_path=path)


class TestEnvOverrides:
    """Environment variables override YAML and defaults."""

    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DEBRIDSTREAM_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("DEBRIDSTREAM_DEBRID_TIMEOUT_SECONDS", "60.0")

        config = load_config(config_path=yaml_config)
        assert config.log_level == "WARNING"
        assert config.debrid.timeout_seconds == 60.0
        # YAML values not overridden by ENV stay
        assert config.app_name == "debridstream-test"

    def test_env_overrides_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEBRIDSTREAM_ENVIRONMENT", "prod")

        config = load_config()
        assert config.environment == "prod"
        assert config.log_format == "json"  # prod → json

    def test_env_poll_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DEBRIDSTREAM_DEBRID_POLL_BUDGET", "8")
        monkeypatch.setenv("DEBRIDSTREAM_DEBRID_POLL_INTERVAL_SECONDS", "0.5")
        monkeypatch.setenv("DEBRIDSTREAM_CACHE_MAX_CONCURRENT", "3")

        config = load_config()
        assert config.debrid.poll_budget == 8
        assert config.debrid.poll_interval_seconds == 0.5
        assert config.cache.max_concurrent == 3

    def test_dotenv_file_participates_as_env(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        # setenv+delenv registers the variable with monkeypatch, so the value
        # load_dotenv writes into os.environ is undone on teardown.
        monkeypatch.setenv("DEBRIDSTREAM_CACHE_BACKEND", "diskcache")
        monkeypatch.delenv("DEBRIDSTREAM_CACHE_BACKEND")
        dotenv = tmp_path / ".env"
        dotenv.write_text("DEBRIDSTREAM_CACHE_BACKEND=redis\n", encoding="utf-8")

        config = load_config(dotenv_path=dotenv)
        assert config.cache.backend == "redis"

    def test_missing_dotenv_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / "missing.env")


class TestCliOverrides:
    """CLI overrides beat everything (highest precedence)."""

    def test_cli_overrides_yaml_and_env(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DEBRIDSTREAM_LOG_LEVEL", "WARNING")

        config = load_config(
            config_path=yaml_config,
            cli_overrides={"log_level": "ERROR"},
        )
        assert config.log_level == "ERROR"

    def test_cli_overrides_with_sectioned_format(self, yaml_config: Path) -> None:
        config = load_config(
            config_path=yaml_config,
            cli_overrides={"debrid": {"poll_budget": 3}},
        )
        assert config.debrid.poll_budget == 3
        assert config.debrid.timeout_seconds == 15.0

    def test_cli_base_url(self) -> None:
        config = load_config(cli_overrides={"debrid_base_url": "http://localhost:1234"})
        assert config.debrid.base_url == "http://localhost:1234"
