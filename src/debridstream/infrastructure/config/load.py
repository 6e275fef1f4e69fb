"""Builds the debridstream AppConfig from its four layers.

Later layers win: built-in defaults, the YAML file given with ``--config``,
``DEBRIDSTREAM_*`` environment variables (including a ``--dotenv`` file),
then the CLI flags (``--base-url``, ``--log-level``, ``--log-format``).
"""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

# Env vars and CLI overrides arrive flat ("debrid_base_url"); YAML and the
# defaults are sectioned ("debrid: {base_url: ...}").
_FLAT_KEYS: dict[str, tuple[str, str]] = {
    "debrid_base_url": ("debrid", "base_url"),
    "debrid_timeout_seconds": ("debrid", "timeout_seconds"),
    "debrid_cache_age_seconds": ("debrid", "cache_age_seconds"),
    "debrid_extra_headers": ("debrid", "extra_headers"),
    "debrid_poll_budget": ("debrid", "poll_budget"),
    "debrid_poll_interval_seconds": ("debrid", "poll_interval_seconds"),
    "cache_backend": ("cache", "backend"),
    "cache_dir": ("cache", "dir"),
    "cache_redis_url": ("cache", "redis_url"),
    "cache_max_concurrent": ("cache", "max_concurrent"),
    "log_level": ("logging", "level"),
    "log_format": ("logging", "format"),
}

_SECTIONS = frozenset(section for section, _ in _FLAT_KEYS.values())
_TOP_LEVEL_KEYS = ("app_name", "environment")


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge *override* into *base* in place; nested sections merge key by key."""
    for key, value in override.items():
        if isinstance(base.get(key), dict) and isinstance(value, Mapping):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _normalize_layer(data: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the sectioned shape (debrid/cache/logging).

    Unknown keys are dropped; a flat key overrides the same key given in a
    section of the same layer.
    """
    out: dict[str, Any] = {
        section: dict(data[section])
        for section in _SECTIONS
        if isinstance(data.get(section), Mapping)
    }
    out.update({key: data[key] for key in _TOP_LEVEL_KEYS if key in data})

    for flat_key, (section, section_key) in _FLAT_KEYS.items():
        if flat_key in data:
            out.setdefault(section, {})[section_key] = data[flat_key]
    return out


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(
            f"{config_path}: expected a mapping with debrid/cache/logging "
            f"sections, got {type(parsed).__name__}"
        )
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Merge all layers and validate them into an AppConfig.

    Never creates files or directories; the diskcache directory is created
    later by the cache adapter.

    Raises:
        FileNotFoundError: *config_path* or *dotenv_path* does not exist.
        pydantic.ValidationError: merged values are invalid (e.g. a bad
            base URL or a malformed extra header).
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        # Exported variables win over the file
        load_dotenv(dotenv_path, override=False)

    merged = _normalize_layer(deepcopy(DEFAULT_CONFIG))

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(config_path)
        _deep_merge(merged, _normalize_layer(_read_yaml_config(config_path)))

    _deep_merge(merged, _normalize_layer(EnvOverrides().to_update_dict()))
    _deep_merge(merged, _normalize_layer(cli_overrides or {}))

    return AppConfig.model_validate(merged)
