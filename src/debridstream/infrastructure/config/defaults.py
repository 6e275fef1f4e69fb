"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "debridstream",
    "environment": "dev",
    "debrid": {
        "base_url": "https://api.real-debrid.com",
        "timeout_seconds": 5.0,
        "cache_age_seconds": 86400,
        "extra_headers": [],
        "poll_budget": 5,
        "poll_interval_seconds": 1.0,
    },
    "cache": {
        "backend": "diskcache",
        "dir": "./.cache/debridstream",
        "redis_url": "redis://localhost:6379/0",
        "max_concurrent": 10,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
}
