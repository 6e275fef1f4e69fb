"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from debridstream.application.debrid_client import validate_base_url
from debridstream.infrastructure.debrid.httpx_transport import parse_extra_headers

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class DebridConfig(BaseModel):
    """Remote debrid service settings."""

    base_url: str = Field(
        default="https://api.real-debrid.com",
        description=(
            "API base URL. May point at a proxy; URLs returned by the API are "
            "rewritten onto it."
        ),
    )
    timeout_seconds: float = Field(
        default=5.0,
        description="Per-request network timeout in seconds.",
    )
    cache_age_seconds: int = Field(
        default=86400,
        description="How long a confirmed instant availability stays trusted.",
    )
    extra_headers: list[str] = Field(
        default_factory=list,
        description='Static headers added to every request ("X-Foo: bar").',
    )
    poll_budget: int = Field(
        default=5,
        description="Torrent status polls before giving up.",
    )
    poll_interval_seconds: float = Field(
        default=1.0,
        description="Wait between torrent status polls.",
    )

    @field_validator("base_url")
    @classmethod
    def _validate_base_url(cls, v: str) -> str:
        return validate_base_url(v)

    @field_validator("extra_headers")
    @classmethod
    def _validate_extra_headers(cls, v: list[str]) -> list[str]:
        parse_extra_headers(v)
        return v

    @field_validator("timeout_seconds", "poll_interval_seconds")
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("cache_age_seconds")
    @classmethod
    def _validate_cache_age(cls, v: int) -> int:
        if v < 0:
            raise ValueError("cache_age_seconds must be >= 0")
        return v

    @field_validator("poll_budget")
    @classmethod
    def _validate_poll_budget(cls, v: int) -> int:
        if v < 1:
            raise ValueError("poll_budget must be >= 1")
        return v


class CacheConfig(BaseModel):
    """Cache storage configuration (backend-agnostic)."""

    backend: Literal["diskcache", "redis"] = Field(
        default="diskcache",
        description="Cache backend: 'diskcache' (SQLite) or 'redis'",
    )
    directory: Path = Field(
        default=Path("./.cache/debridstream"),
        validation_alias=AliasChoices("directory", "dir"),
        description="Diskcache SQLite DB path",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (only when backend=redis)",
    )
    max_concurrent: int = Field(
        default=10,
        description="Max parallel cache ops (semaphore limit)",
    )

    @field_validator("directory", mode="before")
    @classmethod
    def _validate_directory(cls, v: Any) -> Path:
        return _normalize_path(v)


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (debrid/cache/logging).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    app_name: str = Field(default="debridstream", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    debrid: DebridConfig = Field(default_factory=DebridConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read DEBRIDSTREAM_* variables, converts
    the set values to a dict, merges it over YAML/defaults, then validates
    AppConfig.

    Supported env var examples (flat, explicit):
    - DEBRIDSTREAM_DEBRID_BASE_URL
    - DEBRIDSTREAM_DEBRID_TIMEOUT_SECONDS
    - DEBRIDSTREAM_DEBRID_EXTRA_HEADERS='["X-Foo: bar"]'
    - DEBRIDSTREAM_DEBRID_POLL_BUDGET
    - DEBRIDSTREAM_CACHE_BACKEND
    - DEBRIDSTREAM_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="DEBRIDSTREAM_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    debrid_base_url: Optional[str] = None
    debrid_timeout_seconds: Optional[float] = None
    debrid_cache_age_seconds: Optional[int] = None
    debrid_extra_headers: Optional[list[str]] = None
    debrid_poll_budget: Optional[int] = None
    debrid_poll_interval_seconds: Optional[float] = None

    cache_backend: Optional[Literal["diskcache", "redis"]] = None
    cache_dir: Optional[Path] = None
    cache_redis_url: Optional[str] = None
    cache_max_concurrent: Optional[int] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    @field_validator("cache_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
