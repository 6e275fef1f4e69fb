from __future__ import annotations

from .load import load_config
from .schema import AppConfig, CacheConfig, DebridConfig, EnvOverrides

__all__ = ["AppConfig", "CacheConfig", "DebridConfig", "EnvOverrides", "load_config"]
