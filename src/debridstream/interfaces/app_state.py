"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from debridstream.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from debridstream.application.debrid_client import DebridClient
    from debridstream.domain.ports import CachePort


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    cache: CachePort
    http_client: httpx.AsyncClient

    # Application Services
    debrid_client: DebridClient
