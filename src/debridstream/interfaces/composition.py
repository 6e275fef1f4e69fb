"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from debridstream.application.debrid_client import DebridClient
from debridstream.application.use_cases.validate_token import TOKEN_TTL
from debridstream.infrastructure.cache.cache_factory import create_cache
from debridstream.infrastructure.debrid.httpx_transport import HttpxDebridTransport
from debridstream.infrastructure.persistence.timestamp_cache import (
    CacheTimestampStore,
)
from debridstream.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Cache (both timestamp stores live in it)
        2. HTTP Client (per-request timeout from config)
        3. DebridClient (transport + stores)
    """
    state = cast(AppState, app.state)
    config = state.config
    debrid = config.debrid

    # ========== 1) Cache ==========
    cache = create_cache(
        backend=config.cache.backend,
        directory=str(config.cache.directory),
        redis_url=config.cache.redis_url,
        ttl_seconds=debrid.cache_age_seconds,
        max_concurrent=config.cache.max_concurrent,
    )
    await cache.__aenter__()
    state.cache = cache
    log.info("cache_initialized", backend=config.cache.backend)

    try:
        # ========== 2) HTTP Client ==========
        state.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(debrid.timeout_seconds),
        )
        log.info("http_client_initialized", timeout=debrid.timeout_seconds)

        # ========== 3) DebridClient ==========
        state.debrid_client = DebridClient(
            transport=HttpxDebridTransport(
                state.http_client, extra_headers=debrid.extra_headers
            ),
            token_store=CacheTimestampStore(
                cache,
                namespace="token",
                ttl_seconds=int(TOKEN_TTL.total_seconds()),
            ),
            availability_store=CacheTimestampStore(
                cache,
                namespace="availability",
                ttl_seconds=debrid.cache_age_seconds,
            ),
            base_url=debrid.base_url,
            cache_age=timedelta(seconds=debrid.cache_age_seconds),
            poll_budget=debrid.poll_budget,
            poll_interval=debrid.poll_interval_seconds,
        )
        log.info("debrid_client_initialized", base_url=debrid.base_url)

        log.info("app_startup_complete")
        yield
    finally:
        # ========== Cleanup (reverse order) ==========
        http_client = getattr(state, "http_client", None)
        if http_client is not None:
            await http_client.aclose()
            log.info("http_client_closed")

        await cache.aclose()
        log.info("cache_closed")

        log.info("app_shutdown_complete")
