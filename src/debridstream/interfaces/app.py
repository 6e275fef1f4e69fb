"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from debridstream.domain.entities.debrid import DebridError
from debridstream.infrastructure.config import AppConfig
from debridstream.interfaces.app_state import AppState
from debridstream.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration ONLY, NO resource initialization.

    Resources (HTTP client, cache, debrid client) are created in lifespan().
    """
    app = FastAPI(
        title="debridstream",
        description="Resolves magnet links into streamable URLs via Real-Debrid",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from debridstream.interfaces.api.debrid import debrid_error_handler
    from debridstream.interfaces.api.debrid import router as debrid_router

    app.include_router(debrid_router, prefix="/api/v1")
    app.add_exception_handler(DebridError, debrid_error_handler)

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str]:
        """Liveness probe; returns 200 as long as the process is running."""
        return {"status": "ok"}

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            status_code = getattr(locals().get("response", None), "status_code", 500)

            # Query strings carry magnet links, not credentials; tokens travel
            # in the Authorization header and are never logged.
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
