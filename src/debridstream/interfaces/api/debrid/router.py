"""Debrid endpoints: token validation, instant availability, stream redirect."""

from __future__ import annotations

from typing import cast

import structlog
from fastapi import APIRouter, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel, Field

from debridstream.domain.entities.debrid import (
    AccountLockedError,
    DebridError,
    InvalidConfigurationError,
    InvalidCredentialError,
    NoEligibleFileError,
    PollTimeoutError,
    TerminalTorrentStatusError,
)
from debridstream.interfaces.app_state import AppState

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/debrid", tags=["debrid"])

# Anything not listed (transport, bad status, malformed response) is a 502.
_ERROR_STATUS: dict[type[DebridError], int] = {
    InvalidCredentialError: 401,
    AccountLockedError: 403,
    NoEligibleFileError: 404,
    TerminalTorrentStatusError: 422,
    InvalidConfigurationError: 500,
    PollTimeoutError: 504,
}


class AvailabilityRequest(BaseModel):
    info_hashes: list[str] = Field(default_factory=list)


def status_for_error(error: DebridError) -> int:
    for error_type, status in _ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 502


async def debrid_error_handler(request: Request, exc: Exception) -> Response:
    """Translate DebridError into a JSON error response."""
    error = cast(DebridError, exc)
    status_code = status_for_error(error)
    log.warning(
        "debrid_request_failed",
        path=request.url.path,
        error_type=type(error).__name__,
        error=str(error),
        status_code=status_code,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": type(error).__name__, "detail": str(error)},
    )


def _api_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    raise HTTPException(status_code=401, detail="Missing bearer token")


@router.post("/token/validate", status_code=204)
async def validate_token(
    request: Request,
    authorization: str | None = Header(default=None),
) -> Response:
    state = cast(AppState, request.app.state)
    await state.debrid_client.validate_token(_api_token(authorization))
    return Response(status_code=204)


@router.post("/availability")
async def check_availability(
    body: AvailabilityRequest,
    request: Request,
    authorization: str | None = Header(default=None),
) -> dict[str, list[str]]:
    state = cast(AppState, request.app.state)
    available = await state.debrid_client.check_availability(
        _api_token(authorization), body.info_hashes
    )
    log.info(
        "availability_response",
        requested=len(body.info_hashes),
        available=len(available),
    )
    return {"available": available}


@router.get("/stream")
async def stream(
    request: Request,
    magnet: str = Query(..., min_length=1),
    remote: bool = Query(default=False),
    authorization: str | None = Header(default=None),
) -> Response:
    """Resolve *magnet* and redirect the player to the stream URL."""
    state = cast(AppState, request.app.state)
    stream_url = await state.debrid_client.get_stream_url(
        _api_token(authorization), magnet, remote
    )
    return RedirectResponse(url=stream_url, status_code=307)
