"""Helpers for reading JSON bodies returned by the debrid transport."""

from __future__ import annotations

import json
from typing import Any

from debridstream.domain.entities.debrid import MalformedResponseError


def parse_json_object(body: bytes, context: str) -> dict[str, Any]:
    """Decode *body* as a JSON object.

    Raises:
        MalformedResponseError: body is not JSON or not an object.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedResponseError(f"{context}: response body is not JSON") from e
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"{context}: expected a JSON object, got {type(data).__name__}"
        )
    return data


def as_int(value: Any) -> int:
    """Lenient int conversion for numeric JSON fields (0 if unusable)."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return 0
    return 0
