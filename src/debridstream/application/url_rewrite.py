"""Rewrite URLs discovered in API responses onto the configured base URL."""

from __future__ import annotations

from urllib.parse import urlsplit


def rewrite_base_url(discovered_url: str, base_url: str) -> str:
    """Replace the ``scheme://host`` prefix of *discovered_url* with *base_url*.

    Path and query are preserved, so follow-up traffic goes through the
    configured endpoint (e.g. a proxy) instead of whatever host the service
    embedded in its response.

    Raises:
        ValueError: *discovered_url* is not an absolute URL.
    """
    parts = urlsplit(discovered_url)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Not an absolute URL: {discovered_url!r}")

    origin = f"{parts.scheme}://{parts.netloc}"
    # urlsplit drops leading whitespace and control characters and lowercases
    # the scheme
    if discovered_url[: len(origin)].lower() != origin.lower():
        raise ValueError(f"Malformed URL: {discovered_url!r}")
    return base_url.rstrip("/") + discovered_url[len(origin) :]
