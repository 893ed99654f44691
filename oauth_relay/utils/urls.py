"""URL helpers for building outbound redirects."""

from __future__ import annotations

from typing import Iterable, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_ALLOWED_SCHEMES = {"http", "https"}


def is_valid_destination(url: str) -> bool:
    """Return True for an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return False
    return parts.scheme.lower() in _ALLOWED_SCHEMES and bool(hostname)


def merge_query(url: str, params: Iterable[Tuple[str, str]]) -> str:
    """Append ``params`` to the query of ``url``, keeping every existing pair."""
    parts = urlsplit(url)
    query = parse_qsl(parts.query, keep_blank_values=True)
    query.extend(params)
    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment)
    )


__all__ = ["is_valid_destination", "merge_query"]
