"""Classification of process output lines."""

from __future__ import annotations

import re

_URL_PATTERN = re.compile(
    r"https?://localhost:\d+|http://127\.0\.0\.1:\d+|(?<![\w/])localhost:\d+",
    re.IGNORECASE,
)

ERROR_KEYWORDS = (
    "error",
    "failed",
    "failure",
    "exception",
    "fatal",
    "cannot",
    "unable to",
    "not found",
    "enoent",
    "eacces",
    "warn",
    "warning",
)

STATUS_KEYWORDS = (
    "ready",
    "listening",
    "started",
    "running on",
    "available on",
    "local:",
    "server running",
)


def normalize_url(match: str) -> str:
    """Lowercase a matched URL and give bare ``localhost:PORT`` an ``http://`` scheme.

    Bare matches never follow another scheme (``ws://localhost:3000`` is not
    matched at all), so the added scheme cannot replace one.
    """

    url = match.lower()
    if not url.startswith(("http://", "https://")):
        url = f"http://{url}"
    return url


def extract_urls(line: str) -> list[str]:
    """Return local service URLs in ``line``, normalized and deduplicated in first-seen order."""

    return list(dict.fromkeys(normalize_url(match) for match in _URL_PATTERN.findall(line)))


def is_error_line(line: str) -> bool:
    lowered = line.lower()
    return any(keyword in lowered for keyword in ERROR_KEYWORDS)


def is_important_line(line: str) -> bool:
    """True for lines worth surfacing outside verbose mode: URLs, errors, ready messages."""

    if extract_urls(line) or is_error_line(line):
        return True
    lowered = line.lower()
    return any(keyword in lowered for keyword in STATUS_KEYWORDS)


def normalize_route(route: str) -> str:
    return route if route.startswith("/") else f"/{route}"


def route_url(url: str, route: str) -> str:
    return url + normalize_route(route)


__all__ = [
    "ERROR_KEYWORDS",
    "STATUS_KEYWORDS",
    "extract_urls",
    "is_error_line",
    "is_important_line",
    "normalize_route",
    "normalize_url",
    "route_url",
]
