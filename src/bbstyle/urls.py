"""URL validation and guessing for link-bearing tags.

Validation is a scheme-prefix check, not a full RFC 3986 parse: link runs
only need a target the renderer can hand to a browser. Dangerous schemes
are rejected outright.

Thread Safety:
All functions are pure. Safe to call from any thread.
"""

from __future__ import annotations

from urllib.parse import urlsplit

_DANGEROUS_SCHEMES = frozenset(("javascript:", "data:", "vbscript:"))

# Prefixes a link target may start with (compared case-insensitively)
_VALID_PREFIXES = ("http://", "https://", "ftp://", "file://", "content://", "about:")

# Schemes accepted when a bare URL is auto-linked
URL_SCHEMES = frozenset(("http", "https", "ftp", "file"))


def _is_dangerous_url(url: str) -> bool:
    lower = url.strip().lower()
    return any(lower.startswith(s) for s in _DANGEROUS_SCHEMES)


def is_valid_url(url: str | None) -> bool:
    """Check whether ``url`` is usable as a link target.

    Args:
        url: Candidate URL (None is never valid)

    Returns:
        True if the URL starts with a supported scheme prefix and has
        something after it.

    """
    if not url or _is_dangerous_url(url):
        return False
    lower = url.lower()
    return any(lower.startswith(p) and len(url) > len(p) for p in _VALID_PREFIXES)


def guess_url(text: str) -> str | None:
    """Best-effort URL from the visible text of a link tag.

    Adds ``http://`` when no scheme is present. Text that cannot be a URL
    (contains whitespace, fails to split) is returned unchanged and left
    to ``is_valid_url``.

    Args:
        text: Text between ``[url]`` and ``[/url]``

    Returns:
        A URL guess, the original text, or None for blank input.

    Example:
        >>> guess_url("example.com")
        'http://example.com'
        >>> guess_url("https://example.com")
        'https://example.com'

    """
    candidate = text.strip().rstrip(".")
    if not candidate:
        return None
    if any(ch.isspace() for ch in candidate):
        return text
    try:
        parts = urlsplit(candidate)
    except ValueError:
        return text
    if parts.scheme and (parts.netloc or candidate.lower().startswith(("about:", "file:"))):
        return candidate
    return "http://" + candidate


def url_host(url: str) -> str | None:
    """Host of an absolute URL, or None if ``url`` does not parse as one.

    Example:
        >>> url_host("http://x.com/path")
        'x.com'
        >>> url_host("http//broken") is None
        True

    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return None
    if parts.scheme.lower() not in URL_SCHEMES or not host:
        return None
    return host


def encode_name(name: str) -> str:
    """Character/emote name as used in profile and image paths."""
    return name.lower().replace(" ", "%20")


__all__ = ["URL_SCHEMES", "is_valid_url", "guess_url", "url_host", "encode_name"]
