"""Message preprocessing: entity decoding and bare-URL autolinking.

Both passes are pure string functions that run before the resolver sees
the text. Autolinking is also usable on its own, e.g. on outgoing
messages.

Example:
    >>> decode_entities("a &amp; b\\nc")
    'a & b\\nc'
    >>> modify_urls("see http://x.com now", "http")
    'see [url=http://x.com]x.com[/url] now '
"""

from __future__ import annotations

import html

from bbstyle.urls import url_host
from bbstyle.utils.logger import get_logger

logger = get_logger(__name__)

# Private-use code point; extended until it does not occur in the text
_NEWLINE_SENTINEL = "\ue000"


def _sentinel_for(text: str) -> str:
    sentinel = _NEWLINE_SENTINEL
    while sentinel in text:
        sentinel += _NEWLINE_SENTINEL
    return sentinel


def decode_entities(text: str) -> str:
    """Decode HTML entities without touching newline characters.

    Newlines are swapped for a sentinel that does not occur in ``text``,
    entities are decoded, and the sentinel is swapped back.

    Args:
        text: Raw message text

    Returns:
        Text with ``&amp;``, ``&lt;``, ``&#39;`` and friends decoded

    """
    if "&" not in text:
        return text
    sentinel = _sentinel_for(text)
    protected = text.replace("\n", sentinel)
    decoded = html.unescape(protected)
    return decoded.replace(sentinel, "\n")


def modify_urls(text: str | None, indicator: str) -> str | None:
    """Rewrite bare URLs as ``[url]`` tags.

    The text is split on single spaces. Every part starting with
    ``indicator`` that parses as an absolute URL becomes
    ``[url=<part>]<host>[/url]``; parts that fail to parse are kept
    verbatim. Trailing spaces are dropped before the split, and each part
    is followed by one space on rejoin, so rewritten text always ends with
    exactly one space.

    Args:
        text: Message text (None is returned unchanged)
        indicator: Prefix marking a URL candidate, e.g. "http"

    Returns:
        The rewritten text, or the input unchanged if ``indicator`` does
        not occur in it.

    """
    if text is None or indicator not in text:
        return text

    parts: list[str] = []
    for part in text.rstrip(" ").split(" "):
        if part.startswith(indicator):
            host = url_host(part)
            if host is not None:
                part = f"[url={part}]{host}[/url]"
            else:
                logger.debug("Not a URL: %r", part)
        parts.append(part + " ")
    return "".join(parts)


__all__ = ["decode_entities", "modify_urls"]
