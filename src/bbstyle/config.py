"""Parse settings: link labels, profile and icon URLs, image fetching.

The active ParseConfig lives in a ContextVar. ``parse()`` reads it once per
message; BBCode instances install their own for the duration of a call.

Thread Safety:
    Each thread (and asyncio task) sees its own value, so concurrent parses
    with different settings never mix.

Usage:
    from bbstyle.config import ParseConfig, parse_config_context

    with parse_config_context(ParseConfig(decode_entities=False)):
        styled = parse("&amp; stays")

"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any, Iterator

if TYPE_CHECKING:
    from bbstyle.images import ImageFetcher

# Default glyph shown while an icon image is still loading
DEFAULT_PLACEHOLDER_GLYPH = "□"


def _run_inline(callback: Callable[[], None]) -> None:
    callback()


@dataclass(frozen=True, slots=True)
class ParseConfig:
    """Immutable parse configuration.

    Set once per BBCode instance, read by every parse in the context.
    Frozen dataclass ensures thread-safety (immutable after creation).

    Attributes:
        decode_entities: Decode HTML entities (newline-preserving) before scanning
        empty_link_label: Text inserted for an empty [url][/url] pair
        script_scale: Relative text size applied with [sup] and [sub]
        profile_url: Prefix for character profile links ([user], [icon])
        avatar_url: Template for [icon] images, ``{name}`` is the encoded name
        eicon_url: Template for [eicon] images, ``{name}`` is the encoded name
        placeholder_glyph: Pending-state glyph for image placeholders
        glyph_resolver: Optional callback mapping the rendering context to a glyph
        image_fetcher: Collaborator that fetches icon images (None = no fetch)
        dispatch: Schedules image callbacks on the renderer's thread
        autolink_enabled: Rewrite bare URLs to [url] tags before parsing
        url_indicator: Prefix that marks a bare URL for autolinking

    """

    decode_entities: bool = True
    empty_link_label: str = "[LINK]"
    script_scale: float = 0.8
    profile_url: str = "http://f-list.net/c/"
    avatar_url: str = "https://static.f-list.net/images/avatar/{name}.png"
    eicon_url: str = "https://static.f-list.net/images/eicon/{name}.png"
    placeholder_glyph: Any = DEFAULT_PLACEHOLDER_GLYPH
    glyph_resolver: Callable[[Any], Any] | None = None
    image_fetcher: ImageFetcher | None = None
    dispatch: Callable[[Callable[[], None]], None] = _run_inline
    autolink_enabled: bool = False
    url_indicator: str = "http"

    @classmethod
    def from_dict(cls, settings: dict[str, Any]) -> ParseConfig:
        """Build a config from application settings, ignoring unknown keys.

        Example:
            >>> ParseConfig.from_dict({"empty_link_label": "[link]", "theme": "dark"}).empty_link_label
            '[link]'

        """
        names = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in settings.items() if key in names})

    def glyph_for(self, context: Any) -> Any:
        """Pending glyph for a rendering context."""
        if self.glyph_resolver is not None:
            glyph = self.glyph_resolver(context)
            if glyph is not None:
                return glyph
        return self.placeholder_glyph


_DEFAULT_CONFIG: ParseConfig = ParseConfig()

_parse_config: ContextVar[ParseConfig] = ContextVar(
    "bbstyle_parse_config",
    default=_DEFAULT_CONFIG,
)


def get_parse_config() -> ParseConfig:
    """Configuration the next parse in this context will use."""
    return _parse_config.get()


def set_parse_config(config: ParseConfig) -> None:
    _parse_config.set(config)


def reset_parse_config() -> None:
    """Return this context to the default configuration."""
    _parse_config.set(_DEFAULT_CONFIG)


@contextmanager
def parse_config_context(config: ParseConfig) -> Iterator[None]:
    """Parse with ``config`` inside the block, then restore the outer config.

    Example:
        >>> with parse_config_context(ParseConfig(empty_link_label="[x]")):
        ...     styled = parse("[url][/url]")
        >>> styled.text
        '[x]'

    """
    previous = _parse_config.get()
    _parse_config.set(config)
    try:
        yield
    finally:
        _parse_config.set(previous)


__all__ = [
    "DEFAULT_PLACEHOLDER_GLYPH",
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
]
