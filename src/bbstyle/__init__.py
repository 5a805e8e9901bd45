"""
bbstyle: chat BBCode to styled text

Converts chat messages written in the bracket markup dialect
(``[b]``, ``[color=red]``, ``[url=...]``, ``[icon]``, ...) into plain text
plus a list of style runs that a renderer can apply. Malformed markup never
fails a message: it stays visible as literal text.

Quick Start:
    >>> from bbstyle import parse
    >>> styled = parse("[b]Hello[/b] [color=red]World[/color]")
    >>> styled.text
    'Hello World'
    >>> [(run.kind.name, run.start, run.end) for run in styled.runs]
    [('BOLD', 0, 5), ('COLOR', 6, 11)]

    >>> # Or use the high-level BBCode class with its own configuration
    >>> from bbstyle import BBCode
    >>> bb = BBCode(autolink=True, empty_link_label="[link]")
    >>> bb("see http://x.com").text
    'see x.com '

Icons:
    >>> from bbstyle import BBCode, HttpxImageFetcher
    >>> with HttpxImageFetcher() as fetcher:
    ...     bb = BBCode(image_fetcher=fetcher, dispatch=ui_loop.call_soon_threadsafe)
    ...     styled = bb("[eicon]wave[/eicon]")
    ...     styled.placeholders[0].add_listener(redraw)

Installation:
    pip install bbstyle
"""

from collections.abc import Iterable
from dataclasses import replace
from typing import Any

from bbstyle.buffer import TextBuffer
from bbstyle.colors import parse_color
from bbstyle.config import (
    ParseConfig,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)
from bbstyle.errors import BBStyleError, CatalogError, ImageFetchError, PlaceholderError
from bbstyle.images import (
    HttpxImageFetcher,
    ImageFetcher,
    ImagePlaceholder,
    PlaceholderState,
)
from bbstyle.materialize import Materializer
from bbstyle.preprocess import decode_entities, modify_urls
from bbstyle.resolver import Span, TagResolver
from bbstyle.runs import (
    Color,
    ImageReference,
    Link,
    Reference,
    RelativeSize,
    RunKind,
    StyledText,
    StyleRun,
)
from bbstyle.serialization import from_dict, from_json, to_dict, to_json
from bbstyle.tags import TAGS, MatcherKind, TagDefinition, TagKind, get_tag

__version__ = "0.1.0"


def parse(source: str, context: Any = None) -> StyledText:
    """Parse a chat message into plain text and style runs.

    Uses the configuration active in the current context (see
    ``parse_config_context``).

    Args:
        source: Raw message text
        context: Opaque rendering context, passed to the configured glyph
            resolver for image placeholders

    Returns:
        StyledText with the cleaned text and its runs

    Example:
        >>> parse("[b]hi[/b]").runs
        (StyleRun(start=0, end=2, kind=<RunKind.BOLD: 1>, payload=None, inclusive=True),)
    """
    config = get_parse_config()

    text = source
    if config.autolink_enabled:
        text = modify_urls(text, config.url_indicator)
    if config.decode_entities:
        text = decode_entities(text)

    buffer = TextBuffer(text)
    spans = TagResolver(buffer).resolve()
    return Materializer(buffer, spans, config, context).materialize()


class BBCode:
    """High-level BBCode processor with its own configuration.

    Usage:
        >>> bb = BBCode()
        >>> bb("[i]x[/i]").runs[0].kind
        <RunKind.ITALIC: 2>

        >>> # Options are ParseConfig fields
        >>> bb = BBCode(decode_entities=False, script_scale=0.7)

        >>> # Start from an existing config
        >>> bb = BBCode(config=ParseConfig.from_dict(settings), autolink=True)

    Thread Safety:
        Uses ContextVar for thread-local configuration. Safe to use multiple
        BBCode instances concurrently from different threads.

    """

    __slots__ = ("_config",)

    def __init__(
        self,
        *,
        autolink: bool | None = None,
        config: ParseConfig | None = None,
        **options: Any,
    ) -> None:
        """Initialize BBCode processor.

        Args:
            autolink: Rewrite bare URLs to [url] tags before parsing
            config: Base configuration (defaults to ParseConfig())
            **options: ParseConfig fields overriding the base configuration

        Raises:
            TypeError: If an option is not a ParseConfig field
        """
        if autolink is not None:
            options["autolink_enabled"] = autolink
        self._config = replace(config or ParseConfig(), **options)

    @property
    def config(self) -> ParseConfig:
        return self._config

    def __call__(self, source: str, context: Any = None) -> StyledText:
        return self.parse(source, context)

    def parse(self, source: str, context: Any = None) -> StyledText:
        """Parse one message with this processor's configuration."""
        set_parse_config(self._config)
        try:
            return parse(source, context)
        finally:
            reset_parse_config()

    def parse_many(self, sources: Iterable[str], context: Any = None) -> list[StyledText]:
        """Parse several messages, setting the configuration once.

        Example:
            >>> bb = BBCode()
            >>> [s.text for s in bb.parse_many(["[b]a[/b]", "[u]b[/u]"])]
            ['a', 'b']
        """
        set_parse_config(self._config)
        try:
            return [parse(source, context) for source in sources]
        finally:
            reset_parse_config()


__all__ = [  # noqa: RUF022 - grouped by category
    # Version
    "__version__",
    # Core API
    "parse",
    "modify_urls",
    "decode_entities",
    "BBCode",
    # Output model
    "StyledText",
    "StyleRun",
    "RunKind",
    "Color",
    "Link",
    "Reference",
    "RelativeSize",
    "ImageReference",
    # Images
    "ImagePlaceholder",
    "PlaceholderState",
    "ImageFetcher",
    "HttpxImageFetcher",
    # Tag catalog
    "TAGS",
    "TagDefinition",
    "TagKind",
    "MatcherKind",
    "get_tag",
    "parse_color",
    # Pipeline components
    "TextBuffer",
    "TagResolver",
    "Span",
    "Materializer",
    # Serialization
    "to_dict",
    "from_dict",
    "to_json",
    "from_json",
    # Configuration (ContextVar-based)
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
    # Errors
    "BBStyleError",
    "CatalogError",
    "ImageFetchError",
    "PlaceholderError",
]
