"""Style-run materializer.

Turns resolved spans into StyleRuns over the buffer, in three phases:

1. Closed spans, in discovery order: each tag kind emits its runs. Empty
   ``[url][/url]`` pairs get a placeholder label inserted first; icon tags
   start their image fetch.
2. Unclosed spans, in reverse discovery order: their literal ``[code]``
   is written back at the recorded start. No run.
3. Deferred ``[session]`` substitutions, in reverse discovery order: the
   first occurrence of the channel id in the buffer is replaced by the
   display name. The search is a plain substring search over the whole
   text, so an identical earlier string would be replaced instead.

Every buffer edit goes through the edit log, and run offsets are rebased
to the final revision when the result is built.

Thread Safety:
Materializer instances are single-use per parse. All state is
instance-local; image completions arrive through ParseConfig.dispatch.

"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from bbstyle.buffer import TextBuffer
from bbstyle.colors import parse_color
from bbstyle.config import ParseConfig
from bbstyle.images import ImagePlaceholder, request_image
from bbstyle.resolver import Span
from bbstyle.runs import (
    Color,
    ImageReference,
    Link,
    Payload,
    Reference,
    RelativeSize,
    RunKind,
    StyledText,
    StyleRun,
)
from bbstyle.tags import TagKind
from bbstyle.urls import encode_name, guess_url, is_valid_url
from bbstyle.utils.logger import get_logger

logger = get_logger(__name__)

_SIMPLE_KINDS: dict[TagKind, RunKind] = {
    TagKind.BOLD: RunKind.BOLD,
    TagKind.ITALIC: RunKind.ITALIC,
    TagKind.UNDERLINE: RunKind.UNDERLINE,
    TagKind.STRIKETHROUGH: RunKind.STRIKETHROUGH,
}

_SCRIPT_KINDS: dict[TagKind, RunKind] = {
    TagKind.SUPERSCRIPT: RunKind.SUPERSCRIPT,
    TagKind.SUBSCRIPT: RunKind.SUBSCRIPT,
}


class Materializer:
    """Build a StyledText from a resolved buffer.

    Usage:
        >>> buf = TextBuffer("[color=red]x[/color]")
        >>> spans = TagResolver(buf).resolve()
        >>> styled = Materializer(buf, spans, ParseConfig()).materialize()
        >>> styled.runs[0].payload.hex
        '#ff0000'

    """

    __slots__ = ("_buffer", "_spans", "_config", "_context", "_placed", "_substitutions")

    def __init__(
        self,
        buffer: TextBuffer,
        spans: list[Span],
        config: ParseConfig,
        context: Any = None,
    ) -> None:
        self._buffer = buffer
        self._spans = spans
        self._config = config
        self._context = context
        # (run, revision its offsets refer to)
        self._placed: list[tuple[StyleRun, int]] = []
        # (identifier, display name, origin span index)
        self._substitutions: list[tuple[str, str, int]] = []

    def materialize(self) -> StyledText:
        for span in self._spans:
            if span.closed:
                self._apply(span)

        self._reinsert_unresolved()
        self._apply_substitutions()

        buf = self._buffer
        runs = []
        for run, revision in self._placed:
            start = buf.rebase(run.start, revision, run.start_affinity)
            end = buf.rebase(run.end, revision, run.end_affinity)
            runs.append(replace(run, start=start, end=max(start, end)))
        return StyledText(text=buf.text, runs=tuple(runs))

    # =========================================================================
    # Phase 1: closed spans
    # =========================================================================

    def _apply(self, span: Span) -> None:
        buf = self._buffer
        if span.end is None or span.end_revision is None:
            return
        start = buf.rebase(span.start, span.start_revision, span.affinity)
        end = buf.rebase(span.end, span.end_revision, span.affinity)
        kind = span.tag.kind
        logger.debug("ADD span: %s", span)

        match kind:
            case TagKind.BOLD | TagKind.ITALIC | TagKind.UNDERLINE | TagKind.STRIKETHROUGH:
                self._add(start, end, _SIMPLE_KINDS[kind])
            case TagKind.SUPERSCRIPT | TagKind.SUBSCRIPT:
                self._add(start, end, _SCRIPT_KINDS[kind])
                self._add(start, end, RunKind.RELATIVE_SIZE, RelativeSize(self._config.script_scale))
            case TagKind.COLOR:
                self._color(span, start, end)
            case TagKind.LINK:
                self._link(span, start, end)
            case TagKind.PRIVATE_CHANNEL:
                identifier = buf.slice(start, end)
                self._add(
                    start,
                    end,
                    RunKind.REFERENCE,
                    Reference(identifier, display_name=span.variable, private=True),
                )
                if span.variable is not None and identifier:
                    self._substitutions.append((identifier, span.variable, span.index))
            case TagKind.PUBLIC_CHANNEL:
                self._add(start, end, RunKind.REFERENCE, Reference(buf.slice(start, end)))
            case TagKind.USER:
                self._add(start, end, RunKind.UNDERLINE)
                self._add_link(start, end, self._config.profile_url + buf.slice(start, end))
            case TagKind.ICON | TagKind.EICON:
                self._icon(span, start, end)

    def _add(
        self,
        start: int,
        end: int,
        kind: RunKind,
        payload: Payload = None,
        *,
        inclusive: bool = True,
    ) -> None:
        run = StyleRun(start=start, end=end, kind=kind, payload=payload, inclusive=inclusive)
        self._placed.append((run, self._buffer.revision))

    def _add_link(self, start: int, end: int, url: str | None) -> None:
        if url is not None and is_valid_url(url):
            self._add(start, end, RunKind.LINK, Link(url))
        else:
            logger.debug("Url: %r not valid, no link", url)

    def _color(self, span: Span, start: int, end: int) -> None:
        if span.variable is None:
            return
        try:
            argb = parse_color(span.variable)
        except ValueError:
            logger.debug("Can't parse color from: %r", span.variable)
            return
        self._add(start, end, RunKind.COLOR, Color(argb))

    def _link(self, span: Span, start: int, end: int) -> None:
        if start == end:
            label = self._config.empty_link_label
            self._buffer.insert(start, label, origin=span.index)
            end = start + len(label)
        url = span.variable
        if url is None:
            url = guess_url(self._buffer.slice(start, end))
        self._add_link(start, end, url)

    def _icon(self, span: Span, start: int, end: int) -> None:
        config = self._config
        name = encode_name(self._buffer.slice(start, end))
        template = config.avatar_url if span.tag.kind is TagKind.ICON else config.eicon_url
        url = template.format(name=name)
        if not is_valid_url(url):
            logger.debug("Icon Url: %r not valid", url)
            return

        placeholder = ImagePlaceholder(url, pending=config.glyph_for(self._context))
        self._add(start, end, RunKind.IMAGE, ImageReference(url, placeholder), inclusive=False)
        if config.image_fetcher is not None:
            request_image(placeholder, config.image_fetcher, config.dispatch)

        if span.tag.kind is TagKind.ICON:
            self._add_link(start, end, config.profile_url + name)

    # =========================================================================
    # Phase 2 and 3: unresolved tags, deferred substitutions
    # =========================================================================

    def _reinsert_unresolved(self) -> None:
        buf = self._buffer
        for span in reversed(self._spans):
            if span.closed:
                continue
            start = buf.rebase(span.start, span.start_revision, span.affinity)
            buf.insert(start, span.tag.start_token, origin=span.index)

    def _apply_substitutions(self) -> None:
        buf = self._buffer
        for identifier, display_name, origin in reversed(self._substitutions):
            at = buf.find(identifier)
            if at == -1:
                continue
            buf.replace(at, at + len(identifier), display_name, origin=origin)


def materialize(
    buffer: TextBuffer,
    spans: list[Span],
    config: ParseConfig,
    context: Any = None,
) -> StyledText:
    """Materialize ``spans`` over ``buffer`` (convenience wrapper)."""
    return Materializer(buffer, spans, config, context).materialize()


__all__ = ["Materializer", "materialize"]
