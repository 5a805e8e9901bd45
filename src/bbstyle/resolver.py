"""Tokenizing resolver: the single-pass BBCode scanner.

Scans the buffer for ``[...]`` tokens, opens a Span for every start token,
closes spans on end tokens and deletes every recognized token from the
buffer. Unrecognized tokens stay in the text.

Matching is tolerant:
- An end token closes the most recently opened *unclosed* span of the same
  tag. Open spans of other tags are skipped, so ``[b]x[i]y[/b]z[/i]``
  closes both tags (LIFO per tag, not across tags).
- An end token with no open span of its tag is ordinary text.
- Inside ``[noparse]`` only ``[/noparse]`` is recognized.

Algorithm:
    position = 0
    while position < len(buffer):
        find next "[" at/after position, next "]" at/after that
        token = buffer[start:end+1]
        if token matches a tag: delete token, position = start
        else: position = start + 1

Thread Safety:
TagResolver instances are single-use per parse. All state is instance-local.

"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from bbstyle.buffer import Affinity, Edit, TextBuffer
from bbstyle.matchers import extract_variable, is_end, is_start
from bbstyle.tags import LITERAL_BLOCK, TAGS, TagDefinition
from bbstyle.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(slots=True)
class Span:
    """One opened markup occurrence.

    Offsets are only valid at the revision recorded next to them; use
    ``TextBuffer.rebase`` with ``Span.affinity`` to read them later.

    Attributes:
        start: Offset of the opening token's ``[``
        tag: Catalog entry the token matched
        index: Discovery order within the message
        start_revision: Buffer revision ``start`` refers to
        variable: Value embedded in the opening token (``[color=red]``)
        end: Offset of the closing token's ``[``, None while unclosed
        end_revision: Buffer revision ``end`` refers to

    """

    start: int
    tag: TagDefinition
    index: int
    start_revision: int
    variable: str | None = None
    end: int | None = None
    end_revision: int | None = None

    @property
    def closed(self) -> bool:
        return self.end is not None

    def close(self, end: int, revision: int) -> None:
        self.end = end
        self.end_revision = revision

    def affinity(self, edit: Edit) -> Affinity:
        """Side of an insertion point this span's offsets stick to.

        Text inserted by a span discovered earlier lands before this one;
        text inserted by this span or a later one lands after it.
        """
        if edit.origin is not None and self.index > edit.origin:
            return Affinity.AFTER
        return Affinity.BEFORE

    def __str__(self) -> str:
        return f"[{self.tag.kind.name} from: {self.start} to: {self.end}]"


class TagResolver:
    """Scan a buffer and resolve its tags into spans.

    Usage:
        >>> buf = TextBuffer("[b]hi[/b]")
        >>> spans = TagResolver(buf).resolve()
        >>> buf.text, spans[0].closed
        ('hi', True)

    """

    __slots__ = ("_buffer", "_tags", "_spans", "_no_parse")

    def __init__(self, buffer: TextBuffer, tags: Sequence[TagDefinition] = TAGS) -> None:
        self._buffer = buffer
        self._tags = tags
        self._spans: list[Span] = []
        self._no_parse = False

    def resolve(self) -> list[Span]:
        """Run the scan to completion.

        Returns:
            Every span in discovery order, closed or not. ``[noparse]``
            opens no span, so an unterminated one simply disappears.

        """
        buf = self._buffer
        position = 0
        while position < len(buf):
            start = buf.find("[", position)
            if start == -1:
                break
            end = buf.find("]", start)
            if end == -1:
                break
            end += 1

            token = buf.slice(start, end)
            logger.debug("Found: %r", token)

            found, origin = self._match(token, start)
            if found:
                buf.delete(start, end, origin=origin)
                position = start
            else:
                position = start + 1

        return self._spans

    def _match(self, token: str, start: int) -> tuple[bool, int | None]:
        """Apply ``token`` to the span list.

        Returns:
            (found, origin): whether the token was consumed, and the index of
            the span it opened or closed.

        """
        if self._no_parse:
            if is_end(token, LITERAL_BLOCK):
                self._no_parse = False
                return True, None
            return False, None

        for tag in self._tags:
            if is_start(token, tag):
                if tag is LITERAL_BLOCK:
                    self._no_parse = True
                    return True, None
                span = Span(
                    start=start,
                    tag=tag,
                    index=len(self._spans),
                    start_revision=self._buffer.revision,
                    variable=extract_variable(token, tag),
                )
                self._spans.append(span)
                return True, span.index
            if is_end(token, tag):
                span = self._last_open(tag)
                if span is not None:
                    span.close(start, self._buffer.revision)
                    logger.debug("Closed %s", span)
                    return True, span.index
        return False, None

    def _last_open(self, tag: TagDefinition) -> Span | None:
        # Top-down over discovery order; other tags' open spans are skipped
        for span in reversed(self._spans):
            if span.tag is tag and not span.closed:
                return span
        return None


def resolve(buffer: TextBuffer) -> list[Span]:
    """Resolve all tags in ``buffer`` (convenience wrapper)."""
    return TagResolver(buffer).resolve()


__all__ = ["Span", "TagResolver", "resolve"]
