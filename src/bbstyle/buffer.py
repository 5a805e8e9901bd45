"""Edit-logged text buffer.

The resolver and the materializer mutate the message text in place:
tokens are removed, link labels and literal tags are inserted, channel ids
are substituted. Offsets recorded before an edit are only meaningful at
the revision they were recorded at, so every edit is appended to a log and
offsets are rebased through the edits made since.

Rebasing rules for an edit that replaces ``[position, position+removed)``
with ``inserted`` characters:

- offsets before ``position`` are unchanged
- offsets after the replaced range shift by ``inserted - removed``
- an offset at ``position`` (or inside the replaced range) stays at
  ``position`` with Affinity.BEFORE and lands after the new text with
  Affinity.AFTER

Example:
    >>> buf = TextBuffer("ab[b]cd")
    >>> rev = buf.revision
    >>> buf.delete(2, 5)
    >>> buf.text
    'abcd'
    >>> buf.rebase(6, rev, Affinity.BEFORE)
    3

Thread Safety:
TextBuffer instances are local to a single parse. Not thread-safe.

"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum, auto


class Affinity(Enum):
    """Which side of an insertion point an offset sticks to."""

    BEFORE = auto()  # stays put, inserted text lands after it
    AFTER = auto()  # moves, inserted text lands before it


@dataclass(frozen=True, slots=True)
class Edit:
    """One structural edit.

    Attributes:
        position: Start of the replaced range
        removed: Number of characters removed
        inserted: Number of characters inserted
        origin: Discovery index of the span that caused the edit, if any

    """

    position: int
    removed: int
    inserted: int
    origin: int | None = None

    def map(self, offset: int, affinity: Affinity) -> int:
        """Map an offset from before this edit to after it."""
        if offset < self.position:
            return offset
        if offset > self.position and offset >= self.position + self.removed:
            return offset - self.removed + self.inserted
        if affinity is Affinity.AFTER:
            return self.position + self.inserted
        return self.position


type AffinityRule = Affinity | Callable[[Edit], Affinity]


class TextBuffer:
    """Mutable plain text with an append-only edit log."""

    __slots__ = ("_text", "_edits")

    def __init__(self, text: str = "") -> None:
        self._text = text
        self._edits: list[Edit] = []

    @property
    def text(self) -> str:
        """Current buffer contents."""
        return self._text

    @property
    def revision(self) -> int:
        """Number of edits applied so far."""
        return len(self._edits)

    @property
    def edits(self) -> Sequence[Edit]:
        return tuple(self._edits)

    def __len__(self) -> int:
        return len(self._text)

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"TextBuffer({self._text!r}, revision={self.revision})"

    def find(self, sub: str, start: int = 0) -> int:
        """Index of the first occurrence of ``sub`` at or after ``start``, or -1."""
        return self._text.find(sub, start)

    def slice(self, start: int, end: int) -> str:
        return self._text[start:end]

    def replace(self, start: int, end: int, text: str, *, origin: int | None = None) -> None:
        """Replace ``[start, end)`` with ``text`` and log the edit.

        Raises:
            ValueError: If the range is outside the buffer

        """
        if not 0 <= start <= end <= len(self._text):
            raise ValueError(f"Edit range [{start}, {end}) outside buffer of length {len(self._text)}")
        if start == end and not text:
            return
        self._text = self._text[:start] + text + self._text[end:]
        self._edits.append(Edit(start, end - start, len(text), origin))

    def delete(self, start: int, end: int, *, origin: int | None = None) -> None:
        self.replace(start, end, "", origin=origin)

    def insert(self, position: int, text: str, *, origin: int | None = None) -> None:
        self.replace(position, position, text, origin=origin)

    def rebase(self, offset: int, since: int, affinity: AffinityRule) -> int:
        """Map an offset recorded at revision ``since`` to the current revision.

        Args:
            offset: Offset valid at revision ``since``
            since: Revision the offset was recorded at
            affinity: Fixed affinity, or a callable choosing one per edit

        Returns:
            The equivalent offset in the current text

        """
        for edit in self._edits[since:]:
            rule = affinity if isinstance(affinity, Affinity) else affinity(edit)
            offset = edit.map(offset, rule)
        return offset


__all__ = ["Affinity", "AffinityRule", "Edit", "TextBuffer"]
