"""Style runs: the output model of a parse.

A StyleRun is a half-open range ``[start, end)`` over the cleaned text, a
RunKind, and a payload variant carrying only what that kind needs.

Run kinds and payloads:
    BOLD, ITALIC, UNDERLINE, STRIKETHROUGH,
    SUPERSCRIPT, SUBSCRIPT        -> None
    RELATIVE_SIZE                 -> RelativeSize
    COLOR                         -> Color
    LINK                          -> Link
    REFERENCE                     -> Reference
    IMAGE                         -> ImageReference

Thread Safety:
Runs and payloads are frozen. ImageReference points at a mutable
ImagePlaceholder whose state changes are lock-guarded.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from bbstyle.buffer import Affinity
from bbstyle.colors import to_hex

if TYPE_CHECKING:
    from bbstyle.images import ImagePlaceholder


class RunKind(Enum):
    BOLD = auto()
    ITALIC = auto()
    UNDERLINE = auto()
    STRIKETHROUGH = auto()
    SUPERSCRIPT = auto()
    SUBSCRIPT = auto()
    RELATIVE_SIZE = auto()
    COLOR = auto()
    LINK = auto()
    REFERENCE = auto()
    IMAGE = auto()


@dataclass(frozen=True, slots=True)
class Color:
    """Foreground color as a 32-bit ARGB value."""

    argb: int

    @property
    def hex(self) -> str:
        return to_hex(self.argb)


@dataclass(frozen=True, slots=True)
class Link:
    url: str


@dataclass(frozen=True, slots=True)
class Reference:
    """Navigable chat channel reference.

    Attributes:
        identifier: Raw channel id the renderer navigates to
        display_name: Human-readable name shown instead of the id, if any
        private: True for private rooms ([session]), False for [channel]

    """

    identifier: str
    display_name: str | None = None
    private: bool = False


@dataclass(frozen=True, slots=True)
class RelativeSize:
    scale: float


@dataclass(frozen=True, slots=True)
class ImageReference:
    url: str
    placeholder: ImagePlaceholder


type Payload = Color | Link | Reference | RelativeSize | ImageReference | None


@dataclass(frozen=True, slots=True)
class StyleRun:
    """One styled range of the output text.

    Attributes:
        start: First styled character
        end: One past the last styled character
        kind: Style identity
        payload: Kind-specific data (see module docstring)
        inclusive: Text inserted at either boundary joins the run. Image
            runs are exclusive at both ends.

    """

    start: int
    end: int
    kind: RunKind
    payload: Payload = None
    inclusive: bool = True

    @property
    def start_affinity(self) -> Affinity:
        return Affinity.BEFORE if self.inclusive else Affinity.AFTER

    @property
    def end_affinity(self) -> Affinity:
        return Affinity.AFTER if self.inclusive else Affinity.BEFORE

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True, slots=True)
class StyledText:
    """Result of a parse: cleaned text plus its style runs.

    Runs are ordered by creation (discovery order of their tags).
    """

    text: str
    runs: tuple[StyleRun, ...] = ()

    def runs_of(self, kind: RunKind) -> tuple[StyleRun, ...]:
        return tuple(run for run in self.runs if run.kind is kind)

    @property
    def placeholders(self) -> tuple[ImagePlaceholder, ...]:
        """Image placeholders, in run order."""
        return tuple(
            run.payload.placeholder
            for run in self.runs
            if isinstance(run.payload, ImageReference)
        )

    def __str__(self) -> str:
        return self.text


__all__ = [
    "RunKind",
    "Color",
    "Link",
    "Reference",
    "RelativeSize",
    "ImageReference",
    "Payload",
    "StyleRun",
    "StyledText",
]
