"""Tag catalog for the chat BBCode dialect.

The catalog is a fixed, ordered table. The resolver tests tags in
declaration order, so order is part of the matching contract: the first
tag whose start or end pattern accepts a token wins.

Thread Safety:
All definitions are frozen and built once at import. Safe to share.

Usage:
    >>> from bbstyle.tags import get_tag, TAGS
    >>> get_tag("color").matcher
    <MatcherKind.VARIABLE: 2>
    >>> [tag.code for tag in TAGS][:3]
    ['b', 'i', 'u']

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from bbstyle.errors import CatalogError


class MatcherKind(Enum):
    """How a tag's tokens are recognized."""

    EXACT = auto()  # [code] ... [/code]
    VARIABLE = auto()  # [code] or [code=value] ... [/code]


class TagKind(Enum):
    """Identity of each supported markup element."""

    BOLD = auto()
    ITALIC = auto()
    UNDERLINE = auto()
    STRIKETHROUGH = auto()
    SUPERSCRIPT = auto()
    SUBSCRIPT = auto()
    COLOR = auto()
    NOPARSE = auto()
    ICON = auto()
    EICON = auto()
    LINK = auto()
    USER = auto()
    PRIVATE_CHANNEL = auto()
    PUBLIC_CHANNEL = auto()


@dataclass(frozen=True, slots=True)
class TagDefinition:
    """One supported markup element.

    Attributes:
        code: Tag name as written between the brackets (e.g., "b", "color")
        kind: Element identity, used to dispatch materialization
        matcher: Token recognition strategy

    """

    code: str
    kind: TagKind
    matcher: MatcherKind

    @property
    def start_token(self) -> str:
        """Literal opening token, as reinserted for unresolved tags."""
        return f"[{self.code}]"

    @property
    def end_token(self) -> str:
        """Literal closing token."""
        return f"[/{self.code}]"


def _tag(code: str, kind: TagKind, matcher: MatcherKind = MatcherKind.EXACT) -> TagDefinition:
    return TagDefinition(code=code, kind=kind, matcher=matcher)


# Declaration order is matching order
BOLD = _tag("b", TagKind.BOLD)
ITALIC = _tag("i", TagKind.ITALIC)
UNDERLINE = _tag("u", TagKind.UNDERLINE)
STRIKETHROUGH = _tag("s", TagKind.STRIKETHROUGH)
SUPERSCRIPT = _tag("sup", TagKind.SUPERSCRIPT)
SUBSCRIPT = _tag("sub", TagKind.SUBSCRIPT)
COLOR = _tag("color", TagKind.COLOR, MatcherKind.VARIABLE)
LITERAL_BLOCK = _tag("noparse", TagKind.NOPARSE)
ICON = _tag("icon", TagKind.ICON)
EICON = _tag("eicon", TagKind.EICON)
LINK = _tag("url", TagKind.LINK, MatcherKind.VARIABLE)
USER = _tag("user", TagKind.USER)
PRIVATE_CHANNEL = _tag("session", TagKind.PRIVATE_CHANNEL, MatcherKind.VARIABLE)
PUBLIC_CHANNEL = _tag("channel", TagKind.PUBLIC_CHANNEL)

TAGS: tuple[TagDefinition, ...] = (
    BOLD,
    ITALIC,
    UNDERLINE,
    STRIKETHROUGH,
    SUPERSCRIPT,
    SUBSCRIPT,
    COLOR,
    LITERAL_BLOCK,
    ICON,
    EICON,
    LINK,
    USER,
    PRIVATE_CHANNEL,
    PUBLIC_CHANNEL,
)

_BY_CODE: dict[str, TagDefinition] = {tag.code: tag for tag in TAGS}


def get_tag(code: str) -> TagDefinition:
    """Look up a tag definition by its code.

    Args:
        code: Tag name (e.g., "b", "url")

    Returns:
        The catalog entry for that code

    Raises:
        CatalogError: If the code is not a supported tag

    """
    tag = _BY_CODE.get(code)
    if tag is None:
        raise CatalogError(code, "not a supported tag")
    return tag


__all__ = [
    "MatcherKind",
    "TagKind",
    "TagDefinition",
    "TAGS",
    "LITERAL_BLOCK",
    "get_tag",
]
