"""Token matchers for catalog tags.

Two strategies, selected by ``TagDefinition.matcher``:

- EXACT: ``[b]`` opens, ``[/b]`` closes, no variable.
- VARIABLE: any token starting with ``[color`` and ending with ``]``
  opens (``[color]`` and ``[color=red]`` alike), ``[/color]`` closes.
  The variable is whatever follows the first ``=`` up to the final ``]``.

All functions are pure and stateless.
"""

from __future__ import annotations

from bbstyle.tags import MatcherKind, TagDefinition


def is_start(token: str, tag: TagDefinition) -> bool:
    """Whether ``token`` opens ``tag``."""
    if tag.matcher is MatcherKind.VARIABLE:
        return token.startswith("[" + tag.code) and token.endswith("]")
    return token == tag.start_token


def is_end(token: str, tag: TagDefinition) -> bool:
    """Whether ``token`` closes ``tag``."""
    return token == tag.end_token


def extract_variable(token: str, tag: TagDefinition) -> str | None:
    """Extract the embedded variable of an opening token.

    Args:
        token: Full token including brackets (e.g., "[color=red]")
        tag: Tag the token was matched against

    Returns:
        The variable text, or None for exact tags, tokens without ``=``
        and tokens that do not open ``tag``.

    Example:
        >>> extract_variable("[url=http://a.b/?x=1]", get_tag("url"))
        'http://a.b/?x=1'
        >>> extract_variable("[url]", get_tag("url")) is None
        True

    """
    if tag.matcher is not MatcherKind.VARIABLE or not is_start(token, tag):
        return None
    _, eq, rest = token.partition("=")
    if not eq:
        return None
    return rest[:-1]


__all__ = ["is_start", "is_end", "extract_variable"]
