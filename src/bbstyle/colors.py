"""Color specification parsing for [color=...] tags.

Accepts ``#RRGGBB``, ``#AARRGGBB`` and a fixed table of color names.
Values are returned as 32-bit ARGB integers with an opaque alpha channel
unless one was given explicitly.

Example:
    >>> hex(parse_color("red"))
    '0xffff0000'
    >>> hex(parse_color("#80112233"))
    '0x80112233'
"""

from __future__ import annotations

from types import MappingProxyType

_OPAQUE = 0xFF000000

# Case-insensitive name table (values without alpha)
NAMED_COLORS: MappingProxyType[str, int] = MappingProxyType(
    {
        "black": 0x000000,
        "darkgray": 0x444444,
        "darkgrey": 0x444444,
        "gray": 0x888888,
        "grey": 0x888888,
        "lightgray": 0xCCCCCC,
        "lightgrey": 0xCCCCCC,
        "white": 0xFFFFFF,
        "red": 0xFF0000,
        "green": 0x00FF00,
        "blue": 0x0000FF,
        "yellow": 0xFFFF00,
        "cyan": 0x00FFFF,
        "magenta": 0xFF00FF,
        "aqua": 0x00FFFF,
        "fuchsia": 0xFF00FF,
        "lime": 0x00FF00,
        "maroon": 0x800000,
        "navy": 0x000080,
        "olive": 0x808000,
        "purple": 0x800080,
        "silver": 0xC0C0C0,
        "teal": 0x008080,
        # Chat palette colors missing from the basic table
        "orange": 0xFFA500,
        "pink": 0xFFC0CB,
        "brown": 0xA52A2A,
    }
)

_HEX_DIGITS: frozenset[str] = frozenset("0123456789abcdefABCDEF")


def parse_color(spec: str) -> int:
    """Parse a color specification into an ARGB integer.

    Args:
        spec: ``#RRGGBB``, ``#AARRGGBB`` or a color name

    Returns:
        ARGB color value

    Raises:
        ValueError: If the specification is not recognized

    """
    if spec.startswith("#"):
        digits = spec[1:]
        if len(digits) not in (6, 8) or not set(digits) <= _HEX_DIGITS:
            raise ValueError(f"Unknown color: {spec!r}")
        value = int(digits, 16)
        if len(digits) == 6:
            value |= _OPAQUE
        return value

    rgb = NAMED_COLORS.get(spec.lower())
    if rgb is None:
        raise ValueError(f"Unknown color: {spec!r}")
    return rgb | _OPAQUE


def to_hex(argb: int) -> str:
    """Format an ARGB value as ``#RRGGBB`` (or ``#AARRGGBB`` if translucent)."""
    if argb & _OPAQUE == _OPAQUE:
        return f"#{argb & 0xFFFFFF:06x}"
    return f"#{argb:08x}"


__all__ = ["NAMED_COLORS", "parse_color", "to_hex"]
