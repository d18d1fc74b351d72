"""Packed color/attribute values and their conversion to terminal styles.

An ``Attribute`` is a plain ``int`` split into two disjoint fields:

* the low 25 bits hold a color: ``0`` is the terminal default, ``1..256``
  is a palette index offset by one, and values with ``ATTR_IS_RGB_COLOR``
  set carry a 24-bit ``0xRRGGBB`` color;
* bits 25 and up hold text attribute flags (bold, underline, ...).

Because the fields never overlap a color and flags can be combined with
``|``, e.g. ``COLOR_RED | ATTR_BOLD``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

Attribute = int

ATTR_COLOR_BITS = 0x1FFFFFF
ATTR_IS_RGB_COLOR = 1 << 24

COLOR_DEFAULT: Attribute = 0

ATTR_NONE: Attribute = 0
ATTR_BOLD: Attribute = 1 << 25
ATTR_BLINK: Attribute = 1 << 26
ATTR_REVERSE: Attribute = 1 << 27
ATTR_UNDERLINE: Attribute = 1 << 28
ATTR_DIM: Attribute = 1 << 29
ATTR_ITALIC: Attribute = 1 << 30
ATTR_STRIKETHROUGH: Attribute = 1 << 31
ATTR_ALL: Attribute = (
    ATTR_BOLD
    | ATTR_BLINK
    | ATTR_REVERSE
    | ATTR_UNDERLINE
    | ATTR_DIM
    | ATTR_ITALIC
    | ATTR_STRIKETHROUGH
)


class OutputMode(enum.Enum):
    """Color fidelity of the attached terminal."""

    NORMAL = "normal"
    M256 = "256"
    M216 = "216"
    GRAYSCALE = "grayscale"
    TRUE = "true"
    SIMULATOR = "simulator"


# ---------------------------------------------------------------------------
# Color constructors
# ---------------------------------------------------------------------------


def get_color(index: int) -> Attribute:
    """Return the attribute for palette entry *index* (0..255)."""
    return (index & 0xFF) + 1


def new_rgb_color(r: int, g: int, b: int) -> Attribute:
    return ATTR_IS_RGB_COLOR | (r & 0xFF) << 16 | (g & 0xFF) << 8 | (b & 0xFF)


def get_rgb_color(value: int) -> Attribute:
    """Return the attribute for a ``0xRRGGBB`` integer."""
    return ATTR_IS_RGB_COLOR | (value & 0xFFFFFF)


COLOR_BLACK = get_color(0)
COLOR_RED = get_color(1)
COLOR_GREEN = get_color(2)
COLOR_YELLOW = get_color(3)
COLOR_BLUE = get_color(4)
COLOR_MAGENTA = get_color(5)
COLOR_CYAN = get_color(6)
COLOR_WHITE = get_color(7)


# ---------------------------------------------------------------------------
# xterm palette
# ---------------------------------------------------------------------------

_BASE_16: list[tuple[int, int, int]] = [
    (0x00, 0x00, 0x00),
    (0x80, 0x00, 0x00),
    (0x00, 0x80, 0x00),
    (0x80, 0x80, 0x00),
    (0x00, 0x00, 0x80),
    (0x80, 0x00, 0x80),
    (0x00, 0x80, 0x80),
    (0xC0, 0xC0, 0xC0),
    (0x80, 0x80, 0x80),
    (0xFF, 0x00, 0x00),
    (0x00, 0xFF, 0x00),
    (0xFF, 0xFF, 0x00),
    (0x00, 0x00, 0xFF),
    (0xFF, 0x00, 0xFF),
    (0x00, 0xFF, 0xFF),
    (0xFF, 0xFF, 0xFF),
]

_CUBE_LEVELS = [0, 95, 135, 175, 215, 255]


def _palette_rgb(index: int) -> tuple[int, int, int]:
    if index < 16:
        return _BASE_16[index]
    if index < 232:
        i = index - 16
        return (
            _CUBE_LEVELS[i // 36],
            _CUBE_LEVELS[(i // 6) % 6],
            _CUBE_LEVELS[i % 6],
        )
    level = 8 + (index - 232) * 10
    return (level, level, level)


def _is_valid(color: Attribute) -> bool:
    c = color & ATTR_COLOR_BITS
    if c & ATTR_IS_RGB_COLOR:
        return True
    return 1 <= c <= 256


def rgb(color: Attribute) -> tuple[int, int, int]:
    """Return ``(r, g, b)`` for *color*, or ``(-1, -1, -1)`` if unknown."""
    if not _is_valid(color):
        return (-1, -1, -1)
    c = color & ATTR_COLOR_BITS
    if c & ATTR_IS_RGB_COLOR:
        return ((c >> 16) & 0xFF, (c >> 8) & 0xFF, c & 0xFF)
    return _palette_rgb(c - 1)


def hex_value(color: Attribute) -> int:
    """Return ``0xRRGGBB`` for *color*, or ``-1`` if unknown."""
    r, g, b = rgb(color)
    if r < 0:
        return -1
    return r << 16 | g << 8 | b


# ---------------------------------------------------------------------------
# Down-conversion per output mode
# ---------------------------------------------------------------------------


def _nearest_level(value: int) -> int:
    return min(range(len(_CUBE_LEVELS)), key=lambda i: abs(_CUBE_LEVELS[i] - value))


def _rgb_to_index(r: int, g: int, b: int, mode: OutputMode) -> int:
    if mode is OutputMode.GRAYSCALE:
        luminance = (299 * r + 587 * g + 114 * b) // 1000
        return 232 + round(luminance * 23 / 255)
    if mode is OutputMode.NORMAL:
        return min(
            range(16),
            key=lambda i: sum((a - c) ** 2 for a, c in zip(_BASE_16[i], (r, g, b))),
        )
    return 16 + 36 * _nearest_level(r) + 6 * _nearest_level(g) + _nearest_level(b)


def fix_color(color: Attribute, mode: OutputMode) -> Attribute:
    """Reduce *color* to what *mode* can display.

    Attribute flags are dropped; the default color is preserved.
    """
    c = color & ATTR_COLOR_BITS
    if c == COLOR_DEFAULT or not _is_valid(c):
        return COLOR_DEFAULT

    if c & ATTR_IS_RGB_COLOR:
        if mode in (OutputMode.TRUE, OutputMode.SIMULATOR):
            return c
        return get_color(_rgb_to_index(*rgb(c), mode))

    index = c - 1
    if mode is OutputMode.NORMAL:
        index %= 16
    elif mode is OutputMode.M216:
        index = index % 216 + 16
    elif mode is OutputMode.GRAYSCALE:
        index = index % 24 + 232
    else:
        index %= 256
    return get_color(index)


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------

_ATTR_SGR: list[tuple[Attribute, str]] = [
    (ATTR_BOLD, "1"),
    (ATTR_DIM, "2"),
    (ATTR_ITALIC, "3"),
    (ATTR_UNDERLINE, "4"),
    (ATTR_BLINK, "5"),
    (ATTR_REVERSE, "7"),
    (ATTR_STRIKETHROUGH, "9"),
]


def _color_params(color: Attribute, *, foreground: bool) -> list[str]:
    c = color & ATTR_COLOR_BITS
    if c == COLOR_DEFAULT:
        return []
    base = 30 if foreground else 40
    if c & ATTR_IS_RGB_COLOR:
        r, g, b = rgb(c)
        return [str(base + 8), "2", str(r), str(g), str(b)]
    index = c - 1
    if index < 8:
        return [str(base + index)]
    if index < 16:
        return [str(base + 60 + index - 8)]
    return [str(base + 8), "5", str(index)]


@dataclass(frozen=True)
class Style:
    """Terminal-ready style: colors already reduced to the output mode."""

    fg: Attribute = COLOR_DEFAULT
    bg: Attribute = COLOR_DEFAULT
    attrs: Attribute = ATTR_NONE

    def sgr(self) -> str:
        """Return the SGR sequence that selects this style from scratch."""
        params = ["0"]
        for flag, code in _ATTR_SGR:
            if self.attrs & flag:
                params.append(code)
        params.extend(_color_params(self.fg, foreground=True))
        params.extend(_color_params(self.bg, foreground=False))
        return f"\x1b[{';'.join(params)}m"


DEFAULT_STYLE = Style()


def mk_style(fg: Attribute, bg: Attribute, mode: OutputMode = OutputMode.NORMAL) -> Style:
    return Style(fix_color(fg, mode), fix_color(bg, mode), (fg | bg) & ATTR_ALL)
