"""Styled cells and the column-aware line wrapper."""

from __future__ import annotations

from dataclasses import dataclass

from termpane.attribute import COLOR_DEFAULT, Attribute
from termpane.utils import rune_width


@dataclass(frozen=True)
class Cell:
    """One character position: a rune plus its foreground and background."""

    ch: str
    fg: Attribute = COLOR_DEFAULT
    bg: Attribute = COLOR_DEFAULT


Line = list[Cell]


def cells_from_string(text: str, fg: Attribute = COLOR_DEFAULT, bg: Attribute = COLOR_DEFAULT) -> Line:
    return [Cell(ch, fg, bg) for ch in text]


def line_string(line: Line) -> str:
    return "".join(c.ch for c in line)


def line_width(line: Line) -> int:
    return sum(rune_width(c.ch) for c in line)


def wrap_offsets(line: Line, width: int) -> list[tuple[int, int]]:
    """Return the ``(start, end)`` cell ranges of *line* wrapped at *width*.

    Lines are broken after the last space or hyphen that still fits.  A
    space at the break is dropped from both sides; a hyphen stays at the
    end of the upper line.  A word wider than *width* is split hard.
    """
    if width <= 0:
        return [(0, len(line))]

    ranges: list[tuple[int, int]] = []
    offset = 0
    n = 0
    last_break = -1

    for i, cell in enumerate(line):
        ch = cell.ch
        rw = rune_width(ch)
        n += rw

        if n > width:
            if ch == " ":
                ranges.append((offset, i))
                offset = i + 1
                n = 0
            elif ch == "-":
                ranges.append((offset, i))
                offset = i
                n = rw
            elif last_break != -1:
                if line[last_break].ch == "-":
                    ranges.append((offset, last_break + 1))
                else:
                    ranges.append((offset, last_break))
                offset = last_break + 1
                n = sum(rune_width(c.ch) for c in line[offset : i + 1])
            elif offset < i:
                ranges.append((offset, i))
                offset = i
                n = rw
            last_break = -1
        elif ch in (" ", "-"):
            last_break = i

    ranges.append((offset, len(line)))
    return ranges


def wrap_line(line: Line, width: int) -> list[Line]:
    """Wrap *line* into display lines no wider than *width* columns."""
    return [line[start:end] for start, end in wrap_offsets(line, width)]
