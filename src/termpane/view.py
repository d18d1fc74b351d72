"""Views: independently positioned, scrollable and editable text panes.

A view keeps its content as a list of :class:`~termpane.cell.Line` values in
document order.  Everything the user sees is derived from that buffer by
:meth:`View._view_lines`, which maps display rows (after wrapping) back to
document positions.  The cursor is stored in document coordinates and only
converted to display coordinates when it has to be shown or scrolled into
view.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from termpane.attribute import ATTR_ALL, ATTR_COLOR_BITS, COLOR_DEFAULT, Attribute, OutputMode
from termpane.cell import Cell, Line, cells_from_string, line_string, wrap_offsets
from termpane.edit import DEFAULT_EDITOR
from termpane.errors import EscapeSequenceError, InvalidPointError
from termpane.escape import ESC, EscapeInterpreter, Instruction
from termpane.loader import loader_char
from termpane.scrollbar import updated_cursor_and_origin
from termpane.text_area import TextArea, word_end, word_start
from termpane.utils import rune_width, visible_width

if TYPE_CHECKING:
    from termpane.edit import Editor

logger = logging.getLogger(__name__)

# Edges that a view shares with a neighbour (``View.overlaps``)
TOP = 1
BOTTOM = 2
LEFT = 4
RIGHT = 8

TAB_WIDTH = 4


class Canvas(Protocol):
    """Drawing surface handed to :meth:`View.draw` by the compositor."""

    def set_cell(self, x: int, y: int, ch: str, fg: Attribute, bg: Attribute) -> None: ...


@dataclass(frozen=True)
class ViewLine:
    """One display row: cells ``start:end`` of document line ``line``."""

    line: int
    start: int
    end: int
    continuation: bool = False


def _cell_width(ch: str) -> int:
    # every rune takes at least one cell on the grid
    return max(rune_width(ch), 1)


def strip_wide_padding(text: str) -> str:
    """Drop the space some terminals insert after double-width runes.

    Surrounding whitespace is trimmed first.
    """
    text = text.strip()
    out: list[str] = []
    skip = False
    for ch in text:
        if skip and ch == " ":
            skip = False
            continue
        out.append(ch)
        skip = rune_width(ch) > 1
    return "".join(out)


class View:
    """A rectangular pane with its own buffer, cursor and styling."""

    def __init__(
        self,
        name: str,
        x0: int,
        y0: int,
        x1: int,
        y1: int,
        mode: OutputMode = OutputMode.NORMAL,
    ) -> None:
        self._name = name
        self.x0 = x0
        self.y0 = y0
        self.x1 = x1
        self.y1 = y1

        self._lines: list[Line] = []
        self._cx = 0
        self._cy = 0
        self._ox = 0
        self._oy = 0
        self._wx = 0
        self._wy = 0
        self._ei = EscapeInterpreter(mode)
        self._read_cache = ""
        self._read_offset = 0
        self._clipboard = ""

        self.frame = True
        self.frame_runes: str = ""
        self.frame_color: Attribute = COLOR_DEFAULT
        self.title = ""
        self.subtitle = ""
        self.title_color: Attribute = COLOR_DEFAULT
        self.fg_color: Attribute = COLOR_DEFAULT
        self.bg_color: Attribute = COLOR_DEFAULT
        self.sel_fg_color: Attribute = COLOR_DEFAULT
        self.sel_bg_color: Attribute = COLOR_DEFAULT

        self.wrap = False
        self.wrap_prefix = ""
        self.autoscroll = False
        self.editable = False
        self.overwrite = False
        self.highlight = False
        self.visible = True
        self.mask = ""
        self.has_loader = False
        self.scrollbar = False
        self.always_on_top = False
        self.overlaps = 0
        self.editor: Editor = DEFAULT_EDITOR
        self.text_area = TextArea()

    def __repr__(self) -> str:
        return f"View({self._name!r}, {self.x0}, {self.y0}, {self.x1}, {self.y1})"

    # -- geometry -----------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    def size(self) -> tuple[int, int]:
        """Return the interior width and height."""
        return self.x1 - self.x0 - 1, self.y1 - self.y0 - 1

    def dimensions(self) -> tuple[int, int, int, int]:
        return self.x0, self.y0, self.x1, self.y1

    def set_output_mode(self, mode: OutputMode) -> None:
        self._ei.mode = mode

    # -- writing ------------------------------------------------------------

    def write(self, text: str) -> int:
        """Write *text* at the write position, interpreting escape sequences.

        Returns the number of runes consumed.
        """
        for ch in text:
            if ch == ESC or self._ei.in_sequence:
                self._write_escaped(ch)
            elif ch == "\n":
                self._wx = 0
                self._wy += 1
            elif ch == "\r":
                self._wx = 0
            elif ch == "\t":
                for _ in range(TAB_WIDTH - self._wx % TAB_WIDTH):
                    self._put(" ")
            else:
                self._put(ch)
        return len(text)

    def _write_escaped(self, ch: str) -> None:
        try:
            self._ei.parse_one(ch)
        except EscapeSequenceError as exc:
            runes = self._ei.runes()
            self._ei.reset_sequence()
            logger.debug("%s: writing %r literally (%s)", self._name, runes, exc)
            for r in runes:
                self._put(r)
            return
        if self._ei.take_instruction() is Instruction.ERASE_IN_LINE and self._wy < len(self._lines):
            del self._lines[self._wy][self._wx :]
            if self._wy == self._cy:
                self._cx = min(self._cx, len(self._lines[self._wy]))

    def _put(self, ch: str) -> None:
        while len(self._lines) <= self._wy:
            self._lines.append([])
        line = self._lines[self._wy]
        if len(line) < self._wx:
            line.extend(Cell(" ") for _ in range(self._wx - len(line)))
        cell = Cell(ch, self._ei.fg, self._ei.bg)
        if self._wx < len(line):
            line[self._wx] = cell
        else:
            line.append(cell)
        self._wx += 1

    def set_write_pos(self, x: int, y: int) -> None:
        """Move the write position; colors start over from the defaults."""
        if x < 0 or y < 0:
            raise InvalidPointError(f"invalid write position ({x}, {y})")
        self._wx = x
        self._wy = y
        self._ei.reset()

    def write_pos(self) -> tuple[int, int]:
        return self._wx, self._wy

    def clear(self) -> None:
        """Empty the buffer and reset the write position and colors."""
        self._lines = []
        self._wx = 0
        self._wy = 0
        self._ei.reset()
        self._cx = 0
        self._cy = 0
        self._ox = 0
        self._oy = 0

    # -- reading ------------------------------------------------------------

    def buffer(self) -> str:
        return "\n".join(line_string(line) for line in self._lines).replace("\x00", " ")

    def view_buffer(self) -> str:
        """Return the rows currently visible in the viewport."""
        _, height = self.size()
        rows = self._view_lines()[self._oy : self._oy + max(height, 0)]
        return "\n".join(line_string(self._lines[r.line][r.start : r.end]) for r in rows)

    def read(self, size: int = -1) -> str:
        """Read up to *size* runes of the buffer; ``""`` at the end.

        The buffer is snapshotted on the first read after :meth:`rewind`.
        """
        if self._read_offset == 0:
            self._read_cache = self.buffer()
        rest = self._read_cache[self._read_offset :]
        chunk = rest if size < 0 else rest[:size]
        self._read_offset += len(chunk)
        return chunk

    def rewind(self) -> None:
        self._read_offset = 0

    def read_editor(self) -> str:
        return strip_wide_padding(self.buffer())

    def lines_height(self) -> int:
        return len(self._lines)

    def view_lines_height(self) -> int:
        return len(self._view_lines())

    def line(self, y: int) -> str:
        """Return the document line shown at viewport row *y*."""
        row = self._row_at(y)
        return line_string(self._lines[row.line])

    def word(self, x: int, y: int) -> str:
        """Return the space-delimited word at viewport point ``(x, y)``."""
        row = self._row_at(y)
        if x < 0:
            raise InvalidPointError(f"invalid point ({x}, {y})")
        text = line_string(self._lines[row.line])
        index = self._index_in_row(row, x + (0 if self.wrap else self._ox))
        if index >= row.end:
            raise InvalidPointError(f"invalid point ({x}, {y})")

        left = max(text.rfind(" ", 0, index), text.rfind("\x00", 0, index)) + 1
        right = len(text)
        for i in range(index, len(text)):
            if text[i] in (" ", "\x00"):
                right = i
                break
        return text[left:right]

    def _row_at(self, y: int) -> ViewLine:
        rows = self._view_lines()
        index = self._oy + y
        if y < 0 or index >= len(rows):
            raise InvalidPointError(f"invalid row {y}")
        return rows[index]

    # -- display mapping ----------------------------------------------------

    def _wrap_width(self) -> int:
        width, _ = self.size()
        return max(width - visible_width(self.wrap_prefix), 1)

    def _view_lines(self) -> list[ViewLine]:
        rows: list[ViewLine] = []
        if not self.wrap:
            for i, line in enumerate(self._lines):
                rows.append(ViewLine(i, 0, len(line)))
            return rows

        width = self._wrap_width()
        for i, line in enumerate(self._lines):
            for n, (start, end) in enumerate(wrap_offsets(line, width)):
                rows.append(ViewLine(i, start, end, n > 0))
        return rows

    def _row_prefix_width(self, row: ViewLine) -> int:
        return visible_width(self.wrap_prefix) if row.continuation else 0

    def _index_in_row(self, row: ViewLine, column: int) -> int:
        """Map a display column to a cell index, rounding up to a rune boundary."""
        column -= self._row_prefix_width(row)
        line = self._lines[row.line]
        index = row.start
        while index < row.end and column > 0:
            column -= _cell_width(line[index].ch)
            index += 1
        return index

    def _display_cursor(self) -> tuple[int, int]:
        if not self._lines:
            return 0, 0
        line = self._lines[self._cy]
        if not self.wrap:
            return sum(_cell_width(c.ch) for c in line[: self._cx]), self._cy

        rows = self._view_lines()
        found = 0
        for i, row in enumerate(rows):
            if row.line == self._cy and row.start <= self._cx:
                found = i
            elif row.line > self._cy:
                break
        row = rows[found]
        end = min(self._cx, row.end)
        x = self._row_prefix_width(row) + sum(_cell_width(c.ch) for c in line[row.start : end])
        width, _ = self.size()
        if 0 < width <= x:
            # a full row leaves the cursor at the start of the next one
            return 0, found + 1
        return x, found

    def _adjust_origin(self) -> None:
        width, height = self.size()
        x, y = self._display_cursor()
        _, self._oy = updated_cursor_and_origin(self._oy, max(height - 1, 0), y)
        if self.wrap:
            self._ox = 0
        else:
            _, self._ox = updated_cursor_and_origin(self._ox, max(width - 1, 0), x)

    # -- cursor and origin --------------------------------------------------

    def cursor(self) -> tuple[int, int]:
        """Return the cursor position relative to the viewport."""
        x, y = self._display_cursor()
        return x - self._ox, y - self._oy

    def cursor_position(self) -> tuple[int, int]:
        """Return the cursor position in document coordinates."""
        return self._cx, self._cy

    def set_cursor(self, x: int, y: int) -> None:
        """Place the cursor at viewport point ``(x, y)``, clamped to the content."""
        if x < 0 or y < 0:
            raise InvalidPointError(f"invalid cursor position ({x}, {y})")
        rows = self._view_lines()
        if not rows:
            self._cx = self._cy = 0
            return
        row = rows[min(self._oy + y, len(rows) - 1)]
        self._cy = row.line
        self._cx = self._index_in_row(row, x + (0 if self.wrap else self._ox))

    def origin(self) -> tuple[int, int]:
        return self._ox, self._oy

    def set_origin(self, x: int, y: int) -> None:
        if x < 0 or y < 0:
            raise InvalidPointError(f"invalid origin ({x}, {y})")
        self._ox = x
        self._oy = y

    def move_cursor(self, dx: int, dy: int) -> None:
        """Move the cursor in document coordinates and scroll it into view."""
        if not self._lines:
            return

        if dy:
            column = sum(_cell_width(c.ch) for c in self._lines[self._cy][: self._cx])
            self._cy = min(max(self._cy + dy, 0), len(self._lines) - 1)
            line = self._lines[self._cy]
            self._cx = self._index_in_row(ViewLine(self._cy, 0, len(line)), column)

        if dx:
            line = self._lines[self._cy]
            cx = self._cx + dx
            if cx > len(line):
                if dy == 0 and self._cy + 1 < len(self._lines):
                    self._cy += 1
                    cx = 0
                else:
                    cx = len(line)
            elif cx < 0:
                if dy == 0 and self._cy > 0:
                    self._cy -= 1
                    cx = len(self._lines[self._cy])
                else:
                    cx = 0
            self._cx = cx

        self._adjust_origin()

    # -- editing ------------------------------------------------------------

    def _current_line(self) -> Line:
        if not self._lines:
            self._lines.append([])
            self._cx = self._cy = 0
        return self._lines[self._cy]

    def edit_write(self, ch: str) -> None:
        line = self._current_line()
        cell = Cell(ch)
        if self.overwrite and self._cx < len(line):
            line[self._cx] = cell
        else:
            line.insert(self._cx, cell)
        self._cx += 1
        self._adjust_origin()

    def edit_delete(self, back: bool) -> None:
        if not self._lines:
            return
        line = self._lines[self._cy]
        if back:
            if self._cx > 0:
                del line[self._cx - 1]
                self._cx -= 1
            elif self._cy > 0:
                previous = self._lines[self._cy - 1]
                self._cx = len(previous)
                previous.extend(line)
                del self._lines[self._cy]
                self._cy -= 1
        elif self._cx < len(line):
            del line[self._cx]
        elif self._cy + 1 < len(self._lines):
            line.extend(self._lines.pop(self._cy + 1))
        self._adjust_origin()

    def edit_new_line(self) -> None:
        line = self._current_line()
        self._lines[self._cy] = line[: self._cx]
        self._lines.insert(self._cy + 1, line[self._cx :])
        self._cy += 1
        self._cx = 0
        self._adjust_origin()

    def _runes(self) -> list[str]:
        return [c.ch for c in self._lines[self._cy]]

    def _cut(self, start: int, end: int) -> None:
        line = self._lines[self._cy]
        self._clipboard = line_string(line[start:end])
        del line[start:end]
        self._cx = start

    def edit_delete_word(self) -> None:
        """Delete the word before the cursor into the clipboard."""
        if not self._lines:
            return
        if self._cx == 0:
            if self._cy > 0:
                self._clipboard = "\n"
                self.edit_delete(True)
            return
        self._cut(word_start(self._runes(), self._cx), self._cx)
        self._adjust_origin()

    def edit_delete_to_line_start(self) -> None:
        if not self._lines:
            return
        if self._cx == 0:
            if self._cy > 0:
                self._clipboard = "\n"
                self.edit_delete(True)
            return
        self._cut(0, self._cx)
        self._adjust_origin()

    def edit_delete_to_line_end(self) -> None:
        if not self._lines:
            return
        line = self._lines[self._cy]
        if self._cx >= len(line):
            if self._cy + 1 < len(self._lines):
                self._clipboard = "\n"
                self.edit_delete(False)
            return
        self._cut(self._cx, len(line))
        self._adjust_origin()

    def edit_yank(self) -> None:
        for ch in self._clipboard:
            if ch == "\n":
                self.edit_new_line()
            else:
                self.edit_write(ch)

    def edit_line_start(self) -> None:
        self._cx = 0
        self._adjust_origin()

    def edit_line_end(self) -> None:
        if self._lines:
            self._cx = len(self._lines[self._cy])
        self._adjust_origin()

    def move_word_left(self) -> None:
        if not self._lines:
            return
        if self._cx == 0:
            self.move_cursor(-1, 0)
            return
        self._cx = word_start(self._runes(), self._cx)
        self._adjust_origin()

    def move_word_right(self) -> None:
        if not self._lines:
            return
        if self._cx >= len(self._lines[self._cy]):
            self.move_cursor(1, 0)
            return
        self._cx = word_end(self._runes(), self._cx)
        self._adjust_origin()

    @property
    def clipboard(self) -> str:
        return self._clipboard

    def render_text_area(self) -> None:
        """Mirror :attr:`text_area` into the buffer and cursor."""
        self.clear()
        content = self.text_area.get_content()
        self._lines = [cells_from_string(text) for text in content.split("\n")] if content else []
        x, y = self.text_area.get_cursor_xy()
        if self._lines:
            self._cy = y
            self._cx = self._index_in_row(ViewLine(y, 0, len(self._lines[y])), x)
        self._wy = len(self._lines)
        self._adjust_origin()

    # -- drawing ------------------------------------------------------------

    def _cell_colors(self, cell: Cell, selected: bool) -> tuple[Attribute, Attribute]:
        if selected:
            return self.sel_fg_color | (cell.fg & ATTR_ALL), self.sel_bg_color
        fg = cell.fg if cell.fg & ATTR_COLOR_BITS else self.fg_color | cell.fg
        bg = cell.bg if cell.bg & ATTR_COLOR_BITS else self.bg_color | cell.bg
        return fg, bg

    def draw(self, canvas: Canvas) -> None:
        """Paint the interior of the view onto *canvas*."""
        width, height = self.size()
        if width <= 0 or height <= 0:
            return

        rows = self._view_lines()
        if self.autoscroll and len(rows) > height:
            self._oy = len(rows) - height

        _, cursor_row = self._display_cursor()
        left = self.x0 + 1
        top = self.y0 + 1

        for y in range(height):
            index = self._oy + y
            selected = self.highlight and index == cursor_row and index < len(rows)
            fill_bg = self.sel_bg_color if selected else self.bg_color
            fill_fg = self.sel_fg_color if selected else self.fg_color
            for x in range(width):
                canvas.set_cell(left + x, top + y, " ", fill_fg, fill_bg)
            if index >= len(rows):
                continue

            row = rows[index]
            cells = self._lines[row.line][row.start : row.end]
            if row.continuation and self.wrap_prefix:
                cells = cells_from_string(self.wrap_prefix) + cells

            skip = 0 if self.wrap else self._ox
            x = -skip
            for cell in cells:
                cw = _cell_width(cell.ch)
                if x < 0:
                    x += cw
                    continue
                if x + cw > width:
                    break
                fg, bg = self._cell_colors(cell, selected)
                ch = self.mask or cell.ch
                canvas.set_cell(left + x, top + y, ch, fg, bg)
                if cw == 2:
                    canvas.set_cell(left + x + 1, top + y, "", fg, bg)
                x += cw

        if self.has_loader:
            canvas.set_cell(self.x1 - 1, top, loader_char(), self.fg_color, self.bg_color)
