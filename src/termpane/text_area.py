"""Flat text editing model with a single-slot clipboard.

``TextArea`` keeps its content as one list of runes (newlines included)
plus a cursor index into it.  Views can mirror a text area into their
cell buffer with :meth:`termpane.view.View.render_text_area`.
"""

from __future__ import annotations

from termpane.utils import rune_width

WHITESPACE = " \t"
WORD_SEPARATORS = "*?_+-.[]~=/&;!#$%^(){}<>"


def word_start(runes: list[str], index: int) -> int:
    """Return where a backward word deletion from *index* should stop.

    Whitespace directly before *index* is always taken; then either a run
    of separators or a run of word characters.  A newline is never crossed.
    """
    i = index
    while i > 0 and runes[i - 1] in WHITESPACE:
        i -= 1

    separators = False
    while i > 0 and runes[i - 1] in WORD_SEPARATORS:
        i -= 1
        separators = True

    if not separators:
        while (
            i > 0
            and runes[i - 1] != "\n"
            and runes[i - 1] not in WHITESPACE
            and runes[i - 1] not in WORD_SEPARATORS
        ):
            i -= 1
    return i


def word_end(runes: list[str], index: int) -> int:
    """Forward counterpart of :func:`word_start`."""
    i = index
    n = len(runes)
    while i < n and runes[i] in WHITESPACE:
        i += 1

    separators = False
    while i < n and runes[i] in WORD_SEPARATORS:
        i += 1
        separators = True

    if not separators:
        while (
            i < n
            and runes[i] != "\n"
            and runes[i] not in WHITESPACE
            and runes[i] not in WORD_SEPARATORS
        ):
            i += 1
    return i


class TextArea:
    """Editable text with a cursor, overwrite mode and a clipboard."""

    def __init__(self) -> None:
        self._content: list[str] = []
        self._cursor = 0
        self._overwrite = False
        self._clipboard = ""

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def clipboard(self) -> str:
        return self._clipboard

    @property
    def overwrite(self) -> bool:
        return self._overwrite

    # -- typing -------------------------------------------------------------

    def type_rune(self, ch: str) -> None:
        if self._overwrite and not self._at_end():
            self._content[self._cursor] = ch
        else:
            self._content.insert(self._cursor, ch)
        self._cursor += 1

    def type_string(self, text: str) -> None:
        for ch in text:
            self.type_rune(ch)

    def backspace_char(self) -> None:
        if self._cursor == 0:
            return
        del self._content[self._cursor - 1]
        self._cursor -= 1

    def delete_char(self) -> None:
        if self._at_end():
            return
        del self._content[self._cursor]

    def toggle_overwrite(self) -> None:
        self._overwrite = not self._overwrite

    def clear(self) -> None:
        self._content = []
        self._cursor = 0

    # -- cursor motion ------------------------------------------------------

    def move_cursor_left(self) -> None:
        if self._cursor > 0:
            self._cursor -= 1

    def move_cursor_right(self) -> None:
        if not self._at_end():
            self._cursor += 1

    def move_cursor_up(self) -> None:
        x, y = self.get_cursor_xy()
        if y > 0:
            self.set_cursor_2d(x, y - 1)

    def move_cursor_down(self) -> None:
        x, y = self.get_cursor_xy()
        if y < self._content.count("\n"):
            self.set_cursor_2d(x, y + 1)

    def move_left_word(self) -> None:
        if self._cursor > 0 and self._content[self._cursor - 1] == "\n":
            self._cursor -= 1
            return
        self._cursor = word_start(self._content, self._cursor)

    def move_right_word(self) -> None:
        if not self._at_end() and self._content[self._cursor] == "\n":
            self._cursor += 1
            return
        self._cursor = word_end(self._content, self._cursor)

    def go_to_start_of_line(self) -> None:
        self._cursor = self._line_start()

    def go_to_end_of_line(self) -> None:
        self._cursor = self._line_end()

    def set_cursor_2d(self, x: int, y: int) -> None:
        """Place the cursor at display column *x* of line *y*, clamping both."""
        x = max(x, 0)
        y = max(y, 0)
        position = 0
        for ch in self._content:
            if x <= 0 and y == 0:
                self._cursor = position
                return
            if ch == "\n":
                if y == 0:
                    self._cursor = position
                    return
                y -= 1
            elif y == 0:
                x -= rune_width(ch)
            position += 1
        self._cursor = position

    def get_cursor_xy(self) -> tuple[int, int]:
        x = 0
        y = 0
        for ch in self._content[: self._cursor]:
            if ch == "\n":
                y += 1
                x = 0
            else:
                x += rune_width(ch)
        return x, y

    # -- deletion with clipboard ---------------------------------------------

    def backspace_word(self) -> None:
        if self._cursor == 0:
            return
        if self._content[self._cursor - 1] == "\n":
            self._clipboard = "\n"
            self.backspace_char()
            return
        start = word_start(self._content, self._cursor)
        self._cut(start, self._cursor)

    def delete_to_start_of_line(self) -> None:
        if self._cursor == 0:
            return
        if self._content[self._cursor - 1] == "\n":
            self._clipboard = "\n"
            self.backspace_char()
            return
        self._cut(self._line_start(), self._cursor)

    def delete_to_end_of_line(self) -> None:
        if self._at_end():
            return
        if self._content[self._cursor] == "\n":
            self._clipboard = "\n"
            self.delete_char()
            return
        self._cut(self._cursor, self._line_end())

    def yank(self) -> None:
        self.type_string(self._clipboard)

    def get_content(self) -> str:
        return "".join(self._content)

    # -- private ------------------------------------------------------------

    def _at_end(self) -> bool:
        return self._cursor >= len(self._content)

    def _line_start(self) -> int:
        i = self._cursor
        while i > 0 and self._content[i - 1] != "\n":
            i -= 1
        return i

    def _line_end(self) -> int:
        i = self._cursor
        while i < len(self._content) and self._content[i] != "\n":
            i += 1
        return i

    def _cut(self, start: int, end: int) -> None:
        self._clipboard = "".join(self._content[start:end])
        del self._content[start:end]
        self._cursor = start
