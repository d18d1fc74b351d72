"""Incremental interpreter for the ANSI escape sequences written to views.

Only the subset that matters for styled text is understood: SGR
(``ESC[...m``) and erase-in-line (``ESC[0K``).  Everything else is reported
as an error so the writer can fall back to printing the consumed runes
literally.
"""

from __future__ import annotations

import enum

from termpane.attribute import (
    ATTR_ALL,
    ATTR_BLINK,
    ATTR_BOLD,
    ATTR_DIM,
    ATTR_ITALIC,
    ATTR_REVERSE,
    ATTR_STRIKETHROUGH,
    ATTR_UNDERLINE,
    COLOR_DEFAULT,
    Attribute,
    OutputMode,
    fix_color,
    get_color,
    new_rgb_color,
)
from termpane.errors import (
    CSINotANumberError,
    CSIParseError,
    CSITooLongError,
    NotCSIError,
)

ESC = "\x1b"

MAX_PARAMS = 20
MAX_PARAM_LENGTH = 255


class _State(enum.Enum):
    NONE = 0
    ESCAPE = 1
    CSI = 2
    PARAMS = 3


class Instruction(enum.Enum):
    """Non-styling instruction resolved from the last complete sequence."""

    NONE = 0
    ERASE_IN_LINE = 1


_SET_FLAGS: dict[int, Attribute] = {
    1: ATTR_BOLD,
    2: ATTR_DIM,
    3: ATTR_ITALIC,
    4: ATTR_UNDERLINE,
    5: ATTR_BLINK,
    7: ATTR_REVERSE,
    9: ATTR_STRIKETHROUGH,
}

_CLEAR_FLAGS: dict[int, Attribute] = {
    22: ATTR_BOLD | ATTR_DIM,
    23: ATTR_ITALIC,
    24: ATTR_UNDERLINE,
    25: ATTR_BLINK,
    27: ATTR_REVERSE,
    29: ATTR_STRIKETHROUGH,
}


class EscapeInterpreter:
    """Consumes one rune at a time and tracks the running fg/bg attributes.

    Text attribute flags (bold, underline, ...) are carried in ``fg``.
    """

    def __init__(self, mode: OutputMode = OutputMode.NORMAL) -> None:
        self.mode = mode
        self.fg: Attribute = COLOR_DEFAULT
        self.bg: Attribute = COLOR_DEFAULT
        self.instruction = Instruction.NONE
        self._state = _State.NONE
        self._cur_ch = ""
        self._params: list[str] = []

    def reset(self) -> None:
        """Return to the neutral state, dropping colors and any partial sequence."""
        self.fg = COLOR_DEFAULT
        self.bg = COLOR_DEFAULT
        self.instruction = Instruction.NONE
        self.reset_sequence()

    def reset_sequence(self) -> None:
        """Abandon the sequence being parsed, keeping the current colors."""
        self._state = _State.NONE
        self._cur_ch = ""
        self._params = []

    @property
    def in_sequence(self) -> bool:
        return self._state is not _State.NONE

    def runes(self) -> str:
        """Reconstruct the runes consumed by the current sequence so far."""
        if self._state is _State.NONE:
            return ESC
        if self._state is _State.ESCAPE:
            return ESC + self._cur_ch
        if self._state is _State.CSI:
            return ESC + "[" + self._cur_ch
        return ESC + "[" + ";".join(self._params) + self._cur_ch

    def parse_one(self, ch: str) -> bool:
        """Feed *ch*; return True if it belongs to an escape sequence.

        Raises an :class:`~termpane.errors.EscapeSequenceError` subclass when
        the input is not a sequence this interpreter understands.  The
        interpreter is left in the failing state so :meth:`runes` can
        rebuild the consumed input; call :meth:`reset_sequence` afterwards.
        """
        self._cur_ch = ch

        if self._state is _State.NONE:
            if ch == ESC:
                self._state = _State.ESCAPE
                return True
            return False

        if self._state is _State.ESCAPE:
            if ch == "[":
                self._state = _State.CSI
                return True
            raise NotCSIError()

        if self._state is _State.CSI:
            if ch.isdigit() and ch.isascii():
                self._params = [ch]
                self._state = _State.PARAMS
                return True
            raise CSINotANumberError()

        # _State.PARAMS
        if ch.isdigit() and ch.isascii():
            if len(self._params[-1]) >= MAX_PARAM_LENGTH:
                raise CSITooLongError()
            self._params[-1] += ch
            return True
        if ch == ";":
            if len(self._params) >= MAX_PARAMS:
                raise CSITooLongError()
            self._params.append("")
            return True
        if ch == "m":
            self._apply_sgr([int(p) if p else 0 for p in self._params])
            self._finish()
            return True
        if ch == "K":
            self.instruction = Instruction.ERASE_IN_LINE
            self._finish()
            return True
        raise CSIParseError()

    def take_instruction(self) -> Instruction:
        """Return and clear the pending non-styling instruction."""
        instruction = self.instruction
        self.instruction = Instruction.NONE
        return instruction

    # -- private ------------------------------------------------------------

    def _finish(self) -> None:
        self._state = _State.NONE
        self._params = []

    def _color(self, color: Attribute) -> Attribute:
        if self.mode in (OutputMode.TRUE, OutputMode.SIMULATOR):
            return color
        return fix_color(color, self.mode)

    def _set_fg(self, color: Attribute) -> None:
        self.fg = (self.fg & ATTR_ALL) | color

    def _set_bg(self, color: Attribute) -> None:
        self.bg = (self.bg & ATTR_ALL) | color

    def _apply_sgr(self, params: list[int]) -> None:
        i = 0
        while i < len(params):
            p = params[i]

            if p == 0:
                self.fg = COLOR_DEFAULT
                self.bg = COLOR_DEFAULT
            elif p in _SET_FLAGS:
                self.fg |= _SET_FLAGS[p]
            elif p in _CLEAR_FLAGS:
                self.fg &= ~_CLEAR_FLAGS[p]
            elif 30 <= p <= 37:
                self._set_fg(get_color(p - 30))
            elif 40 <= p <= 47:
                self._set_bg(get_color(p - 40))
            elif 90 <= p <= 97:
                self._set_fg(get_color(p - 90 + 8))
            elif 100 <= p <= 107:
                self._set_bg(get_color(p - 100 + 8))
            elif p == 39:
                self._set_fg(COLOR_DEFAULT)
            elif p == 49:
                self._set_bg(COLOR_DEFAULT)
            elif p in (38, 48):
                color, used = self._extended_color(params, i + 1)
                if color is not None:
                    if p == 38:
                        self._set_fg(color)
                    else:
                        self._set_bg(color)
                i += used

            i += 1

    def _extended_color(self, params: list[int], start: int) -> tuple[Attribute | None, int]:
        """Decode ``5;N`` or ``2;R;G;B`` starting at *start*.

        Returns the color (or None) and how many parameters were used.
        """
        if start >= len(params):
            return None, 0
        kind = params[start]
        if kind == 5 and start + 1 < len(params):
            return self._color(get_color(params[start + 1])), 2
        if kind == 2 and start + 3 < len(params):
            r, g, b = params[start + 1 : start + 4]
            return self._color(new_rgb_color(r, g, b)), 4
        return None, 1
