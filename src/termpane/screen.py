"""Screen backends.

Provides the ``Screen`` protocol the GUI draws to and reads events from,
and ``TerminalScreen``, which drives the controlling terminal directly:
raw mode via :mod:`tty` and :mod:`termios`, the alternate screen, mouse
reporting, bracketed paste and SIGWINCH-based resize detection.  Output is
produced by diffing a back buffer of cells against what was last written.
"""

from __future__ import annotations

import logging
import os
import select
import signal
import sys
import termios
import threading
import tty
from collections import deque
from typing import Protocol

from termpane.attribute import DEFAULT_STYLE, Style
from termpane.errors import BackendError
from termpane.event import Event, decode_sequence, error_event, resize_event
from termpane.stdin_buffer import StdinBuffer

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"
_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"
_MOUSE_ENABLE = "\x1b[?1000h\x1b[?1002h\x1b[?1006h"
_MOUSE_DISABLE = "\x1b[?1006l\x1b[?1002l\x1b[?1000l"
_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"
_RESET_STYLE = "\x1b[0m"
_MOVE_FMT = "\x1b[{};{}H"

COLORS_TRUE = 1 << 24

_BLANK = (" ", DEFAULT_STYLE)


# ---------------------------------------------------------------------------
# Screen protocol
# ---------------------------------------------------------------------------


class Screen(Protocol):
    """Capabilities the GUI needs from a display backend."""

    def init(self) -> None: ...

    def fini(self) -> None: ...

    def size(self) -> tuple[int, int]: ...

    def poll_event(self) -> Event | None:
        """Block until an event is available; ``None`` once finalized."""
        ...

    def post_event(self, ev: Event) -> None: ...

    def set_cell(self, x: int, y: int, ch: str, style: Style) -> None: ...

    def show(self) -> None: ...

    def clear(self, style: Style = DEFAULT_STYLE) -> None: ...

    def show_cursor(self, x: int, y: int) -> None: ...

    def hide_cursor(self) -> None: ...

    def colors(self) -> int: ...

    def enable_mouse(self) -> None: ...

    def disable_mouse(self) -> None: ...


def detect_colors() -> int:
    """Guess the color depth of the terminal from ``COLORTERM`` and ``TERM``."""
    colorterm = os.environ.get("COLORTERM", "").lower()
    if colorterm in ("truecolor", "24bit"):
        return COLORS_TRUE
    if "256color" in os.environ.get("TERM", "").lower():
        return 256
    return 16


def _printable(ch: str) -> str:
    if not ch or ord(ch[0]) < 0x20 or 0x7F <= ord(ch[0]) <= 0x9F:
        return " "
    return ch


# ---------------------------------------------------------------------------
# TerminalScreen implementation
# ---------------------------------------------------------------------------


class TerminalScreen:
    """Screen backed by the process's ``stdin``/``stdout`` terminal."""

    def __init__(self) -> None:
        self._in_fd = sys.stdin.fileno()
        self._out_fd = sys.stdout.fileno()
        self._original_termios: list | None = None
        self._prev_sigwinch_handler: signal.Handlers | None = None
        self._write_log_path: str = os.environ.get("TERMPANE_WRITE_LOG", "")

        timeout = os.environ.get("TERMPANE_ESC_TIMEOUT", "")
        try:
            esc_timeout = float(timeout) if timeout else 0.01
        except ValueError:
            logger.warning("ignoring invalid TERMPANE_ESC_TIMEOUT=%r", timeout)
            esc_timeout = 0.01

        self._stdin_buffer = StdinBuffer(timeout=esc_timeout)
        self._stdin_buffer.on_data(self._on_buffer_data)
        self._stdin_buffer.on_paste(self._on_buffer_paste)

        self._lock = threading.Lock()
        self._events: deque[Event] = deque()
        self._wake_r, self._wake_w = os.pipe()
        self._closed = False
        self._mouse = False

        self._width = 0
        self._height = 0
        self._back: list[list[tuple[str, Style]]] = []
        self._front: list[list[tuple[str, Style] | None]] = []
        self._cursor: tuple[int, int] | None = None

    # -- start / stop -------------------------------------------------------

    def init(self) -> None:
        """Enter raw mode and the alternate screen."""
        self._original_termios = termios.tcgetattr(self._in_fd)
        tty.setraw(self._in_fd)

        self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._on_sigwinch)

        self._raw_write(_ALT_SCREEN_ENABLE + _BRACKETED_PASTE_ENABLE + _HIDE_CURSOR + _CLEAR_SCREEN)
        self._resize_buffers()
        logger.debug("terminal screen initialised (%dx%d)", self._width, self._height)

    def fini(self) -> None:
        """Restore the terminal and wake any blocked :meth:`poll_event`."""
        if self._closed:
            return
        self._closed = True

        out = _RESET_STYLE + _SHOW_CURSOR + _BRACKETED_PASTE_DISABLE + _ALT_SCREEN_DISABLE
        if self._mouse:
            out = _MOUSE_DISABLE + out
        self._raw_write(out)

        if self._prev_sigwinch_handler is not None:
            signal.signal(signal.SIGWINCH, self._prev_sigwinch_handler)
            self._prev_sigwinch_handler = None

        if self._original_termios is not None:
            termios.tcsetattr(self._in_fd, termios.TCSADRAIN, self._original_termios)
            self._original_termios = None

        self._wake()
        logger.debug("terminal screen finalised")

    # -- properties ---------------------------------------------------------

    def size(self) -> tuple[int, int]:
        try:
            ts = os.get_terminal_size(self._out_fd)
            return ts.columns, ts.lines
        except (ValueError, OSError):
            return 80, 24

    def colors(self) -> int:
        return detect_colors()

    # -- events -------------------------------------------------------------

    def post_event(self, ev: Event) -> None:
        with self._lock:
            self._events.append(ev)
        self._wake()

    def poll_event(self) -> Event | None:
        while True:
            with self._lock:
                if self._events:
                    return self._events.popleft()
            if self._closed:
                self._close_pipe()
                return None

            timeout = self._stdin_buffer.timeout if self._stdin_buffer.pending else None
            try:
                readable, _, _ = select.select([self._in_fd, self._wake_r], [], [], timeout)
            except InterruptedError:
                continue
            except (OSError, ValueError) as exc:
                if self._closed:
                    continue
                return error_event(BackendError(f"select failed: {exc}"))

            if not readable:
                # a lone ESC is a key press, not the start of a sequence
                self._stdin_buffer.flush()
                continue
            if self._wake_r in readable:
                os.read(self._wake_r, 1024)
            if self._in_fd in readable:
                try:
                    raw = os.read(self._in_fd, 4096)
                except OSError as exc:
                    return error_event(BackendError(f"read failed: {exc}"))
                if not raw:
                    return error_event(BackendError("terminal input closed"))
                self._stdin_buffer.process(raw.decode("utf-8", errors="replace"))

    def _on_buffer_data(self, data: str) -> None:
        ev = decode_sequence(data)
        if ev is not None:
            with self._lock:
                self._events.append(ev)

    def _on_buffer_paste(self, data: str) -> None:
        with self._lock:
            for ch in data:
                ev = decode_sequence(ch)
                if ev is not None:
                    self._events.append(ev)

    def _on_sigwinch(self, signum: int, frame: object) -> None:
        self.post_event(resize_event(*self.size()))

    def _wake(self) -> None:
        try:
            os.write(self._wake_w, b"\0")
        except OSError:
            pass

    def _close_pipe(self) -> None:
        if self._wake_r < 0:
            return
        os.close(self._wake_r)
        os.close(self._wake_w)
        self._wake_r = self._wake_w = -1

    # -- mouse --------------------------------------------------------------

    def enable_mouse(self) -> None:
        self._mouse = True
        self._raw_write(_MOUSE_ENABLE)

    def disable_mouse(self) -> None:
        self._mouse = False
        self._raw_write(_MOUSE_DISABLE)

    # -- drawing ------------------------------------------------------------

    def _resize_buffers(self) -> None:
        width, height = self.size()
        if (width, height) == (self._width, self._height):
            return
        self._width, self._height = width, height
        self._back = [[_BLANK] * width for _ in range(height)]
        # unknown contents: force a full repaint
        self._front = [[None] * width for _ in range(height)]
        self._raw_write(_CLEAR_SCREEN)

    def clear(self, style: Style = DEFAULT_STYLE) -> None:
        self._resize_buffers()
        blank = (" ", style)
        for row in self._back:
            for x in range(len(row)):
                row[x] = blank

    def set_cell(self, x: int, y: int, ch: str, style: Style) -> None:
        if 0 <= x < self._width and 0 <= y < self._height:
            self._back[y][x] = (ch, style)

    def show_cursor(self, x: int, y: int) -> None:
        self._cursor = (x, y)

    def hide_cursor(self) -> None:
        self._cursor = None

    def show(self) -> None:
        """Write every cell that changed since the last call."""
        out: list[str] = [_HIDE_CURSOR]
        style: Style | None = None
        pos: tuple[int, int] | None = None

        for y, (back_row, front_row) in enumerate(zip(self._back, self._front)):
            for x, cell in enumerate(back_row):
                if front_row[x] == cell:
                    continue
                front_row[x] = cell
                ch, cell_style = cell
                if ch == "":
                    # right half of a wide rune
                    continue
                if pos != (x, y):
                    out.append(_MOVE_FMT.format(y + 1, x + 1))
                if cell_style != style:
                    out.append(cell_style.sgr())
                    style = cell_style
                out.append(_printable(ch))
                pos = (x + 1, y)

        out.append(_RESET_STYLE)
        if self._cursor is not None:
            x, y = self._cursor
            out.append(_MOVE_FMT.format(y + 1, x + 1) + _SHOW_CURSOR)
        self.write("".join(out))

    # -- output -------------------------------------------------------------

    def write(self, data: str) -> None:
        """Write data to stdout and optionally to the write log."""
        self._raw_write(data)

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError:
                logger.warning("cannot append to write log %s", self._write_log_path)

    def _raw_write(self, data: str) -> None:
        try:
            sys.stdout.write(data)
            sys.stdout.flush()
        except OSError:
            logger.warning("terminal write failed", exc_info=True)
