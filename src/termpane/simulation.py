"""In-memory screen for tests and headless use.

``SimulationScreen`` satisfies the :class:`~termpane.screen.Screen` protocol
without touching a terminal.  Drawn cells are kept in a grid that can be
inspected, and input can be injected as events or as raw terminal bytes.
"""

from __future__ import annotations

import threading
from collections import deque

from termpane.attribute import DEFAULT_STYLE, Style
from termpane.event import Event, decode_sequence, key_event, mouse_event, resize_event
from termpane.keys import Key, Modifier
from termpane.stdin_buffer import StdinBuffer


class SimulationScreen:
    """Screen that records drawing in memory.

    Parameters
    ----------
    width:
        Number of columns.
    height:
        Number of rows.
    colors:
        Color depth reported by :meth:`colors`.
    """

    def __init__(self, width: int = 80, height: int = 25, colors: int = 1 << 24) -> None:
        self._width = width
        self._height = height
        self._colors = colors
        self._cond = threading.Condition()
        self._events: deque[Event] = deque()
        self._delivering = False
        self._initialised = False
        self._closed = False
        self._mouse = False
        self._cells = self._blank_grid(DEFAULT_STYLE)
        self._front = self._blank_grid(DEFAULT_STYLE)
        self._cursor: tuple[int, int] | None = None
        self._show_count = 0

        self._stdin_buffer = StdinBuffer()
        self._stdin_buffer.on_data(self._on_data)
        self._stdin_buffer.on_paste(self._on_paste)

    def _blank_grid(self, style: Style) -> list[list[tuple[str, Style]]]:
        return [[(" ", style)] * self._width for _ in range(self._height)]

    # -- Screen protocol: lifecycle -----------------------------------------

    def init(self) -> None:
        self._initialised = True
        self._closed = False

    def fini(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def size(self) -> tuple[int, int]:
        return self._width, self._height

    def colors(self) -> int:
        return self._colors

    # -- Screen protocol: events --------------------------------------------

    def poll_event(self) -> Event | None:
        # The returned event stays queued until the next call, so a drained
        # queue means the consumer has finished with every event.
        with self._cond:
            if self._delivering:
                self._events.popleft()
                self._delivering = False
                self._cond.notify_all()
            while not self._events and not self._closed:
                self._cond.wait()
            if self._closed:
                return None
            self._delivering = True
            return self._events[0]

    def post_event(self, ev: Event) -> None:
        with self._cond:
            self._events.append(ev)
            self._cond.notify_all()

    def enable_mouse(self) -> None:
        self._mouse = True

    def disable_mouse(self) -> None:
        self._mouse = False

    # -- Screen protocol: drawing -------------------------------------------

    def clear(self, style: Style = DEFAULT_STYLE) -> None:
        self._cells = self._blank_grid(style)

    def set_cell(self, x: int, y: int, ch: str, style: Style) -> None:
        if 0 <= x < self._width and 0 <= y < self._height:
            self._cells[y][x] = (ch, style)

    def show(self) -> None:
        with self._cond:
            self._front = [list(row) for row in self._cells]
            self._show_count += 1

    def show_cursor(self, x: int, y: int) -> None:
        self._cursor = (x, y)

    def hide_cursor(self) -> None:
        self._cursor = None

    # -- Test helpers -------------------------------------------------------

    @property
    def initialised(self) -> bool:
        return self._initialised

    @property
    def mouse_enabled(self) -> bool:
        return self._mouse

    @property
    def cursor(self) -> tuple[int, int] | None:
        return self._cursor

    @property
    def show_count(self) -> int:
        """Number of completed :meth:`show` calls."""
        return self._show_count

    def cell(self, x: int, y: int) -> tuple[str, Style]:
        """Return the shown rune and style at ``(x, y)``."""
        return self._front[y][x]

    def row_text(self, y: int) -> str:
        return "".join(ch for ch, _ in self._front[y])

    def screen_text(self) -> str:
        """Return the shown screen as text, one line per row."""
        return "\n".join(self.row_text(y) for y in range(self._height))

    def wait_drained(self, timeout: float = 2.0) -> bool:
        """Block until every posted event has been taken by the consumer."""
        with self._cond:
            return self._cond.wait_for(lambda: not self._events or self._closed, timeout)

    def set_size(self, width: int, height: int) -> None:
        """Change the screen size and post a resize event."""
        with self._cond:
            self._width = width
            self._height = height
            self._cells = self._blank_grid(DEFAULT_STYLE)
            self._front = self._blank_grid(DEFAULT_STYLE)
        self.post_event(resize_event(width, height))

    def inject_key(self, key: Key | None = None, ch: str = "", mod: Modifier = Modifier.NONE) -> None:
        self.post_event(key_event(key, ch, mod))

    def inject_mouse(self, button: Key, x: int, y: int, mod: Modifier = Modifier.NONE) -> None:
        self.post_event(mouse_event(button, x, y, mod))

    def inject_bytes(self, data: str) -> None:
        """Feed raw terminal input; complete sequences become events."""
        self._stdin_buffer.process(data)
        self._stdin_buffer.flush()

    def _on_data(self, data: str) -> None:
        ev = decode_sequence(data)
        if ev is not None:
            self.post_event(ev)

    def _on_paste(self, data: str) -> None:
        for ch in data:
            self._on_data(ch)
