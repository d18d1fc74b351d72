"""The GUI: view compositor, keybinding dispatch and the main loop.

``Gui`` owns a :class:`~termpane.screen.Screen` and a z-ordered list of
:class:`~termpane.view.View` objects.  Every loop iteration dispatches the
queued input events, runs the closures scheduled with :meth:`Gui.update`
and then calls :meth:`Gui.flush`, which lays out and redraws everything.

All view state belongs to the loop thread.  Other threads must go through
:meth:`Gui.update`.
"""

from __future__ import annotations

import logging
import math
import os
import threading
from collections import deque
from typing import TYPE_CHECKING, Callable, Union

from termpane.attribute import COLOR_DEFAULT, Attribute, OutputMode, mk_style
from termpane.errors import (
    BackendError,
    DuplicateViewError,
    InvalidDimensionsError,
    InvalidNameError,
    InvalidPointError,
    Quit,
    TermpaneError,
    UnknownKeybindingError,
    UnknownViewError,
)
from termpane.event import Event, EventType
from termpane.keybinding import Keybinding, KeybindingHandler, KeyLike, parse_keybinding
from termpane.keys import Key, Modifier
from termpane.loader import LoaderTicker
from termpane.screen import COLORS_TRUE, TerminalScreen
from termpane.scrollbar import calc_scrollbar
from termpane.simulation import SimulationScreen
from termpane.testing import TestingScreen
from termpane.utils import rune_width, truncate_to_width
from termpane.view import BOTTOM, LEFT, RIGHT, TOP, View

if TYPE_CHECKING:
    from termpane.screen import Screen

logger = logging.getLogger(__name__)

SizeValue = Union[int, float, str]
Layout = Callable[["Gui"], None]
ResizeCallback = Callable[["Gui", int, int], None]
Update = Callable[["Gui"], None]

# horizontal, vertical, top-left, top-right, bottom-left, bottom-right
DEFAULT_FRAME_RUNES = "─│┌┐└┘"
ASCII_FRAME_RUNES = "-|++++"
SCROLLBAR_RUNE = "▐"

# Glyphs whose stroke reaches the neighbouring cell in each direction
_CONNECTS_DOWN = set("│┼├┤┌┐┬")
_CONNECTS_UP = set("│┼├┤└┘┴")
_CONNECTS_RIGHT = set("─┼┬┴┌└├")
_CONNECTS_LEFT = set("─┼┬┴┐┘┤")

_N_TOP = 1
_N_BOTTOM = 2
_N_LEFT = 4
_N_RIGHT = 8

_JUNCTIONS: dict[int, str] = {
    _N_BOTTOM | _N_RIGHT: "┌",
    _N_BOTTOM | _N_LEFT: "┐",
    _N_TOP | _N_RIGHT: "└",
    _N_TOP | _N_LEFT: "┘",
    _N_TOP | _N_BOTTOM | _N_LEFT | _N_RIGHT: "┼",
    _N_TOP | _N_BOTTOM | _N_RIGHT: "├",
    _N_TOP | _N_BOTTOM | _N_LEFT: "┤",
    _N_BOTTOM | _N_LEFT | _N_RIGHT: "┬",
    _N_TOP | _N_LEFT | _N_RIGHT: "┴",
}


def _parse_size_value(value: SizeValue, reference_size: int) -> int:
    """Resolve a view coordinate against *reference_size*.

    * ``int``   -> returned as-is
    * ``0.5``   -> ``math.floor(reference_size * 0.5)``
    * ``"50%"`` -> ``math.floor(reference_size * 50 / 100)``
    """
    if isinstance(value, bool):
        raise InvalidDimensionsError(f"invalid coordinate {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not 0 <= value <= 1:
            raise InvalidDimensionsError(f"fraction out of range: {value!r}")
        return math.floor(reference_size * value)
    if isinstance(value, str) and value.endswith("%"):
        try:
            pct = float(value[:-1])
        except ValueError:
            raise InvalidDimensionsError(f"invalid percentage {value!r}") from None
        return math.floor(reference_size * pct / 100)
    raise InvalidDimensionsError(f"invalid coordinate {value!r}")


def _output_mode_from_env(default: OutputMode) -> OutputMode:
    value = os.environ.get("TERMPANE_OUTPUT_MODE", "")
    if not value:
        return default
    try:
        return OutputMode(value.lower())
    except ValueError:
        logger.warning("ignoring unknown TERMPANE_OUTPUT_MODE=%r", value)
        return default


# ---------------------------------------------------------------------------
# Mailbox / Canvas
# ---------------------------------------------------------------------------


class _Mailbox:
    """Queue shared by the event pump, :meth:`Gui.update` callers and the loop."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._events: deque[Event] = deque()
        self._updates: deque[Update] = deque()
        self._stopped = False

    def put_event(self, ev: Event) -> None:
        with self._cond:
            self._events.append(ev)
            self._cond.notify()

    def put_update(self, fn: Update) -> None:
        with self._cond:
            self._updates.append(fn)
            self._cond.notify()

    def stop(self) -> None:
        with self._cond:
            self._stopped = True
            self._cond.notify()

    def restart(self) -> None:
        with self._cond:
            self._stopped = False

    def take(self) -> tuple[list[Event], list[Update], bool]:
        """Wait for work and return everything queued so far."""
        with self._cond:
            while not self._events and not self._updates and not self._stopped:
                self._cond.wait()
            events = list(self._events)
            updates = list(self._updates)
            self._events.clear()
            self._updates.clear()
            return events, updates, self._stopped


class _Canvas:
    """Cell grid the compositor draws into before it is copied to the screen.

    Cells written through :meth:`set_frame` are remembered as frame cells so
    junctions can be resolved after all views are drawn.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._cells: list[list[tuple[str, Attribute, Attribute] | None]] = [
            [None] * width for _ in range(height)
        ]
        self.frame: set[tuple[int, int]] = set()

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def set_cell(self, x: int, y: int, ch: str, fg: Attribute, bg: Attribute) -> None:
        if self.contains(x, y):
            self._cells[y][x] = (ch, fg, bg)
            self.frame.discard((x, y))

    def set_frame(self, x: int, y: int, ch: str, fg: Attribute, bg: Attribute) -> None:
        if self.contains(x, y):
            self._cells[y][x] = (ch, fg, bg)
            self.frame.add((x, y))

    def get(self, x: int, y: int) -> tuple[str, Attribute, Attribute] | None:
        if not self.contains(x, y):
            return None
        return self._cells[y][x]

    def frame_rune(self, x: int, y: int) -> str:
        if (x, y) not in self.frame:
            return ""
        cell = self._cells[y][x]
        return cell[0] if cell else ""

    def blit(self, screen: Screen, mode: OutputMode) -> None:
        for y, row in enumerate(self._cells):
            for x, cell in enumerate(row):
                if cell is not None:
                    ch, fg, bg = cell
                    screen.set_cell(x, y, ch, mk_style(fg, bg, mode))


# ---------------------------------------------------------------------------
# Gui
# ---------------------------------------------------------------------------


class Gui:
    """Terminal GUI hosting a set of views.

    Parameters
    ----------
    output_mode:
        Requested color mode; ``TERMPANE_OUTPUT_MODE`` overrides it.  The
        mode is downgraded when the screen cannot display it.
    support_mouse:
        Enable mouse reporting and focus-on-click.
    screen:
        Backend to use.  Defaults to a :class:`SimulationScreen` in
        simulator mode and a :class:`TerminalScreen` otherwise.
    support_overlaps:
        Let views share edges; see :attr:`View.overlaps`.
    """

    def __init__(
        self,
        output_mode: OutputMode = OutputMode.NORMAL,
        support_mouse: bool = False,
        *,
        screen: Screen | None = None,
        support_overlaps: bool = False,
    ) -> None:
        mode = _output_mode_from_env(output_mode)
        if screen is None:
            screen = SimulationScreen() if mode is OutputMode.SIMULATOR else TerminalScreen()
        self._screen: Screen = screen
        self._screen.init()

        colors = self._screen.colors()
        if mode is not OutputMode.SIMULATOR:
            if colors < 256:
                mode = OutputMode.NORMAL
            elif mode is OutputMode.TRUE and colors < COLORS_TRUE:
                mode = OutputMode.M256
        self._output_mode = mode
        self.support_overlaps = support_overlaps

        self._views: list[View] = []
        self._geometry: dict[str, tuple[SizeValue, SizeValue, SizeValue, SizeValue]] = {}
        self._current: View | None = None
        self._layouts: list[Layout] = []
        self._resize_callback: ResizeCallback | None = None
        self._keybindings: list[Keybinding] = []
        self._blacklist: set[tuple[Key | None, str, Modifier]] = set()

        self.fg_color: Attribute = COLOR_DEFAULT
        self.bg_color: Attribute = COLOR_DEFAULT
        self.sel_fg_color: Attribute = COLOR_DEFAULT
        self.sel_bg_color: Attribute = COLOR_DEFAULT
        self.frame_color: Attribute = COLOR_DEFAULT
        self.sel_frame_color: Attribute = COLOR_DEFAULT
        self.highlight = False
        self.cursor = False
        self.mouse = False
        self.ascii = False

        self._max_x, self._max_y = self._screen.size()
        self._canvas = _Canvas(self._max_x, self._max_y)
        self._mailbox = _Mailbox()
        self._pump: threading.Thread | None = None
        # written by flush on the loop thread, read by the ticker thread
        self._loader_visible = False
        self._ticker = LoaderTicker(lambda: self._loader_visible, lambda: self.update(lambda g: None))
        self._closed = False

        if support_mouse:
            self.mouse = True
            self._screen.enable_mouse()
        logger.debug("gui created (mode=%s, size=%dx%d)", mode.value, self._max_x, self._max_y)

    # -- lifecycle ----------------------------------------------------------

    def close(self) -> None:
        """Stop background threads and release the screen."""
        if self._closed:
            return
        self._closed = True
        self._ticker.stop()
        self._mailbox.stop()
        self._screen.fini()
        logger.debug("gui closed")

    def __enter__(self) -> Gui:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def output_mode(self) -> OutputMode:
        return self._output_mode

    def size(self) -> tuple[int, int]:
        return self._screen.size()

    def get_testing_screen(self) -> TestingScreen:
        if not isinstance(self._screen, SimulationScreen):
            raise TermpaneError("a testing screen needs a SimulationScreen backend")
        return TestingScreen(self._screen, self)

    # -- canvas -------------------------------------------------------------

    def set_rune(
        self,
        x: int,
        y: int,
        ch: str,
        fg: Attribute = COLOR_DEFAULT,
        bg: Attribute = COLOR_DEFAULT,
    ) -> None:
        """Write a rune straight to the screen; the next flush redraws over it."""
        if not self._canvas.contains(x, y):
            raise InvalidPointError(f"invalid point ({x}, {y})")
        self._canvas.set_cell(x, y, ch, fg, bg)
        self._screen.set_cell(x, y, ch, mk_style(fg, bg, self._output_mode))

    def rune(self, x: int, y: int) -> str:
        if not self._canvas.contains(x, y):
            raise InvalidPointError(f"invalid point ({x}, {y})")
        cell = self._canvas.get(x, y)
        return cell[0] if cell else " "

    # -- views --------------------------------------------------------------

    def _resolve(
        self, geometry: tuple[SizeValue, SizeValue, SizeValue, SizeValue]
    ) -> tuple[int, int, int, int]:
        width, height = self._screen.size()
        x0, y0, x1, y1 = geometry
        return (
            _parse_size_value(x0, width),
            _parse_size_value(y0, height),
            _parse_size_value(x1, width),
            _parse_size_value(y1, height),
        )

    def set_view(
        self,
        name: str,
        x0: SizeValue,
        y0: SizeValue,
        x1: SizeValue,
        y1: SizeValue,
        overlaps: int = 0,
    ) -> tuple[View, bool]:
        """Create the view *name* or update its position.

        Returns the view and whether it was just created.
        """
        if not name:
            raise InvalidNameError("view name must not be empty")
        geometry = (x0, y0, x1, y1)
        rx0, ry0, rx1, ry1 = self._resolve(geometry)
        if rx0 >= rx1 or ry0 >= ry1:
            raise InvalidDimensionsError(f"invalid dimensions for {name!r}: ({rx0}, {ry0}, {rx1}, {ry1})")

        self._geometry[name] = geometry
        for v in self._views:
            if v.name == name:
                v.x0, v.y0, v.x1, v.y1 = rx0, ry0, rx1, ry1
                v.overlaps = overlaps
                return v, False

        v = View(name, rx0, ry0, rx1, ry1, self._output_mode)
        v.overlaps = overlaps
        self._views.append(v)
        logger.debug("view %r created at (%d, %d, %d, %d)", name, rx0, ry0, rx1, ry1)
        return v, True

    def new_view(
        self,
        name: str,
        x0: SizeValue,
        y0: SizeValue,
        x1: SizeValue,
        y1: SizeValue,
        overlaps: int = 0,
    ) -> View:
        if any(v.name == name for v in self._views):
            raise DuplicateViewError(f"view {name!r} already exists")
        v, _ = self.set_view(name, x0, y0, x1, y1, overlaps)
        return v

    def view(self, name: str) -> View:
        for v in self._views:
            if v.name == name:
                return v
        raise UnknownViewError(f"unknown view {name!r}")

    def views(self) -> list[View]:
        return list(self._views)

    def delete_view(self, name: str) -> None:
        v = self.view(name)
        self._views.remove(v)
        self._geometry.pop(name, None)
        if self._current is v:
            self._current = None

    def set_view_on_top(self, name: str) -> View:
        v = self.view(name)
        self._views.remove(v)
        self._views.append(v)
        return v

    def set_view_on_bottom(self, name: str) -> View:
        v = self.view(name)
        self._views.remove(v)
        self._views.insert(0, v)
        return v

    def view_position(self, name: str) -> tuple[int, int, int, int]:
        return self.view(name).dimensions()

    def _draw_order(self) -> list[View]:
        normal = [v for v in self._views if not v.always_on_top]
        on_top = [v for v in self._views if v.always_on_top]
        return normal + on_top

    def _view_at(self, x: int, y: int) -> View | None:
        for v in reversed(self._draw_order()):
            if v.visible and v.x0 <= x <= v.x1 and v.y0 <= y <= v.y1:
                return v
        return None

    def view_by_position(self, x: int, y: int) -> View:
        """Return the topmost visible view covering ``(x, y)``."""
        v = self._view_at(x, y)
        if v is None:
            raise UnknownViewError(f"no view at ({x}, {y})")
        return v

    def set_current_view(self, name: str) -> View:
        v = self.view(name)
        self._current = v
        return v

    def current_view(self) -> View | None:
        return self._current

    # -- layout -------------------------------------------------------------

    def set_layout(self, *layouts: Layout) -> None:
        """Replace the layout callbacks run before every redraw."""
        self._layouts = list(layouts)

    def set_resize_callback(self, fn: ResizeCallback | None) -> None:
        self._resize_callback = fn

    # -- keybindings --------------------------------------------------------

    def set_keybinding(
        self,
        view_name: str,
        key: KeyLike,
        mod: Modifier,
        handler: KeybindingHandler,
        *,
        in_edit_mode: bool = False,
    ) -> None:
        k, ch, m = parse_keybinding(key, mod)
        self._keybindings.append(Keybinding(view_name, k, ch, m, handler, in_edit_mode))
        logger.debug("keybinding %r (mod=%s) registered for view %r", key, m, view_name)

    def delete_keybinding(self, view_name: str, key: KeyLike, mod: Modifier) -> None:
        k, ch, m = parse_keybinding(key, mod)
        for i, kb in enumerate(self._keybindings):
            if kb.view_name == view_name and kb.key == k and kb.ch == ch and kb.mod == m:
                del self._keybindings[i]
                return
        raise UnknownKeybindingError(f"no keybinding {key!r} for view {view_name!r}")

    def delete_view_keybindings(self, name: str) -> None:
        self._keybindings = [kb for kb in self._keybindings if kb.view_name != name]

    def blacklist_keybinding(self, key: KeyLike) -> None:
        """Stop bindings for *key* from firing without removing them."""
        self._blacklist.add(parse_keybinding(key))

    def whitelist_keybinding(self, key: KeyLike) -> None:
        self._blacklist.discard(parse_keybinding(key))

    def _exec_keybindings(self, v: View | None, key: Key | None, ch: str, mod: Modifier) -> bool:
        editable = v is not None and v.editable
        fired = False
        for kb in list(self._keybindings):
            if not kb.matches(key, ch, mod) or not kb.matches_view(v):
                continue
            if (kb.key, kb.ch, kb.mod) in self._blacklist:
                continue
            if kb.is_plain_rune and editable and not kb.in_edit_mode:
                continue
            kb.handler(self, v)
            fired = True
        return fired

    # -- main loop ----------------------------------------------------------

    def update(self, fn: Update) -> None:
        """Schedule *fn* to run on the loop thread.  Safe from any thread."""
        self._mailbox.put_update(fn)

    def stop(self) -> None:
        """Make :meth:`main_loop` return after the current iteration."""
        self._mailbox.stop()

    def main_loop(self) -> None:
        """Run until a handler raises :class:`Quit` or :meth:`stop` is called.

        Any other exception escaping a handler, update or layout is
        re-raised.
        """
        logger.debug("main loop started")
        self._mailbox.restart()
        if self._pump is None:
            self._pump = threading.Thread(target=self._pump_events, name="termpane-events", daemon=True)
            self._pump.start()
        self._ticker.start()
        try:
            self.flush()
            while True:
                events, updates, stopped = self._mailbox.take()
                for ev in events:
                    self._handle_event(ev)
                for fn in updates:
                    fn(self)
                self.flush()
                if stopped:
                    break
        except Quit:
            logger.debug("quit requested")
        except Exception:
            logger.exception("main loop failed")
            raise
        finally:
            self._ticker.stop()
            logger.debug("main loop stopped")

    def _pump_events(self) -> None:
        while True:
            ev = self._screen.poll_event()
            if ev is None:
                break
            self._mailbox.put_event(ev)

    def _handle_event(self, ev: Event) -> None:
        if ev.type is EventType.KEY:
            self._on_key(ev)
        elif ev.type is EventType.MOUSE:
            self._on_mouse(ev)
        elif ev.type is EventType.ERROR:
            if isinstance(ev.err, BackendError):
                raise ev.err
            raise BackendError(str(ev.err)) from ev.err

    def _on_key(self, ev: Event) -> None:
        v = self._current
        if self._exec_keybindings(v, ev.key, ev.ch, ev.mod):
            return
        if v is not None and v.editable and v.editor is not None:
            v.editor.edit(v, ev.key, ev.ch, ev.mod)

    def _on_mouse(self, ev: Event) -> None:
        v = self._view_at(ev.mouse_x, ev.mouse_y)
        if self.mouse and v is not None and ev.key in (Key.MOUSE_LEFT, Key.MOUSE_MIDDLE, Key.MOUSE_RIGHT):
            self._current = v
            x, y = ev.mouse_x - v.x0 - 1, ev.mouse_y - v.y0 - 1
            width, height = v.size()
            if 0 <= x < width and 0 <= y < height:
                v.set_cursor(x, y)
        self._exec_keybindings(v, ev.key, "", ev.mod)

    # -- drawing ------------------------------------------------------------

    def flush(self) -> None:
        """Lay out and redraw every view, then update the screen."""
        width, height = self._screen.size()
        self._screen.clear(mk_style(self.fg_color, self.bg_color, self._output_mode))
        if (width, height) != (self._max_x, self._max_y):
            self._max_x, self._max_y = width, height
            if self._resize_callback is not None:
                self._resize_callback(self, width, height)
        self._canvas = _Canvas(width, height)

        for layout in self._layouts:
            layout(self)

        drawn: list[View] = []
        for v in self._draw_order():
            if not v.visible or not self._apply_geometry(v):
                continue
            if v.frame:
                self._draw_frame(v)
            v.draw(self._canvas)
            drawn.append(v)
        self._loader_visible = any(v.has_loader for v in drawn)

        if not self.ascii:
            self._draw_junctions([v for v in drawn if v.frame])
        self._place_cursor()
        self._canvas.blit(self._screen, self._output_mode)
        self._screen.show()

    def _apply_geometry(self, v: View) -> bool:
        geometry = self._geometry.get(v.name)
        if geometry is None:
            return False
        try:
            x0, y0, x1, y1 = self._resolve(geometry)
        except InvalidDimensionsError:
            return False
        if x0 >= x1 or y0 >= y1:
            return False
        v.x0, v.y0, v.x1, v.y1 = x0, y0, x1, y1
        return True

    def _frame_runes(self, v: View) -> str:
        if len(v.frame_runes) >= 6:
            return v.frame_runes
        if len(v.frame_runes) == 2:
            corners = ASCII_FRAME_RUNES[2:] if self.ascii else DEFAULT_FRAME_RUNES[2:]
            return v.frame_runes + corners
        return ASCII_FRAME_RUNES if self.ascii else DEFAULT_FRAME_RUNES

    def _draw_frame(self, v: View) -> None:
        runes = self._frame_runes(v)
        horizontal, vertical = runes[0], runes[1]
        if self.highlight and v is self._current:
            fg = self.sel_frame_color
        else:
            fg = v.frame_color or self.frame_color
        bg = self.bg_color
        skip = v.overlaps if self.support_overlaps else 0
        canvas = self._canvas

        for x in range(v.x0 + 1, v.x1):
            if not skip & TOP:
                canvas.set_frame(x, v.y0, horizontal, fg, bg)
            if not skip & BOTTOM:
                canvas.set_frame(x, v.y1, horizontal, fg, bg)
        for y in range(v.y0 + 1, v.y1):
            if not skip & LEFT:
                canvas.set_frame(v.x0, y, vertical, fg, bg)
            if not skip & RIGHT:
                canvas.set_frame(v.x1, y, vertical, fg, bg)

        canvas.set_frame(v.x0, v.y0, runes[2], fg, bg)
        canvas.set_frame(v.x1, v.y0, runes[3], fg, bg)
        canvas.set_frame(v.x0, v.y1, runes[4], fg, bg)
        canvas.set_frame(v.x1, v.y1, runes[5], fg, bg)

        title_fg = v.title_color or fg
        if v.title:
            self._draw_label(v.title, v.x0 + 2, v.y0, v.x1 - 1, title_fg, bg)
        if v.subtitle:
            start = v.x1 - 1 - sum(rune_width(ch) for ch in v.subtitle)
            self._draw_label(v.subtitle, max(start, v.x0 + 2), v.y0, v.x1 - 1, title_fg, bg)
        if v.scrollbar:
            self._draw_scrollbar(v, fg, bg)

    def _draw_label(self, text: str, x: int, y: int, limit: int, fg: Attribute, bg: Attribute) -> None:
        for ch in truncate_to_width(text, limit - x):
            w = rune_width(ch)
            if x + w > limit:
                break
            self._canvas.set_cell(x, y, ch, fg, bg)
            x += max(w, 1)

    def _draw_scrollbar(self, v: View, fg: Attribute, bg: Attribute) -> None:
        _, height = v.size()
        total = v.view_lines_height()
        if height <= 0 or total <= height:
            return
        start, thumb = calc_scrollbar(total, height, v.origin()[1], height)
        for i in range(thumb):
            self._canvas.set_cell(v.x1, v.y0 + 1 + start + i, SCROLLBAR_RUNE, fg, bg)

    def _draw_junctions(self, views: list[View]) -> None:
        candidates: set[tuple[int, int]] = set()
        for v in views:
            candidates.update({(v.x0, v.y0), (v.x1, v.y0), (v.x0, v.y1), (v.x1, v.y1)})
            for other in views:
                if other is v:
                    continue
                for x in (v.x0, v.x1):
                    for y in (other.y0, other.y1):
                        if other.x0 <= x <= other.x1 and v.y0 <= y <= v.y1:
                            candidates.add((x, y))

        canvas = self._canvas
        resolved: list[tuple[int, int, str]] = []
        for x, y in candidates:
            if (x, y) not in canvas.frame:
                continue
            mask = 0
            if canvas.frame_rune(x, y - 1) in _CONNECTS_DOWN:
                mask |= _N_TOP
            if canvas.frame_rune(x, y + 1) in _CONNECTS_UP:
                mask |= _N_BOTTOM
            if canvas.frame_rune(x - 1, y) in _CONNECTS_RIGHT:
                mask |= _N_LEFT
            if canvas.frame_rune(x + 1, y) in _CONNECTS_LEFT:
                mask |= _N_RIGHT
            ch = _JUNCTIONS.get(mask)
            if ch is not None:
                resolved.append((x, y, ch))

        for x, y, ch in resolved:
            cell = canvas.get(x, y)
            if cell is not None:
                canvas.set_frame(x, y, ch, cell[1], cell[2])

    def _place_cursor(self) -> None:
        v = self._current
        if not self.cursor or v is None or not v.visible:
            self._screen.hide_cursor()
            return
        cx, cy = v.cursor()
        width, height = v.size()
        if 0 <= cx < width and 0 <= cy < height:
            self._screen.show_cursor(v.x0 + 1 + cx, v.y0 + 1 + cy)
        else:
            self._screen.hide_cursor()
