"""Drive a running GUI from tests.

Obtain a ``TestingScreen`` from :meth:`termpane.gui.Gui.get_testing_screen`
while the GUI runs on a :class:`~termpane.simulation.SimulationScreen`.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from termpane.keys import Key, Modifier
from termpane.simulation import SimulationScreen

if TYPE_CHECKING:
    from termpane.gui import Gui


class TestingScreen:
    """Injects input into a simulated GUI and reads back view contents."""

    __test__ = False  # not a pytest test class

    def __init__(self, screen: SimulationScreen, gui: Gui) -> None:
        self._screen = screen
        self._gui = gui

    @property
    def screen(self) -> SimulationScreen:
        return self._screen

    def send_key(self, key: Key | str, mod: Modifier = Modifier.NONE) -> None:
        """Send a special key, or a rune when *key* is a string."""
        if isinstance(key, Key):
            self._screen.inject_key(key, "", mod)
        else:
            self._screen.inject_key(None, key, mod)

    def send_string(self, text: str) -> None:
        """Send *text* as if it had been typed into the terminal."""
        self._screen.inject_bytes(text)

    def send_mouse(self, button: Key, x: int, y: int, mod: Modifier = Modifier.NONE) -> None:
        self._screen.inject_mouse(button, x, y, mod)

    def resize(self, width: int, height: int) -> None:
        self._screen.set_size(width, height)

    def get_view_content(self, name: str) -> str:
        return self._gui.view(name).buffer()

    def wait_idle(self, timeout: float = 2.0) -> bool:
        """Wait until all sent input has been handled and redrawn.

        Returns False if the loop did not catch up within *timeout* seconds.
        """
        if not self._screen.wait_drained(timeout):
            return False
        done = threading.Event()
        self._gui.update(lambda g: done.set())
        if not done.wait(timeout):
            return False
        # the flush for that iteration runs right after the update
        flushed = threading.Event()
        self._gui.update(lambda g: flushed.set())
        return flushed.wait(timeout)
