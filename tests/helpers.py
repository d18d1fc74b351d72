"""Test doubles shared across the test modules."""

from __future__ import annotations

import threading

from termpane import Gui, TestingScreen


class FakeCanvas:
    """Records the cells a view draws."""

    def __init__(self) -> None:
        self.cells: dict[tuple[int, int], tuple[str, int, int]] = {}

    def set_cell(self, x: int, y: int, ch: str, fg: int, bg: int) -> None:
        self.cells[(x, y)] = (ch, fg, bg)

    def ch(self, x: int, y: int) -> str:
        return self.cells.get((x, y), (" ", 0, 0))[0]

    def row(self, y: int, x0: int, x1: int) -> str:
        return "".join(self.ch(x, y) for x in range(x0, x1))


class LoopRunner:
    """Runs ``Gui.main_loop`` on a thread and keeps whatever it raised."""

    def __init__(self, gui: Gui) -> None:
        self.gui = gui
        self.error: BaseException | None = None
        self._thread = threading.Thread(target=self._run, name="test-main-loop", daemon=True)

    def _run(self) -> None:
        try:
            self.gui.main_loop()
        except BaseException as exc:
            self.error = exc

    def start(self) -> TestingScreen:
        self._thread.start()
        ts = self.gui.get_testing_screen()
        assert ts.wait_idle()
        return ts

    def join(self, timeout: float = 2.0) -> bool:
        """Wait for the loop to return; False if it is still running."""
        self._thread.join(timeout)
        return not self._thread.is_alive()
