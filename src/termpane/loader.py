"""Spinner animation for views that show a loading indicator."""

from __future__ import annotations

import threading
import time
from typing import Callable

FRAMES = "|/-\\"
INTERVAL = 0.05


def loader_char(now: float | None = None) -> str:
    """Return the spinner frame for *now* (defaults to the current time)."""
    if now is None:
        now = time.time()
    return FRAMES[int(now / INTERVAL) % len(FRAMES)]


class LoaderTicker:
    """Background thread that calls *tick* every :data:`INTERVAL` seconds.

    *tick* runs only while *active* returns True, so the loop is woken up
    just often enough to animate spinners that are actually on screen.
    """

    def __init__(self, active: Callable[[], bool], tick: Callable[[], None]) -> None:
        self._active = active
        self._tick = tick
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        # one stop event per thread
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop,), name="termpane-loader", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self._thread = None

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(INTERVAL):
            if self._active():
                self._tick()
