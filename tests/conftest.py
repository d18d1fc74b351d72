"""Shared fixtures: a GUI on a simulated screen and a background loop runner."""

from __future__ import annotations

import pytest

from termpane import Gui, OutputMode, SimulationScreen

from .helpers import FakeCanvas, LoopRunner


@pytest.fixture
def canvas() -> FakeCanvas:
    return FakeCanvas()


@pytest.fixture
def screen() -> SimulationScreen:
    return SimulationScreen(80, 24)


@pytest.fixture
def gui(screen: SimulationScreen, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("TERMPANE_OUTPUT_MODE", raising=False)
    g = Gui(OutputMode.SIMULATOR, screen=screen)
    yield g
    g.close()


@pytest.fixture
def loop(gui: Gui):
    runner = LoopRunner(gui)
    yield runner
    gui.close()
    runner.join()
