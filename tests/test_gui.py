"""Tests for termpane.gui.Gui: view management, layout and compositing.

These tests call ``flush()`` directly and inspect the simulated screen;
the main loop is covered in test_main_loop.py.
"""

from __future__ import annotations

import logging

import pytest

from termpane import (
    BOTTOM,
    COLOR_RED,
    LEFT,
    DuplicateViewError,
    Gui,
    InvalidDimensionsError,
    InvalidNameError,
    InvalidPointError,
    OutputMode,
    SimulationScreen,
    TermpaneError,
    UnknownKeybindingError,
    UnknownViewError,
)
from termpane.gui import _parse_size_value


class PlainScreen:
    """A screen backend that is not a SimulationScreen."""

    def __init__(self) -> None:
        self._inner = SimulationScreen(20, 10)

    def __getattr__(self, name: str):
        return getattr(self._inner, name)


# ---------------------------------------------------------------------------
# _parse_size_value
# ---------------------------------------------------------------------------


class TestParseSizeValue:
    def test_int(self) -> None:
        assert _parse_size_value(7, 80) == 7

    def test_fraction(self) -> None:
        assert _parse_size_value(0.5, 81) == 40
        assert _parse_size_value(1.0, 80) == 80

    def test_percentage(self) -> None:
        assert _parse_size_value("25%", 80) == 20
        assert _parse_size_value("33.3%", 30) == 9

    @pytest.mark.parametrize("value", [1.5, -0.1, "abc%", "50", True])
    def test_invalid(self, value) -> None:
        with pytest.raises(InvalidDimensionsError):
            _parse_size_value(value, 80)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_screen_is_initialised(self, gui: Gui, screen: SimulationScreen) -> None:
        assert screen.initialised
        assert gui.size() == (80, 24)

    def test_output_mode_downgraded_for_16_colors(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TERMPANE_OUTPUT_MODE", raising=False)
        with Gui(OutputMode.M256, screen=SimulationScreen(colors=16)) as g:
            assert g.output_mode is OutputMode.NORMAL

    def test_true_color_downgraded_to_256(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TERMPANE_OUTPUT_MODE", raising=False)
        with Gui(OutputMode.TRUE, screen=SimulationScreen(colors=256)) as g:
            assert g.output_mode is OutputMode.M256

    def test_env_overrides_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TERMPANE_OUTPUT_MODE", "256")
        with Gui(OutputMode.NORMAL, screen=SimulationScreen()) as g:
            assert g.output_mode is OutputMode.M256

    def test_unknown_env_mode_is_ignored(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.setenv("TERMPANE_OUTPUT_MODE", "sepia")
        with caplog.at_level(logging.WARNING, logger="termpane.gui"):
            with Gui(OutputMode.NORMAL, screen=SimulationScreen()) as g:
                assert g.output_mode is OutputMode.NORMAL
        assert "TERMPANE_OUTPUT_MODE" in caplog.text

    def test_simulator_mode_builds_its_own_screen(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TERMPANE_OUTPUT_MODE", raising=False)
        with Gui(OutputMode.SIMULATOR) as g:
            assert g.get_testing_screen().screen.size() == (80, 25)

    def test_mouse_support(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TERMPANE_OUTPUT_MODE", raising=False)
        screen = SimulationScreen()
        with Gui(OutputMode.SIMULATOR, True, screen=screen) as g:
            assert g.mouse is True
            assert screen.mouse_enabled

    def test_testing_screen_needs_simulation(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TERMPANE_OUTPUT_MODE", raising=False)
        with Gui(OutputMode.NORMAL, screen=PlainScreen()) as g:
            with pytest.raises(TermpaneError):
                g.get_testing_screen()


# ---------------------------------------------------------------------------
# View management
# ---------------------------------------------------------------------------


class TestViews:
    def test_set_view_creates_then_updates(self, gui: Gui) -> None:
        v, created = gui.set_view("main", 0, 0, 10, 5)
        assert created is True
        again, created = gui.set_view("main", 1, 1, 20, 10)
        assert again is v
        assert created is False
        assert v.dimensions() == (1, 1, 20, 10)

    def test_empty_name(self, gui: Gui) -> None:
        with pytest.raises(InvalidNameError):
            gui.set_view("", 0, 0, 10, 5)

    @pytest.mark.parametrize("geometry", [(5, 0, 5, 10), (0, 5, 10, 5), (10, 0, 5, 5)])
    def test_degenerate_geometry(self, gui: Gui, geometry: tuple[int, int, int, int]) -> None:
        with pytest.raises(InvalidDimensionsError):
            gui.set_view("v", *geometry)

    def test_new_view_rejects_duplicates(self, gui: Gui) -> None:
        gui.new_view("main", 0, 0, 10, 5)
        with pytest.raises(DuplicateViewError):
            gui.new_view("main", 0, 0, 10, 5)

    def test_unknown_view(self, gui: Gui) -> None:
        with pytest.raises(UnknownViewError):
            gui.view("missing")
        with pytest.raises(KeyError):
            gui.view("missing")

    def test_fractional_geometry(self, gui: Gui) -> None:
        v, _ = gui.set_view("half", 0, 0, 0.5, "50%")
        assert v.dimensions() == (0, 0, 40, 12)

    def test_fractional_geometry_follows_resize(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("half", 0, 0, 0.5, "50%")
        screen.set_size(100, 30)
        gui.flush()
        assert v.dimensions() == (0, 0, 50, 15)

    def test_degenerate_after_resize_is_skipped(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("half", 0, 0, "50%", 5)
        v.write("text")
        screen.set_size(1, 24)
        gui.flush()
        assert screen.row_text(1).strip() == ""

    def test_delete_view(self, gui: Gui) -> None:
        gui.set_view("a", 0, 0, 10, 5)
        gui.set_view("b", 0, 0, 10, 5)
        gui.set_current_view("a")
        gui.delete_view("a")
        assert [v.name for v in gui.views()] == ["b"]
        assert gui.current_view() is None
        with pytest.raises(UnknownViewError):
            gui.delete_view("a")

    def test_z_order(self, gui: Gui) -> None:
        gui.set_view("a", 0, 0, 10, 5)
        gui.set_view("b", 0, 0, 10, 5)
        gui.set_view("c", 0, 0, 10, 5)
        gui.set_view_on_top("a")
        assert [v.name for v in gui.views()] == ["b", "c", "a"]
        gui.set_view_on_bottom("c")
        assert [v.name for v in gui.views()] == ["c", "b", "a"]

    def test_view_by_position_returns_topmost(self, gui: Gui) -> None:
        gui.set_view("back", 0, 0, 20, 10)
        gui.set_view("front", 5, 5, 15, 8)
        assert gui.view_by_position(6, 6).name == "front"
        assert gui.view_by_position(1, 1).name == "back"
        with pytest.raises(UnknownViewError):
            gui.view_by_position(50, 20)

    def test_always_on_top_wins_hit_testing(self, gui: Gui) -> None:
        pinned, _ = gui.set_view("pinned", 0, 0, 20, 10)
        pinned.always_on_top = True
        gui.set_view("other", 0, 0, 20, 10)
        assert gui.view_by_position(5, 5).name == "pinned"

    def test_hidden_views_are_not_hit(self, gui: Gui) -> None:
        gui.set_view("back", 0, 0, 20, 10)
        front, _ = gui.set_view("front", 0, 0, 20, 10)
        front.visible = False
        assert gui.view_by_position(5, 5).name == "back"

    def test_view_position(self, gui: Gui) -> None:
        gui.set_view("main", 1, 2, 10, 5)
        assert gui.view_position("main") == (1, 2, 10, 5)


# ---------------------------------------------------------------------------
# Keybinding registry
# ---------------------------------------------------------------------------


class TestKeybindingRegistry:
    def test_unknown_key_id(self, gui: Gui) -> None:
        with pytest.raises(UnknownKeybindingError):
            gui.set_keybinding("", "bogus-key", 0, lambda g, v: None)

    def test_delete_missing_binding(self, gui: Gui) -> None:
        with pytest.raises(UnknownKeybindingError):
            gui.delete_keybinding("", "q", 0)

    def test_delete_binding(self, gui: Gui) -> None:
        gui.set_keybinding("", "q", 0, lambda g, v: None)
        gui.delete_keybinding("", "q", 0)
        with pytest.raises(UnknownKeybindingError):
            gui.delete_keybinding("", "q", 0)


# ---------------------------------------------------------------------------
# Direct canvas access
# ---------------------------------------------------------------------------


class TestRunes:
    def test_set_and_read_rune(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.set_rune(3, 4, "x", COLOR_RED)
        assert gui.rune(3, 4) == "x"
        screen.show()
        assert screen.cell(3, 4)[0] == "x"

    def test_unset_rune_is_blank(self, gui: Gui) -> None:
        assert gui.rune(0, 0) == " "

    @pytest.mark.parametrize("point", [(-1, 0), (0, -1), (80, 0), (0, 24)])
    def test_out_of_range(self, gui: Gui, point: tuple[int, int]) -> None:
        with pytest.raises(InvalidPointError):
            gui.set_rune(*point, "x")
        with pytest.raises(InvalidPointError):
            gui.rune(*point)


# ---------------------------------------------------------------------------
# Compositing
# ---------------------------------------------------------------------------


class TestFlush:
    def test_frame_and_content(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("main", 0, 0, 6, 3)
        v.write("hey")
        gui.flush()
        assert screen.row_text(0)[:8] == "┌─────┐ "
        assert screen.row_text(1)[:8] == "│hey  │ "
        assert screen.row_text(2)[:8] == "│     │ "
        assert screen.row_text(3)[:8] == "└─────┘ "
        assert screen.show_count == 1

    def test_loader_flag_follows_drawn_views(self, gui: Gui) -> None:
        v, _ = gui.set_view("busy", 0, 0, 6, 3)
        v.has_loader = True
        gui.flush()
        assert gui._loader_visible is True
        v.visible = False
        gui.flush()
        assert gui._loader_visible is False

    def test_no_frame(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("main", 0, 0, 6, 3)
        v.frame = False
        v.write("hey")
        gui.flush()
        assert screen.row_text(0)[:6] == "      "
        assert screen.row_text(1)[:6] == " hey  "

    def test_hidden_view(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("main", 0, 0, 6, 3)
        v.visible = False
        gui.flush()
        assert screen.row_text(0).strip() == ""

    def test_title_and_subtitle(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("main", 0, 0, 12, 3)
        v.title = "Hi"
        v.subtitle = "ab"
        gui.flush()
        assert screen.row_text(0)[:14] == "┌─Hi─────ab─┐ "

    def test_long_title_is_clipped(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("main", 0, 0, 6, 3)
        v.title = "a very long title"
        gui.flush()
        assert screen.row_text(0)[:8] == "┌─a v─┐ "

    def test_ascii_frame(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.ascii = True
        gui.set_view("main", 0, 0, 4, 2)
        gui.flush()
        assert screen.row_text(0)[:5] == "+---+"
        assert screen.row_text(1)[:5] == "|   |"

    def test_custom_frame_runes(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("main", 0, 0, 4, 2)
        v.frame_runes = "═║╔╗╚╝"
        gui.flush()
        assert screen.row_text(0)[:5] == "╔═══╗"
        assert screen.row_text(2)[:5] == "╚═══╝"

    def test_two_frame_runes_keep_default_corners(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("main", 0, 0, 4, 2)
        v.frame_runes = "=!"
        gui.flush()
        assert screen.row_text(0)[:5] == "┌===┐"
        assert screen.row_text(1)[:5] == "!   !"

    def test_frame_colors(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.highlight = True
        gui.sel_frame_color = COLOR_RED
        gui.set_view("main", 0, 0, 4, 2)
        gui.set_view("other", 10, 0, 14, 2)
        gui.set_current_view("main")
        gui.flush()
        assert screen.cell(0, 0)[1].fg == COLOR_RED
        assert screen.cell(10, 0)[1].fg != COLOR_RED

    def test_scrollbar(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("main", 0, 0, 10, 5)
        v.scrollbar = True
        v.write("\n".join(str(i) for i in range(10)))
        gui.flush()
        column = [screen.cell(10, y)[0] for y in range(1, 5)]
        assert column == ["▐", "│", "│", "│"]

    def test_scrollbar_hidden_when_content_fits(self, gui: Gui, screen: SimulationScreen) -> None:
        v, _ = gui.set_view("main", 0, 0, 10, 5)
        v.scrollbar = True
        v.write("short")
        gui.flush()
        assert screen.cell(10, 1)[0] == "│"

    def test_later_views_draw_on_top(self, gui: Gui, screen: SimulationScreen) -> None:
        back, _ = gui.set_view("back", 0, 0, 10, 4)
        back.write("0123456789")
        front, _ = gui.set_view("front", 2, 0, 8, 4)
        front.write("front")
        gui.flush()
        assert screen.row_text(1)[:11] == "│0│front│8│"

    def test_always_on_top_drawn_last(self, gui: Gui, screen: SimulationScreen) -> None:
        pinned, _ = gui.set_view("pinned", 0, 0, 6, 2)
        pinned.always_on_top = True
        pinned.write("pin")
        other, _ = gui.set_view("other", 0, 0, 6, 2)
        other.write("other")
        gui.flush()
        assert screen.row_text(1)[:7] == "│pin  │"

    def test_layout_runs_before_drawing(self, gui: Gui, screen: SimulationScreen) -> None:
        calls: list[tuple[int, int]] = []

        def layout(g: Gui) -> None:
            calls.append(g.size())
            v, created = g.set_view("main", 0, 0, 6, 2)
            if created:
                v.write("made")

        gui.set_layout(layout)
        gui.flush()
        gui.flush()
        assert calls == [(80, 24), (80, 24)]
        assert screen.row_text(1)[:7] == "│made │"

    def test_resize_callback(self, gui: Gui, screen: SimulationScreen) -> None:
        sizes: list[tuple[int, int]] = []
        gui.set_resize_callback(lambda g, w, h: sizes.append((w, h)))
        gui.flush()
        assert sizes == []
        screen.set_size(40, 12)
        gui.flush()
        gui.flush()
        assert sizes == [(40, 12)]

    def test_cursor_placement(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.cursor = True
        v, _ = gui.set_view("main", 2, 1, 12, 5)
        v.write("abc")
        v.set_cursor(2, 0)
        gui.set_current_view("main")
        gui.flush()
        assert screen.cursor == (5, 2)

    def test_cursor_hidden_without_flag(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.set_view("main", 2, 1, 12, 5)
        gui.set_current_view("main")
        gui.flush()
        assert screen.cursor is None


class TestJunctions:
    def test_side_by_side_views_share_tees(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.set_view("left", 0, 0, 10, 5)
        gui.set_view("right", 10, 0, 20, 5)
        gui.flush()
        assert screen.cell(0, 0)[0] == "┌"
        assert screen.cell(10, 0)[0] == "┬"
        assert screen.cell(10, 5)[0] == "┴"
        assert screen.cell(20, 0)[0] == "┐"
        assert screen.cell(10, 2)[0] == "│"

    def test_tees_revert_after_delete(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.set_view("left", 0, 0, 10, 5)
        gui.set_view("right", 10, 0, 20, 5)
        gui.flush()
        gui.delete_view("right")
        gui.flush()
        assert screen.cell(10, 0)[0] == "┐"
        assert screen.cell(10, 5)[0] == "┘"
        assert screen.cell(15, 0)[0] == " "

    def test_stacked_views(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.set_view("top", 0, 0, 10, 4)
        gui.set_view("bottom", 0, 4, 10, 8)
        gui.flush()
        assert screen.cell(0, 4)[0] == "├"
        assert screen.cell(10, 4)[0] == "┤"

    def test_four_views_cross(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.set_view("a", 0, 0, 10, 4)
        gui.set_view("b", 10, 0, 20, 4)
        gui.set_view("c", 0, 4, 10, 8)
        gui.set_view("d", 10, 4, 20, 8)
        gui.flush()
        assert screen.cell(10, 4)[0] == "┼"

    def test_ascii_mode_skips_junctions(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.ascii = True
        gui.set_view("left", 0, 0, 10, 5)
        gui.set_view("right", 10, 0, 20, 5)
        gui.flush()
        assert screen.cell(10, 0)[0] == "+"


class TestOverlaps:
    def test_shared_edge_is_not_redrawn(self, screen: SimulationScreen, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TERMPANE_OUTPUT_MODE", raising=False)
        with Gui(OutputMode.SIMULATOR, screen=screen, support_overlaps=True) as g:
            g.set_view("left", 0, 0, 10, 5)
            right, _ = g.set_view("right", 10, 0, 20, 5, LEFT)
            right.frame_runes = "=!"
            g.flush()
            assert screen.cell(10, 2)[0] == "│"
            assert screen.cell(20, 2)[0] == "!"

    def test_overlaps_ignored_without_support(self, gui: Gui, screen: SimulationScreen) -> None:
        gui.set_view("left", 0, 0, 10, 5)
        right, _ = gui.set_view("right", 10, 0, 20, 5, LEFT | BOTTOM)
        right.frame_runes = "=!"
        gui.flush()
        assert screen.cell(10, 2)[0] == "!"
        assert screen.cell(15, 5)[0] == "="
