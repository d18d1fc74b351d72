"""Tests for termpane.edit -- editor keybindings and the stock editor."""

from __future__ import annotations

import pytest

from termpane import edit
from termpane.edit import (
    DEFAULT_EDITOR,
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorKeybindingsManager,
    edit_func,
    get_editor_keybindings,
    set_editor_keybindings,
    simple_edit,
)
from termpane.keys import Key, Modifier, parse_key_id
from termpane.view import View


@pytest.fixture(autouse=True)
def _reset_global_keybindings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(edit, "_global_editor_keybindings", None)


def make_view() -> View:
    v = View("edit", 0, 0, 40, 10)
    v.editable = True
    return v


def type_text(v: View, text: str) -> None:
    for ch in text:
        assert simple_edit(v, None, ch, Modifier.NONE)


# ---------------------------------------------------------------------------
# DEFAULT_EDITOR_KEYBINDINGS
# ---------------------------------------------------------------------------


class TestDefaultEditorKeybindings:
    def test_has_cursor_movement_actions(self) -> None:
        for action in [
            "cursorUp", "cursorDown", "cursorLeft", "cursorRight",
            "cursorWordLeft", "cursorWordRight",
            "cursorLineStart", "cursorLineEnd",
        ]:
            assert action in DEFAULT_EDITOR_KEYBINDINGS, f"Missing action: {action}"

    def test_has_deletion_actions(self) -> None:
        for action in [
            "deleteCharBackward", "deleteCharForward", "deleteWordBackward",
            "deleteToLineStart", "deleteToLineEnd",
        ]:
            assert action in DEFAULT_EDITOR_KEYBINDINGS, f"Missing action: {action}"

    def test_every_key_id_parses(self) -> None:
        manager = EditorKeybindingsManager()
        for action in DEFAULT_EDITOR_KEYBINDINGS:
            for key_id in manager.get_keys(action):
                parse_key_id(key_id)


# ---------------------------------------------------------------------------
# EditorKeybindingsManager
# ---------------------------------------------------------------------------


class TestEditorKeybindingsManager:
    def test_default_matches(self) -> None:
        manager = EditorKeybindingsManager()
        assert manager.matches(Key.CTRL_A, "", Modifier.NONE, "cursorLineStart")
        assert manager.matches(Key.HOME, "", Modifier.NONE, "cursorLineStart")
        assert not manager.matches(Key.END, "", Modifier.NONE, "cursorLineStart")

    def test_action_for(self) -> None:
        manager = EditorKeybindingsManager()
        assert manager.action_for(Key.CTRL_W, "", Modifier.NONE) == "deleteWordBackward"
        assert manager.action_for(None, "b", Modifier.ALT) == "cursorWordLeft"
        assert manager.action_for(Key.F1, "", Modifier.NONE) is None

    def test_user_config_replaces_action_keys(self) -> None:
        manager = EditorKeybindingsManager({"newLine": ["ctrl+j"]})
        assert manager.get_keys("newLine") == ["ctrl+j"]
        assert manager.matches(Key.CTRL_J, "", Modifier.NONE, "newLine")
        assert not manager.matches(Key.ENTER, "", Modifier.NONE, "newLine")

    def test_single_key_config(self) -> None:
        manager = EditorKeybindingsManager({"yank": "alt+y"})
        assert manager.get_keys("yank") == ["alt+y"]

    def test_set_config_resets_to_defaults_first(self) -> None:
        manager = EditorKeybindingsManager({"yank": "alt+y"})
        manager.set_config({})
        assert manager.get_keys("yank") == ["ctrl+y"]

    def test_global_manager(self) -> None:
        first = get_editor_keybindings()
        assert get_editor_keybindings() is first
        custom = EditorKeybindingsManager({"yank": "alt+y"})
        set_editor_keybindings(custom)
        assert get_editor_keybindings() is custom


# ---------------------------------------------------------------------------
# simple_edit
# ---------------------------------------------------------------------------


class TestSimpleEdit:
    def test_runes_are_written(self) -> None:
        v = make_view()
        type_text(v, "hi there")
        assert v.buffer() == "hi there"
        assert v.cursor_position() == (8, 0)

    def test_enter_breaks_line(self) -> None:
        v = make_view()
        type_text(v, "ab")
        assert simple_edit(v, Key.ENTER, "", Modifier.NONE)
        type_text(v, "cd")
        assert v.buffer() == "ab\ncd"

    def test_backspace_and_delete(self) -> None:
        v = make_view()
        type_text(v, "abc")
        simple_edit(v, Key.BACKSPACE2, "", Modifier.NONE)
        assert v.buffer() == "ab"
        simple_edit(v, Key.CTRL_H, "", Modifier.NONE)
        assert v.buffer() == "a"
        simple_edit(v, Key.HOME, "", Modifier.NONE)
        simple_edit(v, Key.DELETE, "", Modifier.NONE)
        assert v.buffer() == ""

    def test_arrows(self) -> None:
        v = make_view()
        type_text(v, "ab")
        simple_edit(v, Key.LEFT, "", Modifier.NONE)
        assert v.cursor_position() == (1, 0)
        simple_edit(v, Key.RIGHT, "", Modifier.NONE)
        assert v.cursor_position() == (2, 0)

    def test_insert_toggles_overwrite(self) -> None:
        v = make_view()
        type_text(v, "abc")
        simple_edit(v, Key.CTRL_A, "", Modifier.NONE)
        simple_edit(v, Key.INSERT, "", Modifier.NONE)
        assert v.overwrite is True
        type_text(v, "X")
        assert v.buffer() == "Xbc"

    def test_kill_and_yank(self) -> None:
        v = make_view()
        type_text(v, "abc def")
        simple_edit(v, Key.CTRL_W, "", Modifier.NONE)
        assert v.buffer() == "abc "
        simple_edit(v, Key.CTRL_U, "", Modifier.NONE)
        assert v.buffer() == ""
        assert v.clipboard == "abc "
        simple_edit(v, Key.CTRL_Y, "", Modifier.NONE)
        assert v.buffer() == "abc "

    def test_kill_to_line_end(self) -> None:
        v = make_view()
        type_text(v, "abc def")
        simple_edit(v, Key.CTRL_A, "", Modifier.NONE)
        simple_edit(v, Key.CTRL_K, "", Modifier.NONE)
        assert v.buffer() == ""
        assert v.clipboard == "abc def"

    def test_word_motion(self) -> None:
        v = make_view()
        type_text(v, "abc def")
        simple_edit(v, None, "b", Modifier.ALT)
        assert v.cursor_position() == (4, 0)
        simple_edit(v, Key.LEFT, "", Modifier.ALT)
        assert v.cursor_position() == (0, 0)
        simple_edit(v, Key.RIGHT, "", Modifier.ALT)
        assert v.cursor_position() == (3, 0)

    def test_alt_rune_is_not_typed(self) -> None:
        v = make_view()
        assert simple_edit(v, None, "x", Modifier.ALT) is False
        assert v.buffer() == ""

    def test_unbound_key(self) -> None:
        v = make_view()
        assert simple_edit(v, Key.F5, "", Modifier.NONE) is False

    def test_follows_global_keybindings(self) -> None:
        set_editor_keybindings(EditorKeybindingsManager({"newLine": "ctrl+j"}))
        v = make_view()
        type_text(v, "a")
        assert simple_edit(v, Key.ENTER, "", Modifier.NONE) is False
        assert simple_edit(v, Key.CTRL_J, "", Modifier.NONE) is True
        assert v.lines_height() == 2


# ---------------------------------------------------------------------------
# Editor adapters
# ---------------------------------------------------------------------------


class TestEditFunc:
    def test_default_editor_wraps_simple_edit(self) -> None:
        v = make_view()
        assert DEFAULT_EDITOR.edit(v, None, "a", Modifier.NONE)
        assert v.buffer() == "a"

    def test_custom_function(self) -> None:
        calls: list[tuple[Key | None, str, Modifier]] = []

        def upper(view: View, key: Key | None, ch: str, mod: Modifier) -> bool:
            calls.append((key, ch, mod))
            if ch:
                view.edit_write(ch.upper())
                return True
            return False

        editor = edit_func(upper)
        v = make_view()
        assert editor.edit(v, None, "a", Modifier.NONE) is True
        assert editor.edit(v, Key.ENTER, "", Modifier.NONE) is False
        assert v.buffer() == "A"
        assert calls == [(None, "a", Modifier.NONE), (Key.ENTER, "", Modifier.NONE)]
