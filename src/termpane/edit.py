"""Editors: turn key presses on an editable view into buffer edits."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Literal, Protocol

from termpane.keys import Key, KeyId, Modifier, matches_key

if TYPE_CHECKING:
    from termpane.view import View

EditorAction = Literal[
    # Cursor movement
    "cursorUp",
    "cursorDown",
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteToLineStart",
    "deleteToLineEnd",
    # Text input
    "newLine",
    "toggleOverwrite",
    # Clipboard
    "yank",
]

EditorKeybindingsConfig = dict[EditorAction, KeyId | list[KeyId]]

DEFAULT_EDITOR_KEYBINDINGS: dict[EditorAction, KeyId | list[KeyId]] = {
    # Cursor movement
    "cursorUp": "up",
    "cursorDown": "down",
    "cursorLeft": "left",
    "cursorRight": "right",
    "cursorWordLeft": ["alt+left", "alt+b"],
    "cursorWordRight": ["alt+right", "alt+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    # Deletion
    "deleteCharBackward": ["backspace", "ctrl+h"],
    "deleteCharForward": "delete",
    "deleteWordBackward": ["ctrl+w", "alt+backspace"],
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
    # Text input
    "newLine": "enter",
    "toggleOverwrite": "insert",
    # Clipboard
    "yank": "ctrl+y",
}


class EditorKeybindingsManager:
    """Maps editor actions to the key identifiers that trigger them."""

    def __init__(self, config: EditorKeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[EditorAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: EditorKeybindingsConfig) -> None:
        self._action_to_keys.clear()

        for action, keys in DEFAULT_EDITOR_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        # Override with user config
        for action, keys in config.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def matches(self, key: Key | None, ch: str, mod: Modifier, action: EditorAction) -> bool:
        """Check if a key press triggers *action*."""
        return any(matches_key(k, key, ch, mod) for k in self._action_to_keys.get(action, []))

    def action_for(self, key: Key | None, ch: str, mod: Modifier) -> EditorAction | None:
        for action in self._action_to_keys:
            if self.matches(key, ch, mod, action):
                return action
        return None

    def get_keys(self, action: EditorAction) -> list[KeyId]:
        return self._action_to_keys.get(action, [])

    def set_config(self, config: EditorKeybindingsConfig) -> None:
        self._build_maps(config)


_global_editor_keybindings: EditorKeybindingsManager | None = None


def get_editor_keybindings() -> EditorKeybindingsManager:
    global _global_editor_keybindings
    if _global_editor_keybindings is None:
        _global_editor_keybindings = EditorKeybindingsManager()
    return _global_editor_keybindings


def set_editor_keybindings(manager: EditorKeybindingsManager) -> None:
    global _global_editor_keybindings
    _global_editor_keybindings = manager


# ---------------------------------------------------------------------------
# Editors
# ---------------------------------------------------------------------------


class Editor(Protocol):
    def edit(self, view: View, key: Key | None, ch: str, mod: Modifier) -> bool:
        """Apply a key press to *view*; return True if it was handled."""
        ...


class _FuncEditor:
    def __init__(self, fn: Callable[[View, Key | None, str, Modifier], bool]) -> None:
        self._fn = fn

    def edit(self, view: View, key: Key | None, ch: str, mod: Modifier) -> bool:
        return self._fn(view, key, ch, mod)


def edit_func(fn: Callable[[View, Key | None, str, Modifier], bool]) -> Editor:
    """Wrap a plain function as an :class:`Editor`."""
    return _FuncEditor(fn)


_ACTIONS: dict[EditorAction, Callable[[View], None]] = {
    "cursorUp": lambda v: v.move_cursor(0, -1),
    "cursorDown": lambda v: v.move_cursor(0, 1),
    "cursorLeft": lambda v: v.move_cursor(-1, 0),
    "cursorRight": lambda v: v.move_cursor(1, 0),
    "cursorWordLeft": lambda v: v.move_word_left(),
    "cursorWordRight": lambda v: v.move_word_right(),
    "cursorLineStart": lambda v: v.edit_line_start(),
    "cursorLineEnd": lambda v: v.edit_line_end(),
    "deleteCharBackward": lambda v: v.edit_delete(True),
    "deleteCharForward": lambda v: v.edit_delete(False),
    "deleteWordBackward": lambda v: v.edit_delete_word(),
    "deleteToLineStart": lambda v: v.edit_delete_to_line_start(),
    "deleteToLineEnd": lambda v: v.edit_delete_to_line_end(),
    "newLine": lambda v: v.edit_new_line(),
    "toggleOverwrite": lambda v: setattr(v, "overwrite", not v.overwrite),
    "yank": lambda v: v.edit_yank(),
}


def simple_edit(view: View, key: Key | None, ch: str, mod: Modifier) -> bool:
    """The stock editor: runes are typed, editing keys go through the keymap."""
    if key is None and ch and not mod & (Modifier.ALT | Modifier.CTRL):
        view.edit_write(ch)
        return True
    action = get_editor_keybindings().action_for(key, ch, mod)
    if action is None:
        return False
    _ACTIONS[action](view)
    return True


DEFAULT_EDITOR = edit_func(simple_edit)
