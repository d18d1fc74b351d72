"""Keybindings link key presses to handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Union

from termpane.errors import UnknownKeybindingError
from termpane.keys import Key, KeyId, Modifier, parse_key_id

if TYPE_CHECKING:
    from termpane.gui import Gui
    from termpane.view import View

KeybindingHandler = Callable[["Gui", "View | None"], None]

KeyLike = Union[Key, KeyId]


def parse_keybinding(key: KeyLike, mod: Modifier = Modifier.NONE) -> tuple[Key | None, str, Modifier]:
    """Normalise a key argument into ``(key, rune, modifier)``.

    *key* may be a :class:`Key`, a single rune, or a key identifier such
    as ``"ctrl+c"``; modifiers named in the identifier are added to *mod*.
    """
    if isinstance(key, Key):
        return key, "", mod
    if not isinstance(key, str):
        raise UnknownKeybindingError(f"unsupported key type: {type(key).__name__}")
    k, ch, m = parse_key_id(key)
    return k, ch, mod | m


@dataclass(frozen=True)
class Keybinding:
    """A handler bound to a key (or rune) and modifier, globally or per view.

    An empty ``view_name`` makes the binding global.
    """

    view_name: str
    key: Key | None
    ch: str
    mod: Modifier
    handler: KeybindingHandler
    in_edit_mode: bool = False

    def matches(self, key: Key | None, ch: str, mod: Modifier) -> bool:
        if self.key is not None:
            return self.key == key and self.mod == mod
        return bool(ch) and self.ch == ch and self.mod == mod

    def matches_view(self, view: View | None) -> bool:
        return self.view_name == "" or (view is not None and view.name == self.view_name)

    @property
    def is_plain_rune(self) -> bool:
        """True for a rune without modifiers, which an editable view would type."""
        return self.key is None and self.mod == Modifier.NONE
