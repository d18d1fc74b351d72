"""Key codes, modifier flags and terminal input sequence tables.

Also parses human-readable key identifiers such as ``"ctrl+c"`` or
``"alt+left"`` for keybinding registration.
"""

from __future__ import annotations

import enum
import re
from functools import lru_cache

from termpane.errors import UnknownKeybindingError

KeyId = str


class Key(enum.IntEnum):
    """Special keys.  Control keys use their ASCII code."""

    CTRL_SPACE = 0
    CTRL_A = 1
    CTRL_B = 2
    CTRL_C = 3
    CTRL_D = 4
    CTRL_E = 5
    CTRL_F = 6
    CTRL_G = 7
    BACKSPACE = 8
    CTRL_H = 8
    TAB = 9
    CTRL_I = 9
    CTRL_J = 10
    CTRL_K = 11
    CTRL_L = 12
    ENTER = 13
    CTRL_M = 13
    CTRL_N = 14
    CTRL_O = 15
    CTRL_P = 16
    CTRL_Q = 17
    CTRL_R = 18
    CTRL_S = 19
    CTRL_T = 20
    CTRL_U = 21
    CTRL_V = 22
    CTRL_W = 23
    CTRL_X = 24
    CTRL_Y = 25
    CTRL_Z = 26
    ESC = 27
    CTRL_BACKSLASH = 28
    CTRL_RSQ_BRACKET = 29
    CTRL_6 = 30
    CTRL_UNDERSCORE = 31
    BACKSPACE2 = 127

    UP = 256
    DOWN = 257
    RIGHT = 258
    LEFT = 259
    INSERT = 260
    DELETE = 261
    HOME = 262
    END = 263
    PGUP = 264
    PGDN = 265
    BACKTAB = 266
    CLEAR = 267
    F1 = 268
    F2 = 269
    F3 = 270
    F4 = 271
    F5 = 272
    F6 = 273
    F7 = 274
    F8 = 275
    F9 = 276
    F10 = 277
    F11 = 278
    F12 = 279

    MOUSE_LEFT = 512
    MOUSE_MIDDLE = 513
    MOUSE_RIGHT = 514
    MOUSE_RELEASE = 515
    MOUSE_WHEEL_UP = 516
    MOUSE_WHEEL_DOWN = 517


class Modifier(enum.IntFlag):
    NONE = 0
    SHIFT = 1
    ALT = 2
    CTRL = 4


MODIFIERS: dict[str, Modifier] = {
    "shift": Modifier.SHIFT,
    "alt": Modifier.ALT,
    "ctrl": Modifier.CTRL,
}

# Key identifier names -> keys
NAMED_KEYS: dict[str, Key] = {
    "escape": Key.ESC,
    "esc": Key.ESC,
    "enter": Key.ENTER,
    "return": Key.ENTER,
    "tab": Key.TAB,
    "backtab": Key.BACKTAB,
    "backspace": Key.BACKSPACE2,
    "delete": Key.DELETE,
    "insert": Key.INSERT,
    "clear": Key.CLEAR,
    "home": Key.HOME,
    "end": Key.END,
    "pageup": Key.PGUP,
    "pagedown": Key.PGDN,
    "up": Key.UP,
    "down": Key.DOWN,
    "left": Key.LEFT,
    "right": Key.RIGHT,
    "mouseleft": Key.MOUSE_LEFT,
    "mousemiddle": Key.MOUSE_MIDDLE,
    "mouseright": Key.MOUSE_RIGHT,
    "mouserelease": Key.MOUSE_RELEASE,
    "wheelup": Key.MOUSE_WHEEL_UP,
    "wheeldown": Key.MOUSE_WHEEL_DOWN,
    **{f"f{i}": Key[f"F{i}"] for i in range(1, 13)},
}

# Legacy escape sequences -> keys
LEGACY_KEY_SEQUENCES: dict[str, Key] = {
    "\x1b[A": Key.UP,
    "\x1b[B": Key.DOWN,
    "\x1b[C": Key.RIGHT,
    "\x1b[D": Key.LEFT,
    "\x1b[H": Key.HOME,
    "\x1b[F": Key.END,
    "\x1bOA": Key.UP,
    "\x1bOB": Key.DOWN,
    "\x1bOC": Key.RIGHT,
    "\x1bOD": Key.LEFT,
    "\x1bOH": Key.HOME,
    "\x1bOF": Key.END,
    "\x1b[1~": Key.HOME,
    "\x1b[2~": Key.INSERT,
    "\x1b[3~": Key.DELETE,
    "\x1b[4~": Key.END,
    "\x1b[5~": Key.PGUP,
    "\x1b[6~": Key.PGDN,
    "\x1b[7~": Key.HOME,
    "\x1b[8~": Key.END,
    "\x1b[E": Key.CLEAR,
    "\x1b[Z": Key.BACKTAB,
    "\x1bOP": Key.F1,
    "\x1bOQ": Key.F2,
    "\x1bOR": Key.F3,
    "\x1bOS": Key.F4,
    "\x1b[11~": Key.F1,
    "\x1b[12~": Key.F2,
    "\x1b[13~": Key.F3,
    "\x1b[14~": Key.F4,
    "\x1b[15~": Key.F5,
    "\x1b[17~": Key.F6,
    "\x1b[18~": Key.F7,
    "\x1b[19~": Key.F8,
    "\x1b[20~": Key.F9,
    "\x1b[21~": Key.F10,
    "\x1b[23~": Key.F11,
    "\x1b[24~": Key.F12,
}

# Final byte of ``CSI 1;<mod><final>`` -> key
CSI_FINAL_KEYS: dict[str, Key] = {
    "A": Key.UP,
    "B": Key.DOWN,
    "C": Key.RIGHT,
    "D": Key.LEFT,
    "H": Key.HOME,
    "F": Key.END,
    "P": Key.F1,
    "Q": Key.F2,
    "R": Key.F3,
    "S": Key.F4,
}

# Number of ``CSI <n>;<mod>~`` -> key
CSI_TILDE_KEYS: dict[int, Key] = {
    1: Key.HOME,
    2: Key.INSERT,
    3: Key.DELETE,
    4: Key.END,
    5: Key.PGUP,
    6: Key.PGDN,
    15: Key.F5,
    17: Key.F6,
    18: Key.F7,
    19: Key.F8,
    20: Key.F9,
    21: Key.F10,
    23: Key.F11,
    24: Key.F12,
}

LOCK_MASK = 64 + 128

MODIFIED_FINAL_RE = re.compile(r"^\x1b(?:\[1;|O)(\d+)([ABCDHFPQRS])$")
MODIFIED_TILDE_RE = re.compile(r"^\x1b\[(\d+);(\d+)~$")
SGR_MOUSE_RE = re.compile(r"^\x1b\[<(\d+);(\d+);(\d+)([Mm])$")


def decode_modifier(value: int) -> Modifier:
    """Convert the xterm ``1 + bits`` modifier parameter into a :class:`Modifier`."""
    return Modifier((value - 1) & ~LOCK_MASK & 0x7)


def parse_key_id(key_id: KeyId) -> tuple[Key | None, str, Modifier]:
    """Split a key identifier like ``"ctrl+alt+x"`` into ``(key, rune, modifier)``.

    ``ctrl`` combined with a letter maps onto the matching control key, as
    terminals report it that way.  Raises
    :class:`~termpane.errors.UnknownKeybindingError` for unknown names.
    """
    if not key_id:
        raise UnknownKeybindingError("empty key identifier")
    if len(key_id) == 1:
        return None, key_id, Modifier.NONE

    parts = key_id.split("+")
    # "ctrl++" and friends: the last part is the literal plus sign
    if key_id.endswith("++"):
        parts = parts[:-2] + ["+"]

    mod = Modifier.NONE
    base = ""
    last = len(parts) - 1
    for i, part in enumerate(parts):
        lower = part.lower()
        if lower in MODIFIERS and i < last:
            mod |= MODIFIERS[lower]
        elif base:
            raise UnknownKeybindingError(f"unknown key identifier: {key_id!r}")
        else:
            base = part

    if not base:
        raise UnknownKeybindingError(f"unknown key identifier: {key_id!r}")

    lower = base.lower()
    if lower == "space":
        if mod & Modifier.CTRL:
            return Key.CTRL_SPACE, "", mod & ~Modifier.CTRL
        return None, " ", mod

    if len(base) == 1:
        if mod & Modifier.CTRL:
            if base.isalpha() and base.isascii():
                return Key(ord(lower) - ord("a") + 1), "", mod & ~Modifier.CTRL
            raise UnknownKeybindingError(f"unknown key identifier: {key_id!r}")
        return None, base, mod

    if lower == "tab" and mod & Modifier.SHIFT:
        return Key.BACKTAB, "", mod & ~Modifier.SHIFT

    key = NAMED_KEYS.get(lower)
    if key is None:
        raise UnknownKeybindingError(f"unknown key identifier: {key_id!r}")
    return key, "", mod


@lru_cache(maxsize=256)
def _parsed(key_id: KeyId) -> tuple[Key | None, str, Modifier]:
    return parse_key_id(key_id)


def matches_key(key_id: KeyId, key: Key | None, ch: str, mod: Modifier) -> bool:
    """Check whether a decoded key press matches *key_id*."""
    k, c, m = _parsed(key_id)
    return k == key and c == ch and m == mod
