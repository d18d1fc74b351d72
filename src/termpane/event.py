"""Events produced by a screen backend."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from termpane.keys import (
    CSI_FINAL_KEYS,
    CSI_TILDE_KEYS,
    LEGACY_KEY_SEQUENCES,
    MODIFIED_FINAL_RE,
    MODIFIED_TILDE_RE,
    SGR_MOUSE_RE,
    Key,
    Modifier,
    decode_modifier,
)


class EventType(enum.Enum):
    KEY = "key"
    MOUSE = "mouse"
    RESIZE = "resize"
    RAW = "raw"
    ERROR = "error"
    INTERRUPT = "interrupt"


@dataclass(frozen=True)
class Event:
    """A single input occurrence.

    Key events carry either ``key`` (a special key) or ``ch`` (a rune).
    Mouse events reuse ``key`` for the button and fill ``mouse_x`` /
    ``mouse_y``.
    """

    type: EventType
    key: Key | None = None
    ch: str = ""
    mod: Modifier = Modifier.NONE
    width: int = 0
    height: int = 0
    mouse_x: int = -1
    mouse_y: int = -1
    err: BaseException | None = None


def key_event(key: Key | None = None, ch: str = "", mod: Modifier = Modifier.NONE) -> Event:
    return Event(EventType.KEY, key=key, ch=ch, mod=mod)


def resize_event(width: int, height: int) -> Event:
    return Event(EventType.RESIZE, width=width, height=height)


def mouse_event(button: Key, x: int, y: int, mod: Modifier = Modifier.NONE) -> Event:
    return Event(EventType.MOUSE, key=button, mod=mod, mouse_x=x, mouse_y=y)


def error_event(err: BaseException) -> Event:
    return Event(EventType.ERROR, err=err)


# ---------------------------------------------------------------------------
# Input decoding
# ---------------------------------------------------------------------------


def decode_sequence(data: str) -> Event | None:
    """Turn one complete input sequence into an :class:`Event`.

    Returns ``None`` for sequences that carry no key (terminal replies,
    unknown CSI codes).
    """
    if not data:
        return None
    if len(data) == 1:
        return _decode_char(data)

    key = LEGACY_KEY_SEQUENCES.get(data)
    if key is not None:
        return key_event(key)

    m = SGR_MOUSE_RE.match(data)
    if m:
        return _decode_mouse(int(m.group(1)), int(m.group(2)), int(m.group(3)), m.group(4))

    m = MODIFIED_FINAL_RE.match(data)
    if m:
        return key_event(CSI_FINAL_KEYS[m.group(2)], mod=decode_modifier(int(m.group(1))))

    m = MODIFIED_TILDE_RE.match(data)
    if m:
        key = CSI_TILDE_KEYS.get(int(m.group(1)))
        if key is None:
            return None
        return key_event(key, mod=decode_modifier(int(m.group(2))))

    if data[0] == "\x1b":
        if len(data) == 2 or data[1] != "[":
            # ESC prefix: the rest was typed with alt held
            inner = decode_sequence(data[1:])
            if inner is None or inner.type != EventType.KEY:
                return inner
            return key_event(inner.key, inner.ch, inner.mod | Modifier.ALT)
        return None

    # Unbuffered multi-rune input: report the first rune
    return _decode_char(data[0])


def _decode_char(ch: str) -> Event:
    if ch in ("\r", "\n"):
        return key_event(Key.ENTER)
    code = ord(ch)
    if code == 0x7F:
        return key_event(Key.BACKSPACE2)
    if code < 0x20:
        return key_event(Key(code))
    return key_event(ch=ch)


def _decode_mouse(button: int, x: int, y: int, final: str) -> Event:
    mod = Modifier.NONE
    if button & 4:
        mod |= Modifier.SHIFT
    if button & 8:
        mod |= Modifier.ALT
    if button & 16:
        mod |= Modifier.CTRL

    if button & 64:
        key = Key.MOUSE_WHEEL_DOWN if button & 1 else Key.MOUSE_WHEEL_UP
    elif final == "m" or button & 3 == 3:
        key = Key.MOUSE_RELEASE
    else:
        key = (Key.MOUSE_LEFT, Key.MOUSE_MIDDLE, Key.MOUSE_RIGHT)[button & 3]
    # reports are 1-based
    return mouse_event(key, x - 1, y - 1, mod)
