"""Split raw terminal input into complete key and mouse sequences.

Reads from a tty can end in the middle of an escape sequence, especially
for mouse reports.  ``StdinBuffer`` holds on to the partial tail until the
rest arrives, or until the caller decides the wait is over and calls
:meth:`StdinBuffer.flush` (a lone ESC keypress looks exactly like the
start of a sequence).
"""

from __future__ import annotations

import re
from typing import Callable

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

_SGR_MOUSE_PAYLOAD_RE = re.compile(r"^<\d+;\d+;\d+[Mm]$")

COMPLETE = "complete"
INCOMPLETE = "incomplete"
NOT_ESCAPE = "not-escape"


def sequence_status(data: str) -> str:
    """Classify *data* as a complete, incomplete or non-escape sequence."""
    if not data.startswith(ESC):
        return NOT_ESCAPE
    if len(data) == 1:
        return INCOMPLETE

    intro = data[1]
    if intro == "[":
        return _csi_status(data)
    if intro in "]P_":
        # OSC, DCS and APC end with ST (or BEL for OSC)
        if data.endswith(ESC + "\\") or (intro == "]" and data.endswith("\x07")):
            return COMPLETE
        return INCOMPLETE
    if intro == "O":
        return COMPLETE if len(data) >= 3 else INCOMPLETE
    # ESC followed by one character is an alt-modified key
    return COMPLETE


def _csi_status(data: str) -> str:
    if len(data) < 3:
        return INCOMPLETE
    payload = data[2:]
    if payload.startswith("M"):
        # X10 mouse: three raw bytes follow
        return COMPLETE if len(data) >= 6 else INCOMPLETE
    if not 0x40 <= ord(payload[-1]) <= 0x7E:
        return INCOMPLETE
    if payload.startswith("<"):
        return COMPLETE if _SGR_MOUSE_PAYLOAD_RE.match(payload) else INCOMPLETE
    return COMPLETE


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences and an incomplete remainder."""
    sequences: list[str] = []
    pos = 0
    n = len(buffer)

    while pos < n:
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while True:
            status = sequence_status(buffer[pos:end])
            if status != INCOMPLETE:
                break
            if end >= n:
                return sequences, buffer[pos:]
            end += 1
        sequences.append(buffer[pos:end])
        pos = end

    return sequences, ""


class StdinBuffer:
    """Accumulates input chunks and reports complete sequences.

    ``on_data`` receives each complete sequence and ``on_paste`` receives
    the body of a bracketed paste.  Both fire synchronously from
    :meth:`process` and :meth:`flush`.
    """

    def __init__(self, *, timeout: float = 0.01) -> None:
        self.timeout = timeout
        self._buffer = ""
        self._paste_mode = False
        self._paste_buffer = ""

        self._on_data: Callable[[str], None] | None = None
        self._on_paste: Callable[[str], None] | None = None

    def on_data(self, callback: Callable[[str], None]) -> None:
        self._on_data = callback

    def on_paste(self, callback: Callable[[str], None]) -> None:
        self._on_paste = callback

    def _emit_data(self, data: str) -> None:
        if self._on_data:
            self._on_data(data)

    def _emit_paste(self, data: str) -> None:
        if self._on_paste:
            self._on_paste(data)

    @property
    def pending(self) -> bool:
        """True while a partial sequence is waiting for more input."""
        return bool(self._buffer)

    def process(self, data: str) -> None:
        """Feed a chunk of input."""
        if self._paste_mode:
            self._paste_buffer += data
            self._finish_paste()
            return

        self._buffer += data

        start = self._buffer.find(BRACKETED_PASTE_START)
        if start != -1:
            before = self._buffer[:start]
            sequences, _ = split_sequences(before)
            for sequence in sequences:
                self._emit_data(sequence)

            self._paste_mode = True
            self._paste_buffer = self._buffer[start + len(BRACKETED_PASTE_START) :]
            self._buffer = ""
            self._finish_paste()
            return

        sequences, self._buffer = split_sequences(self._buffer)
        for sequence in sequences:
            self._emit_data(sequence)

    def _finish_paste(self) -> None:
        end = self._paste_buffer.find(BRACKETED_PASTE_END)
        if end == -1:
            return
        content = self._paste_buffer[:end]
        remaining = self._paste_buffer[end + len(BRACKETED_PASTE_END) :]
        self._paste_mode = False
        self._paste_buffer = ""
        self._emit_paste(content)
        if remaining:
            self.process(remaining)

    def flush(self) -> list[str]:
        """Give up waiting and emit the partial tail as-is."""
        if not self._buffer:
            return []
        flushed = [self._buffer]
        self._buffer = ""
        for sequence in flushed:
            self._emit_data(sequence)
        return flushed

    def clear(self) -> None:
        self._buffer = ""
        self._paste_mode = False
        self._paste_buffer = ""

    def get_buffer(self) -> str:
        return self._buffer
