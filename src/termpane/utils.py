"""Display-width measurement for runes and strings."""

from __future__ import annotations

import re
import unicodedata
from functools import lru_cache

import grapheme
import wcwidth as _wcwidth

_SGR_RE = re.compile(r"\x1b\[[0-9;]*[mK]")


@lru_cache(maxsize=4096)
def rune_width(ch: str) -> int:
    """Return the number of terminal columns occupied by the rune *ch*.

    Control characters and combining marks take no space; wide (CJK,
    fullwidth) runes take two columns.
    """
    if not ch:
        return 0
    cp = ord(ch[0])
    if 0x20 <= cp < 0x7F:
        return 1
    if cp < 0x20 or 0x7F <= cp <= 0x9F:
        return 0
    return max(_wcwidth.wcwidth(ch[0]), 0)


def _grapheme_width(g: str) -> int:
    if len(g) == 1:
        return rune_width(g)

    for ch in g:
        cp = ord(ch)
        # VS16, ZWJ, skin tones and regional indicators force emoji presentation
        if cp in (0xFE0F, 0x200D) or 0x1F3FB <= cp <= 0x1F3FF or 0x1F1E6 <= cp <= 0x1F1FF:
            return 2

    first = g[0]
    if ord(first) >= 0x1F000:
        return 2
    category = unicodedata.category(first)
    if category.startswith("M") or category == "Cf":
        return 0
    return rune_width(first)


_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def visible_width(text: str) -> int:
    """Return the terminal width of *text*, ignoring SGR sequences.

    Measured per grapheme cluster so that emoji sequences count once.
    """
    if not text:
        return 0
    stripped = _SGR_RE.sub("", text)
    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[stripped] = total
    return total


def truncate_to_width(text: str, max_width: int) -> str:
    """Cut *text* so that it fits into *max_width* columns."""
    if max_width <= 0:
        return ""
    if visible_width(text) <= max_width:
        return text
    out: list[str] = []
    width = 0
    for g in grapheme.graphemes(text):
        w = _grapheme_width(g)
        if width + w > max_width:
            break
        out.append(g)
        width += w
    return "".join(out)
