"""Scrollbar and viewport geometry."""

from __future__ import annotations

import math


def calc_scrollbar(list_size: int, page_size: int, position: int, track: int) -> tuple[int, int]:
    """Return ``(start, height)`` of the scrollbar thumb within *track* cells.

    *position* is the index of the first visible item out of *list_size*
    items, *page_size* of which fit on screen.
    """
    if page_size >= list_size:
        height = track
    else:
        height = int(page_size / list_size * track)

    max_position = list_size - page_size
    if max_position <= 0:
        return 0, height

    position = min(max(position, 0), max_position)
    if position == max_position:
        return track - height, height

    start = math.ceil(position / max_position * (track - height - 1))
    return start, height


def updated_cursor_and_origin(prev_origin: int, size: int, cursor: int) -> tuple[int, int]:
    """Scroll one axis so that *cursor* stays visible.

    Returns ``(view_cursor, origin)``: the cursor relative to the new
    origin, and the origin itself.  The viewport spans ``size + 1``
    positions so that the cursor may sit just past the last column.
    """
    origin = prev_origin
    if cursor < origin:
        origin = cursor
    elif cursor > origin + size:
        origin = cursor - size
    return cursor - origin, origin
