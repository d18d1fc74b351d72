"""Exception types raised by termpane."""

from __future__ import annotations


class TermpaneError(Exception):
    """Base class for all termpane errors."""


class InvalidDimensionsError(TermpaneError, ValueError):
    """View geometry does not satisfy ``x0 < x1`` and ``y0 < y1``."""


class InvalidNameError(TermpaneError, ValueError):
    """A view was requested with an empty name."""


class DuplicateViewError(TermpaneError):
    """A view with the same name already exists."""


class UnknownViewError(TermpaneError, KeyError):
    """No view is registered under the requested name."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class UnknownKeybindingError(TermpaneError, ValueError):
    """A key identifier could not be parsed."""


class InvalidPointError(TermpaneError, ValueError):
    """A coordinate lies outside the valid range."""


class BackendError(TermpaneError):
    """The terminal backend reported a failure."""


# ---------------------------------------------------------------------------
# Escape sequence errors
# ---------------------------------------------------------------------------


class EscapeSequenceError(TermpaneError):
    """Malformed escape sequence; the consumed runes should be replayed."""


class NotCSIError(EscapeSequenceError):
    def __init__(self) -> None:
        super().__init__("Not a CSI escape sequence")


class CSINotANumberError(EscapeSequenceError):
    def __init__(self) -> None:
        super().__init__("CSI escape sequence was expecting a number or a ;")


class CSIParseError(EscapeSequenceError):
    def __init__(self) -> None:
        super().__init__("CSI escape sequence parsing error")


class CSITooLongError(EscapeSequenceError):
    def __init__(self) -> None:
        super().__init__("CSI escape sequence is too long")


# ---------------------------------------------------------------------------
# Control flow
# ---------------------------------------------------------------------------


class Quit(Exception):
    """Raised by a handler or update closure to end the main loop."""
