"""termpane: terminal UI engine with composited, editable views."""

# Colors and styles
from termpane.attribute import (
    ATTR_ALL,
    ATTR_BLINK,
    ATTR_BOLD,
    ATTR_DIM,
    ATTR_ITALIC,
    ATTR_NONE,
    ATTR_REVERSE,
    ATTR_STRIKETHROUGH,
    ATTR_UNDERLINE,
    COLOR_BLACK,
    COLOR_BLUE,
    COLOR_CYAN,
    COLOR_DEFAULT,
    COLOR_GREEN,
    COLOR_MAGENTA,
    COLOR_RED,
    COLOR_WHITE,
    COLOR_YELLOW,
    Attribute,
    OutputMode,
    Style,
    fix_color,
    get_color,
    get_rgb_color,
    hex_value,
    mk_style,
    new_rgb_color,
    rgb,
)

# Cells and wrapping
from termpane.cell import Cell, Line, wrap_line, wrap_offsets

# Editors
from termpane.edit import (
    DEFAULT_EDITOR,
    DEFAULT_EDITOR_KEYBINDINGS,
    EditorAction,
    Editor,
    EditorKeybindingsManager,
    edit_func,
    get_editor_keybindings,
    set_editor_keybindings,
    simple_edit,
)

# Errors
from termpane.errors import (
    BackendError,
    CSINotANumberError,
    CSIParseError,
    CSITooLongError,
    DuplicateViewError,
    EscapeSequenceError,
    InvalidDimensionsError,
    InvalidNameError,
    InvalidPointError,
    NotCSIError,
    Quit,
    TermpaneError,
    UnknownKeybindingError,
    UnknownViewError,
)

# Escape sequences
from termpane.escape import EscapeInterpreter, Instruction

# Events
from termpane.event import Event, EventType, decode_sequence

# Core GUI
from termpane.gui import Gui, SizeValue

# Keybindings
from termpane.keybinding import Keybinding, KeybindingHandler, parse_keybinding

# Keyboard input handling
from termpane.keys import Key, KeyId, Modifier, matches_key, parse_key_id

# Loader
from termpane.loader import loader_char

# Screens
from termpane.screen import Screen, TerminalScreen
from termpane.scrollbar import calc_scrollbar, updated_cursor_and_origin
from termpane.simulation import SimulationScreen

# Input buffering
from termpane.stdin_buffer import StdinBuffer
from termpane.testing import TestingScreen
from termpane.text_area import TextArea

# Utilities
from termpane.utils import truncate_to_width, visible_width
from termpane.view import BOTTOM, LEFT, RIGHT, TOP, View, strip_wide_padding

__all__ = [
    # Colors and styles
    "ATTR_ALL",
    "ATTR_BLINK",
    "ATTR_BOLD",
    "ATTR_DIM",
    "ATTR_ITALIC",
    "ATTR_NONE",
    "ATTR_REVERSE",
    "ATTR_STRIKETHROUGH",
    "ATTR_UNDERLINE",
    "COLOR_BLACK",
    "COLOR_BLUE",
    "COLOR_CYAN",
    "COLOR_DEFAULT",
    "COLOR_GREEN",
    "COLOR_MAGENTA",
    "COLOR_RED",
    "COLOR_WHITE",
    "COLOR_YELLOW",
    "Attribute",
    "OutputMode",
    "Style",
    "fix_color",
    "get_color",
    "get_rgb_color",
    "hex_value",
    "mk_style",
    "new_rgb_color",
    "rgb",
    # Cells
    "Cell",
    "Line",
    "wrap_line",
    "wrap_offsets",
    # Editors
    "DEFAULT_EDITOR",
    "DEFAULT_EDITOR_KEYBINDINGS",
    "Editor",
    "EditorAction",
    "EditorKeybindingsManager",
    "edit_func",
    "get_editor_keybindings",
    "set_editor_keybindings",
    "simple_edit",
    # Errors
    "BackendError",
    "CSINotANumberError",
    "CSIParseError",
    "CSITooLongError",
    "DuplicateViewError",
    "EscapeSequenceError",
    "InvalidDimensionsError",
    "InvalidNameError",
    "InvalidPointError",
    "NotCSIError",
    "Quit",
    "TermpaneError",
    "UnknownKeybindingError",
    "UnknownViewError",
    # Escape sequences
    "EscapeInterpreter",
    "Instruction",
    # Events
    "Event",
    "EventType",
    "decode_sequence",
    # GUI
    "Gui",
    "SizeValue",
    # Keybindings
    "Keybinding",
    "KeybindingHandler",
    "parse_keybinding",
    # Keys
    "Key",
    "KeyId",
    "Modifier",
    "matches_key",
    "parse_key_id",
    # Loader
    "loader_char",
    # Screens
    "Screen",
    "SimulationScreen",
    "TerminalScreen",
    "TestingScreen",
    # Scrollbar
    "calc_scrollbar",
    "updated_cursor_and_origin",
    # Input buffering
    "StdinBuffer",
    # Text editing
    "TextArea",
    # Utilities
    "truncate_to_width",
    "visible_width",
    # Views
    "BOTTOM",
    "LEFT",
    "RIGHT",
    "TOP",
    "View",
    "strip_wide_padding",
]
