"""time-cli: full-screen terminal shell with an event-driven render loop."""

import logging

__version__ = "0.1.0"

# Never let library logging reach the render surface.
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Events
from timecli.events import (  # noqa: E402
    ColorReport,
    ColorScheme,
    Event,
    FocusIn,
    FocusOut,
    KeyPress,
    KeyRelease,
    Mouse,
    MouseButton,
    MouseEvent,
    MouseEventType,
    Paste,
    PasteEnd,
    PasteStart,
    Winsize,
    decode,
)

# Keyboard input handling
from timecli.keys import Key, KeyCode, Modifiers, parse_key  # noqa: E402

# Core
from timecli.app import App, handle_event  # noqa: E402
from timecli.config import Config  # noqa: E402
from timecli.log_feed import LogFeed  # noqa: E402
from timecli.screens import Screen  # noqa: E402
from timecli.state import AppState  # noqa: E402

# Terminal interface and implementation
from timecli.terminal import (  # noqa: E402
    BufferedWriter,
    ProcessTerminal,
    Terminal,
    TerminalError,
)

# Window composition
from timecli.window import (  # noqa: E402
    Rect,
    Region,
    Style,
    Surface,
    Window,
    hit_test,
    resolve,
)

__all__ = [
    "__version__",
    # Events
    "ColorReport",
    "ColorScheme",
    "Event",
    "FocusIn",
    "FocusOut",
    "KeyPress",
    "KeyRelease",
    "Mouse",
    "MouseButton",
    "MouseEvent",
    "MouseEventType",
    "Paste",
    "PasteEnd",
    "PasteStart",
    "Winsize",
    "decode",
    # Keys
    "Key",
    "KeyCode",
    "Modifiers",
    "parse_key",
    # Core
    "App",
    "AppState",
    "Config",
    "LogFeed",
    "Screen",
    "handle_event",
    # Terminal
    "BufferedWriter",
    "ProcessTerminal",
    "Terminal",
    "TerminalError",
    # Window composition
    "Rect",
    "Region",
    "Style",
    "Surface",
    "Window",
    "hit_test",
    "resolve",
]
