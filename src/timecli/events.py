"""Input event types and decoding of raw terminal sequences into events."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import Literal, Optional

from timecli.keys import Key, Modifiers, parse_key


# ============================================================================
# Mouse
# ============================================================================


class MouseButton(enum.Enum):
    LEFT = "left"
    MIDDLE = "middle"
    RIGHT = "right"
    NONE = "none"
    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"
    WHEEL_LEFT = "wheel_left"
    WHEEL_RIGHT = "wheel_right"
    BUTTON_8 = "button_8"
    BUTTON_9 = "button_9"
    BUTTON_10 = "button_10"
    BUTTON_11 = "button_11"


class MouseEventType(enum.Enum):
    PRESS = "press"
    RELEASE = "release"
    MOTION = "motion"
    DRAG = "drag"


_BUTTONS: dict[int, MouseButton] = {
    0: MouseButton.LEFT,
    1: MouseButton.MIDDLE,
    2: MouseButton.RIGHT,
    3: MouseButton.NONE,
    64: MouseButton.WHEEL_UP,
    65: MouseButton.WHEEL_DOWN,
    66: MouseButton.WHEEL_LEFT,
    67: MouseButton.WHEEL_RIGHT,
    128: MouseButton.BUTTON_8,
    129: MouseButton.BUTTON_9,
    130: MouseButton.BUTTON_10,
    131: MouseButton.BUTTON_11,
}

_MOUSE_SHIFT = 4
_MOUSE_ALT = 8
_MOUSE_CTRL = 16
_MOUSE_MOTION = 32
_MOUSE_BUTTON_MASK = 0b1100_0011


@dataclass(frozen=True)
class Mouse:
    """A mouse report in 0-based cell coordinates."""

    col: int
    row: int
    button: MouseButton = MouseButton.NONE
    mods: Modifiers = field(default_factory=Modifiers)
    type: MouseEventType = MouseEventType.MOTION


# ============================================================================
# Event Types
# ============================================================================


@dataclass(frozen=True)
class KeyPress:
    key: Key


@dataclass(frozen=True)
class KeyRelease:
    key: Key


@dataclass(frozen=True)
class MouseEvent:
    mouse: Mouse


@dataclass(frozen=True)
class FocusIn:
    pass


@dataclass(frozen=True)
class FocusOut:
    pass


@dataclass(frozen=True)
class PasteStart:
    pass


@dataclass(frozen=True)
class PasteEnd:
    pass


@dataclass(frozen=True)
class Paste:
    text: str


ColorKind = Literal["fg", "bg", "cursor", "index"]


@dataclass(frozen=True)
class ColorReport:
    kind: ColorKind
    rgb: tuple[int, int, int]
    index: Optional[int] = None  # palette index, only for kind == "index"


@dataclass(frozen=True)
class ColorScheme:
    scheme: Literal["dark", "light"]


@dataclass(frozen=True)
class Winsize:
    rows: int
    cols: int
    x_pixel: int = 0
    y_pixel: int = 0


Event = (
    KeyPress
    | KeyRelease
    | MouseEvent
    | FocusIn
    | FocusOut
    | PasteStart
    | PasteEnd
    | Paste
    | ColorReport
    | ColorScheme
    | Winsize
)


# ============================================================================
# Decoding
# ============================================================================

_SGR_MOUSE_RE = re.compile(r"^\x1b\[<(\d+);(\d+);(\d+)([Mm])$")

# OSC 4;<index>;rgb:... / OSC 10|11|12;rgb:...  terminated by BEL or ST
_OSC_COLOR_RE = re.compile(
    r"^\x1b\](4;(\d+)|10|11|12);rgb:([0-9a-fA-F]{1,4})/([0-9a-fA-F]{1,4})/([0-9a-fA-F]{1,4})(?:\x07|\x1b\\)$"
)

_COLOR_SCHEME_RE = re.compile(r"^\x1b\[\?997;([12])n$")

_OSC_KINDS: dict[str, ColorKind] = {"10": "fg", "11": "bg", "12": "cursor"}


def parse_mouse(data: str) -> Mouse | None:
    """Parse an SGR (mode 1006) mouse report."""
    m = _SGR_MOUSE_RE.match(data)
    if m is None:
        return None
    code = int(m.group(1))
    col = int(m.group(2)) - 1
    row = int(m.group(3)) - 1
    released = m.group(4) == "m"

    button = _BUTTONS.get(code & _MOUSE_BUTTON_MASK)
    if button is None:
        return None
    mods = Modifiers(
        shift=bool(code & _MOUSE_SHIFT),
        alt=bool(code & _MOUSE_ALT),
        ctrl=bool(code & _MOUSE_CTRL),
    )

    if code & _MOUSE_MOTION:
        kind = MouseEventType.MOTION if button is MouseButton.NONE else MouseEventType.DRAG
    elif released:
        kind = MouseEventType.RELEASE
    else:
        kind = MouseEventType.PRESS

    return Mouse(col=max(col, 0), row=max(row, 0), button=button, mods=mods, type=kind)


def _scale_channel(hex_digits: str) -> int:
    """Scale a 1-4 digit hex color channel to 8 bits."""
    max_value = (1 << (4 * len(hex_digits))) - 1
    return round(int(hex_digits, 16) * 255 / max_value)


def parse_color_report(data: str) -> ColorReport | None:
    m = _OSC_COLOR_RE.match(data)
    if m is None:
        return None
    rgb = (
        _scale_channel(m.group(3)),
        _scale_channel(m.group(4)),
        _scale_channel(m.group(5)),
    )
    if m.group(2) is not None:
        return ColorReport(kind="index", rgb=rgb, index=int(m.group(2)))
    return ColorReport(kind=_OSC_KINDS[m.group(1)], rgb=rgb)


def decode(data: str) -> Event | None:
    """Turn one complete input sequence into an event.

    Paste content never reaches this function; the input buffer reports it
    separately. Returns ``None`` for sequences with no meaning to the
    application.
    """
    if data == "\x1b[I":
        return FocusIn()
    if data == "\x1b[O":
        return FocusOut()

    mouse = parse_mouse(data)
    if mouse is not None:
        return MouseEvent(mouse)

    if data.startswith("\x1b]"):
        return parse_color_report(data)

    m = _COLOR_SCHEME_RE.match(data)
    if m is not None:
        return ColorScheme("dark" if m.group(1) == "1" else "light")

    parsed = parse_key(data)
    if parsed is None:
        return None
    if parsed.is_release:
        return KeyRelease(parsed.key)
    return KeyPress(parsed.key)
