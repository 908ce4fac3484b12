"""Keyboard input parsing for terminal applications.

Turns one complete raw input sequence into a ``Key`` value: a codepoint plus
modifier state. Handles the kitty keyboard protocol (CSI u), xterm modified
cursor/function keys, ``modifyOtherKeys``, legacy CSI/SS3 sequences and plain
control characters.

Named keys use the kitty functional-key codepoints, so a key parsed from a
legacy sequence compares equal to the same key reported by a kitty terminal.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

# ---------------------------------------------------------------------------
# Codepoints
# ---------------------------------------------------------------------------


class KeyCode:
    """Codepoints for non-printable keys."""

    tab = 9
    enter = 13
    escape = 27
    space = 32
    backspace = 127

    insert = 57348
    delete = 57349
    left = 57350
    right = 57351
    up = 57352
    down = 57353
    page_up = 57354
    page_down = 57355
    home = 57356
    end = 57357

    f1 = 57364
    f2 = 57365
    f3 = 57366
    f4 = 57367
    f5 = 57368
    f6 = 57369
    f7 = 57370
    f8 = 57371
    f9 = 57372
    f10 = 57373
    f11 = 57374
    f12 = 57375

    kp_enter = 57414


# ---------------------------------------------------------------------------
# Modifier bits (xterm / kitty encoding: param = 1 + bits)
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
    "super": 8,
    "hyper": 16,
    "meta": 32,
    "caps_lock": 64,
    "num_lock": 128,
}

LOCK_MASK = MODIFIERS["caps_lock"] | MODIFIERS["num_lock"]

# Kitty event types
KEY_PRESS = 1
KEY_REPEAT = 2
KEY_RELEASE = 3


@dataclass(frozen=True)
class Modifiers:
    shift: bool = False
    alt: bool = False
    ctrl: bool = False
    super: bool = False
    hyper: bool = False
    meta: bool = False
    caps_lock: bool = False
    num_lock: bool = False

    @classmethod
    def from_bits(cls, bits: int) -> Modifiers:
        return cls(**{name: bool(bits & bit) for name, bit in MODIFIERS.items()})

    @classmethod
    def from_param(cls, param: int) -> Modifiers:
        """Decode the ``1 + bits`` modifier parameter used in CSI sequences."""
        return cls.from_bits(max(param - 1, 0))

    @property
    def bits(self) -> int:
        return sum(bit for name, bit in MODIFIERS.items() if getattr(self, name))

    def same_as(self, other: Modifiers) -> bool:
        """Compare two modifier sets, ignoring caps lock and num lock."""
        return (self.bits & ~LOCK_MASK) == (other.bits & ~LOCK_MASK)


NO_MODIFIERS = Modifiers()


@dataclass(frozen=True)
class Key:
    """A single key event payload.

    ``codepoint`` is the unshifted key. ``text`` is what the key would
    insert, when it inserts anything.
    """

    codepoint: int
    text: Optional[str] = None
    shifted_codepoint: Optional[int] = None
    base_layout_codepoint: Optional[int] = None
    mods: Modifiers = field(default_factory=Modifiers)

    def matches(
        self,
        codepoint: int | str,
        *,
        ctrl: bool = False,
        shift: bool = False,
        alt: bool = False,
        super: bool = False,
    ) -> bool:
        """Return ``True`` if this key is *codepoint* with exactly these modifiers.

        Lock keys are ignored. The base-layout codepoint is accepted too, so
        shortcuts keep working on non-latin keyboard layouts.
        """
        if isinstance(codepoint, str):
            codepoint = ord(codepoint)
        wanted = Modifiers(ctrl=ctrl, shift=shift, alt=alt, super=super)
        if not self.mods.same_as(wanted):
            return False
        return codepoint in (self.codepoint, self.base_layout_codepoint)

    @property
    def unmodified(self) -> bool:
        return self.mods.same_as(NO_MODIFIERS)


@dataclass(frozen=True)
class ParsedKey:
    key: Key
    event_type: int = KEY_PRESS

    @property
    def is_release(self) -> bool:
        return self.event_type == KEY_RELEASE


# ---------------------------------------------------------------------------
# Sequence tables
# ---------------------------------------------------------------------------

LEGACY_KEY_SEQUENCES: dict[str, int] = {
    "\x1b[A": KeyCode.up,
    "\x1b[B": KeyCode.down,
    "\x1b[C": KeyCode.right,
    "\x1b[D": KeyCode.left,
    "\x1b[H": KeyCode.home,
    "\x1b[F": KeyCode.end,
    "\x1bOA": KeyCode.up,
    "\x1bOB": KeyCode.down,
    "\x1bOC": KeyCode.right,
    "\x1bOD": KeyCode.left,
    "\x1bOH": KeyCode.home,
    "\x1bOF": KeyCode.end,
    "\x1bOM": KeyCode.kp_enter,
    "\x1bOP": KeyCode.f1,
    "\x1bOQ": KeyCode.f2,
    "\x1bOR": KeyCode.f3,
    "\x1bOS": KeyCode.f4,
}

# CSI 1 ; <mod> <letter>
_LETTER_CODEPOINTS: dict[str, int] = {
    "A": KeyCode.up,
    "B": KeyCode.down,
    "C": KeyCode.right,
    "D": KeyCode.left,
    "H": KeyCode.home,
    "F": KeyCode.end,
    "P": KeyCode.f1,
    "Q": KeyCode.f2,
    "R": KeyCode.f3,
    "S": KeyCode.f4,
}

# CSI <number> ; <mod> ~
_TILDE_CODEPOINTS: dict[int, int] = {
    1: KeyCode.home,
    2: KeyCode.insert,
    3: KeyCode.delete,
    4: KeyCode.end,
    5: KeyCode.page_up,
    6: KeyCode.page_down,
    7: KeyCode.home,
    8: KeyCode.end,
    11: KeyCode.f1,
    12: KeyCode.f2,
    13: KeyCode.f3,
    14: KeyCode.f4,
    15: KeyCode.f5,
    17: KeyCode.f6,
    18: KeyCode.f7,
    19: KeyCode.f8,
    20: KeyCode.f9,
    21: KeyCode.f10,
    23: KeyCode.f11,
    24: KeyCode.f12,
}

# CSI u format: \x1b[<codepoint>(:<shifted>(:<base_layout>))?(;<modifier>(:<event_type>))?u
_KITTY_CSI_U_RE = re.compile(
    r"^\x1b\[(\d+)(?::(\d*)(?::(\d+))?)?(?:;(\d+)(?::(\d+))?)?u$"
)

# \x1b[1;<modifier>(:<event_type>)?<letter>
_CSI_LETTER_RE = re.compile(r"^\x1b\[1;(\d+)(?::(\d+))?([ABCDHFPQRS])$")

# \x1b[<number>(;<modifier>(:<event_type>)?)?~
_CSI_TILDE_RE = re.compile(r"^\x1b\[(\d+)(?:;(\d+)(?::(\d+))?)?~$")

# xterm modifyOtherKeys: \x1b[27;<modifier>;<keycode>~
_MODIFY_OTHER_KEYS_RE = re.compile(r"^\x1b\[27;(\d+);(\d+)~$")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _text_for(codepoint: int, mods: Modifiers) -> str | None:
    if mods.ctrl or mods.alt or mods.super:
        return None
    if codepoint >= 0xE000 and codepoint <= 0xF8FF:
        return None
    if codepoint > 0x10FFFF:
        return None
    ch = chr(codepoint)
    return ch if ch.isprintable() else None


def _parse_kitty(data: str) -> ParsedKey | None:
    m = _KITTY_CSI_U_RE.match(data)
    if m is None:
        return None
    codepoint = int(m.group(1))
    shifted = int(m.group(2)) if m.group(2) else None
    base_layout = int(m.group(3)) if m.group(3) else None
    mods = Modifiers.from_param(int(m.group(4)) if m.group(4) else 1)
    event_type = int(m.group(5)) if m.group(5) else KEY_PRESS

    text_cp = shifted if (mods.shift and shifted is not None) else codepoint
    key = Key(
        codepoint=codepoint,
        text=_text_for(text_cp, mods),
        shifted_codepoint=shifted,
        base_layout_codepoint=base_layout,
        mods=mods,
    )
    return ParsedKey(key, event_type)


def _parse_csi_modified(data: str) -> ParsedKey | None:
    m = _CSI_LETTER_RE.match(data)
    if m is not None:
        mods = Modifiers.from_param(int(m.group(1)))
        event_type = int(m.group(2)) if m.group(2) else KEY_PRESS
        return ParsedKey(Key(_LETTER_CODEPOINTS[m.group(3)], mods=mods), event_type)

    m = _MODIFY_OTHER_KEYS_RE.match(data)
    if m is not None:
        mods = Modifiers.from_param(int(m.group(1)))
        codepoint = int(m.group(2))
        return ParsedKey(Key(codepoint, text=_text_for(codepoint, mods), mods=mods))

    m = _CSI_TILDE_RE.match(data)
    if m is not None:
        codepoint = _TILDE_CODEPOINTS.get(int(m.group(1)))
        if codepoint is None:
            return None
        mods = Modifiers.from_param(int(m.group(2)) if m.group(2) else 1)
        event_type = int(m.group(3)) if m.group(3) else KEY_PRESS
        return ParsedKey(Key(codepoint, mods=mods), event_type)

    return None


def _parse_single(ch: str, mods: Modifiers) -> Key | None:
    """Parse a single character, optionally already carrying *mods* (alt)."""
    cp = ord(ch)
    if ch in ("\r", "\n"):
        return Key(KeyCode.enter, mods=mods)
    if ch == "\t":
        return Key(KeyCode.tab, mods=mods)
    if ch in ("\x7f", "\x08"):
        return Key(KeyCode.backspace, mods=mods)
    if ch == "\x1b":
        return Key(KeyCode.escape, mods=mods)
    if ch == "\x00":
        return Key(KeyCode.space, mods=Modifiers(ctrl=True, alt=mods.alt))
    if 1 <= cp <= 26:
        return Key(cp + ord("a") - 1, mods=Modifiers(ctrl=True, alt=mods.alt))
    if 28 <= cp <= 31:
        return Key(cp + ord("\\") - 28, mods=Modifiers(ctrl=True, alt=mods.alt))
    if ch == " ":
        return Key(KeyCode.space, text=None if mods.alt else " ", mods=mods)
    if not ch.isprintable():
        return None
    if ch.isupper():
        lower = ch.lower()
        shifted = Modifiers(shift=True, alt=mods.alt)
        return Key(
            ord(lower) if len(lower) == 1 else cp,
            text=None if mods.alt else ch,
            shifted_codepoint=cp,
            mods=shifted,
        )
    return Key(cp, text=None if mods.alt else ch, mods=mods)


def parse_key(data: str) -> ParsedKey | None:
    """Parse one complete raw input sequence into a key event.

    Returns ``None`` when *data* is not a keyboard sequence.
    """
    if not data:
        return None

    if data.startswith("\x1b["):
        parsed = _parse_kitty(data) or _parse_csi_modified(data)
        if parsed is not None:
            return parsed
        if data == "\x1b[Z":
            return ParsedKey(Key(KeyCode.tab, mods=Modifiers(shift=True)))

    codepoint = LEGACY_KEY_SEQUENCES.get(data)
    if codepoint is not None:
        return ParsedKey(Key(codepoint))

    if len(data) == 1:
        key = _parse_single(data, NO_MODIFIERS)
        return ParsedKey(key) if key is not None else None

    # ESC-prefixed alt key
    if len(data) == 2 and data[0] == "\x1b":
        key = _parse_single(data[1], Modifiers(alt=True))
        return ParsedKey(key) if key is not None else None

    return None
