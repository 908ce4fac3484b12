"""Tests for timecli.events -- decoding sequences into events."""

from __future__ import annotations

import pytest

from timecli.events import (
    ColorReport,
    ColorScheme,
    FocusIn,
    FocusOut,
    KeyPress,
    KeyRelease,
    MouseButton,
    MouseEvent,
    MouseEventType,
    decode,
    parse_color_report,
    parse_mouse,
)
from timecli.keys import Modifiers


class TestParseMouse:
    def test_left_press_is_zero_based(self) -> None:
        mouse = parse_mouse("\x1b[<0;6;23M")
        assert mouse is not None
        assert (mouse.col, mouse.row) == (5, 22)
        assert mouse.button is MouseButton.LEFT
        assert mouse.type is MouseEventType.PRESS

    def test_release(self) -> None:
        mouse = parse_mouse("\x1b[<0;1;1m")
        assert mouse is not None
        assert mouse.type is MouseEventType.RELEASE

    def test_motion_without_button(self) -> None:
        mouse = parse_mouse("\x1b[<35;10;5M")
        assert mouse is not None
        assert mouse.button is MouseButton.NONE
        assert mouse.type is MouseEventType.MOTION

    def test_drag(self) -> None:
        mouse = parse_mouse("\x1b[<32;10;5M")
        assert mouse is not None
        assert mouse.button is MouseButton.LEFT
        assert mouse.type is MouseEventType.DRAG

    @pytest.mark.parametrize(
        "code,button",
        [
            (1, MouseButton.MIDDLE),
            (2, MouseButton.RIGHT),
            (64, MouseButton.WHEEL_UP),
            (65, MouseButton.WHEEL_DOWN),
            (128, MouseButton.BUTTON_8),
        ],
    )
    def test_buttons(self, code: int, button: MouseButton) -> None:
        mouse = parse_mouse(f"\x1b[<{code};1;1M")
        assert mouse is not None
        assert mouse.button is button

    def test_modifiers(self) -> None:
        mouse = parse_mouse("\x1b[<28;1;1M")  # shift + alt + ctrl
        assert mouse is not None
        assert mouse.mods == Modifiers(shift=True, alt=True, ctrl=True)
        assert mouse.button is MouseButton.LEFT

    def test_not_mouse(self) -> None:
        assert parse_mouse("\x1b[A") is None


class TestParseColorReport:
    def test_background_bel_terminated(self) -> None:
        report = parse_color_report("\x1b]11;rgb:ffff/0000/8080\x07")
        assert report == ColorReport(kind="bg", rgb=(255, 0, 128))

    def test_foreground_st_terminated(self) -> None:
        report = parse_color_report("\x1b]10;rgb:ff/ff/ff\x1b\\")
        assert report == ColorReport(kind="fg", rgb=(255, 255, 255))

    def test_palette_index(self) -> None:
        report = parse_color_report("\x1b]4;3;rgb:0/f/0\x07")
        assert report == ColorReport(kind="index", rgb=(0, 255, 0), index=3)

    def test_malformed(self) -> None:
        assert parse_color_report("\x1b]11;?\x07") is None


class TestDecode:
    def test_focus(self) -> None:
        assert decode("\x1b[I") == FocusIn()
        assert decode("\x1b[O") == FocusOut()

    def test_mouse(self) -> None:
        event = decode("\x1b[<0;6;23M")
        assert isinstance(event, MouseEvent)
        assert event.mouse.col == 5

    def test_color_scheme(self) -> None:
        assert decode("\x1b[?997;1n") == ColorScheme("dark")
        assert decode("\x1b[?997;2n") == ColorScheme("light")

    def test_color_report(self) -> None:
        assert isinstance(decode("\x1b]11;rgb:0000/0000/0000\x1b\\"), ColorReport)

    def test_key_press(self) -> None:
        event = decode("c")
        assert isinstance(event, KeyPress)
        assert event.key.matches("c")

    def test_key_release(self) -> None:
        event = decode("\x1b[99;1:3u")
        assert isinstance(event, KeyRelease)
        assert event.key.matches("c")

    def test_unknown_osc(self) -> None:
        assert decode("\x1b]52;c;aGVsbG8=\x07") is None

    def test_unknown_csi(self) -> None:
        assert decode("\x1b[?1;2c") is None
