"""Tests for timecli.screens -- transitions and per-screen drawing."""

from __future__ import annotations

import pytest

from timecli.config import Config
from timecli.keys import Key, Modifiers
from timecli.screens import (
    MAIN_MENU_OPTIONS,
    SCREEN_DRAWERS,
    Screen,
    draw_screen,
    draw_screen_indicator,
    screen_for_key,
    transition,
)
from timecli.state import AppState
from timecli.window import Surface


def press(ch: str, **mods: bool) -> Key:
    return Key(ord(ch), text=None if mods else ch, mods=Modifiers(**mods))


class TestScreen:
    def test_initial_screen(self) -> None:
        assert AppState().screen is Screen.MAIN_MENU

    def test_labels(self) -> None:
        assert str(Screen.MAIN_MENU) == "MainMenu"
        assert str(Screen.NEW_TASK) == "NewTask"
        assert str(Screen.CALENDAR) == "Calendar"

    def test_every_screen_has_a_drawer(self) -> None:
        assert set(SCREEN_DRAWERS) == set(Screen)


class TestScreenForKey:
    @pytest.mark.parametrize(
        "ch,screen",
        [("n", Screen.NEW_TASK), ("c", Screen.CALENDAR), ("m", Screen.MAIN_MENU)],
    )
    def test_bound_letters(self, ch: str, screen: Screen) -> None:
        assert screen_for_key(press(ch)) is screen

    def test_unbound_letter(self) -> None:
        assert screen_for_key(press("x")) is None

    @pytest.mark.parametrize("mods", [{"ctrl": True}, {"alt": True}, {"shift": True}])
    def test_modified_letters_are_not_bound(self, mods: dict[str, bool]) -> None:
        assert screen_for_key(press("c", **mods)) is None


class TestTransition:
    def test_switch_logs_from_and_to(self) -> None:
        state = AppState()
        assert transition(state, press("c"))
        assert state.screen is Screen.CALENDAR
        assert list(state.logs.iterate_recent(5)) == ["Switched from MainMenu to Calendar"]

    def test_unbound_key_leaves_state_alone(self) -> None:
        state = AppState()
        assert not transition(state, press("q"))
        assert state.screen is Screen.MAIN_MENU
        assert len(state.logs) == 0

    def test_switch_to_current_screen_still_logs(self) -> None:
        state = AppState()
        transition(state, press("m"))
        assert state.screen is Screen.MAIN_MENU
        assert list(state.logs.iterate_recent(5)) == ["Switched from MainMenu to MainMenu"]

    @pytest.mark.parametrize(
        "keys,expected",
        [
            ("", Screen.MAIN_MENU),
            ("xyz", Screen.MAIN_MENU),
            ("n", Screen.NEW_TASK),
            ("nc", Screen.CALENDAR),
            ("ncm", Screen.MAIN_MENU),
            ("cxq", Screen.CALENDAR),
            ("mnnxc", Screen.CALENDAR),
        ],
    )
    def test_replay_ends_on_last_valid_target(self, keys: str, expected: Screen) -> None:
        state = AppState()
        for ch in keys:
            transition(state, press(ch))
        assert state.screen is expected


class TestDrawing:
    def test_main_menu_options_bottom_up(self) -> None:
        surface = Surface(80, 24)
        draw_screen(Screen.MAIN_MENU, surface.window(), Config())
        assert surface.row_text(22)[2:13] == MAIN_MENU_OPTIONS[0]
        assert surface.row_text(21)[2:12] == MAIN_MENU_OPTIONS[1]

    @pytest.mark.parametrize("screen", [Screen.NEW_TASK, Screen.CALENDAR])
    def test_placeholder_screens_draw_nothing(self, screen: Screen) -> None:
        surface = Surface(80, 24)
        draw_screen(screen, surface.window(), Config())
        assert all(surface.row_text(row).strip() == "" for row in range(24))

    def test_main_menu_on_tiny_surface(self) -> None:
        surface = Surface(5, 1)
        draw_screen(Screen.MAIN_MENU, surface.window(), Config())

    def test_indicator(self) -> None:
        surface = Surface(80, 24)
        assert draw_screen_indicator(Screen.CALENDAR, surface.window())
        assert surface.row_text(0).startswith("Calendar ")

    def test_indicator_needs_a_separating_column(self) -> None:
        surface = Surface(80, 24)
        assert not draw_screen_indicator(Screen.CALENDAR, surface.window(), max_width=8)
        assert surface.row_text(0).strip() == ""
        assert draw_screen_indicator(Screen.CALENDAR, surface.window(), max_width=9)
