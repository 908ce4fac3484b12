"""Named application screens, key-driven transitions and per-screen drawing."""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Callable

from timecli.config import Config
from timecli.keys import Key
from timecli.window import Style, Window

if TYPE_CHECKING:
    from timecli.state import AppState

logger = logging.getLogger(__name__)


class Screen(enum.Enum):
    MAIN_MENU = "MainMenu"
    NEW_TASK = "NewTask"
    CALENDAR = "Calendar"

    def __str__(self) -> str:
        return self.value


# Unmodified key -> target screen. Plain "c" shares its letter with the
# ctrl+c quit binding; only the modifier tells them apart.
SCREEN_KEYS: dict[str, Screen] = {
    "n": Screen.NEW_TASK,
    "c": Screen.CALENDAR,
    "m": Screen.MAIN_MENU,
}

MAIN_MENU_OPTIONS: tuple[str, ...] = (
    "(N)ew entry",
    "(C)alendar",
)


def screen_for_key(key: Key) -> Screen | None:
    """Return the screen bound to *key*, if it is an unmodified bound letter."""
    for letter, screen in SCREEN_KEYS.items():
        if key.matches(letter):
            return screen
    return None


def transition(state: AppState, key: Key) -> bool:
    """Switch screens for a bound key press, recording the switch in the log feed.

    Switching to the screen that is already current still counts and is
    still logged.
    """
    target = screen_for_key(key)
    if target is None:
        return False
    state.logs.log("Switched from %s to %s", state.screen, target)
    logger.info("screen %s -> %s", state.screen, target)
    state.screen = target
    return True


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------


def draw_main_menu(root: Window, config: Config) -> None:
    """Options listed bottom-up from just above the bottom border."""
    start_row = root.height - config.border_offset
    for i, option in enumerate(MAIN_MENU_OPTIONS):
        option_win = root.child(
            x_off=config.border_offset,
            y_off=start_row - i,
            width=len(option),
            height=1,
        )
        option_win.print_segment(option)


def draw_new_task(root: Window, config: Config) -> None:
    pass


def draw_calendar(root: Window, config: Config) -> None:
    pass


SCREEN_DRAWERS: dict[Screen, Callable[[Window, Config], None]] = {
    Screen.MAIN_MENU: draw_main_menu,
    Screen.NEW_TASK: draw_new_task,
    Screen.CALENDAR: draw_calendar,
}


def draw_screen(screen: Screen, root: Window, config: Config) -> None:
    SCREEN_DRAWERS[screen](root, config)


def draw_screen_indicator(screen: Screen, root: Window, max_width: int | None = None) -> bool:
    """Name of the current screen in the top-left corner.

    Skipped when the label plus one separating column does not fit in
    *max_width*. Returns whether it was drawn.
    """
    label = str(screen)
    if max_width is not None and len(label) >= max_width:
        return False
    root.child(width=len(label), height=1).print_segment(label, Style(dim=True))
    return True
