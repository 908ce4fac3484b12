"""Application state owned by the render loop."""

from __future__ import annotations

from dataclasses import dataclass, field

from timecli.events import Mouse
from timecli.log_feed import LogFeed
from timecli.screens import Screen


@dataclass
class AppState:
    screen: Screen = Screen.MAIN_MENU
    logs: LogFeed = field(default_factory=LogFeed)
    # Last mouse report, cleared by the first window that claims it
    mouse: Mouse | None = None
    should_quit: bool = False
