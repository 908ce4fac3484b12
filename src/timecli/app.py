"""Event dispatch and the poll -> drain -> draw -> flush render loop."""

from __future__ import annotations

import logging

from timecli.config import Config
from timecli.events import (
    ColorReport,
    ColorScheme,
    Event,
    FocusIn,
    FocusOut,
    KeyPress,
    KeyRelease,
    MouseEvent,
    Paste,
    PasteEnd,
    PasteStart,
    Winsize,
)
from timecli.screens import draw_screen, draw_screen_indicator, transition
from timecli.state import AppState
from timecli.terminal import Terminal
from timecli.utils import visible_width
from timecli.window import Style, Surface, Window

logger = logging.getLogger(__name__)

# Banner column relative to the horizontal center
BANNER_CENTER_SHIFT = 7


def handle_event(state: AppState, event: Event, terminal: Terminal) -> None:
    """Apply one input event to *state*.

    Every event class has a branch; the ones the application has no use for
    land in the final no-op branch.
    """
    if isinstance(event, KeyPress):
        if event.key.matches("c", ctrl=True):
            state.should_quit = True
        else:
            transition(state, event.key)
    elif isinstance(event, MouseEvent):
        state.mouse = event.mouse
    elif isinstance(event, Winsize):
        terminal.resize(event)
    elif isinstance(
        event,
        (
            KeyRelease,
            FocusIn,
            FocusOut,
            PasteStart,
            PasteEnd,
            Paste,
            ColorReport,
            ColorScheme,
        ),
    ):
        logger.debug("unhandled %s", type(event).__name__)
    else:
        raise TypeError(f"unknown event type: {type(event).__name__}")


class App:
    """Owns the application state and drives the render cycle."""

    def __init__(self, terminal: Terminal, config: Config | None = None) -> None:
        self.terminal = terminal
        self.config = config or Config()
        self.state = AppState()

    async def run(self) -> None:
        """Run render cycles until quit is requested.

        Any failure ends the loop; the terminal is restored before it
        propagates.
        """
        try:
            self.terminal.start()
            self.terminal.enter_alt_screen()
            await self.terminal.query_terminal(self.config.query_timeout)
            self.terminal.set_mouse_mode(True)

            while not self.state.should_quit:
                await self.terminal.poll_event()

                while (event := self.terminal.try_event()) is not None:
                    self.update(event)

                surface = self.draw()

                writer = self.terminal.buffered_writer()
                self.terminal.render(surface, writer)
                writer.flush()
        finally:
            self._teardown()

    def update(self, event: Event) -> None:
        handle_event(self.state, event, self.terminal)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self) -> Surface:
        """Lay out and draw a complete frame."""
        surface = Surface(self.terminal.columns, self.terminal.rows)
        root = surface.window()
        root.clear()
        self.terminal.set_mouse_shape("default")

        log_win = self._log_window(root)
        # The indicator shares row 0 with the log heading when the panel is at the top
        free = log_win.x if log_win.y == 0 else None
        draw_screen_indicator(self.state.screen, root, max_width=free)
        draw_screen(self.state.screen, root, self.config)
        self._draw_banner(root)
        self._draw_logs(root, log_win)
        return surface

    def _draw_banner(self, root: Window) -> None:
        title = self.config.title
        banner = root.child(
            x_off=root.width // 2 - BANNER_CENTER_SHIFT,
            y_off=root.height // 2 + 1,
            width=visible_width(title),
            height=1,
        )

        style = Style()
        if banner.has_mouse(self.state.mouse) is not None:
            self.state.mouse = None
            self.terminal.set_mouse_shape("pointer")
            style = Style(reverse=True)

        banner.print_segment(title, style)

    def _log_window(self, root: Window) -> Window:
        return root.child(
            x_off=int(root.width * self.config.log_panel_x_ratio),
            y_off=max(0, root.height - self.config.log_panel_rise),
            width=root.width,
            height=self.config.max_log_messages,
        )

    def _draw_logs(self, root: Window, log_win: Window) -> None:
        limit = self.config.max_log_messages
        log_win.print_segment("Logs:", Style(bold=True))

        # Row 0 is the heading, so one fewer entry than the panel height fits
        for row, message in enumerate(self.state.logs.iterate_recent(limit - 1), start=1):
            log_win.child(y_off=row, width=root.width, height=1).print_segment(message)

    def _teardown(self) -> None:
        try:
            self.terminal.set_mouse_mode(False)
            self.terminal.exit_alt_screen()
        finally:
            self.terminal.stop()
            self.state.logs.clear()
