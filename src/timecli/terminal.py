"""Terminal abstraction for full-screen raw-mode interaction.

Provides a ``Terminal`` protocol (the narrow interface the render loop
consumes) and a concrete ``ProcessTerminal`` that manages raw mode, the
alternate screen, bracketed paste, focus and mouse reporting, the kitty
keyboard protocol, mouse-pointer shapes and resize detection via ANSI escape
sequences on ``sys.stdin``/``sys.stdout``.

Input is read from an asyncio reader on stdin, decoded into events and
queued. ``poll_event`` is the only place a caller waits.
"""

from __future__ import annotations

import asyncio
import codecs
import collections
import fcntl
import logging
import os
import re
import signal
import struct
import sys
import termios
import tty
from typing import Callable, Protocol, TextIO

from timecli.events import Event, Paste, PasteEnd, PasteStart, Winsize, decode
from timecli.input_buffer import InputBuffer
from timecli.window import Surface

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# ANSI escape constants
# ---------------------------------------------------------------------------

_ALT_SCREEN_ENABLE = "\x1b[?1049h"
_ALT_SCREEN_DISABLE = "\x1b[?1049l"

_BRACKETED_PASTE_ENABLE = "\x1b[?2004h"
_BRACKETED_PASTE_DISABLE = "\x1b[?2004l"

_FOCUS_ENABLE = "\x1b[?1004h"
_FOCUS_DISABLE = "\x1b[?1004l"

# Any-event tracking plus SGR coordinates
_MOUSE_ENABLE = "\x1b[?1003h\x1b[?1006h"
_MOUSE_DISABLE = "\x1b[?1006l\x1b[?1003l"

# Unsolicited light/dark notifications
_COLOR_SCHEME_UPDATES_ENABLE = "\x1b[?2031h"
_COLOR_SCHEME_UPDATES_DISABLE = "\x1b[?2031l"

_KITTY_QUERY = "\x1b[?u"
# Flags 1 (disambiguate) | 2 (report event types)
_KITTY_ENABLE = "\x1b[>3u"
_KITTY_DISABLE = "\x1b[<u"
_COLOR_SCHEME_QUERY = "\x1b[?996n"
_FG_QUERY = "\x1b]10;?\x1b\\"
_BG_QUERY = "\x1b]11;?\x1b\\"
# Primary device attributes: every terminal answers, so it ends the query
_DA1_QUERY = "\x1b[c"

_KITTY_RESPONSE_RE = re.compile(r"^\x1b\[\?(\d+)u$")
_DA1_RESPONSE_RE = re.compile(r"^\x1b\[\?[\d;]*c$")

_HIDE_CURSOR = "\x1b[?25l"
_SHOW_CURSOR = "\x1b[?25h"
_CLEAR_SCREEN = "\x1b[2J\x1b[H"

_MOUSE_SHAPE_FMT = "\x1b]22;{}\x1b\\"

MouseShape = str  # "default", "pointer", "text", "crosshair", "wait", ...


class TerminalError(RuntimeError):
    """The controlling terminal could not be set up or queried."""


# ---------------------------------------------------------------------------
# Buffered frame writer
# ---------------------------------------------------------------------------


class BufferedWriter:
    """Collects a frame's output and hands it to *sink* in one write."""

    def __init__(self, sink: Callable[[str], None]) -> None:
        self._sink = sink
        self._chunks: list[str] = []

    def write(self, data: str) -> None:
        self._chunks.append(data)

    @property
    def pending(self) -> str:
        return "".join(self._chunks)

    def flush(self) -> None:
        if not self._chunks:
            return
        data = "".join(self._chunks)
        self._chunks.clear()
        self._sink(data)


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations consumed by the render loop."""

    @property
    def columns(self) -> int: ...

    @property
    def rows(self) -> int: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...

    async def poll_event(self) -> None: ...

    def try_event(self) -> Event | None: ...

    def resize(self, winsize: Winsize) -> None: ...

    def enter_alt_screen(self) -> None: ...

    def exit_alt_screen(self) -> None: ...

    async def query_terminal(self, timeout: float = 1.0) -> None: ...

    def set_mouse_mode(self, enabled: bool) -> None: ...

    def set_mouse_shape(self, shape: MouseShape) -> None: ...

    def buffered_writer(self) -> BufferedWriter: ...

    def render(self, surface: Surface, writer: BufferedWriter) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal backed by ``sys.stdin``/``sys.stdout``.

    Manages raw mode via :mod:`tty` and :mod:`termios`, registers an asyncio
    reader on stdin and a ``SIGWINCH`` handler on the running loop. ``start``
    and ``stop`` must be called from inside that loop.
    """

    def __init__(
        self,
        write_log_path: str = "",
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._write_log_path = write_log_path
        self._original_termios: list | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._input = InputBuffer(self._on_sequence, self._on_paste)
        # Multi-byte characters may be split across reads
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        self._events: collections.deque[Event] = collections.deque()
        self._ready = asyncio.Event()
        self._failure: BaseException | None = None
        self._query_done: asyncio.Event | None = None

        self._winsize = Winsize(rows=24, cols=80)
        self._kitty_active = False
        self._reporting = False
        self._alt_screen = False
        self._mouse_mode = False
        self._mouse_shape: MouseShape = "default"
        self._rendered_mouse_shape: MouseShape = "default"

    # -- properties ---------------------------------------------------------

    @property
    def columns(self) -> int:
        return self._winsize.cols

    @property
    def rows(self) -> int:
        return self._winsize.rows

    @property
    def kitty_protocol_active(self) -> bool:
        return self._kitty_active

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Enter raw mode and begin reading input."""
        try:
            in_fd = self._stdin.fileno()
            out_fd = self._stdout.fileno()
        except (AttributeError, ValueError, OSError) as e:
            raise TerminalError(f"stdin/stdout have no file descriptor: {e}") from e
        if not os.isatty(in_fd) or not os.isatty(out_fd):
            raise TerminalError("stdin and stdout must be attached to a terminal")

        try:
            self._original_termios = termios.tcgetattr(in_fd)
            tty.setraw(in_fd)
        except termios.error as e:
            raise TerminalError(f"cannot enter raw mode: {e}") from e

        self._loop = asyncio.get_running_loop()
        self._loop.add_reader(in_fd, self._on_stdin_readable)
        self._loop.add_signal_handler(signal.SIGWINCH, self._on_sigwinch)

        self._reporting = True
        self.write(_BRACKETED_PASTE_ENABLE + _FOCUS_ENABLE + _COLOR_SCHEME_UPDATES_ENABLE)

        # The first frame is sized from a real winsize event.
        self._push(self._read_winsize())
        logger.debug("terminal started (%dx%d)", self.columns, self.rows)

    def stop(self) -> None:
        """Restore the terminal to the state found by :meth:`start`.

        Safe after a partial or failed ``start`` and safe to call twice. Raw
        mode is restored even when writing the reset sequences fails.
        """
        out: list[str] = []
        if self._reporting:
            out += [_COLOR_SCHEME_UPDATES_DISABLE, _FOCUS_DISABLE, _BRACKETED_PASTE_DISABLE]
            self._reporting = False
        if self._mouse_mode:
            out.append(_MOUSE_DISABLE)
            self._mouse_mode = False
        if self._kitty_active:
            out.append(_KITTY_DISABLE)
            self._kitty_active = False
        if self._rendered_mouse_shape != "default":
            out.append(_MOUSE_SHAPE_FMT.format("default"))
            self._rendered_mouse_shape = "default"
        if self._alt_screen:
            out.append(_SHOW_CURSOR + _ALT_SCREEN_DISABLE)
            self._alt_screen = False

        try:
            if out:
                self.write("".join(out))
        finally:
            self._input.clear()

            if self._loop is not None:
                loop, self._loop = self._loop, None
                loop.remove_reader(self._stdin.fileno())
                loop.remove_signal_handler(signal.SIGWINCH)

            if self._original_termios is not None:
                attrs, self._original_termios = self._original_termios, None
                termios.tcsetattr(self._stdin.fileno(), termios.TCSADRAIN, attrs)
            logger.debug("terminal stopped")

    # -- events -------------------------------------------------------------

    async def poll_event(self) -> None:
        """Wait until at least one event is queued.

        Re-raises any failure hit while reading input or the window size.
        """
        while not self._events:
            if self._failure is not None:
                raise self._failure
            self._ready.clear()
            await self._ready.wait()

    def try_event(self) -> Event | None:
        if not self._events:
            return None
        return self._events.popleft()

    def resize(self, winsize: Winsize) -> None:
        self._winsize = winsize
        logger.debug("resized to %dx%d", winsize.cols, winsize.rows)

    # -- screen modes -------------------------------------------------------

    def enter_alt_screen(self) -> None:
        self.write(_ALT_SCREEN_ENABLE + _HIDE_CURSOR + _CLEAR_SCREEN)
        self._alt_screen = True

    def exit_alt_screen(self) -> None:
        if not self._alt_screen:
            return
        self.write(_SHOW_CURSOR + _ALT_SCREEN_DISABLE)
        self._alt_screen = False

    async def query_terminal(self, timeout: float = 1.0) -> None:
        """Ask for kitty keyboard support, color scheme and default colors.

        Returns when the device-attributes answer arrives or after *timeout*
        seconds. Answers other than kitty's and DA1 surface as events.
        """
        self._query_done = asyncio.Event()
        self.write(_KITTY_QUERY + _COLOR_SCHEME_QUERY + _FG_QUERY + _BG_QUERY + _DA1_QUERY)
        try:
            await asyncio.wait_for(self._query_done.wait(), timeout)
        except asyncio.TimeoutError:
            logger.warning("terminal did not answer capability query within %.1fs", timeout)
        finally:
            self._query_done = None

    def set_mouse_mode(self, enabled: bool) -> None:
        if enabled == self._mouse_mode:
            return
        self.write(_MOUSE_ENABLE if enabled else _MOUSE_DISABLE)
        self._mouse_mode = enabled

    def set_mouse_shape(self, shape: MouseShape) -> None:
        """Request a pointer shape; it is sent with the next rendered frame."""
        self._mouse_shape = shape

    # -- output -------------------------------------------------------------

    def buffered_writer(self) -> BufferedWriter:
        return BufferedWriter(self.write)

    def render(self, surface: Surface, writer: BufferedWriter) -> None:
        writer.write(_HIDE_CURSOR)
        writer.write(surface.encode())
        if self._mouse_shape != self._rendered_mouse_shape:
            writer.write(_MOUSE_SHAPE_FMT.format(self._mouse_shape))
            self._rendered_mouse_shape = self._mouse_shape

    def write(self, data: str) -> None:
        """Write *data* to the terminal and optionally to the write log."""
        self._stdout.write(data)
        self._stdout.flush()

        if self._write_log_path:
            try:
                with open(self._write_log_path, "a") as f:
                    f.write(data)
            except OSError:
                pass

    # -- private: input -----------------------------------------------------

    def _push(self, event: Event) -> None:
        self._events.append(event)
        self._ready.set()

    def _fail(self, error: BaseException) -> None:
        # Loop callbacks cannot raise into the render loop; poll_event does.
        logger.error("terminal failure: %s", error)
        self._failure = error
        self._ready.set()

    def _on_stdin_readable(self) -> None:
        try:
            raw = os.read(self._stdin.fileno(), 4096)
        except OSError as e:
            self._fail(e)
            return
        if not raw:
            self._fail(TerminalError("stdin closed"))
            return
        self._input.feed(self._decoder.decode(raw))

    def _on_sequence(self, data: str) -> None:
        if _KITTY_RESPONSE_RE.match(data):
            self._kitty_active = True
            self.write(_KITTY_ENABLE)
            logger.debug("kitty keyboard protocol enabled")
            return

        if _DA1_RESPONSE_RE.match(data):
            if self._query_done is not None:
                self._query_done.set()
            return

        event = decode(data)
        if event is None:
            logger.debug("ignoring unrecognised input %r", data)
            return
        self._push(event)

    def _on_paste(self, text: str) -> None:
        self._push(PasteStart())
        self._push(Paste(text))
        self._push(PasteEnd())

    # -- private: resize ----------------------------------------------------

    def _on_sigwinch(self) -> None:
        try:
            self._push(self._read_winsize())
        except TerminalError as e:
            self._fail(e)

    def _read_winsize(self) -> Winsize:
        try:
            packed = fcntl.ioctl(self._stdout.fileno(), termios.TIOCGWINSZ, b"\0" * 8)
        except OSError as e:
            raise TerminalError(f"cannot read window size: {e}") from e
        rows, cols, x_pixel, y_pixel = struct.unpack("HHHH", packed)
        return Winsize(rows=rows, cols=cols, x_pixel=x_pixel, y_pixel=y_pixel)
