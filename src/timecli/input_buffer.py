"""Buffer raw stdin chunks and emit complete input sequences.

Terminal input arrives in arbitrary chunks. An escape sequence (a mouse
report, a modified arrow key, a color report) can be split across two reads,
and a partial sequence must not be mistaken for an escape key press followed
by literal characters. ``InputBuffer`` holds incomplete sequences until the
rest arrives, or until a short timeout expires, and unwraps bracketed paste.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Literal

ESC = "\x1b"
BRACKETED_PASTE_START = "\x1b[200~"
BRACKETED_PASTE_END = "\x1b[201~"

SequenceStatus = Literal["complete", "incomplete"]


def _string_terminated(data: str) -> SequenceStatus:
    """OSC/DCS/APC sequences end with BEL or ST."""
    if data.endswith(f"{ESC}\\") or data.endswith("\x07"):
        return "complete"
    return "incomplete"


def sequence_status(data: str) -> SequenceStatus:
    """Classify an ESC-prefixed candidate as complete or still growing."""
    if len(data) == 1:
        return "incomplete"

    introducer = data[1]

    if introducer == "[":
        if data.startswith(f"{ESC}[M"):
            # X10 mouse: ESC [ M Cb Cx Cy
            return "complete" if len(data) >= 6 else "incomplete"
        if len(data) < 3:
            return "incomplete"
        # CSI ends at the first byte in 0x40..0x7E
        return "complete" if 0x40 <= ord(data[-1]) <= 0x7E else "incomplete"

    if introducer in ("]", "P", "_"):
        return _string_terminated(data)

    if introducer == "O":
        return "complete" if len(data) >= 3 else "incomplete"

    # ESC followed by one character: alt+key
    return "complete"


def split_sequences(buffer: str) -> tuple[list[str], str]:
    """Split *buffer* into complete sequences.

    Returns ``(sequences, remainder)`` where *remainder* is an incomplete
    escape sequence that needs more input.
    """
    sequences: list[str] = []
    pos = 0

    while pos < len(buffer):
        if buffer[pos] != ESC:
            sequences.append(buffer[pos])
            pos += 1
            continue

        end = pos + 1
        while True:
            if sequence_status(buffer[pos:end]) == "complete":
                sequences.append(buffer[pos:end])
                pos = end
                break
            if end >= len(buffer):
                return sequences, buffer[pos:]
            end += 1

    return sequences, ""


class InputBuffer:
    """Accumulates raw input and reports complete sequences and pastes.

    ``on_sequence`` receives one complete sequence per call. ``on_paste``
    receives the full content of a bracketed paste, markers stripped.
    """

    def __init__(
        self,
        on_sequence: Callable[[str], None],
        on_paste: Callable[[str], None],
        *,
        timeout: float = 0.01,
    ) -> None:
        self._on_sequence = on_sequence
        self._on_paste = on_paste
        self.timeout = timeout
        self._pending: str = ""
        self._paste: str | None = None
        self._timer: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> str:
        """Buffered input that does not yet form a complete sequence."""
        return self._pending

    @property
    def in_paste(self) -> bool:
        return self._paste is not None

    def feed(self, data: str) -> None:
        """Add a chunk of decoded stdin data."""
        self._cancel_timer()

        if self._paste is not None:
            self._paste += data
            self._finish_paste()
            return

        self._pending += data

        start = self._pending.find(BRACKETED_PASTE_START)
        if start != -1:
            before = self._pending[:start]
            rest = self._pending[start + len(BRACKETED_PASTE_START):]
            self._pending = ""
            sequences, remainder = split_sequences(before)
            for sequence in sequences:
                self._on_sequence(sequence)
            if remainder:
                self._on_sequence(remainder)
            self._paste = rest
            self._finish_paste()
            return

        sequences, self._pending = split_sequences(self._pending)
        for sequence in sequences:
            self._on_sequence(sequence)

        if self._pending:
            self._schedule_flush()

    def flush(self) -> None:
        """Emit whatever is buffered as a single sequence."""
        self._cancel_timer()
        if self._pending:
            pending, self._pending = self._pending, ""
            self._on_sequence(pending)

    def clear(self) -> None:
        self._cancel_timer()
        self._pending = ""
        self._paste = None

    # -- private ------------------------------------------------------------

    def _finish_paste(self) -> None:
        assert self._paste is not None
        end = self._paste.find(BRACKETED_PASTE_END)
        if end == -1:
            return
        content = self._paste[:end]
        remaining = self._paste[end + len(BRACKETED_PASTE_END):]
        self._paste = None
        self._on_paste(content)
        if remaining:
            self.feed(remaining)

    def _schedule_flush(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running event loop: nothing more can arrive in this chunk.
            self.flush()
            return
        self._timer = loop.call_later(self.timeout, self.flush)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
