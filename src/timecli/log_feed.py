"""Append-only feed of human-readable status messages."""

from __future__ import annotations

import logging
from typing import Iterator

logger = logging.getLogger(__name__)


class LogFeed:
    """Ordered store of status messages, displayed newest first.

    Storage is unbounded unless *capacity* is given, in which case the
    oldest entries are evicted once it is exceeded. Display is always
    bounded by the ``limit`` passed to :meth:`iterate_recent`.
    """

    def __init__(self, capacity: int | None = None) -> None:
        if capacity is not None and capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._entries: list[str] = []

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, message: str) -> None:
        self._entries.append(message)
        if self._capacity is not None and len(self._entries) > self._capacity:
            del self._entries[: len(self._entries) - self._capacity]
        logger.debug("log feed: %s", message)

    def log(self, fmt: str, *args: object) -> None:
        """Append a ``%``-formatted message."""
        self.append(fmt % args if args else fmt)

    def iterate_recent(self, limit: int) -> Iterator[str]:
        """Yield up to *limit* entries, most recently appended first."""
        count = min(max(limit, 0), len(self._entries))
        for i in range(count):
            yield self._entries[-1 - i]

    def clear(self) -> None:
        self._entries.clear()
