"""Configuration for the time-cli application shell."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

MAX_LOG_MESSAGES = 15
BORDER_OFFSET = 2


@dataclass
class Config:
    """Layout constants and debug paths.

    There is no config file; the defaults are the application's behaviour.
    """

    title: str = "Time CLI"
    max_log_messages: int = MAX_LOG_MESSAGES
    border_offset: int = BORDER_OFFSET
    # The log panel sits this many rows above the bottom edge (clamped at 0).
    log_panel_rise: int = 50
    log_panel_x_ratio: float = 0.2
    query_timeout: float = 1.0
    write_log_path: str = field(
        default_factory=lambda: os.environ.get("TIME_CLI_WRITE_LOG", "")
    )
