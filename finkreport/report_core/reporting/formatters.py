"""Console log formatting with optional ANSI colours."""
from __future__ import annotations

import logging
import os
from typing import IO, Optional

ANSI_RESET = "\033[0m"

LEVEL_STYLES = {
    logging.DEBUG: "\033[2m",
    logging.INFO: "",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}


def stream_supports_color(stream: Optional[IO[str]]) -> bool:
    """Return True when ``stream`` is a terminal and ``NO_COLOR`` is unset."""
    # https://no-color.org/
    if os.environ.get("NO_COLOR"):
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class ColoredFormatter(logging.Formatter):
    """Tint each console line by its level.

    Only the console handler uses this formatter; the run log file keeps
    plain text.
    """

    def __init__(self, fmt: str, use_color: bool = True) -> None:
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        style = LEVEL_STYLES.get(record.levelno, "") if self.use_color else ""
        if not style:
            return text
        return f"{style}{text}{ANSI_RESET}"
