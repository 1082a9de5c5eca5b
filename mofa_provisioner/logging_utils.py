from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOG_NAME = "mofa-provision.log"

_RESET = "\033[0m"
_MARKERS = {
    logging.DEBUG: ("\033[0;34m", "·"),
    logging.INFO: ("\033[0;34m", "ℹ"),
    logging.WARNING: ("\033[1;33m", "⚠"),
    logging.ERROR: ("\033[0;31m", "✗"),
    logging.CRITICAL: ("\033[0;31m", "✗"),
}
SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")
_MARKERS[SUCCESS] = ("\033[0;32m", "✓")


class StatusFormatter(logging.Formatter):
    """Console formatter: one severity marker per line, colored on a tty."""

    def __init__(self, *, color: bool) -> None:
        super().__init__(fmt="%(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        color, marker = _MARKERS.get(record.levelno, ("", "ℹ"))
        if self.color:
            return f"{color}{marker}{_RESET} {msg}"
        return f"{marker} {msg}"


def success(logger: logging.Logger, msg: str, *args: object) -> None:
    logger.log(SUCCESS, msg, *args)


def configure_logging(
    log_path: str = DEFAULT_LOG_NAME,
    level: int = logging.INFO,
    also_console: bool = True,
    color: Optional[bool] = None,
) -> str:
    """Configure logging.

    Every decision and external command goes to the log file; the console
    gets the short severity-marked status lines.

    If the requested log path cannot be opened, a file in the current
    working directory is used instead.

    Returns the actual file path being used.
    """

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    # Avoid duplicate handlers if configure_logging() is called multiple times.
    if getattr(logger, "_mofa_configured", False):
        return getattr(logger, "_mofa_log_path", log_path)

    handlers: list[logging.Handler] = []

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        file_handler: logging.Handler = logging.FileHandler(log_path)
        chosen_path = log_path
    except OSError:
        chosen_path = str(Path.cwd() / DEFAULT_LOG_NAME)
        file_handler = logging.FileHandler(chosen_path)
    file_handler.setFormatter(fmt)
    file_handler.setLevel(logging.DEBUG)
    handlers.append(file_handler)

    if also_console:
        console = logging.StreamHandler(sys.stdout)
        use_color = sys.stdout.isatty() if color is None else color
        console.setFormatter(StatusFormatter(color=use_color))
        console.setLevel(level)
        handlers.append(console)

    for h in handlers:
        logger.addHandler(h)

    setattr(logger, "_mofa_configured", True)
    setattr(logger, "_mofa_log_path", chosen_path)

    logging.getLogger(__name__).debug("Logging initialized (requested=%s, actual=%s)", log_path, chosen_path)
    return chosen_path
