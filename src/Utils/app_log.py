"""
app_log.py
Application log setup for the command-line driver.

The entry point calls setup_logging() once.  Everything else only ever asks
for logging.getLogger(__name__) and never installs handlers of its own, so
library code stays quiet when it is imported by something else.

app_log(msg) writes a progress/summary line that always reaches the console,
whatever verbosity was chosen.
"""

from __future__ import annotations

import logging
from pathlib import Path

_APP_LOGGER = "parallaxgen"
_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
_DATE_FORMAT = "%H:%M:%S"

# Handlers installed by setup_logging, replaced on the next call
_installed_handlers: list[logging.Handler] = []


def verbosity_to_level(verbosity: int) -> int:
    """Map the number of -v flags to a logging level."""
    if verbosity >= 1:
        return logging.DEBUG
    return logging.INFO


def setup_logging(verbosity: int = 0, log_file: Path | None = None) -> None:
    """Send log records to the console and, optionally, to log_file.

    Safe to call more than once: handlers from an earlier call are replaced,
    handlers installed by anything else are left alone.
    """
    root = logging.getLogger()
    root.setLevel(verbosity_to_level(verbosity))
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(_FORMAT, _DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)
    _installed_handlers.append(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        _installed_handlers.append(file_handler)

    # Summary lines go through their own logger pinned at INFO
    logging.getLogger(_APP_LOGGER).setLevel(logging.INFO)


def app_log(message: str) -> None:
    """Write a summary line to the application log."""
    logging.getLogger(_APP_LOGGER).info(message)
