"""Logging setup for the command-line entry point."""

from __future__ import annotations

import logging
from enum import Enum

from rich.console import Console
from rich.logging import RichHandler

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class Verbosity(str, Enum):
    """Command-line verbosity choices."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"
    TRACE = "trace"

    @property
    def level(self) -> int:
        return _LEVELS[self]


_LEVELS = {
    Verbosity.ERROR: logging.ERROR,
    Verbosity.WARNING: logging.WARNING,
    Verbosity.INFO: logging.INFO,
    Verbosity.DEBUG: logging.DEBUG,
    Verbosity.TRACE: TRACE,
}


def configure_logging(verbosity: Verbosity = Verbosity.INFO, console: Console | None = None) -> None:
    """Route ``ritobin_tools`` loggers to a rich handler on stderr.

    Calling it again replaces the previous handler.
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbosity in (Verbosity.DEBUG, Verbosity.TRACE),
        rich_tracebacks=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger = logging.getLogger("ritobin_tools")
    for existing in list(logger.handlers):
        if isinstance(existing, RichHandler):
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(verbosity.level)
    logger.propagate = False
