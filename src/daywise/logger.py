"""Verbosity-driven logging for Daywise.

The CLI's ``-v`` count selects how much of the placement loop is narrated:

    0  warnings and errors only
    1  CHANGES  each placement and each unscheduled task
    2  CHECKS   each task considered and each day without room
    3  DEBUG    window resolution, gap sizes, cache activity

CHANGES and CHECKS are custom levels slotted between the standard ones.
"""

from __future__ import annotations

import logging
import sys
from enum import IntEnum
from typing import Any, TextIO

LOGGER_NAME = "daywise"

CHANGES_LEVEL = 25  # INFO < CHANGES < WARNING
CHECKS_LEVEL = 15  # DEBUG < CHECKS < INFO

logging.addLevelName(CHANGES_LEVEL, "CHANGES")
logging.addLevelName(CHECKS_LEVEL, "CHECKS")


class Verbosity(IntEnum):
    """CLI verbosity steps."""

    QUIET = 0
    CHANGES = 1
    CHECKS = 2
    DEBUG = 3

    @property
    def level(self) -> int:
        return _VERBOSITY_LEVELS[self]

    @classmethod
    def clamp(cls, value: int) -> Verbosity:
        return cls(min(max(value, cls.QUIET), cls.DEBUG))


_VERBOSITY_LEVELS = {
    Verbosity.QUIET: logging.WARNING,
    Verbosity.CHANGES: CHANGES_LEVEL,
    Verbosity.CHECKS: CHECKS_LEVEL,
    Verbosity.DEBUG: logging.DEBUG,
}


class DaywiseLogger(logging.Logger):
    """Logger with one method per custom verbosity step."""

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHANGES_LEVEL):
            self._log(CHANGES_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(CHECKS_LEVEL):
            self._log(CHECKS_LEVEL, msg, args, **kwargs)


def get_logger() -> DaywiseLogger:
    """Return the shared ``daywise`` logger."""
    logging.setLoggerClass(DaywiseLogger)
    logger = logging.getLogger(LOGGER_NAME)
    assert isinstance(logger, DaywiseLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Send daywise output to ``stream`` (stderr by default) at ``verbosity``.

    Out-of-range values are clamped. Calling again replaces the previous handler,
    so tests can capture output with a StringIO.
    """
    logger = get_logger()
    logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(Verbosity.clamp(verbosity).level)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and return to the quiet level."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(Verbosity.QUIET.level)


def _enabled(level: int) -> bool:
    return get_logger().isEnabledFor(level)


def changes_enabled() -> bool:
    return _enabled(CHANGES_LEVEL)


def checks_enabled() -> bool:
    return _enabled(CHECKS_LEVEL)


def debug_enabled() -> bool:
    return _enabled(logging.DEBUG)
