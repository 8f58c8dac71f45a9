"""Logging configuration using loguru.

Intercepts stdlib logging so that anything a dependency logs flows through
the same loguru sink.  Logs go to stderr; stdout is reserved for command
output such as ``list`` paths.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class _InterceptHandler(logging.Handler):
    """Bridge stdlib logging records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk the call stack so loguru reports the real call-site
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def shift_level(level: str, verbose: int = 0, quiet: bool = False) -> str:
    """Apply ``-v`` / ``-q`` to a baseline level name.

    Each ``-v`` moves one step towards DEBUG; ``-q`` pins the level to ERROR.
    Unknown baseline names fall back to WARNING.
    """
    if quiet:
        return "ERROR"
    level = level.upper()
    index = _LEVELS.index(level) if level in _LEVELS else _LEVELS.index("WARNING")
    return _LEVELS[max(index - verbose, 0)]


def setup_logging(level: str = "WARNING") -> None:
    """Configure loguru as the sole logging sink.

    Call this once per command invocation, before the engine runs.
    """
    level = level.upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<level>{level: <8}</level> | <level>{message}</level>",
    )

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    logger.debug("Logging initialised (level={})", level)
