"""Console + log-file logging shim shared by both procedures.

Every line goes to stderr and to an append-only log file, prefixed with a
timestamp. ``success`` and ``fatal`` lines are coloured on a terminal.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from loguru import logger

from .errors import FatalError

log = logger

LINE_FORMAT = '[{time:YYYY-MM-DD HH:mm:ss}] - <level>{level}</level>: {message}'


def _level_for(verbosity: int) -> str:
    if verbosity <= 0:
        return 'WARNING'
    if verbosity == 1:
        return 'INFO'
    return 'DEBUG'


def setup_logging(
    log_file: str | Path | None,
    verbosity: int = 1,
    *,
    colorize: bool | None = None,
) -> None:
    logger.remove()
    level = _level_for(verbosity)
    if colorize is None:
        colorize = sys.stderr.isatty() and os.getenv('NO_COLOR') is None
    logger.add(sys.stderr, level=level, colorize=colorize, format=LINE_FORMAT)
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        # The file keeps at least INFO so progress is never lost.
        file_level = 'DEBUG' if level == 'DEBUG' else 'INFO'
        logger.add(
            str(path),
            level=file_level,
            colorize=False,
            format=LINE_FORMAT,
            mode='a',
            encoding='utf-8',
        )
    log.debug(
        'Logging configured at {} (verbosity={}, colorize={}, log_file={})',
        level,
        verbosity,
        colorize,
        log_file or '(none)',
    )


def info(message: str) -> None:
    log.opt(depth=1).info(message)


def success(message: str) -> None:
    log.opt(depth=1).success(message)


def fatal(message: str, *, exit_code: int = 1) -> None:
    """Log an ERROR line and abort by raising :class:`FatalError`."""
    log.opt(depth=1).error(message)
    raise FatalError(message, exit_code=exit_code)
