"""
Logging configuration for revstamp.

Centralized loguru setup plus the small logger interface that the revision
engine writes its diagnostic events to, so host integrations can redirect
them without touching the engine.
"""

from typing import Protocol
from loguru import logger
from rich.console import Console

RAW_LEVEL = "RAW"

LOG_FORMAT = '<green>{time:YYYY/MM/DD HH:mm:ss}</green> | {level.icon}  - <level>{message}</level>'


def _register_levels() -> None:
    """Register the RAW level for verbatim VCS command output (below TRACE=5)."""
    try:
        logger.level(RAW_LEVEL, no=4, color="<magenta>", icon="📄")
    except (TypeError, ValueError):
        # Level already exists, which is fine
        pass


def setup_logging(log_level: str = 'INFO', console: Console = None) -> None:
    """
    Set up logging configuration with an optional shared Rich console.

    Args:
        log_level: Logging level (RAW, TRACE, DEBUG, INFO, SUCCESS, WARNING, ERROR, CRITICAL)
        console: Rich Console instance for coordinated output (optional)
    """
    _register_levels()

    logger.remove()

    if console:
        logger.add(
            lambda msg: console.print(msg, end='', markup=False, highlight=False),
            level=log_level,
            format=LOG_FORMAT,
        )
    else:
        # Version strings go to stdout, so diagnostics stay on stderr
        import sys
        logger.add(
            sys.stderr,
            level=log_level,
            format=LOG_FORMAT,
            colorize=True,
        )


class RevisionLogger(Protocol):
    """Sink for the diagnostic events emitted while computing a version."""

    def raw_output(self, message: str) -> None: ...

    def trace(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoguruLogger:
    """RevisionLogger that forwards every event to loguru."""

    def __init__(self):
        _register_levels()

    def raw_output(self, message: str) -> None:
        logger.opt(depth=1).log(RAW_LEVEL, message)

    def trace(self, message: str) -> None:
        logger.opt(depth=1).trace(message)

    def success(self, message: str) -> None:
        logger.opt(depth=1).success(message)

    def info(self, message: str) -> None:
        logger.opt(depth=1).info(message)

    def warning(self, message: str) -> None:
        logger.opt(depth=1).warning(message)

    def error(self, message: str) -> None:
        logger.opt(depth=1).error(message)


def get_default_logger() -> LoguruLogger:
    """Return the logger used when a caller does not inject one."""
    return LoguruLogger()
