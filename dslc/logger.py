"""Console logging with bracketed level prefixes."""

from __future__ import annotations

import enum
import sys

__all__ = ["LogLevel", "log", "debug", "info", "warning", "error"]


class LogLevel(enum.Enum):
    """Severity of a log message, carrying its printed prefix."""

    DEBUG = "[DEBUG]"
    INFO = "[INFO]"
    WARNING = "[WARN]"
    ERROR = "[ERROR]"

    @property
    def prefix(self) -> str:
        return self.value


def log(level: LogLevel, message: str) -> None:
    """Write ``message`` to standard output behind the level's prefix."""
    print(f"{level.prefix} {message}", file=sys.stdout, flush=True)


def debug(message: str) -> None:
    log(LogLevel.DEBUG, message)


def info(message: str) -> None:
    log(LogLevel.INFO, message)


def warning(message: str) -> None:
    log(LogLevel.WARNING, message)


def error(message: str) -> None:
    log(LogLevel.ERROR, message)