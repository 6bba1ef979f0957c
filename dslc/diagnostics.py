"""Collection and reporting of compiler diagnostics."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, Optional

from dslc import logger
from dslc.ir import Module

__all__ = ["Level", "Diagnostic", "Diagnostics"]


class Level(enum.Enum):
    """Severity of a diagnostic, carrying its printed prefix."""

    INFO = "[INFO]"
    WARNING = "[WARN]"
    ERROR = "[ERROR]"

    @property
    def prefix(self) -> str:
        return self.value


_LOGGERS = {
    Level.INFO: logger.info,
    Level.WARNING: logger.warning,
    Level.ERROR: logger.error,
}


@dataclass(frozen=True)
class Diagnostic:
    level: Level
    message: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        location = ""
        if self.line > 0:
            location = f"line {self.line}"
            if self.column > 0:
                location += f":{self.column}"
            location += ": "
        return f"{self.level.prefix} {location}{self.message}"


@dataclass
class Diagnostics:
    """An ordered list of diagnostics gathered during one compilation."""

    entries: list[Diagnostic] = field(default_factory=list)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def add(self, level: Level, message: str, line: int = 0, column: int = 0) -> Diagnostic:
        """Record a diagnostic and log it at its level."""
        diagnostic = Diagnostic(level, message, line, column)
        self.entries.append(diagnostic)
        _LOGGERS[level](f"Diagnostic: {message}")
        return diagnostic

    def dump_ir(
        self, module: Optional[Module], to_stdout: bool = True, filename: str = ""
    ) -> None:
        """Print the module's text, or write it to ``filename`` when not to stdout."""
        if module is None:
            logger.error("DiagnosticsAgent: Cannot dump IR: module is null")
            return
        if to_stdout:
            logger.info("DiagnosticsAgent: Dumping IR to stdout")
            print(module.to_text(), end="")
        elif filename:
            logger.info(f"DiagnosticsAgent: Dumping IR to file: {filename}")
            try:
                with open(filename, "w", encoding="utf-8") as handle:
                    handle.write(module.to_text())
            except OSError as exc:
                logger.error(f"DiagnosticsAgent: Cannot open file: {exc.strerror or exc}")

    def format(self) -> str:
        """Return the report that :meth:`print_diagnostics` writes."""
        lines = ["", "=== Diagnostics ==="]
        lines.extend(str(diagnostic) for diagnostic in self.entries)
        lines.extend(["==================", ""])
        return "\n".join(lines) + "\n"

    def print_diagnostics(self) -> None:
        print(self.format(), end="")

    def clear(self) -> None:
        self.entries.clear()

    def has_errors(self) -> bool:
        return any(d.level is Level.ERROR for d in self.entries)

    def error_count(self) -> int:
        return sum(1 for d in self.entries if d.level is Level.ERROR)